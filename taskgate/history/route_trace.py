# taskgate/history/route_trace.py
"""
Route Trace Storage - SQLite журнал решений роутера.

Best-effort: ни один метод не бросает исключений. Ошибки пишутся в лог
уровня error, а вызывающий получает False / [].
"""

import sqlite3
import json
import logging
import time
from pathlib import Path
from typing import List, Dict, Any, Optional, Sequence

logger = logging.getLogger(__name__)


class RouteTraceStorage:
    """
    Хранилище результатов маршрутизации.
    Одна строка на вызов route_and_execute.
    """

    def __init__(self, db_path: str):
        """
        Args:
            db_path: Путь к SQLite файлу (":memory:" не поддерживается,
                     так как каждое обращение открывает новое соединение)
        """
        self.db_path = Path(db_path)
        self.available = self._init_db()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(str(self.db_path))

    def _init_db(self) -> bool:
        """Создает таблицу, если её нет"""
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = self._connect()
            try:
                cursor = conn.cursor()
                cursor.execute("""
                    CREATE TABLE IF NOT EXISTS route_traces (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        session_id TEXT,
                        command TEXT NOT NULL,
                        args TEXT,          -- JSON
                        route_type TEXT NOT NULL,
                        domains TEXT,       -- JSON
                        complexity REAL,
                        blocked INTEGER,    -- 0/1
                        timestamp REAL
                    )
                """)
                cursor.execute("""
                    CREATE INDEX IF NOT EXISTS idx_route_session
                    ON route_traces(session_id)
                """)
                conn.commit()
            finally:
                conn.close()
            logger.info(f"Route trace storage initialized: {self.db_path}")
            return True
        except Exception as e:
            logger.error(f"Failed to init route trace DB: {e}")
            return False

    def record(
        self,
        session_id: Optional[str],
        command: str,
        args: Sequence[str],
        route_type: str,
        domains: Sequence[str],
        complexity: float,
        blocked: bool,
        timestamp: Optional[float] = None,
    ) -> bool:
        """Сохраняет один результат маршрутизации"""
        try:
            conn = self._connect()
            try:
                conn.execute("""
                    INSERT INTO route_traces
                    (session_id, command, args, route_type, domains, complexity, blocked, timestamp)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """, (
                    session_id,
                    command,
                    json.dumps(list(args), ensure_ascii=False),
                    route_type,
                    json.dumps(list(domains), ensure_ascii=False),
                    float(complexity),
                    1 if blocked else 0,
                    timestamp if timestamp is not None else time.time(),
                ))
                conn.commit()
            finally:
                conn.close()
            logger.debug(f"Saved route trace: {command} → {route_type}")
            return True
        except Exception as e:
            logger.error(f"Failed to save route trace: {e}")
            return False

    def get_recent(self, limit: int = 20, session_id: Optional[str] = None) -> List[Dict[str, Any]]:
        """Последние записи, новые первыми"""
        try:
            conn = self._connect()
            conn.row_factory = sqlite3.Row
            try:
                if session_id is None:
                    rows = conn.execute(
                        "SELECT * FROM route_traces ORDER BY id DESC LIMIT ?",
                        (int(limit),),
                    ).fetchall()
                else:
                    rows = conn.execute(
                        "SELECT * FROM route_traces WHERE session_id = ? ORDER BY id DESC LIMIT ?",
                        (session_id, int(limit)),
                    ).fetchall()
            finally:
                conn.close()

            return [
                {
                    "session_id": row["session_id"],
                    "command": row["command"],
                    "args": json.loads(row["args"] or "[]"),
                    "route_type": row["route_type"],
                    "domains": json.loads(row["domains"] or "[]"),
                    "complexity": row["complexity"],
                    "blocked": bool(row["blocked"]),
                    "timestamp": row["timestamp"],
                }
                for row in rows
            ]
        except Exception as e:
            logger.error(f"Failed to get route traces: {e}")
            return []

    def clear_session(self, session_id: str) -> bool:
        """Удаляет все записи сессии"""
        try:
            conn = self._connect()
            try:
                conn.execute("DELETE FROM route_traces WHERE session_id = ?", (session_id,))
                conn.commit()
            finally:
                conn.close()
            logger.info(f"Cleared route traces for session {session_id}")
            return True
        except Exception as e:
            logger.error(f"Failed to clear route traces: {e}")
            return False
