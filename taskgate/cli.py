# taskgate/cli.py
"""
TaskGate - командная строка

Команды:
- route <command> [args ...]  - классифицировать задачу и выполнить план хуков
- status                      - состояние диспетчера хуков
- config                      - текущая конфигурация
- history                     - последние записи трейса маршрутизации

Коды выхода: 0 - успех, 1 - маршрут заблокирован, 2 - некорректный ввод.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from typing import Any, Dict, List, Optional, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich import box

from config.settings import cfg
from taskgate.errors import InvalidArgumentError
from taskgate.history.route_trace import RouteTraceStorage
from taskgate.hooks.dispatcher import create_default_dispatcher
from taskgate.routing.router import RoutingResult, TaskRouter
from taskgate.services.notifier import ConsoleNotifier
from taskgate.utils.logging_setup import setup_logging

logger = logging.getLogger(__name__)

APP_NAME = "TaskGate"

EXIT_OK = 0
EXIT_BLOCKED = 1
EXIT_INVALID = 2

# Цветовая схема
COLORS = {
    'primary': 'cyan',
    'success': 'green',
    'warning': 'yellow',
    'error': 'red',
    'muted': 'dim white',
}

ROUTE_ICONS = {
    "single-domain": "🎯",
    "domain-with-helpers": "🤝",
    "multi-domain": "🔀",
    "executive": "🏛️",
}


# ============================================================================
# ARGUMENTS
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="taskgate",
        description="Route development tasks and run their guard hooks",
    )
    sub = parser.add_subparsers(dest="action", required=True)

    route = sub.add_parser("route", help="Route a task and run its hook plan")
    route.add_argument("task_command", metavar="command", help="Task command, e.g. implement")
    route.add_argument("task_args", metavar="args", nargs="*", help="Task description tokens")
    route.add_argument("--session-id", dest="session_id", default=None)
    route.add_argument(
        "--context", default=None,
        help="Extra context as a JSON object (paths, content, permissions, purpose, ...)",
    )
    route.add_argument("--json", action="store_true", help="Print the result as JSON")

    sub.add_parser("status", help="Show hook dispatcher status")
    sub.add_parser("config", help="Show configuration")

    history = sub.add_parser("history", help="Show recent route traces")
    history.add_argument("--limit", type=int, default=20)
    history.add_argument("--session-id", dest="session_id", default=None)

    return parser


def parse_context(raw: Optional[str], session_id: Optional[str]) -> Dict[str, Any]:
    """
    Raises:
        InvalidArgumentError: --context is not a JSON object
    """
    context: Dict[str, Any] = {}
    if raw:
        try:
            loaded = json.loads(raw)
        except json.JSONDecodeError as e:
            raise InvalidArgumentError(f"--context is not valid JSON: {e}")
        if not isinstance(loaded, dict):
            raise InvalidArgumentError("--context must be a JSON object")
        context.update(loaded)
    if session_id:
        context["session_id"] = session_id
    return context


# ============================================================================
# OUTPUT
# ============================================================================

def print_routing_result(console: Console, result: RoutingResult) -> None:
    decision = result.decision
    icon = ROUTE_ICONS.get(result.type.value, "❓")

    summary = Table(show_header=False, box=None, padding=(0, 2))
    summary.add_column(style="bold")
    summary.add_column()
    summary.add_row("Route", f"{icon} {result.type.value}")
    summary.add_row("Domains", ", ".join(result.domains) or "-")
    summary.add_row("Complexity", f"{result.complexity:.2f}")
    summary.add_row("Executive need", "yes" if result.executive_need else "no")
    if decision is not None:
        if decision.primary_domain is not None:
            summary.add_row("Primary", decision.primary_domain.value)
        if decision.helpers:
            summary.add_row("Helpers", ", ".join(decision.helpers))
        if decision.coordination:
            summary.add_row("Coordination", decision.coordination)

    border = COLORS['error'] if result.blocked else COLORS['primary']
    console.print(Panel(summary, title=f"[bold]{APP_NAME}[/]", border_style=border, box=box.ROUNDED))

    hooks = Table(box=box.SIMPLE_HEAD)
    hooks.add_column("Hook")
    hooks.add_column("Allow")
    hooks.add_column("Notes")
    for hook_result in result.dispatcher_results:
        flags = [name for name in ("cached", "failed", "disabled") if getattr(hook_result, name)]
        notes = hook_result.warning or hook_result.message or hook_result.details.get("reason") or ""
        if flags:
            notes = f"[{', '.join(flags)}] {notes}".strip()
        allow = "[green]✓[/]" if hook_result.allow else "[red]✗[/]"
        hooks.add_row(hook_result.handler, allow, str(notes))
    console.print(hooks)

    if result.blocked:
        console.print(f"[bold {COLORS['error']}]⛔ Blocked by {result.blocked_by}[/]")


def print_status(console: Console, status: Dict[str, Any]) -> None:
    table = Table(title="Hook dispatcher", box=box.SIMPLE_HEAD)
    table.add_column("Hook")
    table.add_column("Type")
    table.add_column("Enabled")
    table.add_column("Recent failures", justify="right")
    table.add_column("Disabled")
    for name, info in status["hook_status"].items():
        table.add_row(
            name,
            info["type"],
            "yes" if info["enabled"] else "no",
            str(info["recent_failures"]),
            "[red]yes[/]" if info["disabled"] else "no",
        )
    console.print(table)
    console.print(
        f"[dim]{status['total_hooks']} hooks │ {status['cache_entries']} cache entries[/]"
    )


def print_config(console: Console, rows: Sequence[Sequence[str]]) -> None:
    table = Table(show_header=False, box=box.ROUNDED, border_style=COLORS['muted'])
    table.add_column(style="bold")
    table.add_column()
    for label, value in rows:
        table.add_row(label, str(value))
    console.print(table)


def print_history(console: Console, traces: List[Dict[str, Any]]) -> None:
    if not traces:
        console.print("[dim]No route traces recorded[/]")
        return
    table = Table(box=box.SIMPLE_HEAD)
    table.add_column("Command")
    table.add_column("Route")
    table.add_column("Domains")
    table.add_column("Complexity", justify="right")
    table.add_column("Blocked")
    for trace in traces:
        table.add_row(
            " ".join([trace["command"], *trace["args"]]),
            trace["route_type"],
            ", ".join(trace["domains"]),
            f"{trace['complexity']:.2f}",
            "[red]yes[/]" if trace["blocked"] else "no",
        )
    console.print(table)


def print_json(console: Console, data: Any) -> None:
    console.print(
        json.dumps(data, ensure_ascii=False, indent=2, default=str),
        markup=False,
        highlight=False,
        emoji=False,
        soft_wrap=True,
    )


# ============================================================================
# COMMANDS
# ============================================================================

def build_router(settings: Any = None) -> TaskRouter:
    settings = settings or cfg
    dispatcher = create_default_dispatcher(settings, notifier=ConsoleNotifier())
    trace_storage = RouteTraceStorage(settings.ROUTE_TRACE_DB) if settings.ROUTE_TRACE_DB else None
    return TaskRouter(dispatcher, settings=settings, trace_storage=trace_storage)


def run_route(args: argparse.Namespace, console: Console) -> int:
    context = parse_context(args.context, args.session_id)
    router = build_router()
    result = asyncio.run(router.route_and_execute(args.task_command, args.task_args, context))

    if args.json:
        print_json(console, result.to_dict())
    else:
        print_routing_result(console, result)

    return EXIT_BLOCKED if result.blocked else EXIT_OK


def run_history(args: argparse.Namespace, console: Console) -> int:
    if not cfg.ROUTE_TRACE_DB:
        console.print("[yellow]Route trace is disabled (set TASKGATE_TRACE_DB)[/]")
        return EXIT_OK
    storage = RouteTraceStorage(cfg.ROUTE_TRACE_DB)
    print_history(console, storage.get_recent(limit=args.limit, session_id=args.session_id))
    return EXIT_OK


# ============================================================================
# ТОЧКА ВХОДА
# ============================================================================

def main(argv: Optional[Sequence[str]] = None, console: Optional[Console] = None) -> int:
    """Главная точка входа; возвращает код выхода"""
    console = console or Console()
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(cfg.LOG_LEVEL, cfg.LOG_DIR)

    try:
        if args.action == "route":
            return run_route(args, console)
        if args.action == "status":
            print_status(console, create_default_dispatcher(cfg).get_status())
            return EXIT_OK
        if args.action == "config":
            print_config(console, cfg.summary_rows())
            return EXIT_OK
        if args.action == "history":
            return run_history(args, console)
    except InvalidArgumentError as e:
        logger.debug(f"Invalid input: {e.message}")
        console.print(f"[bold {COLORS['error']}]✗ {e.message}[/]")
        return EXIT_INVALID

    parser.error(f"unknown command: {args.action}")
    return EXIT_INVALID
