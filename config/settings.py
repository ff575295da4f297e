# config/settings.py
import os
import logging
from dotenv import load_dotenv
from pathlib import Path

# Находим .env и загружаем его
BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(BASE_DIR / ".env")

logger = logging.getLogger(__name__)


def _env_int(name, default):
    """Reads an integer override; malformed values keep the default."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring {name}={raw!r}: not an integer, using {default}")
        return default


def _env_flag(name):
    return os.getenv(name, "").strip().lower() in ("1", "true", "yes")


class Config:
    # ============ HOOK DISPATCHER ============
    HOOK_CACHE_TTL_MS = _env_int("TASKGATE_CACHE_TTL_MS", 5 * 60 * 1000)   # 5 минут
    HOOK_TIMEOUT_MS = _env_int("TASKGATE_HOOK_TIMEOUT_MS", 10000)          # 10 секунд
    HOOK_FAILURE_THRESHOLD = _env_int("TASKGATE_FAILURE_THRESHOLD", 3)
    HOOK_FAILURE_WINDOW_MS = _env_int("TASKGATE_FAILURE_WINDOW_MS", 60000)  # 1 минута

    # ============ RESOURCES ============
    MAX_MEMORY_MB = _env_int("TASKGATE_MAX_MEMORY_MB", 512)

    # ============ LOGGING ============
    LOG_LEVEL = os.getenv("TASKGATE_LOG_LEVEL", "INFO").upper()
    LOG_DIR = os.getenv("TASKGATE_LOG_DIR") or None

    # ============ NOTIFICATIONS ============
    AUDIO_ENABLED = not _env_flag("TASKGATE_DISABLE_AUDIO")
    COMPLETION_EVENT = "MILESTONE_REACHED"

    # ============ ROUTE TRACE ============
    # None = трейсинг выключен
    ROUTE_TRACE_DB = os.getenv("TASKGATE_TRACE_DB") or None

    # ============ COMPLEXITY CLASSIFIER ============
    COMPLEXITY_BASE = 0.3

    COMPLEXITY_THRESHOLDS = {
        "simple": 0.3,       # один департамент
        "moderate": 0.6,     # департамент + специалисты
        "complex": 0.8,      # несколько департаментов
        "enterprise": 0.9,   # executive / вся организация
    }

    COMPLEXITY_FACTORS = {
        "keywords": {
            "implement": 0.7,
            "create": 0.6,
            "build": 0.8,
            "design": 0.5,
            "analyze": 0.4,
            "complete": 0.9,
            "enterprise": 0.9,
            "platform": 0.8,
            "system": 0.7,
            "architecture": 0.8,
        },
        "scope": {
            "single": 0.2,
            "multiple": 0.6,
            "complete": 0.9,
            "entire": 0.9,
            "full": 0.8,
            "comprehensive": 0.8,
        },
        "technology": {
            "api": 0.5,
            "database": 0.6,
            "microservices": 0.8,
            "cloud": 0.7,
            "ai": 0.7,
            "machine-learning": 0.8,
            "blockchain": 0.9,
        },
    }

    FACTOR_MULTIPLIERS = {
        "keywords": 0.3,
        "scope": 0.2,
        "technology": 0.1,
    }

    ARGS_WEIGHT = 0.05
    ARGS_WEIGHT_CAP = 0.2
    PREVIOUS_TASKS_WEIGHT = 0.02
    PREVIOUS_TASKS_WEIGHT_CAP = 0.1

    # ============ DOMAINS ============
    DOMAIN_KEYWORDS = {
        "strategic": [
            "business", "strategy", "market", "requirements", "prd", "roadmap",
            "stakeholder", "competitor", "revenue", "pricing", "user-story",
        ],
        "experience": [
            "design", "ui", "ux", "frontend", "interface", "component", "figma",
            "accessibility", "responsive", "wireframe", "prototype", "visual",
        ],
        "technical": [
            "backend", "api", "database", "security", "infrastructure", "deployment",
            "performance", "architecture", "server", "auth", "integration",
        ],
    }

    EXECUTIVE_KEYWORDS = [
        "enterprise", "organization", "platform", "ecosystem", "transformation",
        "initiative", "company-wide", "strategic-planning", "resource-allocation",
    ]

    # Слова, означающие координацию нескольких департаментов
    COORDINATION_WORDS = ["platform", "system", "complete"]

    # Порядок ключей = порядок специалистов в результате
    SPECIALIST_KEYWORDS = {
        "strategic": {
            "market-research": ["market", "competitor", "industry", "trends"],
            "competitive-analysis": ["competition", "competitive", "benchmark", "competitor"],
            "business-model": ["business model", "revenue", "monetization", "pricing"],
            "roi-analysis": ["roi", "return", "investment", "cost-benefit"],
            "stakeholder-comms": ["stakeholder", "communication", "approval", "presentation"],
        },
        "experience": {
            "ux-research": ["user research", "usability", "user testing", "personas"],
            "ui-design": ["interface", "visual design", "layouts", "styling"],
            "accessibility": ["accessibility", "a11y", "wcag", "inclusive"],
            "performance-optimization": ["performance", "optimization", "loading", "speed"],
            "design-system": ["design system", "component library", "tokens", "patterns"],
            "frontend-architecture": ["architecture", "framework", "structure", "scalability"],
        },
        "technical": {
            "database": ["database", "sql", "data model", "schema"],
            "api-architecture": ["api", "endpoint", "rest", "graphql"],
            "security": ["security", "auth", "encryption", "vulnerability"],
            "devops": ["deployment", "ci/cd", "pipeline", "automation"],
            "performance-engineering": ["performance", "optimization", "scalability", "caching"],
            "infrastructure": ["infrastructure", "cloud", "server", "architecture"],
        },
    }

    # ============ SECURITY HOOK ============
    SECURITY_DANGEROUS_PATHS = ["/etc", "/usr/bin", "/system"]
    SECURITY_ELEVATED_PERMISSIONS = ["sudo", "admin"]

    # ============ POLICY HOOK ============
    POLICY_HARMFUL_KEYWORDS = ["hack", "crack", "exploit", "malware", "spam"]
    POLICY_MIN_SCORE = 0.7
    POLICY_MIN_SUSTAINABILITY = 0.6

    # ============ ROUTE EXECUTION PLANS ============
    # Хуки, выполняемые для каждого типа маршрута (по порядку)
    ROUTE_HOOK_PLANS = {
        "single-domain": ["pre-execution", "post-execution", "completion"],
        "domain-with-helpers": ["pre-execution", "resource-monitor", "post-execution", "completion"],
        "multi-domain": ["pre-execution", "resource-monitor", "post-execution", "completion"],
        "executive": [
            "pre-execution", "consciousness-check", "resource-monitor",
            "post-execution", "completion",
        ],
    }

    # allow=False от этих хуков останавливает выполнение плана
    BLOCKING_HOOKS = ["pre-execution", "consciousness-check"]

    # Хук, после которого вызываются обработчики департаментов
    DEPARTMENT_HOOK_PREFIX = "department:"
    DEPARTMENT_HOOKS_AFTER = "pre-execution"

    # ============ МЕТОДЫ ============
    @classmethod
    def get_dispatcher_config(cls):
        """
        Returns the dispatcher tunables in milliseconds / counts.

        Returns:
            dict: {"cache_ttl_ms", "timeout_ms", "failure_threshold", "failure_window_ms"}
        """
        return {
            "cache_ttl_ms": cls.HOOK_CACHE_TTL_MS,
            "timeout_ms": cls.HOOK_TIMEOUT_MS,
            "failure_threshold": cls.HOOK_FAILURE_THRESHOLD,
            "failure_window_ms": cls.HOOK_FAILURE_WINDOW_MS,
        }

    @classmethod
    def get_routing_thresholds(cls):
        return dict(cls.COMPLEXITY_THRESHOLDS)

    @classmethod
    def get_hook_plan(cls, route_type):
        return list(cls.ROUTE_HOOK_PLANS.get(route_type, []))

    @classmethod
    def summary_rows(cls):
        """Label/value pairs for the CLI configuration summary."""
        thresholds = cls.COMPLEXITY_THRESHOLDS
        return [
            ("Hook cache TTL", f"{cls.HOOK_CACHE_TTL_MS} ms"),
            ("Hook timeout", f"{cls.HOOK_TIMEOUT_MS} ms"),
            ("Failure threshold", f"{cls.HOOK_FAILURE_THRESHOLD} in {cls.HOOK_FAILURE_WINDOW_MS} ms"),
            ("Memory limit", f"{cls.MAX_MEMORY_MB} MB"),
            ("Complexity thresholds", ", ".join(f"{k}={v}" for k, v in thresholds.items())),
            ("Audio notifications", "on" if cls.AUDIO_ENABLED else "off"),
            ("Route trace DB", cls.ROUTE_TRACE_DB or "disabled"),
            ("Log level", cls.LOG_LEVEL),
            ("Log directory", cls.LOG_DIR or "console only"),
        ]


# Создаем объект конфигурации
cfg = Config()
