# scripts/test_complexity.py
"""
Complexity Classifier tests.

Run: pytest scripts/test_complexity.py  or  python scripts/test_complexity.py
"""

import random
import sys
from pathlib import Path

import pytest

# Add project root to sys.path for imports
project_root = Path(__file__).resolve().parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from config.settings import Config
from taskgate.errors import InvalidArgumentError
from taskgate.routing.complexity import ComplexityAnalyzer, score


def approx(a, b):
    return abs(a - b) < 1e-9


def test_enterprise_platform_is_clamped_to_one():
    assert score("implement", ["complete", "enterprise", "platform"], {}) == 1.0


def test_empty_task_scores_base():
    assert approx(score("", [], None), 0.3)
    assert approx(score(""), 0.3)


def test_unknown_words_add_only_argument_weight():
    assert approx(score("xyzzy", ["plugh"]), 0.35)


def test_argument_weight_is_capped():
    assert approx(score("xyzzy", ["q"] * 10), 0.5)


def test_previous_tasks_weight_is_capped():
    assert approx(score("xyzzy", [], {"previousTasks": [1, 2, 3]}), 0.36)
    assert approx(score("xyzzy", [], {"previous_tasks": list(range(50))}), 0.4)


def test_overlapping_keyword_counts_twice():
    # "complete" is both a keyword (0.9 * 0.3) and a scope word (0.9 * 0.2)
    assert approx(score("complete"), 0.3 + 0.27 + 0.18)


def test_technology_terms_use_small_multiplier():
    assert approx(score("microservices"), 0.3 + 0.08)


def test_numeric_args_are_coerced():
    assert approx(score("xyzzy", [1, 2.5, True]), 0.45)


def test_score_is_deterministic():
    analyzer = ComplexityAnalyzer()
    args = ["build", "a", "cloud", "api"]
    first = analyzer.score("implement", args, {"previousTasks": ["a"]})
    for _ in range(5):
        assert analyzer.score("implement", args, {"previousTasks": ["a"]}) == first


def test_score_stays_in_bounds_for_random_inputs():
    rng = random.Random(42)
    vocabulary = [
        "", "implement", "enterprise", "platform", "complete", "ai", "api",
        "блокчейн", "データ", "🚀", "x" * 500, "entire", "microservices",
    ]
    analyzer = ComplexityAnalyzer()
    for _ in range(1000):
        command = rng.choice(vocabulary)
        args = [rng.choice(vocabulary) for _ in range(rng.randint(0, 40))]
        context = {"previousTasks": [0] * rng.randint(0, 20)}
        value = analyzer.score(command, args, context)
        assert 0.0 <= value <= 1.0


def test_custom_settings_change_the_base():
    class LowBase(Config):
        COMPLEXITY_BASE = -0.5

    assert score("xyzzy") == pytest.approx(0.3)
    # lower clamp
    assert ComplexityAnalyzer(LowBase()).score("xyzzy") == 0.0


def test_breakdown_lists_matched_terms():
    matched = ComplexityAnalyzer().breakdown("implement", ["complete", "api"])
    assert matched["keywords"] == ["implement", "complete"]
    assert matched["scope"] == ["complete"]
    assert matched["technology"] == ["api"]


@pytest.mark.parametrize("args", [[None], [{"a": 1}], [["nested"]], "a bare string", 5])
def test_malformed_args_raise(args):
    with pytest.raises(InvalidArgumentError):
        score("implement", args)


def test_malformed_context_raises():
    with pytest.raises(InvalidArgumentError):
        score("implement", [], ["not", "a", "mapping"])
    with pytest.raises(InvalidArgumentError):
        score("implement", [], {"previousTasks": 3})


def test_non_string_command_raises():
    with pytest.raises(InvalidArgumentError):
        score(42, [])


def main() -> int:
    tests = [(name, fn) for name, fn in sorted(globals().items())
             if name.startswith("test_") and callable(fn) and not hasattr(fn, "pytestmark")]
    failed = 0
    for name, fn in tests:
        try:
            fn()
            print(f"✅ {name}")
        except Exception as e:
            failed += 1
            print(f"❌ {name}: {e!r}")
    print(f"\n{len(tests) - failed}/{len(tests)} passed")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
