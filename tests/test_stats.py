import pytest

from hookforge.executor.stats import build_hook_result, compute_stats, format_duration
from hookforge.executor.types import TaskResult


def _result(name: str, success: bool = True, duration: float = 0.1) -> TaskResult:
    return TaskResult(name, success, 0 if success else 1, "", "", duration)


def test_stats_from_results():
    stats = compute_stats([_result("a", duration=0.1), _result("b", duration=0.2)], 0.15)

    assert stats.total_tasks == 2
    assert stats.successful_tasks == 2
    assert stats.failed_tasks == 0
    assert stats.cpu_time_s == pytest.approx(0.3)
    assert stats.parallel_savings_s == pytest.approx(0.15)


def test_savings_never_negative():
    stats = compute_stats([_result("a", duration=0.1)], 0.5)
    assert stats.parallel_savings_s == 0.0


def test_hook_result_success_is_and_of_results():
    ok = build_hook_result("pre-commit", [_result("a"), _result("b")], 0.2)
    ko = build_hook_result("pre-commit", [_result("a"), _result("b", success=False)], 0.2)

    assert ok.success is True
    assert ko.success is False
    assert ko.stats.failed_tasks == 1
    assert ko.names() == ["a", "b"]
    assert ko.get("b").exit_code == 1
    assert ko.get("missing") is None


def test_allowed_failures_are_labelled_but_still_fail_the_hook():
    hr = build_hook_result("pre-commit", [_result("a"), _result("flaky", success=False)], 0.2, {"flaky"})

    assert hr.success is False
    assert hr.stats.failed_tasks == 1
    assert hr.allowed_failures == frozenset({"flaky"})


def test_empty_result_is_successful():
    hr = build_hook_result("pre-commit", [], 0.0, skipped_reason="ci")

    assert hr.success is True
    assert hr.results == ()
    assert hr.stats.total_tasks == 0
    assert hr.skipped_reason == "ci"


@pytest.mark.parametrize(
    "seconds, text",
    [
        (0.5, "500ms"),
        (0.0, "0ms"),
        (1.5, "1.50s"),
        (65.0, "1m 5s"),
    ],
)
def test_format_duration(seconds, text):
    assert format_duration(seconds) == text
