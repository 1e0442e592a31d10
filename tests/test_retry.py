"""Tests for the retry policy state machine (no timers involved)."""

import pytest

from reddit_comment_lookup.retry import RetryPolicy


def run_failures(policy, n):
    state = policy.start()
    decisions = []
    for i in range(n):
        decision = policy.on_failure(state, RuntimeError(f"fail {i}"))
        decisions.append(decision)
        if not decision.retry:
            break
        state = decision.state
    return decisions


def test_three_attempt_budget():
    decisions = run_failures(RetryPolicy(retries=3, base_delay=1.0), 10)

    assert [d.retry for d in decisions] == [True, True, False]
    assert [d.delay for d in decisions] == [1.0, 2.0, 0.0]
    assert decisions[-1].state.exhausted
    assert str(decisions[-1].state.last_error) == "fail 2"


def test_delays_double():
    policy = RetryPolicy(retries=5, base_delay=0.5)
    assert [policy.delay_for(n) for n in range(4)] == [0.5, 1.0, 2.0, 4.0]


def test_single_attempt_never_waits():
    decisions = run_failures(RetryPolicy(retries=1), 3)
    assert len(decisions) == 1
    assert decisions[0].retry is False
    assert decisions[0].delay == 0.0


def test_start_state():
    state = RetryPolicy(retries=3).start()
    assert state.attempt == 0
    assert state.retries == 3
    assert not state.exhausted


@pytest.mark.parametrize("retries", [0, -1])
def test_rejects_empty_budget(retries):
    with pytest.raises(ValueError):
        RetryPolicy(retries=retries)
