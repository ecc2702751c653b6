import pytest

from resilient_notifier import RetryPolicy, backoff_delay


@pytest.fixture
def policy():
    return RetryPolicy(initial_delay=0.5, backoff_multiplier=2.0, max_delay=30.0)


@pytest.mark.parametrize("attempt, expected", [(1, 0.5), (2, 1.0), (3, 2.0), (4, 4.0), (20, 30.0)])
def test_exponential_delays(policy, attempt, expected):
    assert backoff_delay(attempt, policy) == pytest.approx(expected)


def test_delay_never_exceeds_max(policy):
    assert all(backoff_delay(n, policy) <= policy.max_delay for n in range(1, 50))


def test_huge_attempt_is_capped(policy):
    assert backoff_delay(5000, policy) == 30.0


def test_attempt_is_one_indexed(policy):
    with pytest.raises(ValueError):
        backoff_delay(0, policy)
