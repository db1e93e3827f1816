from __future__ import annotations

from datetime import datetime, timedelta, timezone

from civic_auth.modules.accounts.lockout import LockoutPolicy

NOW = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


def test_failures_below_threshold_report_remaining_attempts():
    policy = LockoutPolicy()
    outcome = policy.register_failure(0, None, NOW)
    assert outcome.attempts == 1
    assert outcome.remaining_attempts == 4
    assert not outcome.locked


def test_fifth_failure_locks_for_fifteen_minutes():
    policy = LockoutPolicy()
    outcome = policy.register_failure(4, None, NOW)
    assert outcome.attempts == 5
    assert outcome.locked
    assert outcome.locked_until == NOW + timedelta(minutes=15)
    assert outcome.remaining_attempts == 0


def test_is_locked_only_while_lock_is_in_the_future():
    policy = LockoutPolicy()
    assert not policy.is_locked(None, NOW)
    assert policy.is_locked(NOW + timedelta(seconds=1), NOW)
    assert not policy.is_locked(NOW, NOW)
    assert not policy.is_locked(NOW - timedelta(minutes=1), NOW)


def test_naive_lock_timestamps_are_read_as_utc():
    policy = LockoutPolicy()
    assert policy.is_locked(datetime(2025, 1, 1, 12, 5), NOW)


def test_minutes_remaining_rounds_up():
    policy = LockoutPolicy()
    assert policy.minutes_remaining(NOW + timedelta(minutes=14, seconds=1), NOW) == 15
    assert policy.minutes_remaining(NOW + timedelta(seconds=30), NOW) == 1


def test_expired_lock_starts_a_fresh_count():
    policy = LockoutPolicy()
    outcome = policy.register_failure(5, NOW - timedelta(minutes=1), NOW)
    assert outcome.attempts == 1
    assert outcome.remaining_attempts == 4


def test_custom_threshold_and_duration():
    policy = LockoutPolicy(max_attempts=3, lock_duration=timedelta(minutes=30))
    assert policy.lock_minutes == 30
    assert policy.register_failure(2, None, NOW).locked_until == NOW + timedelta(minutes=30)
