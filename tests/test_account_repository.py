from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from civic_auth.core.errors import Conflict
from civic_auth.modules.accounts.identifiers import classify_identifier
from civic_auth.modules.accounts.lockout import LockoutPolicy
from civic_auth.modules.accounts.schemas import Role

NOW = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


def _row(**fields):
    row = {"id": "u-1", "email": "a@example.com", "role": "citizen", "failed_login_attempts": 0}
    row.update(fields)
    return row


def test_local_phone_input_finds_international_record(accounts):
    accounts.create(_row(phone_number="+251911223344"))
    account = accounts.resolve(classify_identifier("0911223344"))
    assert account is not None and account.id == "u-1"


def test_international_phone_input_finds_local_record(accounts):
    accounts.create(_row(phone_number="0911223344"))
    account = accounts.resolve(classify_identifier("+251911223344"))
    assert account is not None and account.id == "u-1"


def test_fin_identifier_never_falls_back_to_phone(accounts):
    # A phone number that happens to be 12 digits is still looked up as a FIN
    accounts.create(_row(phone_number="251911223344"))
    assert accounts.resolve(classify_identifier("251911223344")) is None


def test_fin_lookup(accounts):
    accounts.create(_row(fin="123456789012"))
    assert accounts.resolve(classify_identifier("123456789012")).id == "u-1"
    assert accounts.fin_exists("123456789012")
    assert not accounts.fin_exists("999999999999")


def test_email_is_stored_lowercase_and_unique(accounts):
    accounts.create(_row(email="Mixed@Example.com"))
    assert accounts.email_exists("mixed@example.com")
    with pytest.raises(Conflict):
        accounts.create(_row(id="u-2", email="mixed@example.com"))


def test_duplicate_fin_is_a_conflict(accounts):
    accounts.create(_row(fin="123456789012"))
    with pytest.raises(Conflict):
        accounts.create(_row(id="u-2", email="b@example.com", fin="123456789012"))


def test_role_enum_is_stored_as_value(accounts, supabase):
    accounts.create(_row(role=Role.ADMIN))
    assert supabase.rows("profiles")[0]["role"] == "admin"


def test_record_failed_login_persists_counter_and_lock(accounts):
    account = accounts.create(_row(failed_login_attempts=4))
    outcome = accounts.record_failed_login(account, LockoutPolicy(), NOW)
    stored = accounts.get_by_id("u-1")
    assert outcome.locked
    assert stored.failed_login_attempts == 5
    assert stored.locked_until == NOW + timedelta(minutes=15)


def test_record_failed_login_retries_after_concurrent_increment(accounts, supabase):
    account = accounts.create(_row(failed_login_attempts=1))

    def concurrent_failure(table, rows):
        # Another request increments the counter between our read and our write
        supabase.before_update.clear()
        rows[0]["failed_login_attempts"] = 2

    supabase.before_update.append(concurrent_failure)
    outcome = accounts.record_failed_login(account, LockoutPolicy(), NOW)

    assert outcome.attempts == 3
    assert accounts.get_by_id("u-1").failed_login_attempts == 3


def test_clear_failed_logins(accounts):
    accounts.create(_row(failed_login_attempts=5, locked_until=(NOW + timedelta(minutes=5)).isoformat()))
    accounts.clear_failed_logins("u-1")
    stored = accounts.get_by_id("u-1")
    assert stored.failed_login_attempts == 0
    assert stored.locked_until is None


def test_update_missing_account_returns_none(accounts):
    assert accounts.update("missing", {"role": Role.ADMIN}) is None


def test_list_accounts_filters_by_role_newest_first(accounts):
    accounts.create(_row(id="u-1", email="a@example.com", created_at="2025-01-01T00:00:00+00:00"))
    accounts.create(_row(id="u-2", email="b@example.com", created_at="2025-01-02T00:00:00+00:00"))
    accounts.create(_row(id="u-3", email="c@example.com", role="admin", created_at="2025-01-03T00:00:00+00:00"))

    citizens = accounts.list_accounts(role=Role.CITIZEN)
    assert [a.id for a in citizens] == ["u-2", "u-1"]
    assert [a.id for a in accounts.list_accounts(limit=1, offset=1)] == ["u-2"]
