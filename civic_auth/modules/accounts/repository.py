import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from supabase import Client, PostgrestAPIError

from civic_auth.core.errors import Conflict, UpstreamError
from civic_auth.modules.accounts.identifiers import IdentifierKind, LoginIdentifier
from civic_auth.modules.accounts.lockout import FailureOutcome, LockoutPolicy
from civic_auth.modules.accounts.schemas import Account, Role

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"
# Bound on compare-and-set retries when concurrent logins race on the counter
MAX_COUNTER_RETRIES = 5


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


class AccountRepository:
    """Account rows in the Supabase accounts table."""

    def __init__(self, supabase: Client, table: str = "profiles"):
        self.supabase = supabase
        self.table = table

    def _query(self):
        return self.supabase.table(self.table)

    def _first(self, column: str, value: Any) -> Optional[Account]:
        try:
            result = self._query()\
                .select("*")\
                .eq(column, value)\
                .limit(1)\
                .execute()
        except PostgrestAPIError as e:
            raise UpstreamError(f"Account lookup failed: {e.message}")
        if not result.data:
            return None
        return Account(**result.data[0])

    def get_by_id(self, account_id: str) -> Optional[Account]:
        return self._first("id", account_id)

    def get_by_fin(self, fin: str) -> Optional[Account]:
        return self._first("fin", fin)

    def get_by_email(self, email: str) -> Optional[Account]:
        return self._first("email", email.strip().lower())

    def fin_exists(self, fin: str) -> bool:
        return self.get_by_fin(fin) is not None

    def email_exists(self, email: str) -> bool:
        return self.get_by_email(email) is not None

    def find_by_phone(self, candidates: Iterable[str]) -> Optional[Account]:
        numbers = list(candidates)
        if not numbers:
            return None
        try:
            result = self._query()\
                .select("*")\
                .in_("phone_number", numbers)\
                .limit(1)\
                .execute()
        except PostgrestAPIError as e:
            raise UpstreamError(f"Account lookup failed: {e.message}")
        if not result.data:
            return None
        return Account(**result.data[0])

    def resolve(self, identifier: LoginIdentifier) -> Optional[Account]:
        """Find the account a classified login identifier refers to."""
        if identifier.kind == IdentifierKind.FIN:
            return self.get_by_fin(identifier.value)
        return self.find_by_phone(identifier.candidates)

    def create(self, data: Dict[str, Any]) -> Account:
        row = dict(data)
        row["email"] = row["email"].strip().lower()
        row.setdefault("role", Role.CITIZEN.value)
        row.setdefault("failed_login_attempts", 0)
        if isinstance(row.get("role"), Role):
            row["role"] = row["role"].value
        try:
            result = self._query().insert(row).execute()
        except PostgrestAPIError as e:
            if e.code == UNIQUE_VIOLATION:
                raise Conflict("Account with this FIN or email already exists")
            raise UpstreamError(f"Failed to create account: {e.message}")
        if not result.data:
            raise UpstreamError("Failed to create account")
        account = Account(**result.data[0])
        logger.info("[AUDIT] User created: %s (%s)", account.email, account.id)
        return account

    def update(self, account_id: str, fields: Dict[str, Any]) -> Optional[Account]:
        update_data = dict(fields)
        if isinstance(update_data.get("role"), Role):
            update_data["role"] = update_data["role"].value
        if isinstance(update_data.get("locked_until"), datetime):
            update_data["locked_until"] = _iso(update_data["locked_until"])
        update_data["updated_at"] = datetime.now(timezone.utc).isoformat()
        try:
            result = self._query()\
                .update(update_data)\
                .eq("id", account_id)\
                .execute()
        except PostgrestAPIError as e:
            raise UpstreamError(f"Failed to update account: {e.message}")
        if not result.data:
            return None
        account = Account(**result.data[0])
        logger.info("[AUDIT] User updated: %s (%s)", account.email, account.id)
        return account

    def record_failed_login(self, account: Account, policy: LockoutPolicy, now: datetime) -> FailureOutcome:
        """Increment the failed-login counter with a conditional update.

        The write only lands if the counter still holds the value that was
        read; a concurrent attempt that got there first forces a re-read.
        """
        current = account
        for _ in range(MAX_COUNTER_RETRIES):
            outcome = policy.register_failure(current.failed_login_attempts, current.locked_until, now)
            try:
                result = self._query()\
                    .update({
                        "failed_login_attempts": outcome.attempts,
                        "locked_until": _iso(outcome.locked_until),
                    })\
                    .eq("id", current.id)\
                    .eq("failed_login_attempts", current.failed_login_attempts)\
                    .execute()
            except PostgrestAPIError as e:
                raise UpstreamError(f"Failed to record login attempt: {e.message}")
            if result.data:
                return outcome
            refreshed = self.get_by_id(current.id)
            if refreshed is None:
                return outcome
            current = refreshed
        raise UpstreamError("Failed to record login attempt")

    def clear_failed_logins(self, account_id: str) -> None:
        try:
            self._query()\
                .update({"failed_login_attempts": 0, "locked_until": None})\
                .eq("id", account_id)\
                .execute()
        except PostgrestAPIError as e:
            raise UpstreamError(f"Failed to reset login attempts: {e.message}")

    def list_accounts(self, role: Optional[Role] = None, limit: int = 20, offset: int = 0) -> List[Account]:
        try:
            query = self._query().select("*")
            if role is not None:
                query = query.eq("role", role.value)
            result = query\
                .order("created_at", desc=True)\
                .limit(limit)\
                .offset(offset)\
                .execute()
        except PostgrestAPIError as e:
            raise UpstreamError(f"Failed to list accounts: {e.message}")
        return [Account(**row) for row in result.data or []]
