"""
Migrate Users Script
Copies profiles from the legacy Supabase project into the accounts table.
One-shot: accounts whose e-mail already exists in the target are skipped,
so re-running it is harmless.

Usage: python -m civic_auth.scripts.migrate_users
"""

import sys
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from supabase import AuthError, Client, create_client
import logging

from civic_auth.config import settings
from civic_auth.database.supabase_client import get_supabase
from civic_auth.modules.accounts.repository import AccountRepository
from civic_auth.modules.accounts.schemas import Account, Role

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class MigrationError(Exception):
    pass


def get_legacy_profiles(legacy: Client) -> List[Dict[str, Any]]:
    """Get all profiles from the legacy profiles table"""
    result = legacy.table("profiles").select("*").execute()
    return result.data or []


def get_legacy_auth_user(legacy: Client, user_id: str):
    """Get auth user details from the legacy Supabase Auth"""
    try:
        response = legacy.auth.admin.get_user_by_id(user_id)
    except AuthError as e:
        raise MigrationError(f"Failed to fetch auth user: {e.message}")
    return response.user


def _timestamp(value: Optional[str]) -> str:
    return value or datetime.now(timezone.utc).isoformat()


def _role(profile: Dict[str, Any]) -> Role:
    """Legacy role, or citizen when the legacy value is not a known role"""
    value = profile.get("role")
    if not value:
        return Role.CITIZEN
    try:
        return Role(value)
    except ValueError:
        logger.warning(f"Unknown role '{value}' for user {profile['id']}, migrating as citizen")
        return Role.CITIZEN


def migrate_profile(legacy: Client, accounts: AccountRepository, profile: Dict[str, Any]) -> Optional[Account]:
    """Migrate a single profile. Returns None when skipped."""
    auth_user = get_legacy_auth_user(legacy, profile["id"])
    if not auth_user or not auth_user.email:
        logger.warning(f"Skipping user {profile['id']} - no email found")
        return None

    if accounts.email_exists(auth_user.email):
        logger.info(f"User {auth_user.email} already exists, skipping...")
        return None

    account = accounts.create({
        "id": profile["id"],
        "email": auth_user.email,
        "email_verified": bool(getattr(auth_user, "email_confirmed_at", None)),
        "full_name": profile.get("full_name"),
        "role": _role(profile),
        "fin": profile.get("fin"),
        "phone_number": profile.get("phone_number"),
        "dob": profile.get("dob"),
        "gender": profile.get("gender"),
        "photo_url": profile.get("photo_url"),
        "failed_login_attempts": profile.get("failed_login_attempts") or 0,
        "locked_until": profile.get("locked_until"),
        "created_at": _timestamp(profile.get("created_at")),
        "updated_at": _timestamp(profile.get("updated_at")),
    })
    logger.info(f"Migrated user: {account.email} ({account.role.value})")
    return account


def run_migration(legacy: Client, accounts: AccountRepository) -> Dict[str, int]:
    """Run full migration for all legacy profiles"""
    logger.info("Starting user migration...")

    profiles = get_legacy_profiles(legacy)
    logger.info(f"Found {len(profiles)} profiles to migrate")

    migrated = 0
    skipped = 0
    failed = 0

    for profile in profiles:
        try:
            if migrate_profile(legacy, accounts, profile):
                migrated += 1
            else:
                skipped += 1
        except Exception as e:
            failed += 1
            logger.error(f"Migration failed for profile {profile.get('id')}: {e}")

    logger.info("=== Migration Summary ===")
    logger.info(f"Total profiles: {len(profiles)}")
    logger.info(f"Successfully migrated: {migrated}")
    logger.info(f"Skipped (already exist): {skipped}")
    logger.info(f"Failed: {failed}")

    return {"migrated": migrated, "skipped": skipped, "failed": failed, "total": len(profiles)}


def main() -> int:
    if not settings.legacy_supabase_url or not settings.legacy_supabase_service_role_key:
        logger.error("LEGACY_SUPABASE_URL and LEGACY_SUPABASE_SERVICE_ROLE_KEY must be set")
        return 1
    try:
        legacy = create_client(settings.legacy_supabase_url, settings.legacy_supabase_service_role_key)
        accounts = AccountRepository(get_supabase(), settings.accounts_table)
        run_migration(legacy, accounts)
    except Exception as e:
        logger.exception(f"Migration failed: {e}")
        return 1
    logger.info("Migration completed!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
