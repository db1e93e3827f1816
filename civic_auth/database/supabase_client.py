from supabase import Client, ClientOptions, create_client
from civic_auth.config import settings


class SupabaseClient:
    _client: Client = None
    _service_client: Client = None

    @classmethod
    def get_client(cls) -> Client:
        """Anon-key client. Used for user-facing sign in, sign up and refresh."""
        if cls._client is None:
            # Shared by every request, so it must not keep or auto-refresh the last user's session
            cls._client = create_client(
                settings.supabase_url,
                settings.supabase_key,
                options=ClientOptions(auto_refresh_token=False, persist_session=False),
            )
        return cls._client

    @classmethod
    def get_service_client(cls) -> Client:
        """Client with service_role key; bypasses RLS. Used for the accounts table and auth admin calls."""
        if cls._service_client is None and settings.supabase_service_role_key:
            cls._service_client = create_client(
                settings.supabase_url, settings.supabase_service_role_key
            )
        return cls._service_client or cls.get_client()


def get_supabase() -> Client:
    return SupabaseClient.get_service_client()


def get_supabase_anon() -> Client:
    return SupabaseClient.get_client()
