"""
Culina - Supabase Client.

The pipeline writes with the service-role key: it inserts recipes and
usage rows on behalf of the requesting user.
"""

from supabase import Client, create_client

from culina.config import Settings

# Singleton client instance
_client: Client | None = None


def get_service_client(settings: Settings) -> Client:
    """
    Get the service-role Supabase client.

    Uses singleton pattern to reuse connection.
    """
    global _client

    if _client is None:
        _client = create_client(
            settings.supabase_url,
            settings.supabase_service_role_key,
        )

    return _client

