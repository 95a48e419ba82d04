"""Culina - Database access (Supabase)."""
