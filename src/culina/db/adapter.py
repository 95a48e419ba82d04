"""
Database Adapter Protocol.

The pipeline components talk to the relational store through this thin
interface, matching the Supabase/PostgREST query builder pattern:
table() returns a query builder, rpc() calls stored procedures.

A supabase.Client satisfies it as-is. Tests pass an in-memory fake.
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class DatabaseAdapter(Protocol):
    """
    Abstract database access for the generation pipeline.

    The table() method returns a query builder supporting the fluent
    PostgREST API: .select(), .insert(), .update(), .upsert(), .delete(),
    .eq(), .maybe_single(), .execute().

    The rpc() method calls a database function and returns an object
    with .execute() that yields .data.
    """

    def table(self, name: str) -> Any:
        """Return a query builder for the given table."""
        ...

    def rpc(self, function_name: str, params: dict) -> Any:
        """Call a stored procedure / database function."""
        ...
