# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module wraps the Supabase client behind a small, table-scoped query
# surface used uniformly by every service:
# - fetch_row / fetch_rows / count_rows   (select with eq / neq / in / order)
# - insert_row / update_row / update_rows / delete_row / delete_rows
# - call_rpc                              (stored procedures)
#
# Every backend failure is re-raised as SupabaseClientError with the table
# and operation that failed, so nothing silently degrades to "no change".
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   fields = SupabaseClient.fetch_rows("fields", {"table_id": table_id},
#                                      order_by="order_index")
# =============================================================================

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from supabase import create_client, Client

from app.config import settings
from lib.utils import ApplicationError, normalize_uuid

# Set up logging for this module
logger = logging.getLogger(__name__)

# PostgREST code returned by .single() when no row matches
NO_ROWS_CODE = "PGRST116"

Filters = dict[str, Any]


class SupabaseClientError(ApplicationError):
    """Error during Supabase operations."""

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code=code, suggestion=suggestion, details=details)


class SupabaseClient:
    """
    Typed wrapper for Supabase database operations.

    Implements singleton pattern - one client instance is shared across
    the application. All methods are class methods for easy access without
    instantiation.

    Example:
        table = SupabaseClient.fetch_row("tables", table_id)
        records = SupabaseClient.fetch_rows(
            "records",
            {"table_id": table_id},
            order_by="created_at",
            desc=True,
        )
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton Supabase client.

        Uses service_role key which bypasses Row Level Security (RLS), so
        services check workspace membership themselves.

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                )
        return cls._instance

    @classmethod
    def _apply_filters(
        cls,
        query: Any,
        filters: Filters | None = None,
        neq: Filters | None = None,
        in_filters: dict[str, list[Any]] | None = None,
        gte: Filters | None = None,
    ) -> Any:
        """Chain equality / inequality / membership / lower-bound filters."""
        for column, value in (filters or {}).items():
            query = query.eq(column, normalize_uuid(value))
        for column, value in (neq or {}).items():
            query = query.neq(column, normalize_uuid(value))
        for column, values in (in_filters or {}).items():
            query = query.in_(column, [normalize_uuid(v) for v in values])
        for column, value in (gte or {}).items():
            query = query.gte(column, value)
        return query

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_row(
        cls,
        table: str,
        row_id: str | UUID,
        columns: str = "*",
    ) -> dict[str, Any] | None:
        """
        Fetch a single row by primary key.

        Returns:
            Row dict, or None if not found

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()
        row_id_str = normalize_uuid(row_id)

        try:
            response = (
                client.table(table)
                .select(columns)
                .eq("id", row_id_str)
                .single()
                .execute()
            )
            return response.data

        except Exception as e:
            # Check if it's a "not found" error
            if NO_ROWS_CODE in str(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch {table} row: {e}",
                code="FETCH_ROW_FAILED",
                suggestion=f"Check that the {table} table is reachable",
                details={"table": table, "id": row_id_str}
            )

    @classmethod
    def fetch_rows(
        cls,
        table: str,
        filters: Filters | None = None,
        *,
        neq: Filters | None = None,
        in_filters: dict[str, list[Any]] | None = None,
        gte: Filters | None = None,
        order_by: str | None = None,
        desc: bool = False,
        limit: int | None = None,
        columns: str = "*",
    ) -> list[dict[str, Any]]:
        """
        Fetch rows matching the given filters.

        Args:
            table: Table name
            filters: Equality filters {column: value}
            neq: Inequality filters {column: value}
            in_filters: Membership filters {column: [values]}
            gte: Lower-bound filters {column: value}
            order_by: Column to order by
            desc: Descending order
            limit: Maximum number of rows
            columns: Column list for the select

        Raises:
            SupabaseClientError: If query fails
        """
        if in_filters and any(len(values) == 0 for values in in_filters.values()):
            # PostgREST rejects an empty in.() list; nothing can match anyway
            return []

        client = cls.get_client()

        try:
            query = client.table(table).select(columns)
            query = cls._apply_filters(query, filters, neq, in_filters, gte)
            if order_by:
                query = query.order(order_by, desc=desc)
            if limit is not None:
                query = query.limit(limit)

            response = query.execute()
            rows = response.data or []
            logger.debug(f"Fetched {len(rows)} rows from {table}")
            return rows

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch {table} rows: {e}",
                code="FETCH_ROWS_FAILED",
                details={"table": table, "filters": {k: str(v) for k, v in (filters or {}).items()}}
            )

    @classmethod
    def count_rows(
        cls,
        table: str,
        filters: Filters | None = None,
        *,
        neq: Filters | None = None,
        in_filters: dict[str, list[Any]] | None = None,
    ) -> int:
        """
        Count rows matching the given filters (exact count).

        Raises:
            SupabaseClientError: If query fails
        """
        if in_filters and any(len(values) == 0 for values in in_filters.values()):
            return 0

        client = cls.get_client()

        try:
            query = client.table(table).select("id", count="exact")
            query = cls._apply_filters(query, filters, neq, in_filters)
            response = query.execute()
            return response.count or 0

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to count {table} rows: {e}",
                code="COUNT_ROWS_FAILED",
                details={"table": table}
            )

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    @classmethod
    def insert_row(cls, table: str, data: dict[str, Any]) -> dict[str, Any]:
        """
        Insert a row and return it as stored (with generated id/timestamps).

        Raises:
            SupabaseClientError: If insert fails or returns nothing
        """
        client = cls.get_client()

        try:
            response = (
                client.table(table)
                .insert(data)
                .execute()
            )

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to insert into {table}: {e}",
                code="INSERT_FAILED",
                details={"table": table}
            )

        if response.data:
            return response.data[0]
        raise SupabaseClientError(
            message=f"Insert into {table} returned no data",
            code="INSERT_NO_DATA",
            suggestion="Check row level security policies for the service role",
            details={"table": table}
        )

    @classmethod
    def update_row(
        cls,
        table: str,
        row_id: str | UUID,
        data: dict[str, Any],
    ) -> dict[str, Any] | None:
        """
        Update a row by primary key.

        Returns:
            Updated row dict, or None if no row matched

        Raises:
            SupabaseClientError: If update fails
        """
        rows = cls.update_rows(table, data, {"id": row_id})
        return rows[0] if rows else None

    @classmethod
    def update_rows(
        cls,
        table: str,
        data: dict[str, Any],
        filters: Filters,
    ) -> list[dict[str, Any]]:
        """
        Update every row matching the equality filters.

        Raises:
            SupabaseClientError: If update fails
        """
        client = cls.get_client()

        try:
            query = client.table(table).update(data)
            query = cls._apply_filters(query, filters)
            response = query.execute()
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to update {table}: {e}",
                code="UPDATE_FAILED",
                details={"table": table, "filters": {k: str(v) for k, v in filters.items()}}
            )

    @classmethod
    def delete_row(cls, table: str, row_id: str | UUID) -> None:
        """
        Delete a row by primary key.

        Raises:
            SupabaseClientError: If delete fails
        """
        cls.delete_rows(table, {"id": row_id})

    @classmethod
    def delete_rows(cls, table: str, filters: Filters) -> None:
        """
        Delete every row matching the equality filters.

        Raises:
            SupabaseClientError: If delete fails
        """
        client = cls.get_client()

        try:
            query = client.table(table).delete()
            query = cls._apply_filters(query, filters)
            query.execute()
            logger.debug(f"Deleted from {table} where {filters}")

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to delete from {table}: {e}",
                code="DELETE_FAILED",
                details={"table": table, "filters": {k: str(v) for k, v in filters.items()}}
            )

    # -------------------------------------------------------------------------
    # Stored Procedures
    # -------------------------------------------------------------------------

    @classmethod
    def call_rpc(cls, function: str, params: dict[str, Any]) -> Any:
        """
        Call a Postgres function through PostgREST.

        Returns:
            The function's return value (already decoded)

        Raises:
            SupabaseClientError: If the call fails
        """
        client = cls.get_client()

        try:
            response = client.rpc(function, params).execute()
            return response.data

        except Exception as e:
            raise SupabaseClientError(
                message=f"Stored procedure {function} failed: {e}",
                code="RPC_FAILED",
                suggestion=f"Check that the {function} function is deployed",
                details={"function": function}
            )
