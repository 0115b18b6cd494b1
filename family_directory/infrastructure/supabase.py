"""
Supabase client - the record store connection.
Every repository shares one client instance.
"""

from datetime import date, datetime
from enum import Enum
from typing import List, Dict, Optional, Any
from supabase import create_client, Client

from family_directory.core.config import settings
from family_directory.core.exceptions import DatabaseError
from family_directory.core.logging import get_logger

logger = get_logger(__name__)


class SupabaseClient:
    """
    Supabase client wrapper for all record store operations.

    Provides:
    - Lazy connection management
    - Paginated full-table reads
    - Value conversion for JSON payloads
    """

    def __init__(self, url: str = None, key: str = None):
        self._url = url or settings.supabase_url
        self._key = key or settings.supabase_service_role_key
        self._client: Optional[Client] = None

    def _connect(self):
        """Establish connection to Supabase."""
        if not self._url or not self._key:
            raise DatabaseError(
                "SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set",
                operation="connect"
            )
        try:
            self._client = create_client(self._url, self._key)
            logger.info("Supabase client initialized")
        except Exception as e:
            logger.error(f"Failed to connect to Supabase: {e}")
            raise DatabaseError(str(e), operation="connect")

    @property
    def client(self) -> Client:
        """Get raw Supabase client for direct queries."""
        if not self._client:
            self._connect()
        return self._client

    def table(self, name: str):
        """Get table reference for chaining."""
        return self.client.table(name)

    # ============================================================
    # Pagination Helper
    # ============================================================

    def paginated_select(
        self,
        table: str,
        columns: str = "*",
        page_size: int = 1000,
        order_by: Optional[List[str]] = None,
    ) -> List[Dict]:
        """
        Load every row of a table, page by page.

        Args:
            table: Table name
            columns: Columns to select
            page_size: Records per page
            order_by: Columns to order by (ascending), needed for stable paging

        Returns:
            All rows
        """
        all_data = []
        offset = 0

        while True:
            try:
                query = self.client.table(table).select(columns)
                for column in order_by or []:
                    query = query.order(column)
                response = query.range(offset, offset + page_size - 1).execute()
            except Exception as e:
                logger.error(f"Paginated query failed: {table} - {e}")
                raise DatabaseError(str(e), operation=f"{table}.paginated_select")

            batch = response.data or []
            all_data.extend(batch)

            if len(batch) < page_size:
                break

            offset += page_size
            logger.debug(f"Loaded {len(all_data)} records from {table}...")

        logger.info(f"Loaded {len(all_data)} total records from {table}")
        return all_data

    # ============================================================
    # Type Conversion Utilities
    # ============================================================

    @staticmethod
    def clean_for_json(data: Dict[str, Any]) -> Dict[str, Any]:
        """Clean dict values for JSON serialization."""
        result = {}
        for key, value in data.items():
            if isinstance(value, Enum):
                result[key] = value.value
            elif isinstance(value, (datetime, date)):
                result[key] = value.isoformat()
            elif isinstance(value, tuple):
                result[key] = list(value)
            else:
                result[key] = value
        return result
