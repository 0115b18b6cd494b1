"""
Base repository with common functionality.
"""

from typing import Optional, List, Dict, Any, TypeVar, Generic, NoReturn
from pydantic import BaseModel

from family_directory.core.exceptions import DatabaseError
from family_directory.core.logging import get_logger, timed_query

logger = get_logger(__name__)

T = TypeVar('T', bound=BaseModel)


class BaseRepository(Generic[T]):
    """
    Base repository providing common record store operations.

    Subclasses should:
    - Set `table_name` class attribute
    - Set `model_class` class attribute
    - Implement domain-specific methods

    Every failure of the underlying client surfaces as DatabaseError.
    """

    table_name: str = None
    model_class: type = None
    default_order: List[str] = []

    def __init__(self, supabase_client):
        """
        Initialize repository.

        Args:
            supabase_client: SupabaseClient instance (from infrastructure/)
        """
        self.client = supabase_client
        self.logger = get_logger(f"repo.{self.__class__.__name__}")

    @property
    def table(self):
        """Get table reference for queries."""
        return self.client.table(self.table_name)

    # ============================================================
    # Generic CRUD Operations
    # ============================================================

    async def get_by_id(self, id: str) -> Optional[T]:
        """
        Get single record by ID.

        Returns:
            Model instance or None
        """
        try:
            with timed_query(self.logger, "select", self.table_name):
                response = self.table.select("*").eq("id", id).execute()
        except Exception as e:
            self._handle_error("get_by_id", e)

        if not response.data:
            return None
        return self._to_model(response.data[0])

    async def get_all(self) -> List[T]:
        """Load the whole table in `default_order`."""
        try:
            with timed_query(self.logger, "select all", self.table_name):
                rows = self.client.paginated_select(self.table_name, order_by=self.default_order)
        except Exception as e:
            self._handle_error("get_all", e)
        return [self._to_model(row) for row in rows]

    async def create(self, data: Dict[str, Any]) -> T:
        """
        Create new record.
        """
        try:
            clean_data = self.client.clean_for_json(data)
            with timed_query(self.logger, "insert", self.table_name):
                response = self.table.insert(clean_data).execute()
        except Exception as e:
            self._handle_error("create", e)

        if not response.data:
            raise DatabaseError("Insert returned no data", operation=f"{self.table_name}.create")
        return self._to_model(response.data[0])

    async def update(self, id: str, data: Dict[str, Any]) -> Optional[T]:
        """
        Update existing record.

        Returns:
            Updated model, None when no row has this ID
        """
        try:
            clean_data = self.client.clean_for_json(data)
            with timed_query(self.logger, "update", self.table_name):
                response = self.table.update(clean_data).eq("id", id).execute()
        except Exception as e:
            self._handle_error("update", e)

        if not response.data:
            return None
        return self._to_model(response.data[0])

    async def delete(self, id: str) -> bool:
        """
        Delete record by ID. Returns False when nothing was deleted.
        """
        try:
            with timed_query(self.logger, "delete", self.table_name):
                response = self.table.delete().eq("id", id).execute()
        except Exception as e:
            self._handle_error("delete", e)
        return len(response.data or []) > 0

    # ============================================================
    # Helper Methods
    # ============================================================

    def _to_model(self, data: Dict) -> T:
        """
        Convert database row to model instance.
        Override in subclasses for custom transformation.
        """
        if self.model_class is None:
            return data
        return self.model_class(**data)

    def _handle_error(self, operation: str, error: Exception) -> NoReturn:
        """
        Handle database error with logging.
        """
        self.logger.error(f"{operation} failed: {error}")
        if isinstance(error, DatabaseError):
            raise error
        raise DatabaseError(str(error), operation=f"{self.table_name}.{operation}") from error
