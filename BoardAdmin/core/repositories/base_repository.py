"""
Base Repository Class
Provides common gateway operations for all repositories
"""

from abc import ABC
from typing import Any, Callable, Dict, List, Optional, Union
import logging

from core.models.entities import PagedResult
from core.models.mappers import row_to_paged
from utils.exceptions import GatewayException, ValidationException

logger = logging.getLogger(__name__)


class BaseRepository(ABC):
    """Base repository with common table and procedure operations"""

    def __init__(self, gateway, table_name: str, primary_key: str = 'id'):
        self.gateway = gateway
        self.table_name = table_name
        self.primary_key = primary_key

    def call(self, procedure: str, params: Dict[str, Any] = None) -> Any:
        """Call a named remote procedure"""
        try:
            return self.gateway.rpc(procedure, params or {})
        except GatewayException as e:
            logger.error(f"Error calling {procedure}: {e.message}")
            raise

    def to_entity(self, mapper: Callable[[Any], Any], data: Any) -> Any:
        """Map a response; a row the mapper cannot read becomes a GatewayException"""
        try:
            return mapper(data)
        except (ValueError, TypeError, KeyError, AttributeError, ArithmeticError) as e:
            logger.error(f"Malformed response for {self.table_name}: {e}")
            raise GatewayException(f"Unexpected data from the server: {e}", "BAD_RESPONSE")

    def to_entities(self, mapper: Callable[[Dict[str, Any]], Any], rows: Optional[List[Dict[str, Any]]]) -> list:
        return self.to_entity(lambda items: [mapper(r) for r in items or []], rows)

    def to_page(self, mapper: Callable[[Dict[str, Any]], Any], data: Optional[Dict[str, Any]]) -> PagedResult:
        return self.to_entity(lambda d: row_to_paged(d, mapper), data)

    def create(self, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Insert a row and return it"""
        clean_data = {k: v for k, v in data.items() if k != self.primary_key}
        if not clean_data:
            raise ValidationException("No data provided for creation")

        try:
            rows = self.gateway.insert(self.table_name, clean_data)
            created = rows[0] if rows else None
            logger.info(f"Created record in {self.table_name} with ID: "
                        f"{created.get(self.primary_key) if created else None}")
            return created
        except GatewayException as e:
            logger.error(f"Error creating record in {self.table_name}: {e.message}")
            raise

    def find_all(self, order: Union[str, List[str]] = None, filters: Dict[str, Any] = None,
                 columns: str = '*', limit: int = None) -> List[Dict[str, Any]]:
        """Find all records with optional filters and ordering"""
        try:
            return self.gateway.select(self.table_name, columns=columns, filters=filters,
                                       order=order, limit=limit) or []
        except GatewayException as e:
            logger.error(f"Error finding records in {self.table_name}: {e.message}")
            raise

    def update(self, record_id: Any, data: Dict[str, Any]) -> bool:
        """Update record by primary key"""
        clean_data = {k: v for k, v in data.items() if k != self.primary_key}
        if not clean_data:
            return False

        try:
            self.gateway.update(self.table_name, clean_data, {self.primary_key: record_id})
            logger.info(f"Updated record in {self.table_name} with ID: {record_id}")
            return True
        except GatewayException as e:
            logger.error(f"Error updating record in {self.table_name}: {e.message}")
            raise

    def delete(self, record_id: Any) -> bool:
        """Delete record by primary key"""
        try:
            self.gateway.delete(self.table_name, {self.primary_key: record_id})
            logger.info(f"Deleted record from {self.table_name} with ID: {record_id}")
            return True
        except GatewayException as e:
            logger.error(f"Error deleting record from {self.table_name}: {e.message}")
            raise
