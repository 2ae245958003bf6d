"""
Helper Utilities
Common utility functions for dashboard operations
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, TypeVar
import logging

logger = logging.getLogger(__name__)

T = TypeVar('T')


class StringUtils:
    """Utility functions for string operations"""

    @staticmethod
    def clean_string(text: Optional[str]) -> str:
        """Clean and normalize string input"""
        if not text:
            return ""

        # Remove extra whitespace and normalize
        return " ".join(text.strip().split())

    @staticmethod
    def matches_search(term: str, *values: Optional[str]) -> bool:
        """Case-insensitive substring match against any of the values"""
        term = StringUtils.clean_string(term).lower()
        if not term:
            return True
        return any(term in (v or '').lower() for v in values)


class PageUtils:
    """Local pagination for lists loaded in full"""

    @staticmethod
    def slice_page(items: Sequence[T], page: int, page_size: int) -> List[T]:
        start = (max(1, page) - 1) * page_size
        return list(items[start:start + page_size])


class LoggingUtils:
    """Logging utility functions"""

    @staticmethod
    def log_security_event(event_type: str, user_id: str = None,
                           details: Dict[str, Any] = None):
        """Log sign-in and sign-out events"""
        log_data = {
            'event_type': event_type,
            'user_id': user_id,
            'timestamp': datetime.now().isoformat(),
            'details': details or {}
        }

        logger.warning(f"Security Event: {event_type}", extra=log_data)

    @staticmethod
    def log_business_event(event_type: str, entity_type: str, entity_id: Any,
                           user_id: str = None, details: Dict[str, Any] = None):
        """Log business events"""
        log_data = {
            'event_type': event_type,
            'entity_type': entity_type,
            'entity_id': entity_id,
            'user_id': user_id,
            'timestamp': datetime.now().isoformat(),
            'details': details or {}
        }

        logger.info(f"Business Event: {event_type}", extra=log_data)

