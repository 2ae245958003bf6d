"""
List/Query Controller
Tracks page, search, filters and sort for one entity list, serves reads
from a query cache and keeps the last good page on screen while a newer
request is pending or after it fails.
"""

import logging
import math
import time
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Hashable, Optional, Tuple

from core.controllers.notifier import Notifier
from core.models.entities import PagedResult
from utils.exceptions import BoardAdminException

logger = logging.getLogger(__name__)

SORT_ASC = 'asc'
SORT_DESC = 'desc'


def _freeze_filters(filters: Optional[Dict[str, Any]]) -> Tuple[Tuple[str, Any], ...]:
    return tuple(sorted((k, v) for k, v in (filters or {}).items() if v is not None))


@dataclass(frozen=True)
class ListQuery:
    """Immutable list parameters; also the cache key"""
    page: int = 1
    page_size: int = 10
    search_term: str = ''
    filters: Tuple[Tuple[str, Any], ...] = ()
    sort_field: Optional[str] = None
    sort_order: str = SORT_ASC

    @property
    def filter_dict(self) -> Dict[str, Any]:
        return dict(self.filters)

    def with_changes(self, **changes) -> 'ListQuery':
        """
        Apply changes. Any change other than ``page`` sends the query back
        to page 1; a page-only change keeps everything else as it is.
        """
        if 'filters' in changes and not isinstance(changes['filters'], tuple):
            changes['filters'] = _freeze_filters(changes['filters'])
        if 'search_term' in changes:
            changes['search_term'] = (changes['search_term'] or '').strip()

        updated = replace(self, **changes)
        others_changed = any(
            getattr(updated, name) != getattr(self, name)
            for name in changes if name != 'page'
        )
        if others_changed:
            updated = replace(updated, page=1)
        return updated

    def total_pages(self, total_items: int) -> int:
        if self.page_size <= 0:
            return 1
        return max(1, math.ceil(total_items / self.page_size))


class QueryCache:
    """Results keyed by ``(entity_key, params)``; dropped per entity on invalidation"""

    def __init__(self):
        self._entries: Dict[Tuple[str, Hashable], Any] = {}

    def get(self, entity_key: str, params: Hashable) -> Optional[Any]:
        return self._entries.get((entity_key, params))

    def contains(self, entity_key: str, params: Hashable) -> bool:
        return (entity_key, params) in self._entries

    def put(self, entity_key: str, params: Hashable, value: Any):
        self._entries[(entity_key, params)] = value

    def invalidate(self, entity_key: str) -> int:
        stale = [key for key in self._entries if key[0] == entity_key]
        for key in stale:
            del self._entries[key]
        if stale:
            logger.debug(f"Invalidated {len(stale)} cached queries for {entity_key}")
        return len(stale)


@dataclass(frozen=True)
class FetchTicket:
    sequence: int
    query: ListQuery


class ListController:
    """Paged list state for one entity"""

    def __init__(self, entity_key: str, fetcher: Callable[[ListQuery], PagedResult],
                 cache: QueryCache, notifier: Notifier, query: ListQuery = None):
        self.entity_key = entity_key
        self.fetcher = fetcher
        self.cache = cache
        self.notifier = notifier
        self.query = query or ListQuery()
        self.current: Optional[PagedResult] = None
        self.last_error: Optional[BoardAdminException] = None
        self._issued = 0
        self._applied = 0

    # -- parameters ------------------------------------------------------

    def update(self, **changes) -> ListQuery:
        self.query = self.query.with_changes(**changes)
        return self.query

    def set_page(self, page: int) -> ListQuery:
        return self.update(page=max(1, page))

    def sort_by(self, field: str) -> ListQuery:
        """Same field flips the order; a new field starts ascending"""
        if self.query.sort_field == field:
            order = SORT_DESC if self.query.sort_order == SORT_ASC else SORT_ASC
            return self.update(sort_order=order)
        return self.update(sort_field=field, sort_order=SORT_ASC)

    # -- fetch lifecycle -------------------------------------------------

    @property
    def is_loading(self) -> bool:
        return self._issued > self._applied

    @property
    def items(self) -> list:
        return self.current.items if self.current else []

    @property
    def total_items(self) -> int:
        return self.current.total_items if self.current else 0

    @property
    def total_pages(self) -> int:
        return self.query.total_pages(self.total_items)

    def begin_fetch(self) -> FetchTicket:
        self._issued += 1
        return FetchTicket(self._issued, self.query)

    def complete(self, ticket: FetchTicket, result: PagedResult) -> bool:
        """Apply a response unless a newer one has already been applied"""
        self.cache.put(self.entity_key, ticket.query, result)
        if ticket.sequence <= self._applied:
            logger.debug(f"Discarding stale {self.entity_key} response #{ticket.sequence}")
            return False
        self._applied = ticket.sequence
        self.current = result
        self.last_error = None
        return True

    def fail(self, ticket: FetchTicket, error: BoardAdminException) -> bool:
        if ticket.sequence <= self._applied:
            return False
        self._applied = ticket.sequence
        self.last_error = error
        logger.error(f"Failed to load {self.entity_key}: {error.message}")
        self.notifier.error(error.message)
        return True

    def refresh(self, force: bool = False) -> Optional[PagedResult]:
        """Load the current query, from cache unless ``force`` or invalidated"""
        if not force and self.cache.contains(self.entity_key, self.query):
            self.current = self.cache.get(self.entity_key, self.query)
            return self.current

        ticket = self.begin_fetch()
        try:
            result = self.fetcher(ticket.query)
        except BoardAdminException as e:
            self.fail(ticket, e)
            return self.current
        self.complete(ticket, result)
        return self.current


class Debouncer:
    """Holds a typed value until it has been stable for ``quiet_period`` seconds"""

    def __init__(self, quiet_period: float, clock: Callable[[], float] = time.monotonic,
                 initial: Any = ''):
        self.quiet_period = quiet_period
        self.clock = clock
        self.pending = initial
        self.value = initial
        self._changed_at = clock()

    def push(self, value: Any):
        if value != self.pending:
            self.pending = value
            self._changed_at = self.clock()

    def remaining(self) -> float:
        if self.pending == self.value:
            return 0.0
        return max(0.0, self.quiet_period - (self.clock() - self._changed_at))

    @property
    def is_settled(self) -> bool:
        return self.pending == self.value

    def poll(self) -> bool:
        """Promote the pending value once the quiet period has passed; True when it changed"""
        if self.pending == self.value:
            return False
        if self.clock() - self._changed_at < self.quiet_period:
            return False
        self.value = self.pending
        return True
