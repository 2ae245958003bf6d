"""
Mutation Dispatcher
Runs one backend write, then invalidates the affected list queries,
notifies the user and closes the form. Failures are reported and routed
back to the form; nothing is retried.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

from core.controllers.notifier import Notifier
from core.controllers.query_controller import QueryCache
from utils.exceptions import BoardAdminException, ConflictException

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConflictRoute:
    """Send a conflict with ``code`` whose text contains ``fragment`` to ``field``"""
    code: str
    fragment: Optional[str]
    field: str
    message: Optional[str] = None

    def matches(self, error: ConflictException) -> bool:
        if error.error_code != self.code:
            return False
        return self.fragment is None or self.fragment in error.constraint_text


@dataclass
class MutationResult:
    ok: bool
    data: Any = None
    error: Optional[BoardAdminException] = None


class MutationDispatcher:
    """Single-attempt write with cache invalidation and notifications"""

    def __init__(self, cache: QueryCache, notifier: Notifier):
        self.cache = cache
        self.notifier = notifier

    def dispatch(self, call: Callable[[], Any], entity_keys: Iterable[str] = (),
                 success_message: str = None, form=None,
                 conflict_routes: Iterable[ConflictRoute] = (),
                 on_close: Callable[[], None] = None, error_prefix: str = None) -> MutationResult:
        try:
            data = call()
        except BoardAdminException as e:
            text = self._route_failure(e, form, conflict_routes, error_prefix)
            logger.warning(f"Mutation failed [{e.error_code}]: {e.message}")
            self.notifier.error(text)
            return MutationResult(ok=False, error=e)

        for key in entity_keys:
            self.cache.invalidate(key)
        if success_message:
            self.notifier.success(success_message)
        if on_close:
            on_close()
        return MutationResult(ok=True, data=data)

    def _route_failure(self, error: BoardAdminException, form, conflict_routes, error_prefix) -> str:
        if isinstance(error, ConflictException):
            for route in conflict_routes:
                if route.matches(error):
                    text = route.message or error.message
                    if form is not None:
                        form.set_field_error(route.field, text)
                    return text

        text = f"{error_prefix}: {error.message}" if error_prefix else error.message
        if form is not None:
            form.set_form_error(text)
        return text
