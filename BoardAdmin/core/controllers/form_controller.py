"""
Form Controller
Draft state, field errors and submission for create/edit forms.
Subclasses supply validate(), build_payload() and send().
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

from core.controllers.mutation import ConflictRoute, MutationDispatcher, MutationResult
from utils.exceptions import ValidationException

FORM_ERROR_KEY = '__form__'
FORM_HAS_ERRORS = "The form has errors. Please correct them and try again."


class FormController(ABC):
    """Base create/edit form"""

    entity_keys: Tuple[str, ...] = ()
    success_message: str = "Saved successfully"
    error_prefix: Optional[str] = None
    conflict_routes: Iterable[ConflictRoute] = ()

    def __init__(self, dispatcher: MutationDispatcher, draft: Dict[str, Any]):
        self.dispatcher = dispatcher
        self.draft = dict(draft)
        self.original = dict(draft)
        self.errors: Dict[str, Any] = {}

    # -- editing ---------------------------------------------------------

    def on_change(self, field: str, value: Any):
        if self.is_field_disabled(field):
            return
        self.draft[field] = value
        self.errors.pop(field, None)
        self.errors.pop(FORM_ERROR_KEY, None)
        self.after_change(field, value)

    def after_change(self, field: str, value: Any):
        """Hook for dependent fields"""
        pass

    def is_field_disabled(self, field: str) -> bool:
        return False

    @property
    def is_dirty(self) -> bool:
        return self.draft != self.original

    @property
    def can_submit(self) -> bool:
        return True

    # -- errors ----------------------------------------------------------

    def set_field_error(self, field: str, message: str):
        self.errors[field] = message

    def set_form_error(self, message: str):
        self.errors[FORM_ERROR_KEY] = message

    @property
    def form_error(self) -> Optional[str]:
        return self.errors.get(FORM_ERROR_KEY)

    def error_for(self, field: str) -> Optional[str]:
        value = self.errors.get(field)
        return value if isinstance(value, str) else None

    # -- submission ------------------------------------------------------

    @abstractmethod
    def validate(self) -> Dict[str, Any]:
        """Return the error map for the current draft; empty when valid"""
        pass

    @abstractmethod
    def build_payload(self) -> Any:
        pass

    @abstractmethod
    def send(self, payload: Any) -> Any:
        pass

    def check(self) -> bool:
        self.errors = self.validate()
        return not self.errors

    def submit(self, on_close: Callable[[], None] = None) -> MutationResult:
        if not self.can_submit:
            error = ValidationException("This record can no longer be edited", error_code='LOCKED')
            self.set_form_error(error.message)
            self.dispatcher.notifier.warning(error.message)
            return MutationResult(ok=False, error=error)

        if not self.check():
            self.dispatcher.notifier.warning(FORM_HAS_ERRORS)
            return MutationResult(
                ok=False, error=ValidationException(FORM_HAS_ERRORS, field_errors=dict(self.errors))
            )

        payload = self.build_payload()
        result = self.dispatcher.dispatch(
            lambda: self.send(payload),
            entity_keys=self.entity_keys,
            success_message=self.success_message,
            form=self,
            conflict_routes=self.conflict_routes,
            on_close=on_close,
            error_prefix=self.error_prefix,
        )
        if result.ok:
            self.original = dict(self.draft)
        return result
