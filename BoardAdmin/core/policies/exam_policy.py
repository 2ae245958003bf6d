"""
Exam lifecycle and edit-lock policy
Single source for which exam fields may change in which status.
"""

from enum import Enum
from typing import FrozenSet, Union

from core.models.entities import ExamStatus
from utils.exceptions import InvalidTransitionException


class FieldGroup(Enum):
    NAME = 'name'
    REGISTRATION_INFO = 'registrationInfo'
    FEE_SCHEDULE = 'feeSchedule'


_TRANSITIONS = {
    ExamStatus.PENDING: frozenset({ExamStatus.PENDING, ExamStatus.PREPARATORY, ExamStatus.CANCELLED}),
    ExamStatus.PREPARATORY: frozenset({ExamStatus.PREPARATORY, ExamStatus.ONGOING, ExamStatus.CANCELLED}),
    ExamStatus.ONGOING: frozenset({ExamStatus.ONGOING, ExamStatus.COMPLETED, ExamStatus.CANCELLED}),
    ExamStatus.COMPLETED: frozenset({ExamStatus.COMPLETED}),
    ExamStatus.CANCELLED: frozenset({ExamStatus.CANCELLED}),
}

# Name stays editable for cancelled exams while the form itself is locked;
# kept as observed until the board decides otherwise.
_NAME_EDITABLE = frozenset({ExamStatus.PENDING, ExamStatus.CANCELLED})
_TERMINAL = frozenset({ExamStatus.COMPLETED, ExamStatus.CANCELLED})


def _as_status(status: Union[ExamStatus, str]) -> ExamStatus:
    return status if isinstance(status, ExamStatus) else ExamStatus(status)


def is_field_group_editable(status: Union[ExamStatus, str], group: Union[FieldGroup, str]) -> bool:
    status = _as_status(status)
    group = group if isinstance(group, FieldGroup) else FieldGroup(group)
    if group is FieldGroup.NAME:
        return status in _NAME_EDITABLE
    return status is ExamStatus.PENDING


def allowed_transitions(status: Union[ExamStatus, str]) -> FrozenSet[ExamStatus]:
    """Statuses reachable from ``status``, including itself"""
    return _TRANSITIONS[_as_status(status)]


def is_fully_locked(status: Union[ExamStatus, str]) -> bool:
    """Completed and cancelled exams cannot be saved from the edit form at all"""
    return _as_status(status) in _TERMINAL


def validate_transition(current: Union[ExamStatus, str], target: Union[ExamStatus, str]) -> ExamStatus:
    current = _as_status(current)
    target = _as_status(target)
    if target not in allowed_transitions(current):
        raise InvalidTransitionException(
            f"Cannot move an exam from '{current.value}' to '{target.value}'",
            field_errors={'status': f"Not allowed from {current.value}"},
            error_code='INVALID_TRANSITION',
        )
    return target
