"""
Exam lock policy tests: which field groups are editable per status and
which status changes are allowed.
"""

import pytest

from core.models.entities import ExamStatus
from core.policies.exam_policy import (
    FieldGroup, allowed_transitions, is_field_group_editable, is_fully_locked, validate_transition
)
from utils.exceptions import InvalidTransitionException


class TestFieldGroups:

    def test_pending_everything_editable(self):
        for group in FieldGroup:
            assert is_field_group_editable(ExamStatus.PENDING, group) is True

    @pytest.mark.parametrize("status", [ExamStatus.PREPARATORY, ExamStatus.ONGOING, ExamStatus.COMPLETED])
    def test_nothing_editable_after_pending(self, status):
        for group in FieldGroup:
            assert is_field_group_editable(status, group) is False

    def test_cancelled_keeps_name_editable(self):
        assert is_field_group_editable(ExamStatus.CANCELLED, FieldGroup.NAME) is True
        assert is_field_group_editable(ExamStatus.CANCELLED, FieldGroup.FEE_SCHEDULE) is False
        assert is_field_group_editable(ExamStatus.CANCELLED, FieldGroup.REGISTRATION_INFO) is False

    def test_accepts_raw_values(self):
        assert is_field_group_editable('pending', 'feeSchedule') is True
        assert is_field_group_editable('ongoing', 'registrationInfo') is False

    @pytest.mark.parametrize("status,locked", [
        (ExamStatus.PENDING, False),
        (ExamStatus.PREPARATORY, False),
        (ExamStatus.ONGOING, False),
        (ExamStatus.COMPLETED, True),
        (ExamStatus.CANCELLED, True),
    ])
    def test_fully_locked(self, status, locked):
        assert is_fully_locked(status) is locked


class TestTransitions:

    def test_pending_targets(self):
        assert allowed_transitions(ExamStatus.PENDING) == {
            ExamStatus.PENDING, ExamStatus.PREPARATORY, ExamStatus.CANCELLED
        }

    def test_ongoing_targets(self):
        assert allowed_transitions(ExamStatus.ONGOING) == {
            ExamStatus.ONGOING, ExamStatus.COMPLETED, ExamStatus.CANCELLED
        }

    @pytest.mark.parametrize("status", [ExamStatus.COMPLETED, ExamStatus.CANCELLED])
    def test_terminal_statuses_only_reach_themselves(self, status):
        assert allowed_transitions(status) == {status}

    def test_valid_transition_returns_target(self):
        assert validate_transition('preparatory', 'ongoing') is ExamStatus.ONGOING

    def test_same_status_is_allowed(self):
        assert validate_transition(ExamStatus.ONGOING, ExamStatus.ONGOING) is ExamStatus.ONGOING

    def test_skipping_a_step_is_rejected(self):
        with pytest.raises(InvalidTransitionException) as exc_info:
            validate_transition(ExamStatus.PENDING, ExamStatus.ONGOING)
        assert exc_info.value.error_code == 'INVALID_TRANSITION'
        assert 'status' in exc_info.value.field_errors

    def test_completed_cannot_reopen(self):
        with pytest.raises(InvalidTransitionException):
            validate_transition(ExamStatus.COMPLETED, ExamStatus.PENDING)

    def test_cancelled_cannot_move_back(self):
        with pytest.raises(InvalidTransitionException):
            validate_transition(ExamStatus.CANCELLED, ExamStatus.PREPARATORY)
