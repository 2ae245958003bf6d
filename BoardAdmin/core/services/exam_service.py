"""
Exam Service
Exam creation, status-aware editing, lifecycle changes and listing
"""

from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Dict, List, Optional

from core.controllers.form_controller import FormController
from core.controllers.mutation import ConflictRoute, MutationDispatcher, MutationResult
from core.controllers.query_controller import ListController, ListQuery
from core.models.entities import Exam, ExamFeeDetail, ExamStatus, Marhala
from core.models.mappers import (
    exam_fee_schedule_payload, exam_fee_to_payload, exam_registration_payload
)
from core.policies.exam_policy import (
    FieldGroup, is_field_group_editable, is_fully_locked, validate_transition
)
from core.repositories.exam_repository import ExamRepository
from core.repositories.lookup_repository import LookupRepository
from utils.constants import EXAMS, EXAM_PAGE_SIZE
from utils.exceptions import BoardAdminException, ConflictException, InvalidTransitionException
from utils.helpers import LoggingUtils
from utils.validators import FieldValidator, collect_error

REGISTRATION_FEE_FIELDS = (
    ('registration_fee_regular', "Registration fee (regular)"),
    ('registration_fee_irregular', "Registration fee (irregular)"),
    ('late_registration_fee_regular', "Late registration fee (regular)"),
    ('late_registration_fee_irregular', "Late registration fee (irregular)"),
)

FEE_ROW_FIELDS = (
    ('regular_fee', "Regular fee"),
    ('irregular_fee', "Irregular fee"),
    ('late_regular_fee', "Late fee (regular)"),
    ('late_irregular_fee', "Late fee (irregular)"),
)

FIELD_GROUPS = {
    'name': FieldGroup.NAME,
    'registration_deadline': FieldGroup.REGISTRATION_INFO,
    'starting_registration_number': FieldGroup.REGISTRATION_INFO,
    'registration_fee_regular': FieldGroup.FEE_SCHEDULE,
    'registration_fee_irregular': FieldGroup.FEE_SCHEDULE,
    'late_registration_fee_regular': FieldGroup.FEE_SCHEDULE,
    'late_registration_fee_irregular': FieldGroup.FEE_SCHEDULE,
    'exam_fees': FieldGroup.FEE_SCHEDULE,
}

DUPLICATE_NAME = "An exam with this name already exists"


def _decimal_or_none(value: Any) -> Optional[Decimal]:
    if value is None or value == '':
        return None
    return Decimal(str(value).replace(',', ''))


def _int_or_none(value: Any) -> Optional[int]:
    if value is None or value == '':
        return None
    return int(Decimal(str(value)))


def _deadline_day(value: Optional[datetime]) -> Optional[date]:
    return value.date() if isinstance(value, datetime) else value


def _as_deadline(value: Any, current: Optional[datetime] = None) -> Optional[datetime]:
    """
    The form edits the deadline as a day. An unchanged day keeps the stored
    timestamp; a new day is sent as midnight of that day.
    """
    if isinstance(value, datetime) or value is None:
        return value
    if isinstance(value, date):
        if current is not None and _deadline_day(current) == value:
            return current
        return datetime.combine(value, time.min)
    return value


def blank_fee_row(marhala_id: str) -> Dict[str, Any]:
    return {
        'marhala_id': marhala_id,
        'starting_roll_number': None,
        'regular_fee': None,
        'irregular_fee': None,
        'late_regular_fee': None,
        'late_irregular_fee': None,
    }


def fee_row_from_detail(fee: ExamFeeDetail) -> Dict[str, Any]:
    return {
        'marhala_id': fee.marhala_id,
        'starting_roll_number': fee.starting_roll_number,
        'regular_fee': fee.regular_fee,
        'irregular_fee': fee.irregular_fee,
        'late_regular_fee': fee.late_regular_fee,
        'late_irregular_fee': fee.late_irregular_fee,
    }


def fee_detail_from_row(row: Dict[str, Any]) -> ExamFeeDetail:
    return ExamFeeDetail(
        marhala_id=row['marhala_id'],
        starting_roll_number=_int_or_none(row.get('starting_roll_number')),
        regular_fee=_decimal_or_none(row.get('regular_fee')),
        irregular_fee=_decimal_or_none(row.get('irregular_fee')),
        late_regular_fee=_decimal_or_none(row.get('late_regular_fee')),
        late_irregular_fee=_decimal_or_none(row.get('late_irregular_fee')),
    )


class _ExamForm(FormController):
    """Validation shared by the create and edit forms"""

    entity_keys = (EXAMS,)
    conflict_routes = (
        ConflictRoute(ConflictException.UNIQUE_VIOLATION, 'exams_name_key', 'name', DUPLICATE_NAME),
    )

    # -- fee rows --------------------------------------------------------

    @property
    def fee_rows(self) -> List[Dict[str, Any]]:
        return self.draft['exam_fees']

    def add_fee_row(self, marhala_id: str) -> bool:
        if self.is_field_disabled('exam_fees') or not marhala_id:
            return False
        if any(r['marhala_id'] == marhala_id for r in self.fee_rows):
            return False
        self.draft['exam_fees'] = self.fee_rows + [blank_fee_row(marhala_id)]
        self.errors.pop('exam_fee_selection', None)
        return True

    def remove_fee_row(self, marhala_id: str) -> bool:
        if self.is_field_disabled('exam_fees'):
            return False
        remaining = [r for r in self.fee_rows if r['marhala_id'] != marhala_id]
        if len(remaining) == len(self.fee_rows):
            return False
        self.draft['exam_fees'] = remaining
        fee_errors = self.errors.get('exam_fees')
        if isinstance(fee_errors, dict):
            fee_errors.pop(marhala_id, None)
            if not fee_errors:
                self.errors.pop('exam_fees')
        return True

    def on_fee_change(self, marhala_id: str, field: str, value: Any):
        if self.is_field_disabled('exam_fees'):
            return
        rows = [dict(r) for r in self.fee_rows]
        for row in rows:
            if row['marhala_id'] == marhala_id:
                row[field] = value
        self.draft['exam_fees'] = rows

        fee_errors = self.errors.get('exam_fees')
        if isinstance(fee_errors, dict) and marhala_id in fee_errors:
            fee_errors[marhala_id].pop(field, None)
            if not fee_errors[marhala_id]:
                del fee_errors[marhala_id]
            if not fee_errors:
                self.errors.pop('exam_fees')

    def fee_error(self, marhala_id: str, field: str) -> Optional[str]:
        fee_errors = self.errors.get('exam_fees')
        if not isinstance(fee_errors, dict):
            return None
        return fee_errors.get(marhala_id, {}).get(field)

    # -- validation helpers ----------------------------------------------

    def _validate_name(self, errors: Dict[str, Any]):
        collect_error(errors, 'name', FieldValidator.require_text, self.draft.get('name'), "Exam name")

    def _validate_registration(self, errors: Dict[str, Any]):
        d = self.draft
        collect_error(errors, 'registration_deadline', FieldValidator.validate_date,
                      d.get('registration_deadline'), "Registration deadline")
        collect_error(errors, 'starting_registration_number', FieldValidator.validate_positive_int,
                      d.get('starting_registration_number'), "Starting registration number")

    def _validate_fee_schedule(self, errors: Dict[str, Any]):
        d = self.draft
        for field, label in REGISTRATION_FEE_FIELDS:
            collect_error(errors, field, FieldValidator.validate_non_negative, d.get(field), label)

        fee_errors = {}
        for row in self.fee_rows:
            row_errors = {}
            collect_error(row_errors, 'starting_roll_number', FieldValidator.validate_positive_int,
                          row.get('starting_roll_number'), "Starting roll number")
            for field, label in FEE_ROW_FIELDS:
                collect_error(row_errors, field, FieldValidator.validate_non_negative, row.get(field), label)
            if row_errors:
                fee_errors[row['marhala_id']] = row_errors
        if fee_errors:
            errors['exam_fees'] = fee_errors

    def _fee_details(self) -> List[ExamFeeDetail]:
        return [fee_detail_from_row(r) for r in self.fee_rows]

    def _stored_deadline(self) -> Optional[datetime]:
        return None

    def _exam_from_draft(self) -> Exam:
        d = self.draft
        return Exam(
            name=(d.get('name') or '').strip(),
            registration_deadline=_as_deadline(d.get('registration_deadline'), self._stored_deadline()),
            starting_registration_number=_int_or_none(d.get('starting_registration_number')),
            registration_fee_regular=_decimal_or_none(d.get('registration_fee_regular')),
            registration_fee_irregular=_decimal_or_none(d.get('registration_fee_irregular')),
            late_registration_fee_regular=_decimal_or_none(d.get('late_registration_fee_regular')),
            late_registration_fee_irregular=_decimal_or_none(d.get('late_registration_fee_irregular')),
            exam_fees=self._fee_details(),
        )


class ExamCreateForm(_ExamForm):
    """New exams always start in pending with at least one marhala fee row"""

    success_message = "Exam created"
    error_prefix = "Could not create the exam"

    def __init__(self, dispatcher: MutationDispatcher, repo: ExamRepository):
        self.repo = repo
        draft = {
            'name': '',
            'registration_deadline': None,
            'starting_registration_number': None,
            'registration_fee_regular': None,
            'registration_fee_irregular': None,
            'late_registration_fee_regular': None,
            'late_registration_fee_irregular': None,
            'exam_fees': [],
        }
        super().__init__(dispatcher, draft)

    def validate(self) -> Dict[str, Any]:
        errors = {}
        self._validate_name(errors)
        self._validate_registration(errors)
        self._validate_fee_schedule(errors)
        if not self.fee_rows:
            errors['exam_fee_selection'] = "Set exam fees for at least one marhala"
        return errors

    def build_payload(self) -> Exam:
        return self._exam_from_draft()

    def send(self, payload: Exam) -> Any:
        result = self.repo.create_exam(payload)
        LoggingUtils.log_business_event(
            "exam_created", "exam", None,
            details={'name': payload.name, 'marhalas': len(payload.exam_fees)}
        )
        return result


class ExamEditForm(_ExamForm):
    """Edit form whose editable fields follow the exam's lifecycle status"""

    success_message = "Exam updated"
    error_prefix = "Could not update the exam"

    def __init__(self, dispatcher: MutationDispatcher, repo: ExamRepository, exam: Exam):
        self.repo = repo
        self.exam = exam
        draft = {
            'name': exam.name,
            'registration_deadline': _deadline_day(exam.registration_deadline),
            'starting_registration_number': exam.starting_registration_number,
            'registration_fee_regular': exam.registration_fee_regular,
            'registration_fee_irregular': exam.registration_fee_irregular,
            'late_registration_fee_regular': exam.late_registration_fee_regular,
            'late_registration_fee_irregular': exam.late_registration_fee_irregular,
            'exam_fees': [fee_row_from_detail(f) for f in exam.exam_fees],
        }
        super().__init__(dispatcher, draft)

    @property
    def status(self) -> ExamStatus:
        return self.exam.status

    def _stored_deadline(self) -> Optional[datetime]:
        return self.exam.registration_deadline

    def is_group_editable(self, group: FieldGroup) -> bool:
        return is_field_group_editable(self.status, group)

    def is_field_disabled(self, field: str) -> bool:
        if is_fully_locked(self.status):
            return True
        group = FIELD_GROUPS.get(field)
        return group is not None and not self.is_group_editable(group)

    @property
    def can_submit(self) -> bool:
        if is_fully_locked(self.status):
            return False
        return any(self.is_group_editable(g) for g in FieldGroup)

    def validate(self) -> Dict[str, Any]:
        errors = {}
        if self.is_group_editable(FieldGroup.NAME):
            self._validate_name(errors)
        if self.is_group_editable(FieldGroup.REGISTRATION_INFO):
            self._validate_registration(errors)
        if self.is_group_editable(FieldGroup.FEE_SCHEDULE):
            self._validate_fee_schedule(errors)
        return errors

    def build_payload(self) -> Dict[str, Any]:
        """Only editable groups reach the payload; fee rows go as None when locked"""
        exam = self._exam_from_draft()
        details = {}
        if self.is_group_editable(FieldGroup.NAME):
            details['name'] = exam.name
        if self.is_group_editable(FieldGroup.REGISTRATION_INFO):
            details.update(exam_registration_payload(exam))
        fees = None
        if self.is_group_editable(FieldGroup.FEE_SCHEDULE):
            details.update(exam_fee_schedule_payload(exam))
            fees = [exam_fee_to_payload(f, camel_case=True) for f in exam.exam_fees]
        return {'details': details, 'fees': fees}

    def send(self, payload: Dict[str, Any]) -> Any:
        result = self.repo.update_exam(self.exam.id, payload['details'], payload['fees'])
        LoggingUtils.log_business_event(
            "exam_updated", "exam", self.exam.id,
            details={'fields': sorted(payload['details']), 'fees_updated': payload['fees'] is not None}
        )
        return result


class ExamService:
    """Service class for exam management"""

    def __init__(self, gateway, dispatcher: MutationDispatcher):
        self.exam_repo = ExamRepository(gateway)
        self.lookup_repo = LookupRepository(gateway)
        self.dispatcher = dispatcher
        self._marhalas: Optional[List[Marhala]] = None

    def list_controller(self) -> ListController:
        return ListController(
            EXAMS, self._fetch_page, self.dispatcher.cache, self.dispatcher.notifier,
            ListQuery(page_size=EXAM_PAGE_SIZE),
        )

    def _fetch_page(self, query: ListQuery):
        filters = query.filter_dict
        status = filters.get('status')
        return self.exam_repo.list_exams(
            query.page, query.page_size, query.search_term,
            is_active=filters.get('is_active'),
            status=status.value if isinstance(status, ExamStatus) else status,
        )

    def marhalas(self) -> List[Marhala]:
        if self._marhalas is None:
            try:
                self._marhalas = self.lookup_repo.find_marhalas()
            except BoardAdminException as e:
                self.dispatcher.notifier.error(f"Could not load marhalas: {e.message}")
                return []
        return self._marhalas

    def create_form(self) -> ExamCreateForm:
        return ExamCreateForm(self.dispatcher, self.exam_repo)

    def edit_form(self, exam: Exam) -> ExamEditForm:
        return ExamEditForm(self.dispatcher, self.exam_repo, exam)

    def change_status(self, exam: Exam, target, on_close=None) -> MutationResult:
        """Validate the transition locally, then send only the status"""
        try:
            target = validate_transition(exam.status, target)
        except InvalidTransitionException as e:
            self.dispatcher.notifier.error(e.message)
            return MutationResult(ok=False, error=e)

        if target == exam.status:
            if on_close:
                on_close()
            return MutationResult(ok=True)

        def call():
            result = self.exam_repo.update_exam(exam.id, {'status': target.value}, None)
            LoggingUtils.log_business_event(
                "exam_status_changed", "exam", exam.id,
                details={'from': exam.status.value, 'to': target.value}
            )
            return result

        return self.dispatcher.dispatch(
            call, entity_keys=(EXAMS,), success_message="Exam status updated",
            on_close=on_close, error_prefix="Could not change the status",
        )

    def toggle_active(self, exam: Exam) -> MutationResult:
        new_value = not exam.is_active
        return self.dispatcher.dispatch(
            lambda: self.exam_repo.update_exam(exam.id, {'is_active': new_value}, None),
            entity_keys=(EXAMS,),
            success_message="Exam activated" if new_value else "Exam deactivated",
            error_prefix="Could not change the exam's active state",
        )
