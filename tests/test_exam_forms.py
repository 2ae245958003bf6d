"""
Exam form and service tests: status locks drive editable fields and the
update payload, duplicate names land on the name field, and status
changes are checked before any request.
"""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from core.models.entities import Exam, ExamFeeDetail, ExamStatus
from core.services.exam_service import DUPLICATE_NAME, ExamService
from utils.constants import EXAMS
from utils.exceptions import ConflictException, InvalidTransitionException


def make_exam(status=ExamStatus.PENDING, **overrides):
    values = dict(
        id='e1',
        name='Annual 1446',
        registration_deadline=datetime(2025, 5, 1, 23, 59, 59),
        starting_registration_number=1000,
        registration_fee_regular=Decimal('500'),
        registration_fee_irregular=Decimal('700'),
        late_registration_fee_regular=Decimal('600'),
        late_registration_fee_irregular=Decimal('800'),
        exam_fees=[ExamFeeDetail(marhala_id='m1', starting_roll_number=1, regular_fee=Decimal('100'),
                                 irregular_fee=Decimal('150'), late_regular_fee=Decimal('120'),
                                 late_irregular_fee=Decimal('170'))],
        status=status,
    )
    values.update(overrides)
    return Exam(**values)


@pytest.fixture
def service(gateway, dispatcher):
    return ExamService(gateway, dispatcher)


def fill_create_form(form):
    form.on_change('name', 'Half-yearly 1446')
    form.on_change('registration_deadline', date(2025, 6, 30))
    form.on_change('starting_registration_number', '5000')
    for field in ('registration_fee_regular', 'registration_fee_irregular',
                  'late_registration_fee_regular', 'late_registration_fee_irregular'):
        form.on_change(field, '200')
    form.add_fee_row('m1')
    form.on_fee_change('m1', 'starting_roll_number', '1')
    for field in ('regular_fee', 'irregular_fee', 'late_regular_fee', 'late_irregular_fee'):
        form.on_fee_change('m1', field, '50')


class TestCreateForm:

    def test_requires_a_marhala(self, service, gateway):
        form = service.create_form()
        fill_create_form(form)
        form.remove_fee_row('m1')
        assert not form.submit().ok
        assert 'exam_fee_selection' in form.errors
        assert gateway.calls_to('create_exam_with_fees') == []

    def test_fee_row_errors_are_nested(self, service):
        form = service.create_form()
        fill_create_form(form)
        form.on_fee_change('m1', 'regular_fee', '-1')
        assert not form.check()
        assert form.fee_error('m1', 'regular_fee') == "Regular fee cannot be negative"

        form.on_fee_change('m1', 'regular_fee', '10')
        assert form.fee_error('m1', 'regular_fee') is None
        assert 'exam_fees' not in form.errors

    def test_duplicate_rows_are_ignored(self, service):
        form = service.create_form()
        assert form.add_fee_row('m1') is True
        assert form.add_fee_row('m1') is False
        assert len(form.fee_rows) == 1

    def test_create_payload(self, service, gateway, notifier):
        form = service.create_form()
        fill_create_form(form)
        assert form.submit().ok
        params = gateway.calls_to('create_exam_with_fees')[0]
        details = params['p_exam_details']
        assert details['name'] == 'Half-yearly 1446'
        assert details['starting_registration_number'] == 5000
        assert details['registration_deadline'] == datetime(2025, 6, 30)
        assert params['p_exam_fees'][0]['marhala_id'] == 'm1'
        assert params['p_exam_fees'][0]['regular_fee'] == Decimal('50')
        assert notifier.successes == ["Exam created"]

    def test_duplicate_name_routed_to_name(self, service, gateway):
        gateway.script('create_exam_with_fees', ConflictException(
            'duplicate key value violates unique constraint "exams_name_key"',
            ConflictException.UNIQUE_VIOLATION))
        form = service.create_form()
        fill_create_form(form)
        assert not form.submit().ok
        assert form.error_for('name') == DUPLICATE_NAME
        assert form.form_error is None


class TestEditForm:

    def test_pending_sends_everything(self, service, gateway):
        form = service.edit_form(make_exam(ExamStatus.PENDING))
        form.on_change('name', 'Annual 1446 (revised)')
        assert form.submit().ok
        params = gateway.calls_to('update_exam_with_fees')[0]
        assert params['p_exam_id'] == 'e1'
        assert params['p_exam_details_updates']['name'] == 'Annual 1446 (revised)'
        assert 'registration_fee_regular' in params['p_exam_details_updates']
        assert params['p_exam_fees_updates'][0]['marhalaId'] == 'm1'

    def test_unchanged_deadline_sent_as_stored(self, service, gateway):
        stored = datetime(2025, 1, 31, tzinfo=timezone.utc)
        form = service.edit_form(make_exam(ExamStatus.PENDING, registration_deadline=stored))
        assert form.draft['registration_deadline'] == date(2025, 1, 31)
        form.on_change('registration_deadline', date(2025, 1, 31))
        form.on_change('name', 'Annual 1446 (revised)')
        assert form.submit().ok
        details = gateway.calls_to('update_exam_with_fees')[0]['p_exam_details_updates']
        assert details['registration_deadline'] == stored

    def test_new_deadline_sent_as_midnight(self, service, gateway):
        stored = datetime(2025, 1, 31, tzinfo=timezone.utc)
        form = service.edit_form(make_exam(ExamStatus.PENDING, registration_deadline=stored))
        form.on_change('registration_deadline', date(2025, 2, 15))
        assert form.submit().ok
        details = gateway.calls_to('update_exam_with_fees')[0]['p_exam_details_updates']
        assert details['registration_deadline'] == datetime(2025, 2, 15)

    def test_ongoing_exam_fee_fields_disabled(self, service):
        form = service.edit_form(make_exam(ExamStatus.ONGOING))
        assert form.is_field_disabled('registration_fee_regular')
        assert form.is_field_disabled('exam_fees')
        assert form.is_field_disabled('name')
        form.on_change('registration_fee_regular', '9999')
        assert form.draft['registration_fee_regular'] == Decimal('500')
        assert form.add_fee_row('m2') is False
        form.on_fee_change('m1', 'regular_fee', '1')
        assert form.fee_rows[0]['regular_fee'] == Decimal('100')

    def test_locked_groups_left_out_of_payload(self, service):
        form = service.edit_form(make_exam(ExamStatus.ONGOING))
        payload = form.build_payload()
        assert payload == {'details': {}, 'fees': None}

    def test_nothing_to_save_outside_pending(self, service, gateway, notifier):
        form = service.edit_form(make_exam(ExamStatus.PREPARATORY))
        assert form.can_submit is False
        result = form.submit()
        assert not result.ok
        assert result.error.error_code == 'LOCKED'
        assert gateway.calls_to('update_exam_with_fees') == []
        assert notifier.warnings

    @pytest.mark.parametrize("status", [ExamStatus.COMPLETED, ExamStatus.CANCELLED])
    def test_terminal_exams_fully_locked(self, service, status):
        form = service.edit_form(make_exam(status))
        assert form.can_submit is False
        for field in ('name', 'registration_deadline', 'exam_fees'):
            assert form.is_field_disabled(field)

    def test_invalid_fee_blocks_submit(self, service, gateway):
        form = service.edit_form(make_exam(ExamStatus.PENDING))
        form.on_change('late_registration_fee_irregular', 'abc')
        assert not form.submit().ok
        assert form.error_for('late_registration_fee_irregular') == \
            "Late registration fee (irregular) must be a number"
        assert gateway.calls_to('update_exam_with_fees') == []

    def test_success_invalidates_exam_lists(self, service, cache):
        controller = service.list_controller()
        cache.put(EXAMS, controller.query, object())
        form = service.edit_form(make_exam(ExamStatus.PENDING))
        form.submit()
        assert not cache.contains(EXAMS, controller.query)


class TestStatusChange:

    def test_allowed_change_sends_only_status(self, service, gateway):
        result = service.change_status(make_exam(ExamStatus.PENDING), ExamStatus.PREPARATORY)
        assert result.ok
        params = gateway.calls_to('update_exam_with_fees')[0]
        assert params['p_exam_details_updates'] == {'status': 'preparatory'}
        assert params['p_exam_fees_updates'] is None

    def test_disallowed_change_never_reaches_gateway(self, service, gateway, notifier):
        result = service.change_status(make_exam(ExamStatus.COMPLETED), ExamStatus.ONGOING)
        assert not result.ok
        assert isinstance(result.error, InvalidTransitionException)
        assert gateway.calls == []
        assert notifier.errors

    def test_same_status_is_a_no_op(self, service, gateway):
        closed = []
        result = service.change_status(make_exam(ExamStatus.ONGOING), 'ongoing',
                                       on_close=lambda: closed.append(True))
        assert result.ok
        assert gateway.calls == []
        assert closed == [True]

    def test_toggle_active(self, service, gateway):
        service.toggle_active(make_exam(is_active=True))
        params = gateway.calls_to('update_exam_with_fees')[0]
        assert params['p_exam_details_updates'] == {'is_active': False}


class TestExamList:

    def test_filters_reach_the_procedure(self, service, gateway):
        gateway.script('get_exams_list', {'items': [{'id': 'e1', 'name': 'A', 'status': 'ongoing'}],
                                          'totalItems': 1})
        controller = service.list_controller()
        controller.update(search_term='A', filters={'status': ExamStatus.ONGOING, 'is_active': True})
        controller.refresh()
        params = gateway.calls_to('get_exams_list')[0]
        assert params == {'p_page': 1, 'p_limit': 7, 'p_search_term': 'A',
                          'p_is_active': True, 'p_status': 'ongoing'}
        assert controller.items[0].status is ExamStatus.ONGOING

    def test_malformed_row_reported_not_raised(self, service, gateway, notifier):
        gateway.script('get_exams_list', {'items': [{'id': 'e1', 'name': 'A', 'status': 'archived'}],
                                          'totalItems': 1})
        controller = service.list_controller()
        controller.refresh()
        assert controller.items == []
        assert controller.last_error.error_code == 'BAD_RESPONSE'
        assert len(notifier.errors) == 1
