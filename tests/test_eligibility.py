"""
Mumtahin eligibility tests: the designation set is reloaded after every
toggle, and toggling twice restores the starting state.
"""

import pytest

from core.services.eligibility_service import EligibilityService
from utils.constants import MUMTAHIN_ELIGIBLE
from utils.exceptions import BusinessRuleException

TEACHERS = {'items': [
    {'id': 't2', 'teacher_code': 'T-0002', 'name_bn': 'করিম', 'mobile': '01711111112', 'is_active': True},
    {'id': 't1', 'teacher_code': 'T-0001', 'name_bn': 'রহিম', 'mobile': '01711111111', 'is_active': True},
    {'id': 't3', 'teacher_code': 'T-0003', 'name_bn': 'সালাম', 'mobile': '01711111113', 'is_active': True},
], 'totalItems': 3}


class FakeDesignations:
    """Designation table that the toggle procedure writes to"""

    def __init__(self, *teacher_ids):
        self.ids = set(teacher_ids)

    def rows(self, params):
        return [{'teacher_id': t} for t in sorted(self.ids)]

    def toggle(self, params):
        if params['p_is_eligible']:
            self.ids.add(params['p_teacher_id'])
        else:
            self.ids.discard(params['p_teacher_id'])
        return {'success': True}


@pytest.fixture
def designations():
    return FakeDesignations('t2')


@pytest.fixture
def service(gateway, dispatcher, designations):
    gateway.script('get_teachers_list', TEACHERS)
    gateway.script('select:teacher_general_designations', designations.rows)
    gateway.script('set_teacher_mumtahin_eligibility', designations.toggle)
    svc = EligibilityService(gateway, dispatcher)
    svc.load_teachers()
    svc.load_eligible_ids()
    return svc


class TestEligibility:

    def test_loads_active_teachers_once(self, service, gateway):
        service.load_teachers()
        params = gateway.calls_to('get_teachers_list')
        assert len(params) == 1
        assert params[0]['p_is_active'] is True
        assert params[0]['p_limit'] == 3000

    def test_designation_filter(self, service, gateway):
        params = gateway.calls_to('select:teacher_general_designations')[0]
        assert params['filters'] == {'designation': MUMTAHIN_ELIGIBLE}
        assert service.eligible_ids == {'t2'}

    def test_rows_sorted_by_code_with_flags(self, service):
        rows = service.teachers_with_eligibility()
        assert [(t.id, flag) for t, flag in rows] == [('t1', False), ('t2', True), ('t3', False)]

    def test_search(self, service):
        rows = service.teachers_with_eligibility('সালাম')
        assert [t.id for t, _ in rows] == ['t3']

    def test_toggle_reloads_designations(self, service, gateway):
        result = service.toggle('t1')
        assert result.ok
        assert gateway.calls_to('set_teacher_mumtahin_eligibility') == [
            {'p_teacher_id': 't1', 'p_is_eligible': True}
        ]
        assert len(gateway.calls_to('select:teacher_general_designations')) == 2
        assert service.is_eligible('t1')

    def test_toggle_twice_restores_state(self, service):
        before = set(service.eligible_ids)
        service.toggle('t3')
        service.toggle('t3')
        assert service.eligible_ids == before

    def test_failed_toggle_keeps_state(self, service, gateway, notifier):
        gateway.script('set_teacher_mumtahin_eligibility', BusinessRuleException("Teacher is inactive", "P0001"))
        result = service.toggle('t1')
        assert not result.ok
        assert service.eligible_ids == {'t2'}
        assert notifier.errors == ["Could not change eligibility: Teacher is inactive"]
        assert len(gateway.calls_to('select:teacher_general_designations')) == 1
