"""
Teacher form tests: mobile/NID formats, payment method switching and the
create/update payload shapes.
"""

from datetime import date

import pytest

from core.models.entities import Gender, MobilePayment, PaymentType, Teacher
from core.services.teacher_service import TeacherService
from utils.constants import TEACHERS
from utils.exceptions import ConflictException


@pytest.fixture
def service(gateway, dispatcher):
    return TeacherService(gateway, dispatcher)


def filled_form(service, teacher=None):
    form = service.form(teacher)
    form.on_change('name_bn', 'মাওলানা আব্দুল করিম')
    form.on_change('mobile', '01712345678')
    form.on_change('nid_number', '1234567890')
    form.on_change('date_of_birth', date(1980, 1, 15))
    form.on_change('gender', Gender.MALE)
    form.on_change('educational_qualification', 'm-takmil')
    form.on_change('kitabi_qualification', ['k1', 'k2'])
    form.on_change('payment_type', PaymentType.MOBILE)
    form.on_change('mobile_provider', 'bKash')
    form.on_change('mobile_account_number', '01812345678')
    return form


class TestTeacherValidation:

    @pytest.mark.parametrize("mobile", ['0171234567', '01212345678', '+8801712345678', '0171234567a'])
    def test_bad_mobile(self, service, mobile):
        form = filled_form(service)
        form.on_change('mobile', mobile)
        assert not form.check()
        assert 'mobile' in form.errors

    @pytest.mark.parametrize("nid", ['123456789', '12345678901', '123456789012345678'])
    def test_bad_nid(self, service, nid):
        form = filled_form(service)
        form.on_change('nid_number', nid)
        assert not form.check()
        assert form.error_for('nid_number') == "NID number must be 10, 13 or 17 digits"

    @pytest.mark.parametrize("nid", ['1234567890', '1234567890123', '12345678901234567'])
    def test_good_nid(self, service, nid):
        form = filled_form(service)
        form.on_change('nid_number', nid)
        assert form.check()

    def test_needs_kitabi_qualification(self, service):
        form = filled_form(service)
        form.on_change('kitabi_qualification', [])
        assert not form.check()
        assert 'kitabi_qualification' in form.errors

    def test_email_optional_but_checked(self, service):
        form = filled_form(service)
        assert form.check()
        form.on_change('email', 'not-an-email')
        assert not form.check()
        assert form.error_for('email') == "Invalid email format"

    def test_payment_method_required(self, service):
        form = filled_form(service)
        form.on_change('payment_type', None)
        assert not form.check()
        assert 'payment_type' in form.errors


class TestPaymentSwitch:

    def test_switch_to_bank_clears_mobile_fields(self, service):
        form = filled_form(service)
        form.on_change('payment_type', PaymentType.BANK)
        assert form.draft['mobile_provider'] == ''
        assert form.draft['mobile_account_number'] == ''
        assert form.is_field_disabled('mobile_provider')
        assert not form.is_field_disabled('bank_name')

    def test_bank_fields_required_after_switch(self, service):
        form = filled_form(service)
        form.on_change('payment_type', PaymentType.BANK)
        assert not form.check()
        for field in ('bank_account_name', 'bank_account_number', 'bank_name', 'bank_branch_name'):
            assert field in form.errors

    def test_inactive_variant_cannot_be_typed_into(self, service):
        form = filled_form(service)
        form.on_change('bank_name', 'Sonali')
        assert form.draft['bank_name'] == ''

    def test_mobile_account_must_be_a_mobile_number(self, service):
        form = filled_form(service)
        form.on_change('mobile_account_number', '12345')
        assert not form.check()
        assert 'mobile_account_number' in form.errors


class TestTeacherSubmit:

    def test_create_params(self, service, gateway):
        form = filled_form(service)
        form.on_change('expertise_areas', 'নাহু, সরফ ,')
        form.on_change('post_office', 'Mirpur')
        assert form.submit().ok
        params = gateway.calls_to('create_teacher')[0]
        assert params['p_mobile'] == '01712345678'
        assert params['p_gender'] == 'male'
        assert params['p_payment_info'] == {'type': 'mobile', 'provider': 'bKash',
                                            'account_number': '01812345678'}
        assert params['p_expertise_areas'] == ['নাহু', 'সরফ']
        assert params['p_address_details'] == {'postOffice': 'Mirpur'}
        assert params['p_kitabi_qualification_kitab_ids'] == ['k1', 'k2']

    def test_update_sends_snake_case_updates(self, service, gateway):
        teacher = Teacher(id='t1', teacher_code='T-0001', name_bn='পুরাতন', mobile='01712345678',
                          nid_number='1234567890', date_of_birth=date(1980, 1, 15), gender=Gender.MALE,
                          educational_qualification='m1', kitabi_qualification=['k1'],
                          payment_info=MobilePayment('Nagad', '01912345678'))
        form = service.form(teacher)
        assert form.draft['mobile_provider'] == 'Nagad'
        form.on_change('name_bn', 'নতুন নাম')
        assert form.submit().ok
        params = gateway.calls_to('update_teacher')[0]
        assert params['p_teacher_id'] == 't1'
        assert params['p_updates']['name_bn'] == 'নতুন নাম'
        assert params['p_updates']['payment_info']['provider'] == 'Nagad'

    @pytest.mark.parametrize("constraint,field", [
        ('teachers_mobile_key', 'mobile'),
        ('teachers_nid_number_key', 'nid_number'),
    ])
    def test_duplicates_routed(self, service, gateway, constraint, field):
        gateway.script('create_teacher', ConflictException(
            f'duplicate key value violates unique constraint "{constraint}"',
            ConflictException.UNIQUE_VIOLATION))
        form = filled_form(service)
        assert not form.submit().ok
        assert form.error_for(field)

    def test_toggle_and_list_params(self, service, gateway, cache):
        gateway.script('get_teachers_list', {'items': [], 'totalItems': 0})
        controller = service.list_controller()
        controller.refresh()
        assert gateway.calls_to('get_teachers_list')[0]['p_sort_field'] == 'created_at'
        assert gateway.calls_to('get_teachers_list')[0]['p_sort_order'] == 'desc'

        service.toggle_active(Teacher(id='t9', is_active=False))
        assert gateway.calls_to('update_teacher')[0] == {'p_teacher_id': 't9', 'p_updates': {'is_active': True}}
        assert not cache.contains(TEACHERS, controller.query)
