"""
Mapper tests: decimal parsing, camelCase/snake_case rows and the payload
shapes each procedure expects.
"""

from datetime import date, datetime
from decimal import Decimal

import pytest

from core.models.entities import (
    BankPayment, BankTransactionType, Exam, ExamFeeDetail, ExamStatus, MobilePayment,
    PaymentType, Teacher, TeacherAddress
)
from core.models import mappers


class TestScalars:

    def test_grouped_decimal_string(self):
        assert mappers.parse_decimal("12,345.00") == Decimal("12345.00")

    def test_numbers_and_blanks(self):
        assert mappers.parse_decimal(1500) == Decimal("1500")
        assert mappers.parse_decimal(12.5) == Decimal("12.5")
        assert mappers.parse_decimal("") == Decimal("0")
        assert mappers.parse_decimal(None) == Decimal("0")

    def test_invalid_decimal_raises(self):
        with pytest.raises(ValueError):
            mappers.parse_decimal("twelve")

    def test_optional_values(self):
        assert mappers.parse_optional_decimal("  ") is None
        assert mappers.parse_optional_int("1,000") == 1000
        assert mappers.parse_optional_int(None) is None

    def test_timestamps(self):
        ts = mappers.parse_timestamp("2025-03-01T10:30:00+06:00")
        assert ts.year == 2025 and ts.hour == 10
        assert mappers.parse_date("2025-03-01") == date(2025, 3, 1)
        assert mappers.parse_date(datetime(2025, 3, 1, 9, 0)) == date(2025, 3, 1)


class TestPaged:

    def test_total_items_camel_case(self):
        page = mappers.row_to_paged({'items': [{'id': 'a'}], 'totalItems': 42}, lambda r: r['id'])
        assert page.items == ['a']
        assert page.total_items == 42

    def test_missing_total_falls_back_to_row_count(self):
        page = mappers.row_to_paged({'items': [{'id': 'a'}, {'id': 'b'}]}, lambda r: r['id'])
        assert page.total_items == 2

    def test_empty_response(self):
        page = mappers.row_to_paged(None, lambda r: r)
        assert page.items == [] and page.total_items == 0


class TestBankRows:

    def test_dashboard(self):
        data = mappers.row_to_bank_dashboard({
            'total_balance': "1,25,000.50",
            'accounts': [{'id': 'acc-1', 'bank_name': 'Sonali', 'account_name': 'Board',
                          'account_number': '001', 'account_type': 'savings',
                          'opening_balance': "5,000", 'current_balance': "125000.50",
                          'opening_date': '2024-01-01', 'is_active': True}],
            'recent_transactions': [{'id': 't1', 'type': 'transfer', 'amount': "2,000",
                                     'transaction_date': '2024-02-01'}],
        })
        assert data.total_balance == Decimal("125000.50")
        assert data.accounts[0].opening_balance == Decimal("5000")
        assert data.recent_transactions[0].transaction_type is BankTransactionType.TRANSFER

    def test_update_payload_leaves_out_opening_fields(self):
        account = mappers.row_to_bank_account({'id': 'x', 'bank_name': 'B', 'account_name': 'N',
                                               'account_number': '9', 'opening_balance': 10})
        payload = mappers.bank_account_to_update_payload(account)
        assert 'opening_balance' not in payload
        assert 'opening_date' not in payload


class TestExamRows:

    def test_camel_case_list_row(self):
        exam = mappers.row_to_exam({
            'id': 'e1', 'name': 'Annual 1446', 'status': 'ongoing', 'isActive': False,
            'registrationFeeRegular': "1,200.00",
            'examFees': [{'marhalaId': 'm1', 'startingRollNumber': 1001, 'regularFee': '300'}],
        })
        assert exam.status is ExamStatus.ONGOING
        assert exam.is_active is False
        assert exam.registration_fee_regular == Decimal("1200.00")
        assert exam.exam_fees[0].marhala_id == 'm1'
        assert exam.exam_fees[0].starting_roll_number == 1001

    def test_snake_case_row(self):
        exam = mappers.row_to_exam({'id': 'e2', 'name': 'X', 'exam_fees': [{'marhala_id': 'm2'}]})
        assert exam.status is ExamStatus.PENDING
        assert exam.exam_fees[0].marhala_id == 'm2'

    def test_fee_payload_casing(self):
        fee = ExamFeeDetail(marhala_id='m1', starting_roll_number=1, regular_fee=Decimal('10'))
        assert 'marhalaId' in mappers.exam_fee_to_payload(fee, camel_case=True)
        assert 'marhala_id' in mappers.exam_fee_to_payload(fee)

    def test_create_params(self):
        exam = Exam(name='  Annual  ', starting_registration_number=100,
                    exam_fees=[ExamFeeDetail(marhala_id='m1')])
        params = mappers.exam_to_create_params(exam)
        assert params['p_exam_details']['name'] == 'Annual'
        assert params['p_exam_details']['is_active'] is True
        assert params['p_exam_fees'][0]['marhala_id'] == 'm1'


class TestTeacherRows:

    def test_mobile_payment_round_trip(self):
        info = mappers.payment_info_from_dict({'type': 'mobile', 'provider': 'bKash',
                                               'account_number': '01711111111'})
        assert isinstance(info, MobilePayment)
        assert info.type is PaymentType.MOBILE
        assert mappers.payment_info_to_dict(info)['provider'] == 'bKash'

    def test_unknown_payment_type(self):
        with pytest.raises(ValueError):
            mappers.payment_info_from_dict({'type': 'cash'})

    def test_address_uses_camel_case_post_office(self):
        address = mappers.address_from_dict({'postOffice': 'Mirpur', 'district': 'Dhaka'})
        assert address.post_office == 'Mirpur'
        assert mappers.address_to_dict(address) == {'postOffice': 'Mirpur', 'district': 'Dhaka'}

    def test_empty_address_is_none(self):
        assert mappers.address_to_dict(TeacherAddress()) is None

    def test_create_params_keys(self):
        teacher = Teacher(name_bn='আব্দুল্লাহ', mobile='01711111111', nid_number='1234567890',
                          educational_qualification='m1', kitabi_qualification=['k1'],
                          payment_info=BankPayment('A', '1', 'B', 'C'))
        params = mappers.teacher_to_create_params(teacher)
        assert params['p_educational_qualification_marhala_id'] == 'm1'
        assert params['p_kitabi_qualification_kitab_ids'] == ['k1']
        assert params['p_payment_info']['type'] == 'bank'
        assert params['p_expertise_areas'] is None
