"""
Repository tests: rows the mappers cannot read surface as gateway errors
instead of escaping as ValueError.
"""

import pytest

from core.repositories.bank_repository import BankRepository
from core.repositories.exam_repository import ExamRepository
from core.repositories.kitab_repository import KitabRepository
from core.repositories.teacher_repository import TeacherRepository
from utils.exceptions import GatewayException


class TestMalformedRows:

    def test_bad_decimal(self, gateway):
        gateway.script('get_bank_dashboard_data', {'total_balance': 'twelve', 'accounts': []})
        with pytest.raises(GatewayException) as exc_info:
            BankRepository(gateway).get_dashboard()
        assert exc_info.value.error_code == 'BAD_RESPONSE'

    def test_unknown_exam_status(self, gateway):
        gateway.script('get_exams_list', {'items': [{'id': 'e1', 'status': 'archived'}], 'totalItems': 1})
        with pytest.raises(GatewayException) as exc_info:
            ExamRepository(gateway).list_exams(1, 7)
        assert exc_info.value.error_code == 'BAD_RESPONSE'

    def test_unknown_payment_type(self, gateway):
        gateway.script('get_teachers_list', {'items': [
            {'id': 't1', 'teacher_code': 'T-0001', 'payment_info': {'type': 'cheque'}},
        ], 'totalItems': 1})
        with pytest.raises(GatewayException) as exc_info:
            TeacherRepository(gateway).list_teachers(1, 10)
        assert exc_info.value.error_code == 'BAD_RESPONSE'

    def test_bad_row_in_table_read(self, gateway):
        gateway.script('select:kitabs', [{'id': 'k1', 'kitab_code': 'K-1', 'full_marks': 'hundred'}])
        with pytest.raises(GatewayException) as exc_info:
            KitabRepository(gateway).find_all_kitabs()
        assert exc_info.value.error_code == 'BAD_RESPONSE'

    def test_good_rows_still_map(self, gateway):
        gateway.script('select:kitabs', [{'id': 'k1', 'kitab_code': 'K-1', 'name_bn': 'নাহু', 'full_marks': '100'}])
        kitabs = KitabRepository(gateway).find_all_kitabs()
        assert kitabs[0].full_marks == 100
