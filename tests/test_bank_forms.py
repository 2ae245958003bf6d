"""
Bank form tests: amount rules, transfer accounts, account number
uniqueness and edit-only immutability.
"""

from datetime import date
from decimal import Decimal

import pytest

from core.models.entities import BankTransactionType
from core.services.bank_service import BankService
from utils.constants import BANK_DASHBOARD
from utils.exceptions import ConflictException, NetworkException

DASHBOARD = {
    'total_balance': "15,000.00",
    'accounts': [
        {'id': 'a1', 'bank_name': 'Sonali', 'account_name': 'Board', 'account_number': '1001',
         'account_type': 'current', 'current_balance': '10000', 'is_active': True},
        {'id': 'a2', 'bank_name': 'Islami', 'account_name': 'Fees', 'account_number': '2002',
         'account_type': 'savings', 'current_balance': '5000', 'is_active': True},
        {'id': 'a3', 'bank_name': 'Janata', 'account_name': 'Old', 'account_number': '3003',
         'account_type': 'current', 'current_balance': '0', 'is_active': False},
    ],
    'recent_transactions': [],
}


@pytest.fixture
def service(gateway, dispatcher):
    gateway.script('get_bank_dashboard_data', DASHBOARD)
    return BankService(gateway, dispatcher)


@pytest.fixture
def accounts(service):
    return service.load_dashboard().accounts


class TestDashboard:

    def test_load_is_cached(self, service, gateway):
        service.load_dashboard()
        service.load_dashboard()
        assert len(gateway.calls_to('get_bank_dashboard_data')) == 1

    def test_failure_keeps_last_data(self, service, gateway, notifier):
        first = service.load_dashboard()
        gateway.script('get_bank_dashboard_data', NetworkException("offline", "NETWORK"))
        assert service.load_dashboard(force=True) is first
        assert notifier.errors == ["Could not load bank data: offline"]


class TestTransactionForm:

    def _deposit(self, service, accounts, amount):
        form = service.transaction_form(accounts)
        form.on_change('amount', amount)
        form.on_change('to_account_id', 'a1')
        return form

    @pytest.mark.parametrize("amount", [0, "-5", ""])
    def test_amount_must_be_positive(self, service, accounts, gateway, amount):
        form = self._deposit(service, accounts, amount)
        result = form.submit()
        assert not result.ok
        assert 'amount' in form.errors
        assert gateway.calls_to('create_bank_transaction') == []

    def test_amount_of_one_is_accepted(self, service, accounts, gateway, notifier):
        form = self._deposit(service, accounts, "1")
        assert form.submit().ok
        params = gateway.calls_to('create_bank_transaction')[0]
        assert params['p_type'] == 'deposit'
        assert params['p_amount'] == Decimal('1')
        assert params['p_from_account_id'] is None
        assert notifier.successes == ["Transaction recorded"]

    def test_transfer_to_same_account_rejected(self, service, accounts, gateway):
        form = service.transaction_form(accounts)
        form.on_change('transaction_type', BankTransactionType.TRANSFER)
        form.on_change('amount', '500')
        form.on_change('from_account_id', 'a1')
        form.on_change('to_account_id', 'a1')
        assert not form.submit().ok
        assert form.errors['to_account_id'] == "Source and destination accounts must be different"
        assert gateway.calls_to('create_bank_transaction') == []

    def test_inactive_accounts_not_offered(self, service, accounts):
        form = service.transaction_form(accounts)
        assert [a.id for a in form.active_accounts] == ['a1', 'a2']
        form.on_change('amount', '10')
        form.on_change('to_account_id', 'a3')
        assert not form.check()
        assert form.errors['to_account_id'] == "Select an active account"

    def test_switching_to_deposit_clears_source(self, service, accounts):
        form = service.transaction_form(accounts)
        form.on_change('transaction_type', BankTransactionType.WITHDRAWAL)
        form.on_change('from_account_id', 'a1')
        form.on_change('transaction_type', BankTransactionType.DEPOSIT)
        assert form.draft['from_account_id'] is None
        assert form.is_field_disabled('from_account_id')

    def test_success_refreshes_dashboard(self, service, accounts, cache):
        form = self._deposit(service, accounts, "100")
        form.submit()
        assert not cache.contains(BANK_DASHBOARD, 'all')


class TestAccountForm:

    def _fill(self, form, number):
        form.on_change('bank_name', 'Pubali')
        form.on_change('account_name', 'Exams')
        form.on_change('account_number', number)
        form.on_change('opening_date', date(2025, 1, 1))
        form.on_change('opening_balance', '1,000')

    def test_duplicate_number_blocked_locally(self, service, accounts, gateway):
        form = service.account_form(accounts)
        self._fill(form, '2002')
        assert not form.submit().ok
        assert form.errors['account_number'] == "This account number already exists"
        assert gateway.calls_to('create_bank_account') == []

    def test_create_sends_opening_balance(self, service, accounts, gateway):
        form = service.account_form(accounts)
        self._fill(form, '4004')
        assert form.submit().ok
        params = gateway.calls_to('create_bank_account')[0]
        assert params['p_opening_balance'] == Decimal('1000')
        assert params['p_account_number'] == '4004'

    def test_negative_opening_balance(self, service, accounts):
        form = service.account_form(accounts)
        self._fill(form, '4004')
        form.on_change('opening_balance', '-1')
        assert not form.check()
        assert 'opening_balance' in form.errors

    def test_edit_keeps_own_number_and_locks_opening_fields(self, service, accounts, gateway):
        account = accounts[0]
        form = service.account_form(accounts, account)
        assert form.is_field_disabled('opening_balance')
        form.on_change('opening_balance', '999999')
        assert form.draft['opening_balance'] == account.opening_balance

        form.on_change('account_name', 'Board Main')
        assert form.submit().ok
        params = gateway.calls_to('update_bank_account')[0]
        assert params['p_account_id'] == 'a1'
        assert params['p_updates']['account_number'] == '1001'
        assert 'opening_balance' not in params['p_updates']

    def test_server_duplicate_routed_to_number(self, service, accounts, gateway):
        gateway.script('create_bank_account', ConflictException(
            'duplicate key value violates unique constraint "bank_accounts_account_number_key"',
            ConflictException.UNIQUE_VIOLATION))
        form = service.account_form(accounts)
        self._fill(form, '5005')
        assert not form.submit().ok
        assert form.errors['account_number'] == "This account number already exists"
