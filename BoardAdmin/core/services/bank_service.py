"""
Bank Service
Account and transaction forms for the board's bank ledger
"""

from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from core.controllers.form_controller import FormController
from core.controllers.mutation import ConflictRoute, MutationDispatcher
from core.models.entities import (
    BankAccount, BankAccountType, BankDashboardData, BankTransaction, BankTransactionType
)
from core.repositories.bank_repository import BankRepository
from utils.constants import BANK_DASHBOARD
from utils.exceptions import BoardAdminException, ConflictException
from utils.helpers import LoggingUtils
from utils.validators import FieldValidator, collect_error

_DASHBOARD_PARAMS = 'all'


def _to_decimal(value: Any) -> Decimal:
    return Decimal(str(value).replace(',', ''))


class BankAccountForm(FormController):
    """Create or edit a bank account"""

    entity_keys = (BANK_DASHBOARD,)
    conflict_routes = (
        ConflictRoute(ConflictException.UNIQUE_VIOLATION, 'account_number', 'account_number',
                      "This account number already exists"),
    )
    _CREATE_ONLY = ('opening_date', 'opening_balance')

    def __init__(self, dispatcher: MutationDispatcher, repo: BankRepository,
                 existing_accounts: List[BankAccount], account: BankAccount = None):
        self.repo = repo
        self.existing_accounts = existing_accounts
        self.account = account
        draft = {
            'bank_name': account.bank_name if account else '',
            'branch_name': (account.branch_name or '') if account else '',
            'account_name': account.account_name if account else '',
            'account_number': account.account_number if account else '',
            'account_type': account.account_type if account else BankAccountType.CURRENT,
            'opening_date': account.opening_date if account else date.today(),
            'opening_balance': account.opening_balance if account else Decimal('0'),
        }
        super().__init__(dispatcher, draft)
        self.success_message = "Bank account updated" if self.is_edit else "Bank account created"
        self.error_prefix = "Could not save the bank account"

    @property
    def is_edit(self) -> bool:
        return self.account is not None and self.account.id is not None

    def is_field_disabled(self, field: str) -> bool:
        return self.is_edit and field in self._CREATE_ONLY

    def validate(self) -> Dict[str, Any]:
        errors = {}
        d = self.draft
        collect_error(errors, 'bank_name', FieldValidator.require_text, d.get('bank_name'), "Bank name")
        collect_error(errors, 'account_name', FieldValidator.require_text, d.get('account_name'), "Account name")
        number = collect_error(errors, 'account_number', FieldValidator.require_text,
                               d.get('account_number'), "Account number")
        if number:
            own_id = self.account.id if self.is_edit else None
            if any(a.account_number == number and a.id != own_id for a in self.existing_accounts):
                errors['account_number'] = "This account number already exists"

        if not self.is_edit:
            collect_error(errors, 'opening_date', FieldValidator.validate_date,
                          d.get('opening_date'), "Opening date")
            collect_error(errors, 'opening_balance', FieldValidator.validate_non_negative,
                          d.get('opening_balance'), "Opening balance")
        return errors

    def build_payload(self) -> BankAccount:
        d = self.draft
        account_type = d['account_type']
        return BankAccount(
            id=self.account.id if self.is_edit else None,
            bank_name=d['bank_name'].strip(),
            branch_name=(d.get('branch_name') or '').strip() or None,
            account_name=d['account_name'].strip(),
            account_number=d['account_number'].strip(),
            account_type=account_type if isinstance(account_type, BankAccountType) else BankAccountType(account_type),
            opening_date=self.account.opening_date if self.is_edit else d['opening_date'],
            opening_balance=self.account.opening_balance if self.is_edit else _to_decimal(d['opening_balance']),
        )

    def send(self, payload: BankAccount) -> Any:
        if self.is_edit:
            result = self.repo.update_account(payload)
            LoggingUtils.log_business_event("bank_account_updated", "bank_account", payload.id)
        else:
            result = self.repo.create_account(payload)
            LoggingUtils.log_business_event(
                "bank_account_created", "bank_account", None,
                details={'account_number': payload.account_number,
                         'opening_balance': str(payload.opening_balance)}
            )
        return result


class BankTransactionForm(FormController):
    """Deposit, withdrawal or transfer between active accounts"""

    entity_keys = (BANK_DASHBOARD,)
    success_message = "Transaction recorded"
    error_prefix = "Could not record the transaction"

    def __init__(self, dispatcher: MutationDispatcher, repo: BankRepository,
                 accounts: List[BankAccount]):
        self.repo = repo
        self.active_accounts = [a for a in accounts if a.is_active]
        draft = {
            'transaction_type': BankTransactionType.DEPOSIT,
            'amount': None,
            'transaction_date': date.today(),
            'from_account_id': None,
            'to_account_id': None,
            'description': '',
            'check_number': '',
        }
        super().__init__(dispatcher, draft)

    @property
    def transaction_type(self) -> BankTransactionType:
        value = self.draft['transaction_type']
        return value if isinstance(value, BankTransactionType) else BankTransactionType(value)

    def needs_source(self) -> bool:
        return self.transaction_type in (BankTransactionType.WITHDRAWAL, BankTransactionType.TRANSFER)

    def needs_destination(self) -> bool:
        return self.transaction_type in (BankTransactionType.DEPOSIT, BankTransactionType.TRANSFER)

    def after_change(self, field: str, value: Any):
        if field != 'transaction_type':
            return
        if not self.needs_source():
            self.draft['from_account_id'] = None
            self.errors.pop('from_account_id', None)
        if not self.needs_destination():
            self.draft['to_account_id'] = None
            self.errors.pop('to_account_id', None)

    def is_field_disabled(self, field: str) -> bool:
        if field == 'from_account_id':
            return not self.needs_source()
        if field == 'to_account_id':
            return not self.needs_destination()
        return False

    def validate(self) -> Dict[str, Any]:
        errors = {}
        d = self.draft
        collect_error(errors, 'transaction_type', FieldValidator.require_value,
                      d.get('transaction_type'), "Transaction type")
        collect_error(errors, 'amount', FieldValidator.validate_positive, d.get('amount'), "Amount")
        collect_error(errors, 'transaction_date', FieldValidator.validate_date,
                      d.get('transaction_date'), "Transaction date")

        active_ids = {a.id for a in self.active_accounts}
        source = d.get('from_account_id')
        destination = d.get('to_account_id')
        if self.needs_source():
            if not source:
                errors['from_account_id'] = "Select the source account"
            elif source not in active_ids:
                errors['from_account_id'] = "Select an active account"
        if self.needs_destination():
            if not destination:
                errors['to_account_id'] = "Select the destination account"
            elif destination not in active_ids:
                errors['to_account_id'] = "Select an active account"
        if (self.transaction_type is BankTransactionType.TRANSFER and source and destination
                and source == destination):
            errors['to_account_id'] = "Source and destination accounts must be different"
        return errors

    def build_payload(self) -> Dict[str, Any]:
        d = self.draft
        txn = BankTransaction(
            transaction_type=self.transaction_type,
            amount=_to_decimal(d['amount']),
            transaction_date=d['transaction_date'],
            description=(d.get('description') or '').strip() or None,
            check_number=(d.get('check_number') or '').strip() or None,
        )
        return {
            'txn': txn,
            'from_account_id': d['from_account_id'] if self.needs_source() else None,
            'to_account_id': d['to_account_id'] if self.needs_destination() else None,
        }

    def send(self, payload: Dict[str, Any]) -> Any:
        result = self.repo.create_transaction(
            payload['txn'], payload['from_account_id'], payload['to_account_id']
        )
        LoggingUtils.log_business_event(
            "bank_transaction_created", "bank_transaction", None,
            details={'type': payload['txn'].transaction_type.value,
                     'amount': str(payload['txn'].amount)}
        )
        return result


class BankService:
    """Service class for the bank ledger"""

    def __init__(self, gateway, dispatcher: MutationDispatcher):
        self.bank_repo = BankRepository(gateway)
        self.dispatcher = dispatcher
        self.last_dashboard: Optional[BankDashboardData] = None

    def load_dashboard(self, force: bool = False) -> Optional[BankDashboardData]:
        cache = self.dispatcher.cache
        if not force and cache.contains(BANK_DASHBOARD, _DASHBOARD_PARAMS):
            self.last_dashboard = cache.get(BANK_DASHBOARD, _DASHBOARD_PARAMS)
            return self.last_dashboard
        try:
            data = self.bank_repo.get_dashboard()
        except BoardAdminException as e:
            self.dispatcher.notifier.error(f"Could not load bank data: {e.message}")
            return self.last_dashboard
        cache.put(BANK_DASHBOARD, _DASHBOARD_PARAMS, data)
        self.last_dashboard = data
        return data

    def account_form(self, existing_accounts: List[BankAccount],
                     account: BankAccount = None) -> BankAccountForm:
        return BankAccountForm(self.dispatcher, self.bank_repo, existing_accounts, account)

    def transaction_form(self, accounts: List[BankAccount]) -> BankTransactionForm:
        return BankTransactionForm(self.dispatcher, self.bank_repo, accounts)
