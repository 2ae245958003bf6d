"""
Bank Repository
Board bank accounts and their transactions
"""

from typing import Any, Dict, Optional

from core.repositories.base_repository import BaseRepository
from core.models.entities import BankAccount, BankDashboardData, BankTransaction
from core.models.mappers import (
    bank_account_to_create_params, bank_account_to_update_payload,
    bank_transaction_to_params, row_to_bank_dashboard
)


class BankRepository(BaseRepository):
    """Repository for bank accounts and transactions"""

    def __init__(self, gateway):
        super().__init__(gateway, 'bank_accounts')

    def get_dashboard(self) -> BankDashboardData:
        """Total balance, every account and the latest transactions"""
        return self.to_entity(row_to_bank_dashboard, self.call('get_bank_dashboard_data'))

    def create_account(self, account: BankAccount) -> Any:
        return self.call('create_bank_account', bank_account_to_create_params(account))

    def update_account(self, account: BankAccount) -> Any:
        return self.call('update_bank_account', {
            'p_account_id': account.id,
            'p_updates': bank_account_to_update_payload(account),
        })

    def create_transaction(self, txn: BankTransaction, from_account_id: Optional[str],
                           to_account_id: Optional[str]) -> Dict[str, Any]:
        return self.call(
            'create_bank_transaction',
            bank_transaction_to_params(txn, from_account_id, to_account_id),
        )
