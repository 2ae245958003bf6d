"""
Kitab Repository
Textbooks referenced by marhalas and teacher qualifications
"""

from typing import Any, List

from core.repositories.base_repository import BaseRepository
from core.models.entities import Kitab
from core.models.mappers import kitab_to_create_params, kitab_to_update_params, row_to_kitab


class KitabRepository(BaseRepository):
    """Repository for kitabs table operations"""

    def __init__(self, gateway):
        super().__init__(gateway, 'kitabs')

    def find_all_kitabs(self) -> List[Kitab]:
        return self.to_entities(row_to_kitab, self.find_all(order='kitab_code'))

    def create_kitab(self, kitab: Kitab) -> Any:
        """The backend assigns the next kitab code"""
        return self.call('create_kitab_with_auto_code', kitab_to_create_params(kitab))

    def update_kitab(self, kitab: Kitab) -> Any:
        return self.call('update_kitab', kitab_to_update_params(kitab))

    def delete_kitab(self, kitab_id: str) -> Any:
        return self.call('delete_kitab', {'p_id': kitab_id})
