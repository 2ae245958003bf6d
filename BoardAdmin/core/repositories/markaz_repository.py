"""
Markaz Repository
Exam centers and the madrasas hosting them
"""

from typing import Any, Dict, Set

from core.repositories.base_repository import BaseRepository
from core.models.entities import Markaz, PagedResult
from core.models.mappers import (
    markaz_to_create_params, markaz_to_update_payload, row_to_markaz
)


class MarkazRepository(BaseRepository):
    """Repository for markazes"""

    def __init__(self, gateway):
        super().__init__(gateway, 'markazes')

    def list_markazes(self, page: int, limit: int, search_term: str = None) -> PagedResult:
        data = self.call('get_markazes_filtered', {
            'p_page': page,
            'p_limit': limit,
            'p_search_term': search_term or None,
        })
        return self.to_page(row_to_markaz, data)

    def hosted_madrasa_ids(self) -> Set[str]:
        rows = self.find_all(columns='host_madrasa_id')
        return {r['host_madrasa_id'] for r in rows if r.get('host_madrasa_id')}

    def create_markaz(self, markaz: Markaz) -> Any:
        return self.call('create_markaz_with_auto_code', markaz_to_create_params(markaz))

    def update_markaz(self, markaz_id: str, updates: Dict[str, Any]) -> Any:
        return self.call('update_markaz', {'p_markaz_id': markaz_id, 'p_updates': updates})

    def update_from_entity(self, markaz: Markaz) -> Any:
        return self.update_markaz(markaz.id, markaz_to_update_payload(markaz))
