"""
Lookup Repository
Read-only reference data: marhalas, zones and madrasa search
"""

from typing import List

from core.repositories.base_repository import BaseRepository
from core.models.entities import Madrasa, Marhala, Zone
from core.models.mappers import row_to_madrasa, row_to_marhala, row_to_zone
from utils.constants import MADRASA_LOOKUP_LIMIT


class LookupRepository(BaseRepository):
    """Reference lists shared by several forms"""

    def __init__(self, gateway):
        super().__init__(gateway, 'marhalas')

    def find_marhalas(self) -> List[Marhala]:
        return self.to_entities(row_to_marhala, self.find_all(order='marhala_order'))

    def find_zones(self) -> List[Zone]:
        rows = self.gateway.select('zones', columns='id, zone_code, name_bn, districts',
                                   order='zone_code')
        return self.to_entities(row_to_zone, rows)

    def search_madrasas(self, search_term: str, limit: int = MADRASA_LOOKUP_LIMIT) -> List[Madrasa]:
        data = self.call('get_madrasas_filtered', {'p_search_term': search_term, 'p_limit': limit})
        return self.to_entities(row_to_madrasa, (data or {}).get('items'))
