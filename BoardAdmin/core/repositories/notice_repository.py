"""
Notice Repository
Plain table access; deletes are permanent
"""

from typing import List

from core.repositories.base_repository import BaseRepository
from core.models.entities import Notice
from core.models.mappers import notice_to_payload, row_to_notice


class NoticeRepository(BaseRepository):
    """Repository for notices table operations"""

    def __init__(self, gateway):
        super().__init__(gateway, 'notices')

    def find_all_notices(self) -> List[Notice]:
        return self.to_entities(row_to_notice, self.find_all(order='created_at.desc'))

    def create_notice(self, notice: Notice):
        return self.create(notice_to_payload(notice))

    def update_notice(self, notice: Notice) -> bool:
        return self.update(notice.id, notice_to_payload(notice))

    def set_active(self, notice_id: str, is_active: bool) -> bool:
        return self.update(notice_id, {'is_active': is_active})
