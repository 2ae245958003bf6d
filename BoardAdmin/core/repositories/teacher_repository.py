"""
Teacher Repository
"""

from typing import Any, Dict, Optional

from core.repositories.base_repository import BaseRepository
from core.models.entities import PagedResult, Teacher
from core.models.mappers import row_to_teacher, teacher_to_create_params


class TeacherRepository(BaseRepository):
    """Repository for teachers"""

    def __init__(self, gateway):
        super().__init__(gateway, 'teachers')

    def list_teachers(self, page: int, limit: int, search_term: str = None,
                      is_active: Optional[bool] = None, sort_field: str = 'created_at',
                      sort_order: str = 'desc') -> PagedResult:
        data = self.call('get_teachers_list', {
            'p_is_active': is_active,
            'p_limit': limit,
            'p_page': page,
            'p_search_term': search_term or None,
            'p_sort_field': sort_field,
            'p_sort_order': sort_order,
        })
        return self.to_page(row_to_teacher, data)

    def create_teacher(self, teacher: Teacher) -> Any:
        return self.call('create_teacher', teacher_to_create_params(teacher))

    def update_teacher(self, teacher_id: str, updates: Dict[str, Any]) -> Any:
        return self.call('update_teacher', {'p_teacher_id': teacher_id, 'p_updates': updates})
