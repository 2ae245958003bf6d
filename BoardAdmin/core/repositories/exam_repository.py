"""
Exam Repository
Exams with their per-marhala fee rows
"""

from typing import Any, Dict, List, Optional

from core.repositories.base_repository import BaseRepository
from core.models.entities import Exam, PagedResult
from core.models.mappers import exam_to_create_params, row_to_exam


class ExamRepository(BaseRepository):
    """Repository for exams"""

    def __init__(self, gateway):
        super().__init__(gateway, 'exams')

    def list_exams(self, page: int, limit: int, search_term: str = None,
                   is_active: Optional[bool] = None, status: Optional[str] = None) -> PagedResult:
        data = self.call('get_exams_list', {
            'p_page': page,
            'p_limit': limit,
            'p_search_term': search_term or None,
            'p_is_active': is_active,
            'p_status': status,
        })
        return self.to_page(row_to_exam, data)

    def create_exam(self, exam: Exam) -> Any:
        return self.call('create_exam_with_fees', exam_to_create_params(exam))

    def update_exam(self, exam_id: str, details: Dict[str, Any],
                    fees: Optional[List[Dict[str, Any]]] = None) -> Any:
        """Exam columns and fee rows change together in one procedure call"""
        return self.call('update_exam_with_fees', {
            'p_exam_id': exam_id,
            'p_exam_details_updates': details,
            'p_exam_fees_updates': fees,
        })
