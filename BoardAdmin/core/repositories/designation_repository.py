"""
Designation Repository
Teacher designations stored apart from the teacher record
"""

from typing import Any, Set

from core.repositories.base_repository import BaseRepository
from utils.constants import MUMTAHIN_ELIGIBLE


class DesignationRepository(BaseRepository):
    """Repository for teacher_general_designations"""

    def __init__(self, gateway):
        super().__init__(gateway, 'teacher_general_designations')

    def mumtahin_teacher_ids(self) -> Set[str]:
        rows = self.find_all(columns='teacher_id', filters={'designation': MUMTAHIN_ELIGIBLE})
        return {r['teacher_id'] for r in rows if r.get('teacher_id')}

    def set_mumtahin_eligibility(self, teacher_id: str, is_eligible: bool) -> Any:
        """Creates or removes the designation row"""
        return self.call('set_teacher_mumtahin_eligibility', {
            'p_teacher_id': teacher_id,
            'p_is_eligible': is_eligible,
        })
