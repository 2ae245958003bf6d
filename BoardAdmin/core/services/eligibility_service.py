"""
Eligibility Service
Mumtahin (examiner) eligibility is a designation row per teacher, not a
teacher column. Every toggle is followed by a full reload of the
designation set.
"""

from typing import List, Optional, Set, Tuple

from core.controllers.mutation import MutationDispatcher, MutationResult
from core.models.entities import Teacher
from core.repositories.designation_repository import DesignationRepository
from core.repositories.teacher_repository import TeacherRepository
from utils.constants import ELIGIBILITY_TEACHER_LIMIT, MUMTAHIN_DESIGNATIONS, TEACHERS
from utils.exceptions import BoardAdminException
from utils.helpers import LoggingUtils, StringUtils

_ACTIVE_TEACHERS = 'active_all'
_ALL = 'all'


class EligibilityService:
    """Service class for examiner eligibility"""

    def __init__(self, gateway, dispatcher: MutationDispatcher):
        self.teacher_repo = TeacherRepository(gateway)
        self.designation_repo = DesignationRepository(gateway)
        self.dispatcher = dispatcher
        self.eligible_ids: Set[str] = set()
        self._teachers: List[Teacher] = []

    def load_teachers(self) -> List[Teacher]:
        cache = self.dispatcher.cache
        if not cache.contains(TEACHERS, _ACTIVE_TEACHERS):
            try:
                page = self.teacher_repo.list_teachers(
                    1, ELIGIBILITY_TEACHER_LIMIT, is_active=True,
                    sort_field='teacher_code', sort_order='asc',
                )
            except BoardAdminException as e:
                self.dispatcher.notifier.error(f"Could not load teachers: {e.message}")
                return self._teachers
            cache.put(TEACHERS, _ACTIVE_TEACHERS, page.items)
        self._teachers = cache.get(TEACHERS, _ACTIVE_TEACHERS)
        return self._teachers

    def load_eligible_ids(self, force: bool = False) -> Set[str]:
        cache = self.dispatcher.cache
        if force or not cache.contains(MUMTAHIN_DESIGNATIONS, _ALL):
            try:
                ids = self.designation_repo.mumtahin_teacher_ids()
            except BoardAdminException as e:
                self.dispatcher.notifier.error(f"Could not load eligibility: {e.message}")
                return self.eligible_ids
            cache.put(MUMTAHIN_DESIGNATIONS, _ALL, ids)
        self.eligible_ids = set(cache.get(MUMTAHIN_DESIGNATIONS, _ALL))
        return self.eligible_ids

    def is_eligible(self, teacher_id: str) -> bool:
        return teacher_id in self.eligible_ids

    def set_eligibility(self, teacher_id: str, is_eligible: bool) -> MutationResult:
        def call():
            result = self.designation_repo.set_mumtahin_eligibility(teacher_id, is_eligible)
            LoggingUtils.log_business_event(
                "mumtahin_eligibility_set", "teacher", teacher_id,
                details={'is_eligible': is_eligible}
            )
            return result

        result = self.dispatcher.dispatch(
            call,
            entity_keys=(MUMTAHIN_DESIGNATIONS,),
            success_message="Marked as examiner-eligible" if is_eligible else "Examiner eligibility removed",
            error_prefix="Could not change eligibility",
        )
        if result.ok:
            self.load_eligible_ids(force=True)
        return result

    def toggle(self, teacher_id: str) -> MutationResult:
        return self.set_eligibility(teacher_id, not self.is_eligible(teacher_id))

    def teachers_with_eligibility(self, search_term: Optional[str] = None) -> List[Tuple[Teacher, bool]]:
        """Active teachers matching the search, ordered by code, each with its flag"""
        teachers = [
            t for t in self._teachers
            if StringUtils.matches_search(search_term or '', t.name_bn, t.name_en, t.teacher_code, t.mobile)
        ]
        teachers.sort(key=lambda t: t.teacher_code or '')
        return [(t, self.is_eligible(t.id)) for t in teachers]
