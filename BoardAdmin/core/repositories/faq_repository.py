"""
FAQ Repository
All FAQ writes go through procedures; delete only deactivates
"""

from typing import Any, List, Optional

from core.repositories.base_repository import BaseRepository
from core.models.entities import Faq
from core.models.mappers import row_to_faq


class FaqRepository(BaseRepository):
    """Repository for FAQs"""

    def __init__(self, gateway):
        super().__init__(gateway, 'faqs')

    def find_all_faqs(self) -> List[Faq]:
        return self.to_entities(row_to_faq, self.call('get_all_faqs'))

    def create_faq(self, question: str, answer: str, is_active: bool = True) -> Any:
        return self.call('create_faq', {
            'p_question': question,
            'p_answer': answer,
            'p_is_active': is_active,
        })

    def update_faq(self, faq_id: str, question: Optional[str] = None,
                   answer: Optional[str] = None, is_active: Optional[bool] = None) -> Any:
        params = {'p_faq_id': faq_id}
        if question is not None:
            params['p_question'] = question
        if answer is not None:
            params['p_answer'] = answer
        if is_active is not None:
            params['p_is_active'] = is_active
        return self.call('update_faq', params)

    def deactivate_faq(self, faq_id: str) -> Any:
        return self.call('delete_faq', {'p_faq_id': faq_id})
