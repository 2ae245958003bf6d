"""
FAQ Service
"""

from typing import Any, Dict, List

from core.controllers.form_controller import FormController
from core.controllers.mutation import MutationDispatcher, MutationResult
from core.models.entities import Faq
from core.repositories.faq_repository import FaqRepository
from utils.constants import FAQS
from utils.exceptions import BoardAdminException
from utils.validators import FieldValidator, collect_error

_ALL = 'all'


class FaqForm(FormController):
    entity_keys = (FAQS,)
    error_prefix = "Could not save the FAQ"

    def __init__(self, dispatcher: MutationDispatcher, repo: FaqRepository, faq: Faq = None):
        self.repo = repo
        self.faq = faq
        draft = {
            'question': faq.question if faq else '',
            'answer': faq.answer if faq else '',
            'is_active': faq.is_active if faq else True,
        }
        super().__init__(dispatcher, draft)
        self.success_message = "FAQ updated" if self.is_edit else "FAQ added"

    @property
    def is_edit(self) -> bool:
        return self.faq is not None and self.faq.id is not None

    def validate(self) -> Dict[str, Any]:
        errors = {}
        collect_error(errors, 'question', FieldValidator.require_text, self.draft.get('question'), "Question")
        collect_error(errors, 'answer', FieldValidator.require_text, self.draft.get('answer'), "Answer")
        return errors

    def build_payload(self) -> Faq:
        return Faq(
            id=self.faq.id if self.is_edit else None,
            question=self.draft['question'].strip(),
            answer=self.draft['answer'].strip(),
            is_active=bool(self.draft.get('is_active', True)),
        )

    def send(self, payload: Faq) -> Any:
        if self.is_edit:
            return self.repo.update_faq(payload.id, payload.question, payload.answer, payload.is_active)
        return self.repo.create_faq(payload.question, payload.answer, payload.is_active)


class FaqService:
    """Service class for FAQs; deleting only deactivates"""

    def __init__(self, gateway, dispatcher: MutationDispatcher):
        self.faq_repo = FaqRepository(gateway)
        self.dispatcher = dispatcher
        self.last_faqs: List[Faq] = []

    def all_faqs(self) -> List[Faq]:
        cache = self.dispatcher.cache
        if not cache.contains(FAQS, _ALL):
            try:
                cache.put(FAQS, _ALL, self.faq_repo.find_all_faqs())
            except BoardAdminException as e:
                self.dispatcher.notifier.error(f"Could not load FAQs: {e.message}")
                return self.last_faqs
        self.last_faqs = cache.get(FAQS, _ALL)
        return self.last_faqs

    def form(self, faq: Faq = None) -> FaqForm:
        return FaqForm(self.dispatcher, self.faq_repo, faq)

    def toggle_active(self, faq: Faq) -> MutationResult:
        new_value = not faq.is_active
        return self.dispatcher.dispatch(
            lambda: self.faq_repo.update_faq(faq.id, is_active=new_value),
            entity_keys=(FAQS,),
            success_message="FAQ activated" if new_value else "FAQ deactivated",
        )

    def deactivate(self, faq: Faq) -> MutationResult:
        return self.dispatcher.dispatch(
            lambda: self.faq_repo.deactivate_faq(faq.id),
            entity_keys=(FAQS,),
            success_message="FAQ deactivated",
        )
