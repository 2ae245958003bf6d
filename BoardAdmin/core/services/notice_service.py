"""
Notice Service
"""

from typing import Any, Dict, List

from core.controllers.form_controller import FormController
from core.controllers.mutation import MutationDispatcher, MutationResult
from core.models.entities import Notice
from core.repositories.notice_repository import NoticeRepository
from utils.constants import NOTICES
from utils.exceptions import BoardAdminException
from utils.helpers import LoggingUtils
from utils.validators import FieldValidator, collect_error

_ALL = 'all'


class NoticeForm(FormController):
    entity_keys = (NOTICES,)
    error_prefix = "Could not save the notice"

    def __init__(self, dispatcher: MutationDispatcher, repo: NoticeRepository, notice: Notice = None):
        self.repo = repo
        self.notice = notice
        draft = {
            'title': notice.title if notice else '',
            'content': notice.content if notice else '',
            'is_active': notice.is_active if notice else True,
        }
        super().__init__(dispatcher, draft)
        self.success_message = "Notice updated" if self.is_edit else "Notice published"

    @property
    def is_edit(self) -> bool:
        return self.notice is not None and self.notice.id is not None

    def validate(self) -> Dict[str, Any]:
        errors = {}
        collect_error(errors, 'title', FieldValidator.require_text, self.draft.get('title'), "Title")
        collect_error(errors, 'content', FieldValidator.require_text, self.draft.get('content'), "Content")
        return errors

    def build_payload(self) -> Notice:
        return Notice(
            id=self.notice.id if self.is_edit else None,
            title=self.draft['title'],
            content=self.draft['content'],
            is_active=bool(self.draft.get('is_active', True)),
        )

    def send(self, payload: Notice) -> Any:
        if self.is_edit:
            return self.repo.update_notice(payload)
        return self.repo.create_notice(payload)


class NoticeService:
    """Service class for notices"""

    def __init__(self, gateway, dispatcher: MutationDispatcher):
        self.notice_repo = NoticeRepository(gateway)
        self.dispatcher = dispatcher
        self.last_notices: List[Notice] = []

    def all_notices(self) -> List[Notice]:
        cache = self.dispatcher.cache
        if not cache.contains(NOTICES, _ALL):
            try:
                cache.put(NOTICES, _ALL, self.notice_repo.find_all_notices())
            except BoardAdminException as e:
                self.dispatcher.notifier.error(f"Could not load notices: {e.message}")
                return self.last_notices
        self.last_notices = cache.get(NOTICES, _ALL)
        return self.last_notices

    def form(self, notice: Notice = None) -> NoticeForm:
        return NoticeForm(self.dispatcher, self.notice_repo, notice)

    def toggle_active(self, notice: Notice) -> MutationResult:
        new_value = not notice.is_active
        return self.dispatcher.dispatch(
            lambda: self.notice_repo.set_active(notice.id, new_value),
            entity_keys=(NOTICES,),
            success_message="Notice shown" if new_value else "Notice hidden",
        )

    def delete_notice(self, notice: Notice) -> MutationResult:
        """Permanent delete"""
        def call():
            result = self.notice_repo.delete(notice.id)
            LoggingUtils.log_business_event("notice_deleted", "notice", notice.id)
            return result

        return self.dispatcher.dispatch(call, entity_keys=(NOTICES,), success_message="Notice deleted")
