"""
Kitab Service
Textbook list with local search, create/edit form and delete
"""

from typing import Any, Dict, List

from core.controllers.form_controller import FormController
from core.controllers.mutation import ConflictRoute, MutationDispatcher, MutationResult
from core.controllers.query_controller import ListController, ListQuery
from core.models.entities import Kitab, PagedResult
from core.repositories.kitab_repository import KitabRepository
from utils.constants import KITABS, KITAB_PAGE_SIZE
from utils.exceptions import ConflictException
from utils.helpers import LoggingUtils, PageUtils, StringUtils
from utils.validators import FieldValidator, collect_error

_ALL = 'all'


class KitabForm(FormController):
    """Create or edit a kitab; the code is never editable"""

    entity_keys = (KITABS,)
    conflict_routes = (
        ConflictRoute(ConflictException.UNIQUE_VIOLATION, None, 'name_bn',
                      "A kitab with this name already exists"),
    )

    def __init__(self, dispatcher: MutationDispatcher, repo: KitabRepository, kitab: Kitab = None):
        self.repo = repo
        self.kitab = kitab
        draft = {
            'name_bn': kitab.name_bn if kitab else '',
            'name_ar': (kitab.name_ar or '') if kitab else '',
            'full_marks': kitab.full_marks if kitab else None,
        }
        super().__init__(dispatcher, draft)
        self.success_message = "Kitab updated" if self.is_edit else "Kitab created"
        self.error_prefix = "Could not save the kitab"

    @property
    def is_edit(self) -> bool:
        return self.kitab is not None and self.kitab.id is not None

    def is_field_disabled(self, field: str) -> bool:
        return field == 'kitab_code'

    def validate(self) -> Dict[str, Any]:
        errors = {}
        collect_error(errors, 'name_bn', FieldValidator.require_text, self.draft.get('name_bn'), "Name (Bengali)")
        collect_error(errors, 'full_marks', FieldValidator.validate_positive_int,
                      self.draft.get('full_marks'), "Full marks")
        return errors

    def build_payload(self) -> Kitab:
        d = self.draft
        return Kitab(
            id=self.kitab.id if self.is_edit else None,
            kitab_code=self.kitab.kitab_code if self.is_edit else None,
            name_bn=d['name_bn'].strip(),
            name_ar=(d.get('name_ar') or '').strip() or None,
            full_marks=FieldValidator.validate_positive_int(d['full_marks'], "Full marks"),
        )

    def send(self, payload: Kitab) -> Any:
        if self.is_edit:
            result = self.repo.update_kitab(payload)
            LoggingUtils.log_business_event("kitab_updated", "kitab", payload.id)
        else:
            result = self.repo.create_kitab(payload)
            LoggingUtils.log_business_event("kitab_created", "kitab", None,
                                            details={'name_bn': payload.name_bn})
        return result


class KitabService:
    """Service class for kitabs"""

    def __init__(self, gateway, dispatcher: MutationDispatcher):
        self.kitab_repo = KitabRepository(gateway)
        self.dispatcher = dispatcher

    def all_kitabs(self) -> List[Kitab]:
        """Every kitab, cached until the next kitab mutation"""
        cache = self.dispatcher.cache
        if not cache.contains(KITABS, _ALL):
            cache.put(KITABS, _ALL, self.kitab_repo.find_all_kitabs())
        return cache.get(KITABS, _ALL)

    def _fetch_page(self, query: ListQuery) -> PagedResult:
        matches = [
            k for k in self.all_kitabs()
            if StringUtils.matches_search(query.search_term, k.kitab_code, k.name_bn, k.name_ar)
        ]
        return PagedResult(
            items=PageUtils.slice_page(matches, query.page, query.page_size),
            total_items=len(matches),
        )

    def list_controller(self) -> ListController:
        return ListController(
            KITABS, self._fetch_page, self.dispatcher.cache, self.dispatcher.notifier,
            ListQuery(page_size=KITAB_PAGE_SIZE),
        )

    def form(self, kitab: Kitab = None) -> KitabForm:
        return KitabForm(self.dispatcher, self.kitab_repo, kitab)

    def delete_kitab(self, kitab: Kitab, on_close=None) -> MutationResult:
        """A kitab still used by a marhala is refused by the backend; its message is shown as-is"""
        def call():
            result = self.kitab_repo.delete_kitab(kitab.id)
            LoggingUtils.log_business_event("kitab_deleted", "kitab", kitab.id)
            return result

        return self.dispatcher.dispatch(
            call, entity_keys=(KITABS,), success_message=f"Kitab '{kitab.name_bn}' deleted",
            on_close=on_close,
        )
