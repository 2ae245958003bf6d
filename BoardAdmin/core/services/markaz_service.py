"""
Markaz Service
Exam centers: listing, host madrasa search, create/edit and activation
"""

from typing import Any, Dict, List, Optional

from core.controllers.form_controller import FormController
from core.controllers.mutation import ConflictRoute, MutationDispatcher, MutationResult
from core.controllers.query_controller import ListController, ListQuery
from core.models.entities import Madrasa, Markaz, Zone
from core.repositories.lookup_repository import LookupRepository
from core.repositories.markaz_repository import MarkazRepository
from utils.constants import HOST_SEARCH_MIN_CHARS, MARKAZES, MARKAZ_NAME_SUFFIX, MARKAZ_PAGE_SIZE
from utils.exceptions import BoardAdminException, ConflictException
from utils.helpers import LoggingUtils, StringUtils
from utils.validators import FieldValidator, collect_error

_HOST_TAKEN = "This madrasa already hosts a markaz"


class MarkazForm(FormController):
    """Create or edit a markaz; picking a host fills name, zone and code"""

    entity_keys = (MARKAZES,)
    conflict_routes = (
        ConflictRoute(ConflictException.UNIQUE_VIOLATION, 'markazes_name_bn_key', 'name_bn',
                      "A markaz with this name already exists"),
        ConflictRoute(ConflictException.UNIQUE_VIOLATION, 'markazes_host_madrasa_id_key',
                      'host_madrasa_id', _HOST_TAKEN),
        ConflictRoute(ConflictException.UNIQUE_VIOLATION, 'markazes_markaz_code_key',
                      'host_madrasa_id', _HOST_TAKEN),
    )

    def __init__(self, dispatcher: MutationDispatcher, repo: MarkazRepository, markaz: Markaz = None):
        self.repo = repo
        self.markaz = markaz
        draft = {
            'host_madrasa_id': markaz.host_madrasa_id if markaz else None,
            'host_madrasa_name': (markaz.host_madrasa_name or '') if markaz else '',
            'name_bn': markaz.name_bn if markaz else '',
            'zone_id': markaz.zone_id if markaz else None,
            'markaz_code': markaz.markaz_code if markaz else None,
            'examinee_capacity': markaz.examinee_capacity if markaz else None,
            'is_active': markaz.is_active if markaz else True,
        }
        super().__init__(dispatcher, draft)
        self.success_message = "Markaz updated" if self.is_edit else "Markaz created"
        self.error_prefix = "Could not save the markaz"

    @property
    def is_edit(self) -> bool:
        return self.markaz is not None and self.markaz.id is not None

    def is_field_disabled(self, field: str) -> bool:
        return field == 'markaz_code'

    def select_host(self, madrasa: Madrasa):
        self.on_change('host_madrasa_id', madrasa.id)
        self.draft['host_madrasa_name'] = madrasa.name_bn
        self.draft['name_bn'] = f"{madrasa.name_bn}{MARKAZ_NAME_SUFFIX}"
        self.draft['zone_id'] = madrasa.zone_id
        self.draft['markaz_code'] = madrasa.madrasa_code
        for field in ('name_bn', 'zone_id'):
            self.errors.pop(field, None)

    def validate(self) -> Dict[str, Any]:
        errors = {}
        d = self.draft
        collect_error(errors, 'host_madrasa_id', FieldValidator.require_value,
                      d.get('host_madrasa_id'), "Host madrasa")
        collect_error(errors, 'name_bn', FieldValidator.require_text, d.get('name_bn'), "Markaz name")
        collect_error(errors, 'zone_id', FieldValidator.require_value, d.get('zone_id'), "Zone")
        collect_error(errors, 'examinee_capacity', FieldValidator.validate_positive_int,
                      d.get('examinee_capacity'), "Examinee capacity")
        return errors

    def build_payload(self) -> Markaz:
        d = self.draft
        return Markaz(
            id=self.markaz.id if self.is_edit else None,
            name_bn=d['name_bn'].strip(),
            host_madrasa_id=d['host_madrasa_id'],
            zone_id=d['zone_id'],
            examinee_capacity=FieldValidator.validate_positive_int(d['examinee_capacity'], "Examinee capacity"),
            is_active=bool(d.get('is_active', True)),
        )

    def send(self, payload: Markaz) -> Any:
        if self.is_edit:
            result = self.repo.update_from_entity(payload)
            LoggingUtils.log_business_event("markaz_updated", "markaz", payload.id)
        else:
            result = self.repo.create_markaz(payload)
            LoggingUtils.log_business_event("markaz_created", "markaz", None,
                                            details={'host_madrasa_id': payload.host_madrasa_id})
        return result


class MarkazService:
    """Service class for markazes"""

    def __init__(self, gateway, dispatcher: MutationDispatcher):
        self.markaz_repo = MarkazRepository(gateway)
        self.lookup_repo = LookupRepository(gateway)
        self.dispatcher = dispatcher
        self._zones: Optional[List[Zone]] = None

    def list_controller(self) -> ListController:
        return ListController(
            MARKAZES,
            lambda q: self.markaz_repo.list_markazes(q.page, q.page_size, q.search_term),
            self.dispatcher.cache, self.dispatcher.notifier,
            ListQuery(page_size=MARKAZ_PAGE_SIZE),
        )

    def zones(self) -> List[Zone]:
        if self._zones is None:
            try:
                self._zones = self.lookup_repo.find_zones()
            except BoardAdminException as e:
                self.dispatcher.notifier.error(f"Could not load zones: {e.message}")
                return []
        return self._zones

    def search_hosts(self, search_term: str, current_host_id: str = None) -> List[Madrasa]:
        """Madrasas free to host a markaz, plus the current host when editing"""
        term = StringUtils.clean_string(search_term)
        if len(term) < HOST_SEARCH_MIN_CHARS:
            return []
        try:
            hosted = self.markaz_repo.hosted_madrasa_ids()
            found = self.lookup_repo.search_madrasas(term)
        except BoardAdminException as e:
            self.dispatcher.notifier.error(f"Could not search madrasas: {e.message}")
            return []
        return [m for m in found if m.id == current_host_id or m.id not in hosted]

    def form(self, markaz: Markaz = None) -> MarkazForm:
        return MarkazForm(self.dispatcher, self.markaz_repo, markaz)

    def toggle_active(self, markaz: Markaz) -> MutationResult:
        new_value = not markaz.is_active
        return self.dispatcher.dispatch(
            lambda: self.markaz_repo.update_markaz(markaz.id, {'is_active': new_value}),
            entity_keys=(MARKAZES,),
            success_message="Markaz activated" if new_value else "Markaz deactivated",
            error_prefix="Could not change the markaz's active state",
        )
