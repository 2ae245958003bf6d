"""
Teacher Service
Teacher registration and editing, listing with sort/search, activation
"""

from typing import Any, Dict, List, Optional

from core.controllers.form_controller import FormController
from core.controllers.mutation import ConflictRoute, MutationDispatcher, MutationResult
from core.controllers.query_controller import SORT_DESC, ListController, ListQuery
from core.models.entities import (
    BankPayment, Gender, Kitab, Marhala, MobilePayment, PaymentInfo, PaymentType, Teacher, TeacherAddress
)
from core.models.mappers import teacher_to_payload
from core.repositories.kitab_repository import KitabRepository
from core.repositories.lookup_repository import LookupRepository
from core.repositories.teacher_repository import TeacherRepository
from utils.constants import TEACHERS, TEACHER_PAGE_SIZES
from utils.exceptions import BoardAdminException, ConflictException
from utils.helpers import LoggingUtils
from utils.validators import FieldValidator, collect_error

MOBILE_PAYMENT_FIELDS = ('mobile_provider', 'mobile_account_number')
BANK_PAYMENT_FIELDS = ('bank_account_name', 'bank_account_number', 'bank_name', 'bank_branch_name')
ADDRESS_FIELDS = ('village', 'post_office', 'upazila', 'district', 'division', 'holding')


def _payment_draft(payment: Optional[PaymentInfo]) -> Dict[str, Any]:
    draft = {field: '' for field in MOBILE_PAYMENT_FIELDS + BANK_PAYMENT_FIELDS}
    draft['payment_type'] = payment.type if payment else None
    if isinstance(payment, MobilePayment):
        draft['mobile_provider'] = payment.provider
        draft['mobile_account_number'] = payment.account_number
    elif isinstance(payment, BankPayment):
        draft['bank_account_name'] = payment.account_name
        draft['bank_account_number'] = payment.account_number
        draft['bank_name'] = payment.bank_name
        draft['bank_branch_name'] = payment.branch_name
    return draft


def _as_payment_type(value: Any) -> Optional[PaymentType]:
    if value is None or value == '':
        return None
    return value if isinstance(value, PaymentType) else PaymentType(value)


def _as_gender(value: Any) -> Optional[Gender]:
    if value is None or value == '':
        return None
    return value if isinstance(value, Gender) else Gender(value)


class TeacherForm(FormController):
    """Create or edit a teacher"""

    entity_keys = (TEACHERS,)
    conflict_routes = (
        ConflictRoute(ConflictException.UNIQUE_VIOLATION, 'mobile', 'mobile',
                      "This mobile number is already registered"),
        ConflictRoute(ConflictException.UNIQUE_VIOLATION, 'nid_number', 'nid_number',
                      "This NID number is already registered"),
        ConflictRoute(ConflictException.UNIQUE_VIOLATION, 'email', 'email',
                      "This email is already registered"),
    )

    def __init__(self, dispatcher: MutationDispatcher, repo: TeacherRepository, teacher: Teacher = None):
        self.repo = repo
        self.teacher = teacher
        t = teacher or Teacher()
        address = t.address or TeacherAddress()
        draft = {
            'name_bn': t.name_bn,
            'name_en': t.name_en or '',
            'mobile': t.mobile,
            'nid_number': t.nid_number,
            'email': t.email or '',
            'date_of_birth': t.date_of_birth,
            'gender': t.gender,
            'photo_url': t.photo_url or '',
            'educational_qualification': t.educational_qualification,
            'kitabi_qualification': list(t.kitabi_qualification),
            'expertise_areas': ', '.join(t.expertise_areas),
            'notes': t.notes or '',
            'is_active': t.is_active,
        }
        draft.update({field: getattr(address, field) or '' for field in ADDRESS_FIELDS})
        draft.update(_payment_draft(t.payment_info))
        super().__init__(dispatcher, draft)
        self.success_message = "Teacher updated" if self.is_edit else "Teacher registered"
        self.error_prefix = "Could not save the teacher"

    @property
    def is_edit(self) -> bool:
        return self.teacher is not None and self.teacher.id is not None

    @property
    def payment_type(self) -> Optional[PaymentType]:
        return _as_payment_type(self.draft.get('payment_type'))

    def after_change(self, field: str, value: Any):
        if field != 'payment_type':
            return
        kind = self.payment_type
        stale = BANK_PAYMENT_FIELDS if kind is PaymentType.MOBILE else MOBILE_PAYMENT_FIELDS
        if kind is None:
            stale = MOBILE_PAYMENT_FIELDS + BANK_PAYMENT_FIELDS
        for name in stale:
            self.draft[name] = ''
            self.errors.pop(name, None)

    def is_field_disabled(self, field: str) -> bool:
        kind = self.payment_type
        if field in MOBILE_PAYMENT_FIELDS:
            return kind is not PaymentType.MOBILE
        if field in BANK_PAYMENT_FIELDS:
            return kind is not PaymentType.BANK
        return False

    def validate(self) -> Dict[str, Any]:
        errors = {}
        d = self.draft
        collect_error(errors, 'name_bn', FieldValidator.require_text, d.get('name_bn'), "Name (Bengali)")
        collect_error(errors, 'mobile', FieldValidator.validate_mobile, d.get('mobile'))
        collect_error(errors, 'nid_number', FieldValidator.validate_nid, d.get('nid_number'))
        collect_error(errors, 'date_of_birth', FieldValidator.validate_date, d.get('date_of_birth'), "Date of birth")
        collect_error(errors, 'gender', FieldValidator.require_value, d.get('gender'), "Gender")
        collect_error(errors, 'educational_qualification', FieldValidator.require_value,
                      d.get('educational_qualification'), "Educational qualification")
        if not d.get('kitabi_qualification'):
            errors['kitabi_qualification'] = "Select at least one kitabi qualification"
        collect_error(errors, 'email', FieldValidator.validate_email, d.get('email'))

        kind = self.payment_type
        if kind is None:
            errors['payment_type'] = "Select a payment method"
        elif kind is PaymentType.MOBILE:
            collect_error(errors, 'mobile_provider', FieldValidator.require_text,
                          d.get('mobile_provider'), "Provider")
            collect_error(errors, 'mobile_account_number', FieldValidator.validate_mobile,
                          d.get('mobile_account_number'), "Account number")
        else:
            collect_error(errors, 'bank_account_name', FieldValidator.require_text,
                          d.get('bank_account_name'), "Account name")
            collect_error(errors, 'bank_account_number', FieldValidator.require_text,
                          d.get('bank_account_number'), "Account number")
            collect_error(errors, 'bank_name', FieldValidator.require_text, d.get('bank_name'), "Bank name")
            collect_error(errors, 'bank_branch_name', FieldValidator.require_text,
                          d.get('bank_branch_name'), "Branch name")
        return errors

    def _payment_info(self) -> Optional[PaymentInfo]:
        d = self.draft
        kind = self.payment_type
        if kind is PaymentType.MOBILE:
            return MobilePayment(provider=d['mobile_provider'].strip(),
                                 account_number=d['mobile_account_number'].strip())
        if kind is PaymentType.BANK:
            return BankPayment(
                account_name=d['bank_account_name'].strip(),
                account_number=d['bank_account_number'].strip(),
                bank_name=d['bank_name'].strip(),
                branch_name=d['bank_branch_name'].strip(),
            )
        return None

    def build_payload(self) -> Teacher:
        d = self.draft
        areas = [a.strip() for a in (d.get('expertise_areas') or '').split(',') if a.strip()]
        return Teacher(
            id=self.teacher.id if self.is_edit else None,
            teacher_code=self.teacher.teacher_code if self.is_edit else None,
            name_bn=d['name_bn'].strip(),
            name_en=(d.get('name_en') or '').strip() or None,
            mobile=d['mobile'].strip(),
            nid_number=d['nid_number'].strip(),
            email=(d.get('email') or '').strip() or None,
            date_of_birth=d['date_of_birth'],
            gender=_as_gender(d['gender']),
            photo_url=(d.get('photo_url') or '').strip() or None,
            payment_info=self._payment_info(),
            address=TeacherAddress(**{f: (d.get(f) or '').strip() or None for f in ADDRESS_FIELDS}),
            educational_qualification=d['educational_qualification'],
            kitabi_qualification=list(d['kitabi_qualification']),
            expertise_areas=areas,
            notes=(d.get('notes') or '').strip() or None,
            is_active=bool(d.get('is_active', True)),
        )

    def send(self, payload: Teacher) -> Any:
        if self.is_edit:
            result = self.repo.update_teacher(payload.id, teacher_to_payload(payload))
            LoggingUtils.log_business_event("teacher_updated", "teacher", payload.id)
        else:
            result = self.repo.create_teacher(payload)
            LoggingUtils.log_business_event("teacher_registered", "teacher", None,
                                            details={'mobile': payload.mobile})
        return result


class TeacherService:
    """Service class for teachers"""

    def __init__(self, gateway, dispatcher: MutationDispatcher):
        self.teacher_repo = TeacherRepository(gateway)
        self.lookup_repo = LookupRepository(gateway)
        self.kitab_repo = KitabRepository(gateway)
        self.dispatcher = dispatcher
        self._marhalas: Optional[List[Marhala]] = None
        self._kitabs: Optional[List[Kitab]] = None

    def marhalas(self) -> List[Marhala]:
        """Options for the educational qualification"""
        if self._marhalas is None:
            try:
                self._marhalas = self.lookup_repo.find_marhalas()
            except BoardAdminException as e:
                self.dispatcher.notifier.error(f"Could not load marhalas: {e.message}")
                return []
        return self._marhalas

    def kitabs(self) -> List[Kitab]:
        """Options for the kitabi qualification"""
        if self._kitabs is None:
            try:
                self._kitabs = self.kitab_repo.find_all_kitabs()
            except BoardAdminException as e:
                self.dispatcher.notifier.error(f"Could not load kitabs: {e.message}")
                return []
        return self._kitabs

    def _fetch_page(self, query: ListQuery):
        return self.teacher_repo.list_teachers(
            query.page, query.page_size, query.search_term,
            is_active=query.filter_dict.get('is_active'),
            sort_field=query.sort_field or 'created_at',
            sort_order=query.sort_order,
        )

    def list_controller(self) -> ListController:
        return ListController(
            TEACHERS, self._fetch_page, self.dispatcher.cache, self.dispatcher.notifier,
            ListQuery(page_size=TEACHER_PAGE_SIZES[0], sort_field='created_at', sort_order=SORT_DESC),
        )

    def form(self, teacher: Teacher = None) -> TeacherForm:
        return TeacherForm(self.dispatcher, self.teacher_repo, teacher)

    def toggle_active(self, teacher: Teacher) -> MutationResult:
        new_value = not teacher.is_active
        return self.dispatcher.dispatch(
            lambda: self.teacher_repo.update_teacher(teacher.id, {'is_active': new_value}),
            entity_keys=(TEACHERS,),
            success_message="Teacher activated" if new_value else "Teacher deactivated",
            error_prefix="Could not change the teacher's active state",
        )
