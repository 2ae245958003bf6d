"""
Row/entity mappers
Pure translations between gateway rows (snake_case, decimals as grouped
strings, ISO-8601 dates) and the dataclasses in core.models.entities.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, Optional

from dateutil.parser import isoparse

from core.models.entities import (
    BankAccount, BankAccountType, BankDashboardData, BankPayment, BankTransaction,
    BankTransactionType, Exam, ExamFeeDetail, ExamStatus, Faq, Gender, Kitab, Madrasa,
    Marhala, MarhalaCategory, MarhalaType, Markaz, MobilePayment, Notice, PagedResult,
    PaymentInfo, PaymentType, Teacher, TeacherAddress, Zone
)


# ----------------------------------------------------------------------
# Scalars
# ----------------------------------------------------------------------

def parse_decimal(value: Any) -> Decimal:
    """Parse ``12345``, ``12345.5`` or ``"12,345.00"`` into a Decimal; blank is zero"""
    if value is None:
        return Decimal('0')
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    text = str(value).replace(',', '').strip()
    if not text:
        return Decimal('0')
    try:
        return Decimal(text)
    except InvalidOperation:
        raise ValueError(f"Not a decimal value: {value!r}")


def parse_optional_decimal(value: Any) -> Optional[Decimal]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return parse_decimal(value)


def parse_optional_int(value: Any) -> Optional[int]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return int(parse_decimal(value))


def parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    return isoparse(str(value))


def parse_date(value: Any) -> Optional[date]:
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return isoparse(str(value)).date()


def _pick(row: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    """First present key; procedures answer in either camelCase or snake_case"""
    for key in keys:
        if key in row and row[key] is not None:
            return row[key]
    return default


def _enum_value(value: Any) -> Any:
    return value.value if hasattr(value, 'value') else value


def row_to_paged(data: Optional[Dict[str, Any]], mapper: Callable[[Dict[str, Any]], Any]) -> PagedResult:
    """Map a ``{items, totalItems}`` procedure response"""
    data = data or {}
    rows = data.get('items') or []
    total = _pick(data, 'totalItems', 'total_items', default=len(rows))
    return PagedResult(items=[mapper(r) for r in rows], total_items=int(total))


# ----------------------------------------------------------------------
# Banks
# ----------------------------------------------------------------------

def row_to_bank_account(row: Dict[str, Any]) -> BankAccount:
    return BankAccount(
        id=row.get('id'),
        bank_name=row.get('bank_name') or '',
        branch_name=row.get('branch_name'),
        account_name=row.get('account_name') or '',
        account_number=row.get('account_number') or '',
        account_type=BankAccountType(row.get('account_type') or 'current'),
        opening_date=parse_date(row.get('opening_date')),
        opening_balance=parse_decimal(row.get('opening_balance')),
        current_balance=parse_decimal(row.get('current_balance')),
        is_active=bool(row.get('is_active', True)),
        created_at=parse_timestamp(row.get('created_at')),
        updated_at=parse_timestamp(row.get('updated_at')),
    )


def row_to_bank_transaction(row: Dict[str, Any]) -> BankTransaction:
    return BankTransaction(
        id=row.get('id'),
        account_id=row.get('account_id'),
        transaction_type=BankTransactionType(_pick(row, 'type', 'transaction_type', default='deposit')),
        amount=parse_decimal(row.get('amount')),
        transaction_date=parse_date(row.get('transaction_date')),
        description=row.get('description'),
        check_number=row.get('check_number'),
        balance_after=parse_optional_decimal(row.get('balance_after')),
        bank_name=row.get('bank_name'),
        account_name=row.get('account_name'),
        created_at=parse_timestamp(row.get('created_at')),
    )


def row_to_bank_dashboard(data: Optional[Dict[str, Any]]) -> BankDashboardData:
    data = data or {}
    return BankDashboardData(
        total_balance=parse_decimal(data.get('total_balance')),
        accounts=[row_to_bank_account(r) for r in data.get('accounts') or []],
        recent_transactions=[row_to_bank_transaction(r) for r in data.get('recent_transactions') or []],
    )


def bank_account_to_create_params(account: BankAccount) -> Dict[str, Any]:
    return {
        'p_bank_name': account.bank_name,
        'p_branch_name': account.branch_name or None,
        'p_account_name': account.account_name,
        'p_account_number': account.account_number,
        'p_account_type': _enum_value(account.account_type),
        'p_opening_date': account.opening_date,
        'p_opening_balance': account.opening_balance,
    }


def bank_account_to_update_payload(account: BankAccount) -> Dict[str, Any]:
    """Editable columns only; opening date and balance are fixed at creation"""
    return {
        'bank_name': account.bank_name,
        'branch_name': account.branch_name or None,
        'account_name': account.account_name,
        'account_number': account.account_number,
        'account_type': _enum_value(account.account_type),
    }


def bank_transaction_to_params(txn: BankTransaction, from_account_id: Optional[str],
                               to_account_id: Optional[str]) -> Dict[str, Any]:
    return {
        'p_type': _enum_value(txn.transaction_type),
        'p_amount': txn.amount,
        'p_transaction_date': txn.transaction_date,
        'p_from_account_id': from_account_id,
        'p_to_account_id': to_account_id,
        'p_description': txn.description or None,
        'p_check_number': txn.check_number or None,
    }


# ----------------------------------------------------------------------
# Exams
# ----------------------------------------------------------------------

def row_to_exam_fee(row: Dict[str, Any]) -> ExamFeeDetail:
    return ExamFeeDetail(
        marhala_id=_pick(row, 'marhalaId', 'marhala_id', default=''),
        starting_roll_number=parse_optional_int(_pick(row, 'startingRollNumber', 'starting_roll_number')),
        regular_fee=parse_optional_decimal(_pick(row, 'regularFee', 'regular_fee')),
        irregular_fee=parse_optional_decimal(_pick(row, 'irregularFee', 'irregular_fee')),
        late_regular_fee=parse_optional_decimal(_pick(row, 'lateRegularFee', 'late_regular_fee')),
        late_irregular_fee=parse_optional_decimal(_pick(row, 'lateIrregularFee', 'late_irregular_fee')),
        marhala_name=_pick(row, 'marhalaNameBn', 'marhala_name_bn'),
    )


def row_to_exam(row: Dict[str, Any]) -> Exam:
    return Exam(
        id=row.get('id'),
        name=row.get('name') or '',
        registration_deadline=parse_timestamp(_pick(row, 'registrationDeadline', 'registration_deadline')),
        starting_registration_number=parse_optional_int(
            _pick(row, 'startingRegistrationNumber', 'starting_registration_number')),
        last_used_registration_number=parse_optional_int(
            _pick(row, 'lastUsedRegistrationNumber', 'last_used_registration_number')),
        registration_fee_regular=parse_optional_decimal(
            _pick(row, 'registrationFeeRegular', 'registration_fee_regular')),
        registration_fee_irregular=parse_optional_decimal(
            _pick(row, 'registrationFeeIrregular', 'registration_fee_irregular')),
        late_registration_fee_regular=parse_optional_decimal(
            _pick(row, 'lateRegistrationFeeRegular', 'late_registration_fee_regular')),
        late_registration_fee_irregular=parse_optional_decimal(
            _pick(row, 'lateRegistrationFeeIrregular', 'late_registration_fee_irregular')),
        exam_fees=[row_to_exam_fee(f) for f in _pick(row, 'examFees', 'exam_fees', default=[])],
        is_active=bool(_pick(row, 'isActive', 'is_active', default=True)),
        status=ExamStatus(row.get('status') or 'pending'),
        created_at=parse_timestamp(_pick(row, 'createdAt', 'created_at')),
        updated_at=parse_timestamp(_pick(row, 'updatedAt', 'updated_at')),
    )


def exam_fee_to_payload(fee: ExamFeeDetail, camel_case: bool = False) -> Dict[str, Any]:
    """Fee row payload; the update procedure expects camelCase keys, create expects snake_case"""
    values = [
        ('marhalaId', 'marhala_id', fee.marhala_id),
        ('startingRollNumber', 'starting_roll_number', fee.starting_roll_number),
        ('regularFee', 'regular_fee', fee.regular_fee),
        ('irregularFee', 'irregular_fee', fee.irregular_fee),
        ('lateRegularFee', 'late_regular_fee', fee.late_regular_fee),
        ('lateIrregularFee', 'late_irregular_fee', fee.late_irregular_fee),
    ]
    return {(camel if camel_case else snake): value for camel, snake, value in values}


def exam_registration_payload(exam: Exam) -> Dict[str, Any]:
    return {
        'registration_deadline': exam.registration_deadline,
        'starting_registration_number': exam.starting_registration_number,
    }


def exam_fee_schedule_payload(exam: Exam) -> Dict[str, Any]:
    return {
        'registration_fee_regular': exam.registration_fee_regular,
        'registration_fee_irregular': exam.registration_fee_irregular,
        'late_registration_fee_regular': exam.late_registration_fee_regular,
        'late_registration_fee_irregular': exam.late_registration_fee_irregular,
    }


def exam_to_create_params(exam: Exam) -> Dict[str, Any]:
    details = {'name': exam.name.strip()}
    details.update(exam_registration_payload(exam))
    details.update(exam_fee_schedule_payload(exam))
    details['is_active'] = True
    return {
        'p_exam_details': details,
        'p_exam_fees': [exam_fee_to_payload(f) for f in exam.exam_fees],
    }


# ----------------------------------------------------------------------
# Lookups
# ----------------------------------------------------------------------

def row_to_kitab(row: Dict[str, Any]) -> Kitab:
    return Kitab(
        id=row.get('id'),
        kitab_code=row.get('kitab_code'),
        name_bn=row.get('name_bn') or '',
        name_ar=row.get('name_ar') or None,
        full_marks=parse_optional_int(row.get('full_marks')),
        created_at=parse_timestamp(row.get('created_at')),
    )


def kitab_to_create_params(kitab: Kitab) -> Dict[str, Any]:
    return {
        'p_name_bn': kitab.name_bn.strip(),
        'p_name_ar': (kitab.name_ar or '').strip() or None,
        'p_full_marks': kitab.full_marks,
    }


def kitab_to_update_params(kitab: Kitab) -> Dict[str, Any]:
    params = {'p_id': kitab.id}
    params.update(kitab_to_create_params(kitab))
    return params


def row_to_marhala(row: Dict[str, Any]) -> Marhala:
    return Marhala(
        id=row.get('id') or '',
        marhala_code=parse_optional_int(row.get('marhala_code')),
        name_bn=row.get('name_bn') or '',
        name_ar=row.get('name_ar') or None,
        marhala_type=MarhalaType(row.get('type') or 'boys'),
        category=MarhalaCategory(row.get('category') or 'darsiyat'),
        kitab_ids=list(row.get('kitab_ids') or []),
        marhala_order=int(row.get('marhala_order') or 0),
        requires_photo=bool(row.get('requires_photo', False)),
    )


def row_to_zone(row: Dict[str, Any]) -> Zone:
    return Zone(
        id=row.get('id') or '',
        zone_code=row.get('zone_code'),
        name_bn=row.get('name_bn') or '',
        districts=list(row.get('districts') or []),
    )


def row_to_madrasa(row: Dict[str, Any]) -> Madrasa:
    return Madrasa(
        id=row.get('id') or '',
        madrasa_code=parse_optional_int(row.get('madrasa_code')),
        name_bn=row.get('name_bn') or '',
        zone_id=row.get('zone_id') or None,
    )


# ----------------------------------------------------------------------
# Markazes
# ----------------------------------------------------------------------

def row_to_markaz(row: Dict[str, Any]) -> Markaz:
    return Markaz(
        id=row.get('id'),
        name_bn=row.get('name_bn') or '',
        markaz_code=parse_optional_int(row.get('markaz_code')),
        host_madrasa_id=row.get('host_madrasa_id'),
        zone_id=row.get('zone_id'),
        examinee_capacity=parse_optional_int(row.get('examinee_capacity')),
        is_active=bool(row.get('is_active', True)),
        host_madrasa_name=row.get('host_madrasa_name_bn'),
        zone_name=row.get('zone_name_bn'),
        created_at=parse_timestamp(row.get('created_at')),
    )


def markaz_to_update_payload(markaz: Markaz) -> Dict[str, Any]:
    """The markaz code follows the host madrasa server-side and is never sent"""
    return {
        'name_bn': markaz.name_bn.strip(),
        'host_madrasa_id': markaz.host_madrasa_id,
        'zone_id': markaz.zone_id,
        'examinee_capacity': markaz.examinee_capacity,
        'is_active': markaz.is_active,
    }


def markaz_to_create_params(markaz: Markaz) -> Dict[str, Any]:
    return {
        'p_name_bn': markaz.name_bn.strip(),
        'p_host_madrasa_id': markaz.host_madrasa_id,
        'p_zone_id': markaz.zone_id,
        'p_examinee_capacity': markaz.examinee_capacity,
    }


# ----------------------------------------------------------------------
# Teachers
# ----------------------------------------------------------------------

def payment_info_from_dict(data: Optional[Dict[str, Any]]) -> Optional[PaymentInfo]:
    if not data:
        return None
    kind = data.get('type')
    if kind == PaymentType.MOBILE.value:
        return MobilePayment(
            provider=data.get('provider') or '',
            account_number=data.get('account_number') or '',
        )
    if kind == PaymentType.BANK.value:
        return BankPayment(
            account_name=data.get('account_name') or '',
            account_number=data.get('account_number') or '',
            bank_name=data.get('bank_name') or '',
            branch_name=data.get('branch_name') or '',
        )
    raise ValueError(f"Unknown payment type: {kind!r}")


def payment_info_to_dict(payment: Optional[PaymentInfo]) -> Optional[Dict[str, Any]]:
    if payment is None:
        return None
    if isinstance(payment, MobilePayment):
        return {
            'type': PaymentType.MOBILE.value,
            'provider': payment.provider,
            'account_number': payment.account_number,
        }
    return {
        'type': PaymentType.BANK.value,
        'account_name': payment.account_name,
        'account_number': payment.account_number,
        'bank_name': payment.bank_name,
        'branch_name': payment.branch_name,
    }


def address_from_dict(data: Optional[Dict[str, Any]]) -> TeacherAddress:
    data = data or {}
    return TeacherAddress(
        village=data.get('village') or None,
        post_office=_pick(data, 'postOffice', 'post_office'),
        upazila=data.get('upazila') or None,
        district=data.get('district') or None,
        division=data.get('division') or None,
        holding=data.get('holding') or None,
    )


def address_to_dict(address: TeacherAddress) -> Optional[Dict[str, Any]]:
    values = {
        'village': address.village,
        'postOffice': address.post_office,
        'upazila': address.upazila,
        'district': address.district,
        'division': address.division,
        'holding': address.holding,
    }
    if not any(values.values()):
        return None
    return {k: v for k, v in values.items() if v}


def row_to_teacher(row: Dict[str, Any]) -> Teacher:
    gender = row.get('gender')
    return Teacher(
        id=row.get('id'),
        teacher_code=row.get('teacher_code'),
        name_bn=row.get('name_bn') or '',
        name_en=row.get('name_en') or None,
        mobile=row.get('mobile') or '',
        nid_number=row.get('nid_number') or '',
        email=row.get('email') or None,
        date_of_birth=parse_date(row.get('date_of_birth')),
        gender=Gender(gender) if gender else None,
        photo_url=row.get('photo_url') or None,
        payment_info=payment_info_from_dict(row.get('payment_info')),
        address=address_from_dict(row.get('address_details')),
        educational_qualification=row.get('educational_qualification'),
        kitabi_qualification=list(row.get('kitabi_qualification') or []),
        expertise_areas=list(row.get('expertise_areas') or []),
        notes=row.get('notes') or None,
        is_active=bool(row.get('is_active', True)),
        registered_by=row.get('registered_by'),
        created_at=parse_timestamp(row.get('created_at')),
        updated_at=parse_timestamp(row.get('updated_at')),
    )


def teacher_to_payload(teacher: Teacher) -> Dict[str, Any]:
    return {
        'name_bn': teacher.name_bn.strip(),
        'name_en': (teacher.name_en or '').strip() or None,
        'mobile': teacher.mobile,
        'nid_number': teacher.nid_number,
        'email': (teacher.email or '').strip() or None,
        'date_of_birth': teacher.date_of_birth,
        'gender': _enum_value(teacher.gender),
        'photo_url': teacher.photo_url or None,
        'payment_info': payment_info_to_dict(teacher.payment_info),
        'address_details': address_to_dict(teacher.address),
        'educational_qualification': teacher.educational_qualification,
        'kitabi_qualification': list(teacher.kitabi_qualification),
        'expertise_areas': list(teacher.expertise_areas) or None,
        'notes': teacher.notes or None,
        'is_active': teacher.is_active,
    }


def teacher_to_create_params(teacher: Teacher) -> Dict[str, Any]:
    payload = teacher_to_payload(teacher)
    return {
        'p_name_bn': payload['name_bn'],
        'p_name_en': payload['name_en'],
        'p_mobile': payload['mobile'],
        'p_nid_number': payload['nid_number'],
        'p_email': payload['email'],
        'p_date_of_birth': payload['date_of_birth'],
        'p_gender': payload['gender'],
        'p_photo_url': payload['photo_url'],
        'p_payment_info': payload['payment_info'],
        'p_address_details': payload['address_details'],
        'p_educational_qualification_marhala_id': payload['educational_qualification'],
        'p_kitabi_qualification_kitab_ids': payload['kitabi_qualification'],
        'p_expertise_areas': payload['expertise_areas'],
        'p_notes': payload['notes'],
    }


# ----------------------------------------------------------------------
# Notices and FAQs
# ----------------------------------------------------------------------

def row_to_notice(row: Dict[str, Any]) -> Notice:
    return Notice(
        id=row.get('id'),
        title=row.get('title') or '',
        content=row.get('content') or '',
        is_active=bool(row.get('is_active', True)),
        created_at=parse_timestamp(row.get('created_at')),
    )


def notice_to_payload(notice: Notice) -> Dict[str, Any]:
    return {
        'title': notice.title.strip(),
        'content': notice.content.strip(),
        'is_active': notice.is_active,
    }


def row_to_faq(row: Dict[str, Any]) -> Faq:
    return Faq(
        id=row.get('id'),
        question=row.get('question') or '',
        answer=row.get('answer') or '',
        is_active=bool(row.get('is_active', True)),
        created_at=parse_timestamp(row.get('created_at')),
    )
