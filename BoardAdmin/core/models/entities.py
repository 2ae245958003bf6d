"""
Data Models for the Board Admin dashboard
Dataclasses holding the in-memory copies of gateway records
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from typing import Optional, List, Generic, TypeVar, Union
from enum import Enum

T = TypeVar('T')


# Enums for backend constraints
class ExamStatus(Enum):
    PENDING = 'pending'
    PREPARATORY = 'preparatory'
    ONGOING = 'ongoing'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'


class BankAccountType(Enum):
    CURRENT = 'current'
    SAVINGS = 'savings'


class BankTransactionType(Enum):
    DEPOSIT = 'deposit'
    WITHDRAWAL = 'withdrawal'
    TRANSFER = 'transfer'


class MarhalaType(Enum):
    BOYS = 'boys'
    GIRLS = 'girls'


class MarhalaCategory(Enum):
    DARSIYAT = 'darsiyat'
    HIFZ = 'hifz'


class Gender(Enum):
    MALE = 'male'
    FEMALE = 'female'
    OTHER = 'other'


class PaymentType(Enum):
    MOBILE = 'mobile'
    BANK = 'bank'


@dataclass
class PagedResult(Generic[T]):
    """One page of a list query"""
    items: List[T] = field(default_factory=list)
    total_items: int = 0


# ----------------------------------------------------------------------
# Banks
# ----------------------------------------------------------------------

@dataclass
class BankAccount:
    """Board-owned bank account; opening date and balance never change after creation"""
    id: Optional[str] = None
    bank_name: str = ""
    branch_name: Optional[str] = None
    account_name: str = ""
    account_number: str = ""
    account_type: BankAccountType = BankAccountType.CURRENT
    opening_date: Optional[date] = None
    opening_balance: Decimal = Decimal('0.00')
    current_balance: Decimal = Decimal('0.00')
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class BankTransaction:
    id: Optional[str] = None
    account_id: Optional[str] = None
    transaction_type: BankTransactionType = BankTransactionType.DEPOSIT
    amount: Decimal = Decimal('0.00')
    transaction_date: Optional[date] = None
    description: Optional[str] = None
    check_number: Optional[str] = None
    balance_after: Optional[Decimal] = None
    bank_name: Optional[str] = None
    account_name: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass
class BankDashboardData:
    total_balance: Decimal = Decimal('0.00')
    accounts: List[BankAccount] = field(default_factory=list)
    recent_transactions: List[BankTransaction] = field(default_factory=list)


# ----------------------------------------------------------------------
# Exams
# ----------------------------------------------------------------------

@dataclass
class ExamFeeDetail:
    """Per-marhala roll numbering and fees for one exam"""
    marhala_id: str = ""
    starting_roll_number: Optional[int] = None
    regular_fee: Optional[Decimal] = None
    irregular_fee: Optional[Decimal] = None
    late_regular_fee: Optional[Decimal] = None
    late_irregular_fee: Optional[Decimal] = None
    marhala_name: Optional[str] = None


@dataclass
class Exam:
    id: Optional[str] = None
    name: str = ""
    registration_deadline: Optional[datetime] = None
    starting_registration_number: Optional[int] = None
    last_used_registration_number: Optional[int] = None
    registration_fee_regular: Optional[Decimal] = None
    registration_fee_irregular: Optional[Decimal] = None
    late_registration_fee_regular: Optional[Decimal] = None
    late_registration_fee_irregular: Optional[Decimal] = None
    exam_fees: List[ExamFeeDetail] = field(default_factory=list)
    is_active: bool = True
    status: ExamStatus = ExamStatus.PENDING
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ----------------------------------------------------------------------
# Lookups
# ----------------------------------------------------------------------

@dataclass
class Kitab:
    """Textbook; the code is assigned by the backend"""
    id: Optional[str] = None
    kitab_code: Optional[str] = None
    name_bn: str = ""
    name_ar: Optional[str] = None
    full_marks: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass
class Marhala:
    id: str = ""
    marhala_code: Optional[int] = None
    name_bn: str = ""
    name_ar: Optional[str] = None
    marhala_type: MarhalaType = MarhalaType.BOYS
    category: MarhalaCategory = MarhalaCategory.DARSIYAT
    kitab_ids: List[str] = field(default_factory=list)
    marhala_order: int = 0
    requires_photo: bool = False


@dataclass
class Zone:
    id: str = ""
    zone_code: Optional[str] = None
    name_bn: str = ""
    districts: List[str] = field(default_factory=list)


@dataclass
class Madrasa:
    """Lookup subset of a madrasa used when picking a markaz host"""
    id: str = ""
    madrasa_code: Optional[int] = None
    name_bn: str = ""
    zone_id: Optional[str] = None


@dataclass
class Markaz:
    """Exam center hosted at exactly one madrasa"""
    id: Optional[str] = None
    name_bn: str = ""
    markaz_code: Optional[int] = None
    host_madrasa_id: Optional[str] = None
    zone_id: Optional[str] = None
    examinee_capacity: Optional[int] = None
    is_active: bool = True
    host_madrasa_name: Optional[str] = None
    zone_name: Optional[str] = None
    created_at: Optional[datetime] = None


# ----------------------------------------------------------------------
# Teachers
# ----------------------------------------------------------------------

@dataclass(frozen=True)
class MobilePayment:
    provider: str = ""
    account_number: str = ""
    type: PaymentType = field(default=PaymentType.MOBILE, init=False)


@dataclass(frozen=True)
class BankPayment:
    account_name: str = ""
    account_number: str = ""
    bank_name: str = ""
    branch_name: str = ""
    type: PaymentType = field(default=PaymentType.BANK, init=False)


PaymentInfo = Union[MobilePayment, BankPayment]


@dataclass
class TeacherAddress:
    village: Optional[str] = None
    post_office: Optional[str] = None
    upazila: Optional[str] = None
    district: Optional[str] = None
    division: Optional[str] = None
    holding: Optional[str] = None


@dataclass
class Teacher:
    id: Optional[str] = None
    teacher_code: Optional[str] = None
    name_bn: str = ""
    name_en: Optional[str] = None
    mobile: str = ""
    nid_number: str = ""
    email: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    photo_url: Optional[str] = None
    payment_info: Optional[PaymentInfo] = None
    address: TeacherAddress = field(default_factory=TeacherAddress)
    educational_qualification: Optional[str] = None
    kitabi_qualification: List[str] = field(default_factory=list)
    expertise_areas: List[str] = field(default_factory=list)
    notes: Optional[str] = None
    is_active: bool = True
    registered_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ----------------------------------------------------------------------
# Content
# ----------------------------------------------------------------------

@dataclass
class Notice:
    id: Optional[str] = None
    title: str = ""
    content: str = ""
    is_active: bool = True
    created_at: Optional[datetime] = None


@dataclass
class Faq:
    id: Optional[str] = None
    question: str = ""
    answer: str = ""
    is_active: bool = True
    created_at: Optional[datetime] = None
