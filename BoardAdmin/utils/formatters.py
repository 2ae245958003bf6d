"""
Formatting helpers shared across Streamlit pages.
Taka amounts, Bengali digits, status labels, date helpers.
"""

from decimal import Decimal, InvalidOperation
from datetime import datetime, date
from typing import Optional, Union

from core.models.entities import BankTransactionType, ExamStatus

_BENGALI_DIGITS = str.maketrans('0123456789', '০১২৩৪৫৬৭৮৯')

EXAM_STATUS_LABELS = {
    ExamStatus.PENDING: "Pending",
    ExamStatus.PREPARATORY: "Preparatory",
    ExamStatus.ONGOING: "Ongoing",
    ExamStatus.COMPLETED: "Completed",
    ExamStatus.CANCELLED: "Cancelled",
}

TRANSACTION_TYPE_LABELS = {
    BankTransactionType.DEPOSIT: "Deposit",
    BankTransactionType.WITHDRAWAL: "Withdrawal",
    BankTransactionType.TRANSFER: "Transfer",
}


def format_currency(amount: Union[int, float, Decimal, str, None]) -> str:
    """Format amount as a Taka currency string."""
    if amount is None:
        return "৳0.00"
    try:
        if isinstance(amount, str):
            amount = Decimal(amount.replace(',', ''))
        elif isinstance(amount, (int, float)):
            amount = Decimal(str(amount))
        return f"৳{amount:,.2f}"
    except (InvalidOperation, ValueError):
        return f"৳{amount}"


def to_bengali_number(value: Union[int, str, None]) -> str:
    """Render digits with Bengali numerals."""
    if value is None:
        return ""
    return str(value).translate(_BENGALI_DIGITS)


def format_date(dt: Union[datetime, date, None]) -> str:
    """Format date for display."""
    if dt is None:
        return "N/A"
    if isinstance(dt, datetime):
        return dt.strftime("%d %b %Y, %I:%M %p")
    return dt.strftime("%d %b %Y")


def exam_status_label(status: Union[ExamStatus, str]) -> str:
    status = status if isinstance(status, ExamStatus) else ExamStatus(status)
    return EXAM_STATUS_LABELS[status]


def active_badge(is_active: bool) -> str:
    return "Active" if is_active else "Inactive"


def yes_no(value: Optional[bool]) -> str:
    return "Yes" if value else "No"
