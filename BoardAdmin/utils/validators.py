"""
Input Validation Utilities
Field checks used by the dashboard forms. Each check raises
ValidationException; forms gather the messages with collect_error().
"""

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, Optional

from utils.exceptions import ValidationException

MOBILE_PATTERN = re.compile(r'^01[3-9]\d{8}$')
NID_PATTERN = re.compile(r'^(\d{10}|\d{13}|\d{17})$')
EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')


class FieldValidator:
    """Validation utilities for form fields"""

    @staticmethod
    def require_text(value: Optional[str], label: str) -> str:
        text = (value or '').strip() if isinstance(value, str) or value is None else str(value)
        if not text:
            raise ValidationException(f"{label} is required")
        return text

    @staticmethod
    def require_value(value: Any, label: str) -> Any:
        if value is None or value == '' or value == []:
            raise ValidationException(f"{label} is required")
        return value

    @staticmethod
    def to_number(value: Any, label: str) -> Decimal:
        """Parse a required numeric input"""
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValidationException(f"{label} is required")
        try:
            number = Decimal(str(value).replace(',', '').strip())
        except InvalidOperation:
            raise ValidationException(f"{label} must be a number")
        if not number.is_finite():
            raise ValidationException(f"{label} must be a number")
        return number

    @staticmethod
    def validate_non_negative(value: Any, label: str) -> Decimal:
        number = FieldValidator.to_number(value, label)
        if number < 0:
            raise ValidationException(f"{label} cannot be negative")
        return number

    @staticmethod
    def validate_positive(value: Any, label: str) -> Decimal:
        number = FieldValidator.to_number(value, label)
        if number <= 0:
            raise ValidationException(f"{label} must be greater than zero")
        return number

    @staticmethod
    def validate_positive_int(value: Any, label: str) -> int:
        number = FieldValidator.validate_positive(value, label)
        if number != number.to_integral_value():
            raise ValidationException(f"{label} must be a whole number")
        return int(number)

    @staticmethod
    def validate_mobile(mobile: Optional[str], label: str = "Mobile number") -> str:
        mobile = FieldValidator.require_text(mobile, label)
        if not MOBILE_PATTERN.match(mobile):
            raise ValidationException(f"{label} must be 11 digits starting with 013-019")
        return mobile

    @staticmethod
    def validate_nid(nid: Optional[str]) -> str:
        nid = FieldValidator.require_text(nid, "NID number")
        if not NID_PATTERN.match(nid):
            raise ValidationException("NID number must be 10, 13 or 17 digits")
        return nid

    @staticmethod
    def validate_email(email: Optional[str]) -> Optional[str]:
        """Email is optional; only its format is checked"""
        email = (email or '').strip()
        if not email:
            return None
        if not EMAIL_PATTERN.match(email):
            raise ValidationException("Invalid email format")
        return email

    @staticmethod
    def validate_date(value: Any, label: str) -> date:
        if value is None or value == '':
            raise ValidationException(f"{label} is required")
        if isinstance(value, (date, datetime)):
            return value
        raise ValidationException(f"{label} is not a valid date")


def collect_error(errors: Dict[str, Any], field: str, check: Callable, *args) -> Any:
    """Run ``check``; on failure record its message under ``field`` and return None"""
    try:
        return check(*args)
    except ValidationException as e:
        errors[field] = e.message
        return None
