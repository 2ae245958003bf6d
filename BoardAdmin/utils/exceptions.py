"""
Custom Exceptions for the Board Admin dashboard
"""

from typing import Dict, Optional


class BoardAdminException(Exception):
    """Base exception for all dashboard errors"""
    def __init__(self, message: str, error_code: str = None):
        self.message = message
        self.error_code = error_code
        super().__init__(self.message)


class ValidationException(BoardAdminException):
    """Raised when local input validation fails"""
    def __init__(self, message: str, field_errors: Optional[Dict] = None, error_code: str = None):
        super().__init__(message, error_code)
        self.field_errors = field_errors or {}


class InvalidTransitionException(ValidationException):
    """Raised when a lifecycle status change is not allowed"""
    pass


class AuthenticationException(BoardAdminException):
    """Raised when sign-in or sign-out fails"""
    pass


class GatewayException(BoardAdminException):
    """Raised when the remote data gateway reports a failure"""
    def __init__(self, message: str, error_code: str = None, details: str = None,
                 hint: str = None, status_code: int = None):
        super().__init__(message, error_code)
        self.details = details
        self.hint = hint
        self.status_code = status_code


class ConflictException(GatewayException):
    """Raised on unique or foreign-key constraint violations"""

    UNIQUE_VIOLATION = '23505'
    FOREIGN_KEY_VIOLATION = '23503'

    @property
    def constraint_text(self) -> str:
        return f"{self.message} {self.details or ''}"

    @property
    def is_unique_violation(self) -> bool:
        return self.error_code == self.UNIQUE_VIOLATION


class RecordNotFoundException(GatewayException):
    """Raised when the referenced record does not exist"""
    pass


class BusinessRuleException(GatewayException):
    """Raised when a remote procedure rejects the request with its own message"""
    pass


class NetworkException(GatewayException):
    """Raised on connection failures and timeouts"""
    pass
