"""
Authentication Service
Password sign-in and sign-out against the gateway's auth endpoint
"""

from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from utils.constants import ADMIN_ROLES
from utils.exceptions import AuthenticationException, BoardAdminException, ValidationException
from utils.helpers import LoggingUtils


class AuthenticationService:
    """Service class for authentication"""

    def __init__(self, gateway):
        self.gateway = gateway

    def login(self, email: str, password: str) -> Dict[str, Any]:
        """Authenticate, switch the gateway to the user's token and check the profile role"""
        try:
            # Validate inputs
            if not email or not password:
                raise ValidationException("Email and password are required")

            session = self.gateway.sign_in(email.strip(), password)
            token = (session or {}).get('access_token')
            if not token:
                raise AuthenticationException("Login failed. Please check your credentials.")

            user = session.get('user') or {}
            user_id = user.get('id')
            user_meta = user.get('user_metadata') or {}

            expires_in = session.get('expires_in')
            expires_at = datetime.now() + timedelta(seconds=int(expires_in)) if expires_in else None

            self.gateway.set_access_token(token)
            role = self._profile_role(user_id)
            if role not in ADMIN_ROLES:
                self._drop_session()
                raise AuthenticationException(
                    "This account does not have access to the admin dashboard.", "NOT_ADMIN"
                )

            # Log successful login
            LoggingUtils.log_security_event(
                "login_success",
                user_id=user_id,
                details={'email': email, 'role': role}
            )

            return {
                'success': True,
                'session_token': token,
                'refresh_token': session.get('refresh_token'),
                'user_id': user_id,
                'username': user_meta.get('name') or user.get('email') or email,
                'email': user.get('email') or email,
                'role': role,
                'login_time': datetime.now(),
                'expires_at': expires_at,
            }

        except (AuthenticationException, ValidationException) as e:
            # Log failed login attempt
            LoggingUtils.log_security_event(
                "login_failed",
                details={'email': email, 'error': str(e)}
            )
            raise
        except BoardAdminException as e:
            LoggingUtils.log_security_event(
                "login_error",
                details={'email': email, 'error': str(e)}
            )
            self.gateway.set_access_token(None)
            raise AuthenticationException(f"Login failed: {e.message}")

    def _profile_role(self, user_id: str) -> Optional[str]:
        """Role as stored in user_profiles, lowercased; None when there is no profile"""
        if not user_id:
            return None
        rows = self.gateway.select('user_profiles', columns='role', filters={'id': user_id})
        role = rows[0].get('role') if rows else None
        return role.lower() if isinstance(role, str) else None

    def _drop_session(self):
        try:
            self.gateway.sign_out()
        except BoardAdminException as e:
            LoggingUtils.log_security_event("logout_error", details={'error': str(e)})
            self.gateway.set_access_token(None)

    def logout(self, user_id: str = None) -> bool:
        """Sign out and fall back to the anonymous key"""
        try:
            self.gateway.sign_out()
        except BoardAdminException as e:
            LoggingUtils.log_security_event(
                "logout_error", user_id=user_id, details={'error': str(e)}
            )
            self.gateway.set_access_token(None)
            return False

        LoggingUtils.log_security_event("logout", user_id=user_id)
        return True
