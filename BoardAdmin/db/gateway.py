"""
Remote Data Gateway Client
Talks to the board's hosted PostgREST backend: named procedures, table
reads/writes and password sign-in, all over HTTPS.
"""

import json
import logging
import os
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Union

import requests

from utils.exceptions import (
    AuthenticationException, BusinessRuleException, ConflictException,
    GatewayException, NetworkException, RecordNotFoundException
)

# Configure logging
logging.basicConfig(level=os.getenv('BOARD_LOG_LEVEL', 'INFO').upper())
logger = logging.getLogger(__name__)

NOT_FOUND_CODES = ('PGRST116',)
RAISED_IN_PROCEDURE = 'P0001'


class GatewayConfig:
    """Gateway configuration read from the environment"""

    def __init__(self):
        self.base_url = os.getenv('BOARD_API_URL', '').rstrip('/')
        self.api_key = os.getenv('BOARD_API_KEY', '')
        self.timeout = float(os.getenv('BOARD_API_TIMEOUT', 15))
        self.schema = os.getenv('BOARD_API_SCHEMA', 'public')

        if not self.base_url or not self.api_key:
            logger.error("Gateway URL or API key is not configured")
            raise GatewayException(
                "BOARD_API_URL and BOARD_API_KEY must be set", "CONFIG_MISSING"
            )

    @property
    def rest_url(self) -> str:
        return f"{self.base_url}/rest/v1"

    @property
    def auth_url(self) -> str:
        return f"{self.base_url}/auth/v1"


class _PayloadEncoder(json.JSONEncoder):
    """Decimals go as numeric strings, dates as ISO-8601, enums as their value"""

    def default(self, o):
        if isinstance(o, Decimal):
            return str(o)
        if isinstance(o, (datetime, date)):
            return o.isoformat()
        if isinstance(o, Enum):
            return o.value
        return super().default(o)


def encode_payload(payload: Any) -> str:
    return json.dumps(payload, cls=_PayloadEncoder)


def _format_filter_value(value: Any) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if value is None:
        return 'null'
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def build_filter_params(filters: Optional[Dict[str, Any]]) -> Dict[str, str]:
    """
    Translate ``{'designation': 'X', 'id': ('in', [1, 2])}`` into
    PostgREST query parameters (``designation=eq.X``, ``id=in.(1,2)``).
    """
    params = {}
    for column, value in (filters or {}).items():
        if isinstance(value, tuple):
            operator, operand = value
            if operator == 'in':
                joined = ','.join(_format_filter_value(v) for v in operand)
                params[column] = f"in.({joined})"
            elif operator == 'is':
                params[column] = f"is.{_format_filter_value(operand)}"
            else:
                params[column] = f"{operator}.{_format_filter_value(operand)}"
        elif value is None:
            params[column] = 'is.null'
        else:
            params[column] = f"eq.{_format_filter_value(value)}"
    return params


def classify_error(response: requests.Response) -> GatewayException:
    """Turn a PostgREST error response into the matching exception"""
    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}

    code = body.get('code')
    message = (body.get('message') or body.get('msg') or body.get('error_description')
               or response.reason or 'Request failed')
    kwargs = {
        'error_code': code,
        'details': body.get('details'),
        'hint': body.get('hint'),
        'status_code': response.status_code,
    }

    if code in (ConflictException.UNIQUE_VIOLATION, ConflictException.FOREIGN_KEY_VIOLATION):
        return ConflictException(message, **kwargs)
    if code in NOT_FOUND_CODES or response.status_code == 404:
        return RecordNotFoundException(message, **kwargs)
    if code == RAISED_IN_PROCEDURE:
        return BusinessRuleException(message, **kwargs)
    return GatewayException(message, **kwargs)


class RemoteGateway:
    """Gateway operations over a shared requests session"""

    def __init__(self, config: GatewayConfig = None, session: requests.Session = None):
        self.config = config or GatewayConfig()
        self.session = session or requests.Session()
        self.access_token: Optional[str] = None

    def set_access_token(self, token: Optional[str]):
        """Use the signed-in user's token instead of the anonymous key"""
        self.access_token = token

    def _headers(self, prefer: str = None) -> Dict[str, str]:
        h = {
            'apikey': self.config.api_key,
            'Authorization': f"Bearer {self.access_token or self.config.api_key}",
            'Content-Type': 'application/json',
            'Accept': 'application/json',
            'Accept-Profile': self.config.schema,
            'Content-Profile': self.config.schema,
        }
        if prefer:
            h['Prefer'] = prefer
        return h

    def _request(self, method: str, url: str, params: Dict[str, Any] = None,
                 payload: Any = None, prefer: str = None) -> Any:
        logger.debug(f"{method} {url} params={params}")
        try:
            response = self.session.request(
                method,
                url,
                params=params,
                data=encode_payload(payload) if payload is not None else None,
                headers=self._headers(prefer),
                timeout=self.config.timeout,
            )
        except requests.Timeout as e:
            logger.error(f"Gateway timeout on {method} {url}: {e}")
            raise NetworkException("The server took too long to respond", "TIMEOUT")
        except requests.RequestException as e:
            logger.error(f"Gateway connection error on {method} {url}: {e}")
            raise NetworkException(f"Could not reach the server: {e}", "NETWORK")

        if not response.ok:
            error = classify_error(response)
            logger.error(f"Gateway error on {method} {url}: [{error.error_code}] {error.message}")
            raise error

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            logger.error(f"Gateway returned a non-JSON body for {method} {url}")
            raise GatewayException("Unexpected response from the server", "BAD_RESPONSE")

    # ------------------------------------------------------------------
    # Remote procedures
    # ------------------------------------------------------------------

    def rpc(self, name: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Call a named remote procedure"""
        return self._request('POST', f"{self.config.rest_url}/rpc/{name}", payload=params or {})

    # ------------------------------------------------------------------
    # Table access
    # ------------------------------------------------------------------

    def select(self, table: str, columns: str = '*', filters: Dict[str, Any] = None,
               order: Union[str, List[str]] = None, limit: int = None) -> List[Dict[str, Any]]:
        """Read rows from a table. ``order`` uses ``column`` or ``column.desc``."""
        params = {'select': columns}
        params.update(build_filter_params(filters))
        if order:
            orders = [order] if isinstance(order, str) else order
            params['order'] = ','.join(o if '.' in o else f"{o}.asc" for o in orders)
        if limit:
            params['limit'] = str(limit)
        return self._request('GET', f"{self.config.rest_url}/{table}", params=params) or []

    def insert(self, table: str, rows: Union[Dict[str, Any], List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
        return self._request(
            'POST', f"{self.config.rest_url}/{table}", payload=rows, prefer='return=representation'
        ) or []

    def update(self, table: str, values: Dict[str, Any], filters: Dict[str, Any]) -> List[Dict[str, Any]]:
        if not filters:
            raise GatewayException("Refusing to update without a filter", "UNFILTERED_WRITE")
        return self._request(
            'PATCH', f"{self.config.rest_url}/{table}", params=build_filter_params(filters),
            payload=values, prefer='return=representation'
        ) or []

    def delete(self, table: str, filters: Dict[str, Any]) -> List[Dict[str, Any]]:
        if not filters:
            raise GatewayException("Refusing to delete without a filter", "UNFILTERED_WRITE")
        return self._request(
            'DELETE', f"{self.config.rest_url}/{table}", params=build_filter_params(filters),
            prefer='return=representation'
        ) or []

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    def sign_in(self, email: str, password: str) -> Dict[str, Any]:
        """Password sign-in; returns the session body with ``access_token`` and ``user``"""
        try:
            return self._request(
                'POST', f"{self.config.auth_url}/token",
                params={'grant_type': 'password'},
                payload={'email': email, 'password': password},
            )
        except NetworkException:
            raise
        except GatewayException as e:
            raise AuthenticationException(e.message or "Invalid login credentials", "AUTH_FAILED")

    def sign_out(self):
        if not self.access_token:
            return
        try:
            self._request('POST', f"{self.config.auth_url}/logout")
        finally:
            self.access_token = None
