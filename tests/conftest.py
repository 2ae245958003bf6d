"""
Root conftest.py: sys.path, env vars, shared fixtures.

Puts the dashboard root on sys.path so 'core', 'db' and 'utils' import
the way the Streamlit app imports them, and supplies an in-memory
gateway so nothing talks to a real backend.
"""

import copy
import os
import sys

import pytest

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
APP_ROOT = os.path.join(PROJECT_ROOT, "BoardAdmin")
if APP_ROOT not in sys.path:
    sys.path.insert(0, APP_ROOT)

# Constants are read at import time, before any fixture runs
_ENV_DEFAULTS = {
    "BOARD_API_URL": "https://board.test",
    "BOARD_API_KEY": "test-anon-key",
    "BOARD_LOG_LEVEL": "WARNING",
}
for _key, _value in _ENV_DEFAULTS.items():
    os.environ.setdefault(_key, _value)

from core.controllers.mutation import MutationDispatcher  # noqa: E402
from core.controllers.notifier import Notifier  # noqa: E402
from core.controllers.query_controller import QueryCache  # noqa: E402


class FakeGateway:
    """
    Records every call and answers from scripted outcomes.

    Keys are procedure names for rpc() and ``"<verb>:<table>"`` for table
    access. An outcome is a value, a callable taking the params, or an
    exception instance to raise. Several outcomes are consumed in order;
    the last one repeats.
    """

    def __init__(self):
        self.calls = []
        self.outcomes = {}
        self.access_token = None

    def script(self, key, *outcomes):
        self.outcomes[key] = list(outcomes)
        return self

    def calls_to(self, key):
        return [params for name, params in self.calls if name == key]

    def _answer(self, key, params):
        self.calls.append((key, params))
        queue = self.outcomes.get(key)
        if not queue:
            return None
        outcome = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(outcome, Exception):
            raise outcome
        if callable(outcome):
            return outcome(params)
        return copy.deepcopy(outcome)

    def set_access_token(self, token):
        self.access_token = token

    def rpc(self, name, params=None):
        return self._answer(name, params or {})

    def select(self, table, columns='*', filters=None, order=None, limit=None):
        params = {'columns': columns, 'filters': filters, 'order': order, 'limit': limit}
        return self._answer(f"select:{table}", params) or []

    def insert(self, table, rows):
        return self._answer(f"insert:{table}", rows) or []

    def update(self, table, values, filters):
        return self._answer(f"update:{table}", {'values': values, 'filters': filters}) or []

    def delete(self, table, filters):
        return self._answer(f"delete:{table}", {'filters': filters}) or []

    def sign_in(self, email, password):
        return self._answer("auth:sign_in", {'email': email, 'password': password})

    def sign_out(self):
        self._answer("auth:sign_out", {})
        self.access_token = None


class RecordingNotifier(Notifier):
    """Keeps every message instead of showing it"""

    def __init__(self):
        self.successes = []
        self.errors = []
        self.warnings = []

    def success(self, message):
        self.successes.append(message)

    def error(self, message):
        self.errors.append(message)

    def warning(self, message):
        self.warnings.append(message)


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def cache():
    return QueryCache()


@pytest.fixture
def dispatcher(cache, notifier):
    return MutationDispatcher(cache, notifier)
