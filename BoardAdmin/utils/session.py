"""
Per-session wiring for pages.
One gateway, one query cache and one dispatcher live in st.session_state
so every page shares cached lists and invalidation.
"""

import streamlit as st

from core.controllers.mutation import MutationDispatcher
from core.controllers.query_controller import QueryCache
from db.gateway import RemoteGateway
from utils.notifier import StreamlitNotifier

_GATEWAY_KEY = "_gateway"
_DISPATCHER_KEY = "_dispatcher"
_SERVICES_KEY = "_services"


def get_gateway() -> RemoteGateway:
    if _GATEWAY_KEY not in st.session_state:
        gateway = RemoteGateway()
        token = st.session_state.get("session_data", {}).get("session_token")
        if token:
            gateway.set_access_token(token)
        st.session_state[_GATEWAY_KEY] = gateway
    return st.session_state[_GATEWAY_KEY]


def get_dispatcher() -> MutationDispatcher:
    if _DISPATCHER_KEY not in st.session_state:
        st.session_state[_DISPATCHER_KEY] = MutationDispatcher(QueryCache(), StreamlitNotifier())
    return st.session_state[_DISPATCHER_KEY]


def get_service(service_cls):
    """Session-scoped service instance, built on first use"""
    services = st.session_state.setdefault(_SERVICES_KEY, {})
    name = service_cls.__name__
    if name not in services:
        services[name] = service_cls(get_gateway(), get_dispatcher())
    return services[name]


def get_state(key: str, factory):
    """Page-local object kept across reruns (list controllers, open forms)"""
    if key not in st.session_state:
        st.session_state[key] = factory()
    return st.session_state[key]


def drop_state(*keys):
    for key in keys:
        st.session_state.pop(key, None)
