"""
Streamlit notifier
Toasts for outcomes; messages raised before a rerun are queued in
session state and shown on the next run.
"""

import streamlit as st

from core.controllers.notifier import Notifier

_QUEUE_KEY = "_pending_notifications"
_ICONS = {"success": "✅", "error": "❌", "warning": "⚠️"}


class StreamlitNotifier(Notifier):
    """Queue-backed st.toast notifier"""

    def _push(self, kind: str, message: str):
        st.session_state.setdefault(_QUEUE_KEY, []).append((kind, message))

    def success(self, message: str):
        self._push("success", message)

    def error(self, message: str):
        self._push("error", message)

    def warning(self, message: str):
        self._push("warning", message)


def flush_notifications():
    """Show and clear queued notifications; call once near the top of each page"""
    pending = st.session_state.pop(_QUEUE_KEY, [])
    for kind, message in pending:
        st.toast(message, icon=_ICONS.get(kind))
        if kind == "error":
            st.error(message)
