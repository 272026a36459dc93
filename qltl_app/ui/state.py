from __future__ import annotations
from typing import Optional

import streamlit as st

from ..filters import FileTab, reset_filters
from ..models import SearchFilters
from ..repository import ClientStore
from ..services.loaders import LoadToken

OVERVIEW_TAB = "overview"

def init_session_state(store: ClientStore, tab_key: Optional[str] = None) -> None:
    """Per-browser-session UI state. Only the dashboard tab survives a reload."""
    st.session_state.setdefault("file_tab", FileTab.ALL.value)
    st.session_state.setdefault("search", SearchFilters())
    st.session_state.setdefault("confirm_delete_id", None)
    st.session_state.setdefault("flash", None)
    if tab_key and tab_key not in st.session_state:
        st.session_state[tab_key] = store.get(tab_key) or OVERVIEW_TAB

def persist_tab(store: ClientStore, tab_key: str) -> None:
    store.set(tab_key, st.session_state[tab_key])

def new_load_token() -> LoadToken:
    """Supersede any load still running for an earlier render."""
    previous = st.session_state.get("load_token")
    if previous is not None:
        previous.cancel()
    token = LoadToken()
    st.session_state.load_token = token
    return token

def reset_search() -> None:
    tab, search = reset_filters()
    st.session_state.file_tab = tab.value
    st.session_state.search = search
    for key in [k for k in st.session_state.keys() if str(k).startswith("search_")]:
        del st.session_state[key]

def flash(ok: bool, message: str) -> None:
    """Show a message once, after the rerun that follows an action."""
    st.session_state.flash = (ok, message)

def show_flash() -> None:
    pending = st.session_state.get("flash")
    if not pending:
        return
    ok, message = pending
    (st.success if ok else st.error)(message)
    st.session_state.flash = None
