from __future__ import annotations
import streamlit as st

from qltl_app.config import APP_SUBTITLE, APP_TITLE, settings
from qltl_app.logging_config import setup_logging
from qltl_app.repository import ClientStore
from qltl_app.models import User
from qltl_app.roles import DashboardVariant, resolve_dashboard, role_badge
from qltl_app.services.api_client import ApiClient
from qltl_app.services.loaders import load_admin_overview
from qltl_app.session import FORBIDDEN_DETAIL, FORBIDDEN_TITLE, SessionStatus, ensure_session, login, logout
from qltl_app.ui.dashboards import (
    DASHBOARDS, PageContext, render_department_files, render_my_files,
)
from qltl_app.ui.state import show_flash

PAGE_DASHBOARD = "Dashboard"
PAGE_MY_FILES = "Hồ sơ của tôi"
PAGE_DEPARTMENT_FILES = "Hồ sơ khoa"
PAGE_SYSTEM_STATS = "Thống kê hệ thống"
ADMIN_PAGES = {PAGE_SYSTEM_STATS}

st.set_page_config(page_title=APP_TITLE, layout="wide")
setup_logging()


@st.cache_resource
def get_store() -> ClientStore:
    return ClientStore(settings.client_db_path).init()


def pages_for(user: User) -> list:
    variant = resolve_dashboard(user)
    pages = [PAGE_DASHBOARD]
    if variant is DashboardVariant.LECTURER:
        pages.append(PAGE_MY_FILES)
    if variant in (DashboardVariant.DEPARTMENT_HEAD, DashboardVariant.MANAGER):
        pages.append(PAGE_DEPARTMENT_FILES)
    if user.has_admin_role:
        pages.append(PAGE_SYSTEM_STATS)
    return pages


def login_view(store: ClientStore, client: ApiClient) -> None:
    st.title(APP_TITLE)
    st.caption(APP_SUBTITLE)
    with st.form("login"):
        email = st.text_input("Email")
        password = st.text_input("Mật khẩu", type="password")
        if st.form_submit_button("Đăng nhập", type="primary"):
            error = login(store, client, email.strip(), password)
            if error:
                st.error(error)
            else:
                st.rerun()


def render_system_stats(ctx: PageContext) -> None:
    st.header(PAGE_SYSTEM_STATS)
    st.json(load_admin_overview(ctx.client))


store = get_store()
client = ApiClient(token_provider=lambda: store.token)
page = st.session_state.get("page", PAGE_DASHBOARD)
session = ensure_session(store, client, require_admin=page in ADMIN_PAGES)

if session.needs_login:
    login_view(store, client)
    st.stop()

if session.status is SessionStatus.FORBIDDEN:
    st.error(FORBIDDEN_TITLE)
    st.caption(FORBIDDEN_DETAIL)
    st.button("Quay lại", on_click=lambda: st.session_state.update({"page": PAGE_DASHBOARD}))
    st.stop()

user = session.user
ctx = PageContext(store=store, client=client, user=user)

with st.sidebar:
    st.header(APP_TITLE)
    st.markdown(f"**{user.full_name or user.email}**  \n{role_badge(user.role)}")
    if user.department and user.department.name:
        st.caption(user.department.name)
    options = pages_for(user)
    if st.session_state.get("page") not in options:
        st.session_state.page = PAGE_DASHBOARD
    page = st.radio("Trang", options, key="page")
    if st.button("Đăng xuất"):
        logout(store)
        st.session_state.clear()
        st.rerun()

show_flash()

if page == PAGE_MY_FILES:
    render_my_files(ctx)
elif page == PAGE_DEPARTMENT_FILES:
    render_department_files(ctx)
elif page == PAGE_SYSTEM_STATS:
    render_system_stats(ctx)
else:
    DASHBOARDS[resolve_dashboard(user)](ctx)
