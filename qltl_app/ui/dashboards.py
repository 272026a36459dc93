from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Sequence

import pandas as pd
import streamlit as st

from ..exceptions import LoadCancelled
from ..filters import DEPARTMENT_FIELDS, LECTURER_FIELDS, apply_filters, summarize
from ..models import Criterion, ProgressSummary, Standard, SubmissionRecord, SystemConfig, User
from ..repository import ClientStore, DASHBOARD_TAB_KEY, LECTURER_TAB_KEY
from ..roles import DashboardVariant
from ..services import loaders
from ..services.api_client import ApiClient
from ..vocabulary import SEMESTER_LABELS, STATUS_LABELS
from . import sections
from .state import OVERVIEW_TAB, init_session_state, new_load_token, persist_tab


@dataclass
class PageContext:
    store: ClientStore
    client: ApiClient
    user: User


def _tab_selector(ctx: PageContext, tab_key: str, tabs: Dict[str, str]) -> str:
    init_session_state(ctx.store, tab_key)
    if st.session_state[tab_key] not in tabs:
        st.session_state[tab_key] = OVERVIEW_TAB
    return st.radio(
        "Mục", list(tabs), format_func=tabs.get, key=tab_key, horizontal=True,
        label_visibility="collapsed", on_change=persist_tab, args=(ctx.store, tab_key),
    )


def _metrics(values: Sequence[tuple]) -> None:
    for col, (label, value) in zip(st.columns(len(values)), values):
        col.metric(label, value)


def _load(fn: Callable[..., Any], *args: Any) -> Any:
    """Run a loader for this render; None when a newer render took over."""
    try:
        with st.spinner("Đang tải..."):
            return fn(*args, token=new_load_token())
    except LoadCancelled:
        return None


def _numeric_items(data: Dict[str, Any]) -> List[tuple]:
    return [(k, v) for k, v in data.items() if isinstance(v, (int, float)) and not isinstance(v, bool)]


# ----------------------------------------------------------- file workspace

def files_workspace(ctx: PageContext, files: List[SubmissionRecord], config: SystemConfig,
                    standards: Sequence[Standard], criteria: Sequence[Criterion]) -> None:
    qa_labels = sections.qa_code_labels(standards, criteria)
    sections.upload_form(ctx.client, config, qa_labels)

    tab = sections.file_tab_selector()
    search = sections.search_panel(LECTURER_FIELDS)
    visible = apply_filters(files, tab, search, LECTURER_FIELDS)

    head_l, head_r = st.columns([0.85, 0.15])
    head_l.caption(f"Hiển thị {len(visible)} / {len(files)} hồ sơ")
    with head_r:
        sections.export_button(visible)
    sections.file_table(visible)

    record = sections.record_picker(visible, "Chi tiết hồ sơ", key="lecturer_selected")
    if record is None:
        return
    with st.container(border=True):
        sections.file_details(ctx.client, record)
        with st.expander("Chỉnh sửa"):
            sections.edit_form(ctx.client, record, qa_labels)
        sections.delete_control(ctx.client, record)


# ---------------------------------------------------------------- lecturer

def render_lecturer(ctx: PageContext) -> None:
    st.header("Dashboard Giảng viên")
    tab = _tab_selector(ctx, LECTURER_TAB_KEY, {OVERVIEW_TAB: "Tổng quan", "files": "Hồ sơ minh chứng"})
    data = _load(loaders.load_lecturer_data, ctx.client)
    if data is None:
        return

    if tab == OVERVIEW_TAB:
        s = summarize(data.files)
        _metrics([("Tổng hồ sơ", s.total), ("Đã duyệt", s.approved), ("Đang chờ", s.pending),
                  ("Yêu cầu chỉnh sửa", s.needs_attention)])
        sections.announcements_block(data.announcements)
    else:
        files_workspace(ctx, data.files, data.system_config, data.standards, data.criteria)


def render_my_files(ctx: PageContext) -> None:
    st.header("Hồ sơ của tôi")
    init_session_state(ctx.store)
    data = _load(loaders.load_lecturer_data, ctx.client)
    if data is not None:
        files_workspace(ctx, data.files, data.system_config, data.standards, data.criteria)


# --------------------------------------------------------- department head

def render_department_head(ctx: PageContext) -> None:
    st.header("Dashboard Trưởng khoa")
    tab = _tab_selector(ctx, DASHBOARD_TAB_KEY, {OVERVIEW_TAB: "Tổng quan", "standards": "Tiêu chuẩn QA"})
    overview = _load(loaders.load_department_overview, ctx.client, {})
    if overview is None:
        return

    if tab == OVERVIEW_TAB:
        summary = ProgressSummary.from_progress(overview.progress)
        _metrics([("Tổng hồ sơ", summary.total), ("Đã duyệt", summary.approved),
                  ("Đang xử lý", summary.pending), ("Tỷ lệ hoàn thành", f"{summary.completion_rate:.0f}%")])
        qa_items = _numeric_items(overview.qa_overview)
        if qa_items:
            st.subheader("Tổng quan QA")
            st.bar_chart(pd.DataFrame(qa_items, columns=["Mục", "Số lượng"]).set_index("Mục"))
        if isinstance(overview.timeline, list) and overview.timeline:
            st.subheader("Tiến độ theo thời gian")
            st.dataframe(pd.DataFrame(overview.timeline), hide_index=True, width="stretch")
        return

    if not overview.standards:
        st.caption("Chưa có tiêu chuẩn nào.")
    for standard in overview.standards:
        with st.expander(f"{standard.code} - {standard.name}"):
            if standard.description:
                st.caption(standard.description)
            for c in overview.criteria_for(standard.id):
                st.markdown(f"- **{c.code}** {c.name}")


# ----------------------------------------------------------------- manager

def render_manager(ctx: PageContext) -> None:
    st.header("Dashboard Quản lý")
    summary = _load(loaders.load_manager_summary, ctx.client)
    if summary is None:
        return
    _metrics([("Tổng hồ sơ", summary.total), ("Đã duyệt", summary.approved),
              ("Đang xử lý", summary.pending), ("Tỷ lệ hoàn thành", f"{summary.completion_rate:.0f}%")])
    st.caption("Xem chi tiết và duyệt hồ sơ ở trang Hồ sơ khoa.")


# ------------------------------------------------------------------- admin

def render_admin(ctx: PageContext) -> None:
    st.header("Dashboard Quản trị")
    tab = _tab_selector(ctx, DASHBOARD_TAB_KEY, {OVERVIEW_TAB: "Tổng quan", "raw": "Dữ liệu thống kê"})
    overview = _load(loaders.load_admin_overview, ctx.client)
    if overview is None:
        return
    if tab == OVERVIEW_TAB:
        items = _numeric_items(overview)
        if items:
            _metrics(items[:4])
        else:
            st.caption("Chưa có số liệu.")
    else:
        st.json(overview)


# -------------------------------------------------------- department files

def render_department_files(ctx: PageContext) -> None:
    st.header("Hồ sơ của khoa")
    init_session_state(ctx.store)
    people = _load(loaders.load_department_people, ctx.client)
    if people is None:
        return
    if people.error:
        st.error(people.error)

    c1, c2, c3 = st.columns(3)
    with c1:
        year = st.text_input("Năm học", key="dept_year", placeholder="2024-2025")
    with c2:
        semester = sections.select("Học kỳ", SEMESTER_LABELS, key="dept_semester")
    with c3:
        status = sections.select("Trạng thái", STATUS_LABELS, key="dept_status")
    query = loaders.DepartmentQuery(academic_year=year.strip(), semester=semester, submission_status=status)

    result = _load(loaders.load_department_files, ctx.client, query)
    if result is None:
        return
    if result.error:
        st.error(result.error)
        if result.retryable:
            st.button("Thử lại", key="dept_retry")
        return

    st.subheader("Tình hình nộp hồ sơ")
    sections.lecturer_stats_table(result.lecturer_stats)
    sections.reminder_form(ctx.client, people.lecturers, result.lecturer_stats)

    st.subheader("Danh sách hồ sơ")
    tab = sections.file_tab_selector()
    search = sections.search_panel(DEPARTMENT_FIELDS, people.lecturers)
    visible = apply_filters(result.files, tab, search, DEPARTMENT_FIELDS)
    head_l, head_r = st.columns([0.85, 0.15])
    head_l.caption(f"Hiển thị {len(visible)} / {len(result.files)} hồ sơ")
    with head_r:
        sections.export_button(visible)
    sections.file_table(visible, with_department=True)

    record = sections.record_picker(visible, "Duyệt hồ sơ", key="dept_selected")
    if record is not None:
        with st.container(border=True):
            sections.file_details(ctx.client, record)
            sections.review_form(ctx.client, record)


DASHBOARDS: Dict[DashboardVariant, Callable[[PageContext], None]] = {
    DashboardVariant.ADMIN: render_admin,
    DashboardVariant.MANAGER: render_manager,
    DashboardVariant.DEPARTMENT_HEAD: render_department_head,
    DashboardVariant.LECTURER: render_lecturer,
}
