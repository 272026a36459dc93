from __future__ import annotations
from typing import Collection, Dict, List, Optional, Sequence

import streamlit as st

from ..config import PDF_DPI_DEFAULT
from ..export import CSV_MIME, export_filename, export_to_csv
from ..filters import FILE_TAB_LABELS, FileTab
from ..models import (
    Announcement, Criterion, LecturerStats, Person, SearchFilters, Standard, SubmissionRecord, SystemConfig,
)
from ..services import actions
from ..services.api_client import ApiClient
from ..services.pdf_renderer import is_pdf, render_pdf_pages
from ..vocabulary import (
    ACTIVITY_TYPE_LABELS, SEMESTER_LABELS, STATUS_LABELS, activity_type_label, semester_label, status_color,
    status_label,
)
from .state import flash, reset_search
from .tables import format_size, lecturer_stats_frame, records_frame

ANY = ""

# markdown has no yellow
_MD_COLORS = {"yellow": "violet"}

def _md_color(status: str) -> str:
    color = status_color(status)
    return _MD_COLORS.get(color, color)

def _options(labels: Dict[str, str], empty: str) -> tuple:
    return (ANY, *labels.keys()), (lambda v: labels.get(v, v) if v else empty)

def select(label: str, labels: Dict[str, str], key: str, empty: str = "Tất cả", value: str = ANY) -> str:
    options, fmt = _options(labels, empty)
    if value and value not in options:
        # keep values typed before the option list changed
        options = (*options, value)
    index = options.index(value) if value in options else 0
    return st.selectbox(label, options, index=index, format_func=fmt, key=key)

def qa_code_labels(standards: Sequence[Standard], criteria: Sequence[Criterion]) -> Dict[str, str]:
    labels: Dict[str, str] = {}
    for s in standards:
        labels[s.code] = f"{s.code} - {s.name}"
        for c in criteria:
            if c.standard_id == s.id:
                labels[c.code] = f"    {c.code} - {c.name}"
    return labels

def apply_result(result: Optional[actions.ActionResult]) -> None:
    if result is None:
        return
    if result.ok:
        flash(True, result.message)
        st.rerun()
    st.error(result.message)

# ------------------------------------------------------------ filter bar

def file_tab_selector() -> str:
    return st.radio(
        "Danh mục",
        [t.value for t in FileTab],
        format_func=lambda v: FILE_TAB_LABELS[FileTab(v)],
        key="file_tab",
        horizontal=True,
        label_visibility="collapsed",
    )

def search_panel(fields: Collection[str], lecturers: Sequence[Person] = ()) -> SearchFilters:
    with st.expander("Tìm kiếm nâng cao", expanded=not st.session_state.search.is_empty()):
        with st.form("search_form"):
            c1, c2, c3 = st.columns(3)
            with c1:
                st.text_input("Từ khóa", key="search_keyword", placeholder="Tên file, mô tả, tag")
                select("Loại hoạt động", ACTIVITY_TYPE_LABELS, key="search_activity_type")
                st.text_input("Tiêu chuẩn QA", key="search_qa_standard")
            with c2:
                st.text_input("Mã học phần", key="search_course_code")
                st.text_input("Tên học phần", key="search_course_name")
                st.text_input("Năm học", key="search_academic_year", placeholder="2024-2025")
            with c3:
                select("Học kỳ", SEMESTER_LABELS, key="search_semester")
                select("Trạng thái", STATUS_LABELS, key="search_submission_status")
                if "lecturer_id" in fields and lecturers:
                    select("Giảng viên", {p.id: p.full_name for p in lecturers if p.id}, key="search_lecturer_id")
            submitted = st.form_submit_button("Tìm kiếm", type="primary")
        st.button("Xóa bộ lọc", on_click=reset_search)

    if submitted:
        st.session_state.search = SearchFilters(**{
            name: (st.session_state.get(f"search_{name}") or "").strip()
            for name in fields
        })
    return st.session_state.search

def export_button(records: Sequence[SubmissionRecord]) -> None:
    st.download_button(
        "Xuất CSV",
        data=export_to_csv(records),
        file_name=export_filename(),
        mime=CSV_MIME,
        disabled=not records,
    )

def file_table(records: Sequence[SubmissionRecord], with_department: bool = False) -> None:
    if not records:
        st.caption("Không có hồ sơ nào.")
        return
    st.dataframe(records_frame(records, with_department), hide_index=True, width="stretch")

def record_picker(records: Sequence[SubmissionRecord], label: str, key: str) -> Optional[SubmissionRecord]:
    by_id = {r.id: r for r in records}
    choice = st.selectbox(
        label, [ANY, *by_id.keys()], key=key,
        format_func=lambda v: f"{by_id[v].original_name} ({status_label(by_id[v].submission_status)})" if v else "-- Chọn hồ sơ --",
    )
    return by_id.get(choice)

# ------------------------------------------------------------- details

def file_details(client: ApiClient, record: SubmissionRecord) -> None:
    st.markdown(f"**{record.original_name}** · {format_size(record.length)} · {record.content_type or '-'}")
    st.markdown(f"Trạng thái: :{_md_color(record.submission_status)}[{status_label(record.submission_status) or '-'}]")
    c1, c2 = st.columns(2)
    with c1:
        st.text(f"Tiêu chuẩn QA: {record.qa_standard or '-'}")
        st.text(f"Học phần: {record.course_code or '-'} {record.course_name or ''}")
        st.text(f"Loại hoạt động: {activity_type_label(record.activity_type) or '-'}")
        st.text(f"Năm học / Học kỳ: {record.academic_year or '-'} / {semester_label(record.semester) or '-'}")
    with c2:
        st.text(f"Người nộp: {record.uploader.full_name if record.uploader else '-'}")
        st.text(f"Người duyệt: {record.reviewed_by or record.approved_by or '-'}")
        st.text(f"Ngày duyệt: {(record.reviewed_at or '-')[:10]}")
        st.text(f"Tags: {', '.join(record.tags) or '-'}")
    if record.description:
        st.caption(record.description)
    if record.review_notes:
        st.info(f"Ghi chú duyệt: {record.review_notes}")

    dl_key = f"download_{record.id}"
    if st.button("Tải file", key=f"fetch_{record.id}"):
        content, error = actions.download_file(client, record)
        if error:
            st.error(error.message)
        else:
            st.session_state[dl_key] = content
    content = st.session_state.get(dl_key)
    if content:
        st.download_button("Lưu về máy", data=content, file_name=record.original_name, key=f"save_{record.id}")
        if is_pdf(record.content_type, record.original_name):
            pages = render_pdf_pages(content, dpi=PDF_DPI_DEFAULT)
            if pages:
                st.image(pages[0], caption="Trang đầu", use_container_width=True)

# --------------------------------------------------------------- forms

def file_form_fields(prefix: str, initial: actions.FileForm, qa_labels: Dict[str, str],
                     with_name: bool = False) -> actions.FileForm:
    c1, c2 = st.columns(2)
    with c1:
        name = st.text_input("Tên hiển thị", value=initial.original_name, key=f"{prefix}_name") if with_name else ""
        qa = select("Tiêu chuẩn / tiêu chí", qa_labels, key=f"{prefix}_qa", empty="-- Chọn tiêu chuẩn/tiêu chí --",
                     value=initial.qa_standard)
        activity = select("Loại hoạt động", ACTIVITY_TYPE_LABELS, key=f"{prefix}_activity",
                           empty="-- Chọn loại hoạt động --", value=initial.activity_type)
        course_code = st.text_input("Mã học phần", value=initial.course_code, key=f"{prefix}_course_code")
        course_name = st.text_input("Tên học phần", value=initial.course_name, key=f"{prefix}_course_name")
    with c2:
        year = st.text_input("Năm học", value=initial.academic_year, key=f"{prefix}_year", placeholder="2024-2025")
        semester = select("Học kỳ", SEMESTER_LABELS, key=f"{prefix}_semester", empty="-- Chọn học kỳ --",
                           value=initial.semester)
        status = st.selectbox("Trạng thái", ["draft", "submitted"], key=f"{prefix}_status",
                              index=1 if initial.submission_status == "submitted" else 0, format_func=status_label)
        tags = st.text_input("Tags (phân cách bằng dấu phẩy)", value=initial.tags, key=f"{prefix}_tags")
    description = st.text_area("Mô tả", value=initial.description, key=f"{prefix}_description")
    return actions.FileForm(
        tags=tags, description=description, qa_standard=qa, course_code=course_code, course_name=course_name,
        activity_type=activity, academic_year=year, semester=semester, original_name=name,
        submission_status=status,
    )

def upload_form(client: ApiClient, config: SystemConfig, qa_labels: Dict[str, str]) -> None:
    with st.expander("Tải lên hồ sơ"):
        st.caption(
            f"Tối đa {config.max_file_per_upload} file, mỗi file không quá {config.max_file_size}MB "
            f"({', '.join(config.allowed_file_types)})."
        )
        uploaded = st.file_uploader(
            "Chọn file", accept_multiple_files=True, key="upload_files",
            type=[t.lstrip(".") for t in config.allowed_file_types],
        ) or []
        custom_names: Dict[int, str] = {}
        for i, f in enumerate(uploaded):
            custom_names[i] = st.text_input(f"Đổi tên: {f.name}", key=f"upload_rename_{i}",
                                            placeholder="Để trống để giữ tên gốc")
        form = file_form_fields("upload", actions.FileForm(), qa_labels)
        if st.button("Tải lên", type="primary", key="upload_submit"):
            files = [(f.name, f.getvalue(), f.type or "application/octet-stream") for f in uploaded]
            apply_result(actions.upload_files(client, files, form, config, custom_names))

def edit_form(client: ApiClient, record: SubmissionRecord, qa_labels: Dict[str, str]) -> None:
    form = file_form_fields(f"edit_{record.id}", actions.FileForm.from_record(record), qa_labels, with_name=True)
    if st.button("Lưu thay đổi", type="primary", key=f"edit_submit_{record.id}"):
        apply_result(actions.edit_file(client, record, form))

def delete_control(client: ApiClient, record: SubmissionRecord) -> None:
    if st.session_state.confirm_delete_id != record.id:
        st.button("Xóa", key=f"delete_{record.id}",
                  on_click=lambda: st.session_state.update({"confirm_delete_id": record.id}))
        return
    with st.container(border=True):
        st.warning(f"Bạn có chắc muốn xóa file {record.original_name}?")
        c1, c2 = st.columns(2)
        with c1:
            if st.button("Có, xóa", type="primary", key=f"delete_yes_{record.id}"):
                st.session_state.confirm_delete_id = None
                apply_result(actions.delete_file(client, record))
        with c2:
            st.button("Hủy", key=f"delete_no_{record.id}",
                      on_click=lambda: st.session_state.update({"confirm_delete_id": None}))

def review_form(client: ApiClient, record: SubmissionRecord) -> None:
    statuses = list(STATUS_LABELS.keys())
    current = record.submission_status if record.submission_status in statuses else statuses[0]
    status = st.selectbox("Trạng thái duyệt", statuses, index=statuses.index(current),
                          format_func=status_label, key=f"review_status_{record.id}")
    notes = st.text_area("Ghi chú", value=record.review_notes or "", key=f"review_notes_{record.id}")
    if st.button("Lưu kết quả duyệt", type="primary", key=f"review_submit_{record.id}"):
        apply_result(actions.review_file(client, record, status, notes))

def reminder_form(client: ApiClient, lecturers: Sequence[Person], stats: Sequence[LecturerStats]) -> None:
    with st.expander("Gửi nhắc nhở"):
        not_submitted = [s for s in stats if not s.has_submitted]
        if not_submitted:
            st.caption("Chưa nộp: " + ", ".join(s.full_name for s in not_submitted))
        reminder_type = st.radio(
            "Gửi tới", [actions.REMINDER_ALL, actions.REMINDER_SPECIFIC], horizontal=True, key="reminder_type",
            format_func=lambda v: "Tất cả giảng viên" if v == actions.REMINDER_ALL else "Chọn giảng viên",
        )
        names = {p.id: p.full_name for p in lecturers if p.id}
        selected: List[str] = []
        if reminder_type == actions.REMINDER_SPECIFIC:
            selected = st.multiselect("Giảng viên", list(names), format_func=names.get, key="reminder_lecturers")
        message = st.text_area("Nội dung", key="reminder_message")
        due = st.date_input("Hạn nộp", value=None, key="reminder_due")
        if st.button("Gửi", type="primary", key="reminder_submit"):
            apply_result(actions.send_reminder(
                client, reminder_type, message, selected, due.isoformat() if due else None,
            ))

# ---------------------------------------------------------- misc blocks

def announcements_block(announcements: Sequence[Announcement]) -> None:
    st.subheader("Thông báo")
    active = [a for a in announcements if a.is_active]
    if not active:
        st.caption("Chưa có thông báo.")
    for a in active:
        with st.container(border=True):
            st.markdown(f"**{a.title}**")
            st.caption(f"{a.created_by or '-'} · {(a.created_at or '')[:10]}")
            st.write(a.content)

def lecturer_stats_table(stats: Sequence[LecturerStats]) -> None:
    if stats:
        st.dataframe(lecturer_stats_frame(stats), hide_index=True, width="stretch")
