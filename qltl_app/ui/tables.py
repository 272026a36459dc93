from __future__ import annotations
from typing import List, Sequence

import pandas as pd

from ..models import LecturerStats, SubmissionRecord
from ..vocabulary import activity_type_label, semester_label, status_label

PLACEHOLDER = "-"

def format_size(length: int) -> str:
    size = float(length or 0)
    for unit in ("B", "KB", "MB"):
        if size < 1024:
            return f"{size:.0f} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} GB"

def _date(value) -> str:
    return value[:10] if value else PLACEHOLDER

def records_frame(records: Sequence[SubmissionRecord], with_department: bool = False) -> pd.DataFrame:
    """Display table for a file list; absent fields show as a dash."""
    rows: List[dict] = []
    for idx, r in enumerate(records, start=1):
        row = {
            "STT": idx,
            "Tên file": r.original_name,
            "Dung lượng": format_size(r.length),
            "Tiêu chuẩn QA": r.qa_standard or PLACEHOLDER,
            "Loại hoạt động": activity_type_label(r.activity_type) or PLACEHOLDER,
            "Năm học": r.academic_year or PLACEHOLDER,
            "Học kỳ": semester_label(r.semester) or PLACEHOLDER,
            "Trạng thái": status_label(r.submission_status) or PLACEHOLDER,
            "Ngày tạo": _date(r.created_at),
        }
        if with_department:
            row["Giảng viên"] = r.uploader.full_name if r.uploader else PLACEHOLDER
            row["Khoa"] = (r.department.name if r.department else None) or PLACEHOLDER
        rows.append(row)
    return pd.DataFrame(rows)

def lecturer_stats_frame(stats: Sequence[LecturerStats]) -> pd.DataFrame:
    return pd.DataFrame([
        {
            "Giảng viên": s.full_name,
            "Email": s.email,
            "Đã nộp": s.submitted_count,
            "Yêu cầu": s.total_expected,
            "Lần nộp gần nhất": _date(s.last_submission),
            "Trạng thái": "Đã nộp" if s.has_submitted else "Chưa nộp",
        }
        for s in stats
    ])
