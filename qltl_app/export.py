"""
CSV export of the currently visible file list.

Values are joined with plain commas and never quoted, so a comma inside a
file name or review note shifts the columns of that row. Only export lists
whose text fields come from the system's own forms.
"""
from __future__ import annotations
from datetime import date
from typing import Iterable, List, Optional, Sequence

from .models import SubmissionRecord
from .vocabulary import status_label

BOM = "\ufeff"
PLACEHOLDER = "-"
CSV_MIME = "text/csv;charset=utf-8;"

HEADER = ["STT", "Tên file", "Tiêu chuẩn QA", "Năm học", "Học kỳ", "Trạng thái", "Ghi chú"]


def _cell(value: Optional[str]) -> str:
    return value if value else PLACEHOLDER


def csv_rows(records: Sequence[SubmissionRecord]) -> List[List[str]]:
    rows = [list(HEADER)]
    for idx, r in enumerate(records, start=1):
        rows.append([
            str(idx),
            r.original_name,
            _cell(r.qa_standard),
            _cell(r.academic_year),
            _cell(r.semester),
            status_label(r.submission_status),
            _cell(r.review_notes),
        ])
    return rows


def export_to_csv(records: Iterable[SubmissionRecord]) -> bytes:
    content = "\n".join(",".join(row) for row in csv_rows(list(records)))
    return (BOM + content).encode("utf-8")


def export_filename(today: Optional[date] = None) -> str:
    return f"danh-sach-ho-so-{(today or date.today()).isoformat()}.csv"
