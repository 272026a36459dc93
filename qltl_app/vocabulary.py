from __future__ import annotations
from typing import Dict

DRAFT = "draft"
SUBMITTED = "submitted"
UNDER_REVIEW = "under_review"
APPROVED = "approved"
REJECTED = "rejected"
REVISION_REQUIRED = "revision_required"

SUBMISSION_STATUSES = (DRAFT, SUBMITTED, UNDER_REVIEW, APPROVED, REJECTED, REVISION_REQUIRED)
PENDING_STATUSES = (DRAFT, SUBMITTED, UNDER_REVIEW)
ATTENTION_STATUSES = (REJECTED, REVISION_REQUIRED)

# One table for every view. The lecturer screens used to say "Đang xét" and
# "Yêu cầu sửa" for the same two statuses; see DESIGN.md.
STATUS_LABELS: Dict[str, str] = {
    DRAFT: "Nháp",
    SUBMITTED: "Đã nộp",
    UNDER_REVIEW: "Đang duyệt",
    APPROVED: "Đã duyệt",
    REJECTED: "Từ chối",
    REVISION_REQUIRED: "Yêu cầu chỉnh sửa",
}

STATUS_COLORS: Dict[str, str] = {
    DRAFT: "gray",
    SUBMITTED: "blue",
    UNDER_REVIEW: "yellow",
    APPROVED: "green",
    REJECTED: "red",
    REVISION_REQUIRED: "orange",
}
DEFAULT_STATUS_COLOR = "gray"

ACTIVITY_TYPE_LABELS: Dict[str, str] = {
    "teaching": "Giảng dạy (Đề cương, Giáo trình, Bài giảng)",
    "research": "NCKH (Nghiên cứu khoa học)",
    "seminar": "Hội thảo / Seminar",
    "business_cooperation": "Hợp tác Doanh nghiệp",
    "student_activity": "Hoạt động Sinh viên",
    "conference": "Hội nghị / Báo cáo",
    "publication": "Công bố / Bài báo",
    "project": "Dự án / Đề tài",
    "other": "Khác",
}

SEMESTER_LABELS: Dict[str, str] = {
    "HK1": "Học kỳ 1",
    "HK2": "Học kỳ 2",
    "HK3": "Học kỳ 3",
    "FULL_YEAR": "Cả năm",
}

def status_label(status: str | None) -> str:
    """Vietnamese label for a status; unknown values come back unchanged."""
    if not status:
        return ""
    return STATUS_LABELS.get(status, status)

def status_color(status: str | None) -> str:
    return STATUS_COLORS.get(status or "", DEFAULT_STATUS_COLOR)

def activity_type_label(value: str | None) -> str:
    if not value:
        return ""
    return ACTIVITY_TYPE_LABELS.get(value, value)

def semester_label(value: str | None) -> str:
    if not value:
        return ""
    return SEMESTER_LABELS.get(value, value)
