"""
Client-side filtering of submission records.

Lecturer, my-files and department views all narrow the list they fetched with
``apply_filters``: a category tab first, then the free-text keyword, then any
structured search fields. Every active predicate must hold (AND). The
function is pure: it returns a new list in input order and leaves the input
untouched.
"""
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Collection, Iterable, List, Optional, Sequence, Tuple

from .models import SEARCH_FIELDS, SearchFilters, SubmissionRecord
from .vocabulary import APPROVED, ATTENTION_STATUSES, DRAFT, PENDING_STATUSES

Predicate = Callable[[SubmissionRecord], bool]


class FileTab(str, Enum):
    ALL = "all"
    QA = "qa"
    NCKH = "nckh"
    APPROVED = "approved"
    PENDING = "pending"


FILE_TAB_LABELS = {
    FileTab.ALL: "Tất cả",
    FileTab.QA: "Hồ sơ QA",
    FileTab.NCKH: "NCKH / Seminar",
    FileTab.APPROVED: "Đã duyệt",
    FileTab.PENDING: "Đang chờ",
}

RESEARCH_TAG_MARKERS = ("nckh", "nghiên cứu", "seminar", "hội thảo")

# Field sets honoured per record shape.
LECTURER_FIELDS = tuple(f for f in SEARCH_FIELDS if f != "lecturer_id")
DEPARTMENT_FIELDS = SEARCH_FIELDS


def _contains(haystack: Optional[str], needle: str) -> bool:
    return bool(haystack) and needle.lower() in haystack.lower()


def _has_qa_standard(r: SubmissionRecord) -> bool:
    return bool(r.qa_standard and r.qa_standard.strip())


def _is_research(r: SubmissionRecord) -> bool:
    return any(marker in tag.lower() for tag in r.tags for marker in RESEARCH_TAG_MARKERS)


_TAB_PREDICATES = {
    FileTab.QA: _has_qa_standard,
    FileTab.NCKH: _is_research,
    FileTab.APPROVED: lambda r: r.submission_status == APPROVED,
    FileTab.PENDING: lambda r: r.submission_status in PENDING_STATUSES,
}


def tab_predicate(tab: str) -> Optional[Predicate]:
    """Predicate for a tab, or None when the tab does not narrow."""
    try:
        return _TAB_PREDICATES.get(FileTab(tab))
    except ValueError:
        return None


def _keyword_predicate(keyword: str) -> Predicate:
    def match(r: SubmissionRecord) -> bool:
        return (
            _contains(r.original_name, keyword)
            or _contains(r.description, keyword)
            or any(_contains(t, keyword) for t in r.tags)
        )
    return match


def _exact(attr: str, value: str) -> Predicate:
    return lambda r: getattr(r, attr) == value


def _substring(attr: str, value: str) -> Predicate:
    return lambda r: _contains(getattr(r, attr), value)


_FIELD_PREDICATES = {
    "keyword": _keyword_predicate,
    "activity_type": lambda v: _exact("activity_type", v),
    "qa_standard": lambda v: _substring("qa_standard", v),
    "course_code": lambda v: _substring("course_code", v),
    "course_name": lambda v: _substring("course_name", v),
    "academic_year": lambda v: _exact("academic_year", v),
    "semester": lambda v: _exact("semester", v),
    "submission_status": lambda v: _exact("submission_status", v),
    "lecturer_id": lambda v: _exact("uploader_id", v),
}


def build_predicates(
    tab: str,
    search: SearchFilters,
    fields: Optional[Collection[str]] = None,
) -> List[Predicate]:
    predicates: List[Predicate] = []
    by_tab = tab_predicate(tab)
    if by_tab is not None:
        predicates.append(by_tab)
    for name in SEARCH_FIELDS:
        if fields is not None and name not in fields:
            continue
        value = getattr(search, name)
        if value:
            predicates.append(_FIELD_PREDICATES[name](value))
    return predicates


def apply_filters(
    records: Iterable[SubmissionRecord],
    tab: str = FileTab.ALL,
    search: Optional[SearchFilters] = None,
    fields: Optional[Collection[str]] = None,
) -> List[SubmissionRecord]:
    """Records passing the tab and every non-empty search field.

    ``fields`` limits which search fields are honoured; ``None`` means all.
    """
    predicates = build_predicates(tab, search or SearchFilters(), fields)
    return [r for r in records if all(p(r) for p in predicates)]


def reset_filters() -> Tuple[FileTab, SearchFilters]:
    return FileTab.ALL, SearchFilters()


@dataclass(frozen=True)
class SubmissionSummary:
    total: int
    approved: int
    pending: int
    needs_attention: int


def summarize(records: Sequence[SubmissionRecord]) -> SubmissionSummary:
    """Counters shown above the lecturer's file list."""
    statuses = [r.submission_status for r in records]
    return SubmissionSummary(
        total=len(statuses),
        approved=sum(1 for s in statuses if s == APPROVED),
        # anything handed in and not yet approved, rejected ones included
        pending=sum(1 for s in statuses if s not in (DRAFT, APPROVED)),
        needs_attention=sum(1 for s in statuses if s in ATTENTION_STATUSES),
    )
