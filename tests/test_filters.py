"""
Unit tests for the submission filter engine
Tests for: tabs, keyword search, structured fields, summary counters
"""
from dataclasses import replace

import pytest

from qltl_app.filters import (
    DEPARTMENT_FIELDS,
    LECTURER_FIELDS,
    FileTab,
    apply_filters,
    reset_filters,
    summarize,
    tab_predicate,
)
from qltl_app.models import SearchFilters

from .conftest import make_record


@pytest.fixture
def mixed():
    return [
        make_record(originalName="De cuong IT001.pdf", qaStandard="TC1", submissionStatus="draft",
                    courseCode="IT001", courseName="Nhap mon lap trinh", academicYear="2024-2025",
                    semester="HK1", activityType="teaching", tags=["giang day"]),
        make_record(originalName="Bao cao seminar.docx", submissionStatus="submitted",
                    tags=["Seminar"], description="Hội thảo khoa", academicYear="2024-2025", semester="HK2"),
        make_record(originalName="Bai bao.pdf", qaStandard="TC2", submissionStatus="approved",
                    tags=["NCKH"], activityType="research", academicYear="2023-2024", semester="HK1"),
        make_record(originalName="Ke hoach.pdf", submissionStatus="rejected", qaStandard="  "),
        make_record(originalName="Minh chung.pdf", submissionStatus="under_review", tags=None),
    ]


class TestTabs:
    """Category tab narrowing"""

    def test_nckh_tab_matches_research_tag(self):
        """A record tagged nckh shows on the research tab but not the QA tab"""
        records = [make_record(originalName="A.pdf", tags=["nckh"], submissionStatus="approved", qaStandard="")]

        assert apply_filters(records, "nckh", SearchFilters()) == records
        assert apply_filters(records, "qa", SearchFilters()) == []

    def test_pending_tab_keeps_draft_and_submitted_in_order(self):
        """Pending tab keeps draft/submitted and preserves relative order"""
        draft = make_record(submissionStatus="draft")
        submitted = make_record(submissionStatus="submitted")
        approved = make_record(submissionStatus="approved")

        result = apply_filters([draft, submitted, approved], "pending", SearchFilters())

        assert result == [draft, submitted]

    def test_pending_tab_includes_under_review(self, mixed):
        result = apply_filters(mixed, FileTab.PENDING)

        assert [r.submission_status for r in result] == ["draft", "submitted", "under_review"]

    def test_qa_tab_ignores_blank_standard(self, mixed):
        """Whitespace-only QA standard does not count as QA"""
        result = apply_filters(mixed, FileTab.QA)

        assert [r.qa_standard for r in result] == ["TC1", "TC2"]

    def test_research_markers_case_insensitive(self, mixed):
        result = apply_filters(mixed, FileTab.NCKH)

        assert [r.original_name for r in result] == ["Bao cao seminar.docx", "Bai bao.pdf"]

    def test_approved_tab(self, mixed):
        assert [r.submission_status for r in apply_filters(mixed, FileTab.APPROVED)] == ["approved"]

    def test_all_tab_returns_everything(self, mixed):
        assert apply_filters(mixed, FileTab.ALL) == mixed

    def test_unknown_tab_does_not_narrow(self, mixed):
        """An unrecognised tab behaves like the all tab"""
        assert tab_predicate("archived") is None
        assert apply_filters(mixed, "archived") == mixed

    def test_status_tabs_partition_records(self, mixed):
        """approved, pending, needs-attention and unknown statuses cover every record once"""
        odd = make_record(submissionStatus="archived")
        records = mixed + [odd]
        approved = {r.id for r in apply_filters(records, FileTab.APPROVED)}
        pending = {r.id for r in apply_filters(records, FileTab.PENDING)}
        attention = {r.id for r in records if r.submission_status in ("rejected", "revision_required")}
        unknown = {odd.id}

        groups = [approved, pending, attention, unknown]
        assert sum(len(g) for g in groups) == len(records)
        assert set().union(*groups) == {r.id for r in records}


class TestKeyword:
    """Free text search over name, description and tags"""

    def test_keyword_does_not_search_course_code(self):
        """Keyword never looks at the course code; the course code field does"""
        record = make_record(originalName="Slide.pdf", courseCode="IT001")

        assert apply_filters([record], FileTab.ALL, SearchFilters(keyword="it001")) == []
        assert apply_filters([record], FileTab.ALL, SearchFilters(course_code="IT001")) == [record]

    def test_keyword_matches_description(self, mixed):
        result = apply_filters(mixed, FileTab.ALL, SearchFilters(keyword="hội thảo"))

        assert [r.original_name for r in result] == ["Bao cao seminar.docx"]

    def test_keyword_matches_tag_case_insensitive(self, mixed):
        result = apply_filters(mixed, FileTab.ALL, SearchFilters(keyword="nckh"))

        assert [r.original_name for r in result] == ["Bai bao.pdf"]

    def test_uppercase_keyword_matches_tag(self):
        record = make_record(tags=["seminar 2024"])

        assert apply_filters([record], FileTab.ALL, SearchFilters(keyword="SEMINAR")) == [record]

    def test_keyword_matches_name(self, mixed):
        result = apply_filters(mixed, FileTab.ALL, SearchFilters(keyword="KE HOACH"))

        assert len(result) == 1

    def test_keyword_is_not_trimmed(self, mixed):
        """Surrounding whitespace is part of the needle"""
        assert apply_filters(mixed, FileTab.ALL, SearchFilters(keyword=" zzz ")) == []


class TestStructuredFields:
    """Exact and substring field predicates"""

    def test_course_name_substring(self, mixed):
        result = apply_filters(mixed, FileTab.ALL, SearchFilters(course_name="LAP TRINH"))

        assert len(result) == 1

    def test_qa_standard_substring(self, mixed):
        result = apply_filters(mixed, FileTab.ALL, SearchFilters(qa_standard="tc"))

        assert [r.qa_standard for r in result] == ["TC1", "TC2"]

    def test_academic_year_exact(self, mixed):
        result = apply_filters(mixed, FileTab.ALL, SearchFilters(academic_year="2024"))

        assert result == []

    def test_semester_and_status_exact(self, mixed):
        result = apply_filters(mixed, FileTab.ALL, SearchFilters(semester="HK1", submission_status="approved"))

        assert [r.original_name for r in result] == ["Bai bao.pdf"]

    def test_activity_type_exact(self, mixed):
        result = apply_filters(mixed, FileTab.ALL, SearchFilters(activity_type="research"))

        assert len(result) == 1

    def test_lecturer_id_matches_uploader(self):
        mine = make_record(uploader={"_id": "u1", "fullName": "Nguyen Van A"})
        other = make_record(uploader={"_id": "u2", "fullName": "Tran Thi B"})
        anonymous = make_record()

        result = apply_filters([mine, other, anonymous], FileTab.ALL, SearchFilters(lecturer_id="u1"))

        assert result == [mine]

    def test_fields_not_offered_are_ignored(self):
        """Lecturer views do not honour the lecturer filter"""
        record = make_record(uploader={"_id": "u2"})
        search = SearchFilters(lecturer_id="u1")

        assert apply_filters([record], FileTab.ALL, search, LECTURER_FIELDS) == [record]
        assert apply_filters([record], FileTab.ALL, search, DEPARTMENT_FIELDS) == []

    def test_absent_fields_never_match_a_value(self):
        record = make_record()

        assert apply_filters([record], FileTab.ALL, SearchFilters(course_code="IT")) == []


class TestFilterProperties:
    """Invariants of apply_filters"""

    def test_empty_search_all_tab_is_identity(self, mixed):
        assert apply_filters(mixed, FileTab.ALL, SearchFilters()) == mixed

    def test_idempotent(self, mixed):
        search = SearchFilters(keyword="pdf", academic_year="2024-2025")

        assert apply_filters(mixed, FileTab.QA, search) == apply_filters(mixed, FileTab.QA, search)

    def test_empty_input(self):
        assert apply_filters([], FileTab.QA, SearchFilters(keyword="x")) == []

    def test_result_is_subsequence(self, mixed):
        result = apply_filters(mixed, FileTab.ALL, SearchFilters(academic_year="2024-2025"))
        positions = [mixed.index(r) for r in result]

        assert positions == sorted(positions)

    def test_adding_a_field_never_grows_result(self, mixed):
        base = SearchFilters(academic_year="2024-2025")
        narrower = replace(base, semester="HK1")

        wide = apply_filters(mixed, FileTab.ALL, base)
        narrow = apply_filters(mixed, FileTab.ALL, narrower)

        assert len(narrow) <= len(wide)
        assert all(r in wide for r in narrow)

    def test_input_not_mutated(self, mixed):
        before = list(mixed)
        apply_filters(mixed, FileTab.PENDING, SearchFilters(keyword="a"))

        assert mixed == before

    def test_returns_new_list(self, mixed):
        assert apply_filters(mixed) is not mixed

    def test_reset_restores_full_list(self, mixed):
        tab, search = reset_filters()

        assert tab is FileTab.ALL
        assert search.is_empty()
        assert apply_filters(mixed, tab, search) == mixed


class TestSummarize:
    """Lecturer dashboard counters"""

    def test_counts(self, mixed):
        s = summarize(mixed)

        assert s.total == 5
        assert s.approved == 1
        assert s.pending == 3
        assert s.needs_attention == 1

    def test_empty(self):
        s = summarize([])

        assert (s.total, s.approved, s.pending, s.needs_attention) == (0, 0, 0, 0)
