"""
Unit tests for display helpers
Tests for: status vocabulary, table frames, PDF preview
"""
import fitz

from qltl_app.services.pdf_renderer import is_pdf, render_pdf_pages
from qltl_app.ui.tables import format_size, lecturer_stats_frame, records_frame
from qltl_app.models import LecturerStats
from qltl_app.vocabulary import activity_type_label, semester_label, status_color, status_label

from .conftest import make_record


class TestVocabulary:
    def test_known_status(self):
        assert status_label("under_review") == "Đang duyệt"
        assert status_color("approved") == "green"

    def test_unknown_status_passes_through(self):
        assert status_label("archived") == "archived"
        assert status_color("archived") == "gray"

    def test_absent_values(self):
        assert status_label(None) == ""
        assert status_color(None) == "gray"
        assert semester_label("") == ""

    def test_labels(self):
        assert semester_label("FULL_YEAR") == "Cả năm"
        assert activity_type_label("other") == "Khác"


class TestTables:
    """pandas frames behind st.dataframe"""

    def test_format_size(self):
        assert format_size(512) == "512 B"
        assert format_size(2048) == "2.0 KB"
        assert format_size(None) == "0 B"

    def test_records_frame_placeholders(self):
        frame = records_frame([make_record(originalName="a.pdf", submissionStatus="approved")])

        row = frame.iloc[0]
        assert row["STT"] == 1
        assert row["Trạng thái"] == "Đã duyệt"
        assert row["Tiêu chuẩn QA"] == "-"
        assert "Khoa" not in frame.columns

    def test_department_columns(self):
        record = make_record(uploader={"_id": "u1", "fullName": "Nguyễn Văn A"}, departmentId={"_id": "d1"})

        row = records_frame([record], with_department=True).iloc[0]

        assert row["Giảng viên"] == "Nguyễn Văn A"
        assert row["Khoa"] == "-"

    def test_lecturer_stats_frame(self):
        stats = [LecturerStats.model_validate({"_id": "u1", "fullName": "A", "hasSubmitted": False})]

        assert lecturer_stats_frame(stats).iloc[0]["Trạng thái"] == "Chưa nộp"


class TestPdfPreview:
    def test_is_pdf(self):
        assert is_pdf("application/pdf")
        assert is_pdf("application/octet-stream", "Bao cao.PDF")
        assert not is_pdf("application/msword", "a.doc")

    def test_renders_first_page(self):
        doc = fitz.open()
        doc.new_page()
        doc.new_page()
        data = doc.tobytes()
        doc.close()

        pages = render_pdf_pages(data, dpi=72)

        assert len(pages) == 1
        assert pages[0].mode == "RGB"

    def test_broken_file_gives_no_pages(self):
        assert render_pdf_pages(b"not a pdf", dpi=72) == []
