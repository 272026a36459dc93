"""
Unit tests for backend payload models
Tests for: user normalization, tolerant records, config fallbacks
"""
from qltl_app.config import DEFAULT_ALLOWED_FILE_TYPES
from qltl_app.models import (
    Criterion,
    LecturerStats,
    ProgressSummary,
    SearchFilters,
    SubmissionRecord,
    SystemConfig,
    User,
)
from qltl_app.roles import Role


class TestUser:
    """Canonical user shape"""

    def test_roles_list_normalized(self):
        user = User.model_validate({"_id": "u1", "fullName": "A", "roles": ["manager"], "role": "lecturer"})

        assert user.role is Role.MANAGER
        assert user.full_name == "A"

    def test_wrapped_profile(self):
        user = User.model_validate({"user": {"_id": "u1", "role": "admin", "email": "a@b.vn"}})

        assert user.role is Role.ADMIN
        assert user.email == "a@b.vn"

    def test_unknown_role(self):
        assert User.model_validate({"role": "guest"}).role is Role.UNRECOGNIZED

    def test_missing_role(self):
        assert User.model_validate({"roles": []}).role is Role.LECTURER

    def test_department_id_string(self):
        user = User.model_validate({"department": "d1"})

        assert user.department.id == "d1"
        assert user.department.name is None


class TestSubmissionRecord:
    """Optional fields are absent-safe"""

    def test_minimal_record(self):
        r = SubmissionRecord.model_validate({"_id": "f1"})

        assert r.tags == []
        assert r.uploader_id is None
        assert r.review_notes is None
        assert r.department is None

    def test_null_tags(self):
        assert SubmissionRecord.model_validate({"_id": "f1", "tags": None}).tags == []

    def test_populated_references(self):
        r = SubmissionRecord.model_validate({
            "_id": "f1",
            "uploader": {"_id": "u1", "fullName": "Nguyen Van A"},
            "departmentId": {"_id": "d1", "name": "CNTT"},
            "reviewedBy": {"fullName": "Truong Khoa"},
        })

        assert r.uploader_id == "u1"
        assert r.department.name == "CNTT"
        assert r.reviewed_by == "Truong Khoa"

    def test_department_reference_as_id(self):
        r = SubmissionRecord.model_validate({"_id": "f1", "departmentId": "d1"})

        assert r.department.id == "d1"

    def test_unknown_keys_ignored(self):
        r = SubmissionRecord.model_validate({"_id": "f1", "somethingNew": 1})

        assert not hasattr(r, "somethingNew")


class TestSystemConfig:
    """Upload limits fall back to defaults"""

    def test_defaults(self):
        c = SystemConfig()

        assert (c.max_file_size, c.max_file_per_upload) == (10, 5)
        assert c.allowed_file_types == DEFAULT_ALLOWED_FILE_TYPES

    def test_falsy_values_use_defaults(self):
        c = SystemConfig.model_validate({"maxFileSize": 0, "maxFilePerUpload": None, "allowedFileTypes": []})

        assert (c.max_file_size, c.max_file_per_upload) == (10, 5)
        assert c.allowed_file_types == [".pdf", ".doc", ".docx"]

    def test_backend_values_kept(self):
        c = SystemConfig.model_validate({"maxFileSize": 20, "allowedFileTypes": [".pdf"]})

        assert c.max_file_size == 20
        assert c.allowed_file_types == [".pdf"]

    def test_default_list_not_shared(self):
        SystemConfig().allowed_file_types.append(".exe")

        assert ".exe" not in SystemConfig().allowed_file_types


class TestCriterion:
    def test_populated_standard(self):
        c = Criterion.model_validate({"_id": "c1", "standardId": {"_id": "s1", "code": "TC1"}})

        assert c.standard_id == "s1"


class TestProgressSummary:
    """Manager and department head counters"""

    def test_pending_sums_open_statuses(self):
        s = ProgressSummary.from_progress({
            "total": 10, "approved": 4, "submitted": 1, "under_review": 2,
            "rejected": 1, "revision_required": 1, "draft": 1, "completionRate": 40,
        })

        assert s.total == 10
        assert s.approved == 4
        assert s.pending == 5
        assert s.completion_rate == 40

    def test_missing_progress(self):
        s = ProgressSummary.from_progress(None)

        assert (s.total, s.pending, s.completion_rate) == (0, 0, 0)


class TestSearchFilters:
    def test_is_empty(self):
        assert SearchFilters().is_empty()
        assert not SearchFilters(semester="HK1").is_empty()


class TestNullFields:
    """Backend nulls fall back to field defaults"""

    def test_uploader_with_null_contact(self):
        r = SubmissionRecord.model_validate({
            "_id": "f1",
            "originalName": None,
            "length": None,
            "uploader": {"_id": "u1", "fullName": None, "email": None},
            "submissionStatus": None,
        })

        assert r.uploader.full_name == ""
        assert r.uploader.email == ""
        assert r.uploader_id == "u1"
        assert (r.original_name, r.length, r.submission_status) == ("", 0, "")

    def test_lecturer_stats_nulls(self):
        s = LecturerStats.model_validate({
            "_id": "l1", "fullName": None, "email": None, "submittedCount": None, "totalExpected": None,
        })

        assert (s.full_name, s.email, s.submitted_count, s.total_expected) == ("", "", 0, 0)

    def test_wrapped_user_nulls(self):
        user = User.model_validate({"user": {"_id": "u1", "email": None, "fullName": None, "role": None}})

        assert user.email == ""
        assert user.role is Role.LECTURER


class TestAdminFlag:
    def test_admin_later_in_roles(self):
        user = User.model_validate({"_id": "u1", "roles": ["lecturer", "admin"]})

        assert user.role is Role.LECTURER
        assert user.has_admin_role

    def test_plain_admin(self):
        assert User.model_validate({"role": "admin"}).has_admin_role

    def test_not_admin(self):
        assert not User.model_validate({"roles": ["department_head"]}).has_admin_role
