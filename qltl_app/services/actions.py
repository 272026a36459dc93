"""
User-triggered mutations: upload, edit, delete, download, review, reminders.

Each action returns an ``ActionResult`` carrying one static message for the
page to show. Failures are logged and never retried automatically; a
``success: false`` body counts as a failure just like a transport error.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple
import logging
import os

import requests

from ..exceptions import DownloadError
from ..models import ApiResponse, SubmissionRecord, SystemConfig
from ..vocabulary import DRAFT
from .api_client import ApiClient, UploadPart

logger = logging.getLogger(__name__)

NO_FILE_SELECTED = "Vui lòng chọn file"
UPLOAD_OK = "Upload file thành công"
UPLOAD_FAILED = "Không thể upload file"
UPDATE_OK = "Cập nhật file thành công"
UPDATE_FAILED = "Không thể cập nhật file"
DELETE_OK = "Xóa file thành công"
DELETE_FAILED = "Không thể xóa file"
DOWNLOAD_FAILED = "Không thể tải file"
REVIEW_OK = "Đã cập nhật trạng thái hồ sơ"
REVIEW_FAILED = "Không thể duyệt file"
REMINDER_OK = "Đã gửi nhắc nhở thành công"
REMINDER_FAILED = "Không thể gửi nhắc nhở"
REMINDER_NO_LECTURER = "Vui lòng chọn ít nhất một giảng viên"
REMINDER_NO_MESSAGE = "Vui lòng nhập nội dung nhắc nhở"

REMINDER_ALL = "all"
REMINDER_SPECIFIC = "specific"


@dataclass
class ActionResult:
    ok: bool
    message: str

    @classmethod
    def failed(cls, message: str) -> "ActionResult":
        return cls(False, message)


def _call(what: str, fn, ok_message: str, fail_message: str) -> ActionResult:
    try:
        resp: ApiResponse = fn()
    except requests.RequestException as e:
        logger.error("Failed to %s: %s", what, e)
        return ActionResult.failed(fail_message)
    if not resp.success:
        logger.error("Failed to %s: %s", what, resp.message)
        return ActionResult.failed(fail_message)
    return ActionResult(True, ok_message)


def parse_tags(text: str) -> List[str]:
    return [t.strip() for t in (text or "").split(",") if t.strip()]


def upload_name(original: str, custom: Optional[str]) -> str:
    """Custom display name keeps the original file's extension."""
    if not custom or not custom.strip():
        return original
    return custom.strip() + os.path.splitext(original)[1]


@dataclass
class FileForm:
    """Metadata typed into the upload and edit forms."""
    tags: str = ""
    description: str = ""
    qa_standard: str = ""
    course_code: str = ""
    course_name: str = ""
    activity_type: str = ""
    academic_year: str = ""
    semester: str = ""
    original_name: str = ""
    submission_status: str = DRAFT

    @classmethod
    def from_record(cls, r: SubmissionRecord) -> "FileForm":
        return cls(
            tags=", ".join(r.tags),
            description=r.description or "",
            qa_standard=r.qa_standard or "",
            course_code=r.course_code or "",
            course_name=r.course_name or "",
            activity_type=r.activity_type or "",
            academic_year=r.academic_year or "",
            semester=r.semester or "",
            original_name=r.original_name,
            submission_status=r.submission_status or DRAFT,
        )

    def _common(self) -> Dict[str, Any]:
        return {
            "description": self.description,
            "qaStandard": self.qa_standard,
            "courseCode": self.course_code,
            "courseName": self.course_name,
            "activityType": self.activity_type,
            "academicYear": self.academic_year,
            "semester": self.semester,
            "submissionStatus": self.submission_status,
        }

    def to_upload_metadata(self) -> Dict[str, str]:
        # the upload endpoint splits the raw tag string itself
        return {"tags": self.tags, **self._common()}

    def to_patch(self, record: SubmissionRecord) -> Dict[str, Any]:
        return {
            **self._common(),
            "originalName": self.original_name.strip() or record.original_name,
            "tags": parse_tags(self.tags),
        }


def validate_upload(files: Sequence[UploadPart], config: SystemConfig) -> Optional[str]:
    if not files:
        return NO_FILE_SELECTED
    if len(files) > config.max_file_per_upload:
        return f"Bạn chỉ có thể chọn tối đa {config.max_file_per_upload} file cùng lúc."
    allowed = {t.lower() for t in config.allowed_file_types}
    limit = config.max_file_size * 1024 * 1024
    for name, content, _ in files:
        ext = os.path.splitext(name)[1].lower()
        if allowed and ext not in allowed:
            return f"Định dạng {ext or name} không được hỗ trợ ({', '.join(config.allowed_file_types)})."
        if len(content) > limit:
            return f"File {name} vượt quá dung lượng tối đa {config.max_file_size}MB."
    return None


def upload_files(
    client: ApiClient,
    files: Sequence[UploadPart],
    form: FileForm,
    config: SystemConfig,
    custom_names: Optional[Dict[int, str]] = None,
) -> ActionResult:
    names = custom_names or {}
    parts = [(upload_name(name, names.get(i)), content, ctype) for i, (name, content, ctype) in enumerate(files)]
    problem = validate_upload(parts, config)
    if problem:
        return ActionResult.failed(problem)
    return _call(
        "upload files",
        lambda: client.upload_files(parts, form.to_upload_metadata()),
        UPLOAD_OK,
        UPLOAD_FAILED,
    )


def edit_file(client: ApiClient, record: SubmissionRecord, form: FileForm) -> ActionResult:
    return _call("update file", lambda: client.update_file(record.id, form.to_patch(record)), UPDATE_OK, UPDATE_FAILED)


def delete_file(client: ApiClient, record: SubmissionRecord) -> ActionResult:
    return _call("delete file", lambda: client.delete_file(record.id), DELETE_OK, DELETE_FAILED)


def download_file(client: ApiClient, record: SubmissionRecord) -> Tuple[Optional[bytes], Optional[ActionResult]]:
    try:
        return client.download_file(record.id), None
    except (requests.RequestException, DownloadError) as e:
        logger.error("Failed to download file %s: %s", record.id, e)
        return None, ActionResult.failed(DOWNLOAD_FAILED)


def review_file(client: ApiClient, record: SubmissionRecord, status: str, notes: str = "") -> Optional[ActionResult]:
    """Returns None when no status was picked (nothing to send)."""
    if not status:
        return None
    return _call(
        "review file",
        lambda: client.review_department_file(record.id, {"submissionStatus": status, "reviewNotes": notes}),
        REVIEW_OK,
        REVIEW_FAILED,
    )


def send_reminder(
    client: ApiClient,
    reminder_type: str,
    message: str,
    lecturer_ids: Sequence[str] = (),
    due_date: Optional[str] = None,
) -> ActionResult:
    if reminder_type == REMINDER_SPECIFIC and not lecturer_ids:
        return ActionResult.failed(REMINDER_NO_LECTURER)
    if not message or not message.strip():
        return ActionResult.failed(REMINDER_NO_MESSAGE)
    payload = {
        "reminderType": reminder_type,
        "lecturerIds": list(lecturer_ids) if reminder_type == REMINDER_SPECIFIC else None,
        "message": message,
        "dueDate": due_date or None,
    }
    return _call("send reminder", lambda: client.send_reminder_to_lecturers(payload), REMINDER_OK, REMINDER_FAILED)
