from __future__ import annotations
from dataclasses import dataclass, fields
from typing import Any, Dict, Iterable, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .config import DEFAULT_ALLOWED_FILE_TYPES, DEFAULT_MAX_FILE_PER_UPLOAD, DEFAULT_MAX_FILE_SIZE_MB
from .roles import Role, grants_admin, role_from_payload

M = TypeVar("M", bound=BaseModel)


class ApiModel(BaseModel):
    """Backend payloads are camelCase with Mongo-style ``_id``."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        # null means absent: the field default applies
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


def _name_of(value: Any) -> Any:
    # reviewer/approver arrive populated as {"fullName": ...}
    if isinstance(value, dict):
        return value.get("fullName") or value.get("full_name")
    return value


class ApiResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    success: bool = False
    data: Any = None
    message: Optional[str] = None


class Person(ApiModel):
    id: Optional[str] = Field(default=None, alias="_id")
    full_name: str = ""
    email: str = ""


class Department(ApiModel):
    id: Optional[str] = Field(default=None, alias="_id")
    code: Optional[str] = None
    name: Optional[str] = None


class User(ApiModel):
    id: Optional[str] = Field(default=None, alias="_id")
    email: str = ""
    full_name: str = ""
    role: Role = Role.LECTURER
    department: Optional[Department] = None
    is_active: bool = True
    created_at: Optional[str] = None
    # admin anywhere in roles[], not only the effective role
    has_admin_role: bool = False

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        # some endpoints wrap the profile as {"user": {...}}
        if isinstance(data.get("user"), dict):
            data = data["user"]
        data = {k: v for k, v in data.items() if v is not None}
        data["role"] = role_from_payload(data)
        data["hasAdminRole"] = grants_admin(data)
        data.pop("roles", None)
        if isinstance(data.get("department"), str):
            data["department"] = {"_id": data["department"]}
        return data


class SubmissionRecord(ApiModel):
    id: str = Field(alias="_id")
    filename: Optional[str] = None
    original_name: str = ""
    length: int = 0
    content_type: str = ""
    uploader: Optional[Person] = None
    department: Optional[Department] = Field(default=None, alias="departmentId")
    tags: List[str] = Field(default_factory=list)
    description: Optional[str] = None
    qa_standard: Optional[str] = None
    course_code: Optional[str] = None
    course_name: Optional[str] = None
    activity_type: Optional[str] = None
    academic_year: Optional[str] = None
    semester: Optional[str] = None
    submission_status: str = ""
    approved: bool = False
    review_notes: Optional[str] = None
    reviewed_by: Optional[str] = None
    approved_by: Optional[str] = None
    reviewed_at: Optional[str] = None
    created_at: Optional[str] = None

    @field_validator("tags", mode="before")
    @classmethod
    def _tags(cls, v: Any) -> Any:
        return v or []

    @field_validator("department", mode="before")
    @classmethod
    def _department(cls, v: Any) -> Any:
        if isinstance(v, str):
            return {"_id": v}
        return v

    @field_validator("reviewed_by", "approved_by", mode="before")
    @classmethod
    def _names(cls, v: Any) -> Any:
        return _name_of(v)

    @property
    def uploader_id(self) -> Optional[str]:
        return self.uploader.id if self.uploader else None


class Announcement(ApiModel):
    id: str = Field(alias="_id")
    title: str = ""
    content: str = ""
    created_by: Optional[str] = None
    created_at: Optional[str] = None
    is_active: bool = True

    @field_validator("created_by", mode="before")
    @classmethod
    def _creator(cls, v: Any) -> Any:
        return _name_of(v)


class SystemConfig(ApiModel):
    max_file_size: int = DEFAULT_MAX_FILE_SIZE_MB
    max_file_per_upload: int = DEFAULT_MAX_FILE_PER_UPLOAD
    allowed_file_types: List[str] = Field(default_factory=lambda: list(DEFAULT_ALLOWED_FILE_TYPES))

    @model_validator(mode="before")
    @classmethod
    def _fallbacks(cls, data: Any) -> Any:
        # 0, null and [] from the backend all mean "use the default"
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v}
        return data


class Standard(ApiModel):
    id: str = Field(alias="_id")
    code: str = ""
    name: str = ""
    description: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    is_active: bool = True


class Criterion(ApiModel):
    id: str = Field(alias="_id")
    code: str = ""
    name: str = ""
    standard_id: Optional[str] = None
    is_active: bool = True

    @field_validator("standard_id", mode="before")
    @classmethod
    def _standard(cls, v: Any) -> Any:
        # populated references come back as the whole standard document
        if isinstance(v, dict):
            return v.get("_id")
        return v


class LecturerStats(ApiModel):
    id: str = Field(alias="_id")
    full_name: str = ""
    email: str = ""
    submitted_count: int = 0
    total_expected: int = 0
    last_submission: Optional[str] = None
    has_submitted: bool = False


class ProgressSummary(BaseModel):
    total: int = 0
    approved: int = 0
    pending: int = 0
    completion_rate: float = 0

    @classmethod
    def from_progress(cls, progress: Optional[Dict[str, Any]]) -> "ProgressSummary":
        p = progress or {}
        pending = sum(int(p.get(k) or 0) for k in ("submitted", "under_review", "rejected", "revision_required"))
        return cls(
            total=int(p.get("total") or 0),
            approved=int(p.get("approved") or 0),
            pending=pending,
            completion_rate=float(p.get("completionRate") or 0),
        )


@dataclass
class SearchFilters:
    keyword: str = ""
    activity_type: str = ""
    qa_standard: str = ""
    course_code: str = ""
    course_name: str = ""
    academic_year: str = ""
    semester: str = ""
    submission_status: str = ""
    lecturer_id: str = ""   # department views only

    def is_empty(self) -> bool:
        return not any(getattr(self, f.name) for f in fields(self))


SEARCH_FIELDS = tuple(f.name for f in fields(SearchFilters))


def parse_many(model: Type[M], items: Optional[Iterable[Dict[str, Any]]]) -> List[M]:
    return [model.model_validate(item) for item in (items or [])]
