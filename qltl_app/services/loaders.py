"""
Dataset loading for the dashboards.

Independent fetches of one dashboard run side by side on a thread pool and
are joined before anything is written to page state. Results are keyed by
dataset name; completion order never matters. A failing dataset is logged
and falls back to its default without taking the others down, except on the
department files page which reports *why* the list could not be loaded.

Every load is tied to a ``LoadToken``. A newer render cancels the older
token, and a load whose token was cancelled raises ``LoadCancelled`` instead
of returning stale data.
"""
from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional
import logging
import threading

from pydantic import ValidationError
import requests

from ..config import settings
from ..exceptions import LoadCancelled
from ..filters import apply_filters
from ..models import (
    Announcement, ApiResponse, Criterion, LecturerStats, Person, ProgressSummary,
    SearchFilters, Standard, SubmissionRecord, SystemConfig, parse_many,
)
from .api_client import ApiClient

logger = logging.getLogger(__name__)

BACKEND_UNREACHABLE = "Không thể kết nối đến server. Vui lòng kiểm tra backend đang chạy."
LOAD_FAILED = "Đã xảy ra lỗi khi tải dữ liệu"
FILES_LOAD_FAILED = "Không thể tải danh sách hồ sơ"
INITIAL_LOAD_FAILED = "Không thể tải dữ liệu ban đầu"


class LoadToken:
    def __init__(self) -> None:
        self._cancelled = threading.Event()

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def check(self) -> None:
        if self.cancelled:
            raise LoadCancelled()


def run_concurrently(
    calls: Dict[str, Callable[[], Any]],
    token: Optional[LoadToken] = None,
    max_workers: Optional[int] = None,
) -> Dict[str, Any]:
    """Run every call, join them all and return ``{name: result or exception}``."""
    if not calls:
        return {}
    workers = min(len(calls), max_workers or settings.max_workers)
    outcomes: Dict[str, Any] = {}
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="qltl-load") as pool:
        futures = {name: pool.submit(fn) for name, fn in calls.items()}
        for name, fut in futures.items():
            try:
                outcomes[name] = fut.result()
            except Exception as e:
                outcomes[name] = e
    if token is not None:
        token.check()
    return outcomes


def fetch_datasets(
    calls: Dict[str, Callable[[], Any]],
    defaults: Dict[str, Any],
    token: Optional[LoadToken] = None,
) -> Dict[str, Any]:
    """Like ``run_concurrently`` but a failed dataset becomes its default."""
    results = {}
    for name, outcome in run_concurrently(calls, token).items():
        if isinstance(outcome, Exception):
            logger.error("Failed to fetch %s: %s", name, outcome)
            results[name] = defaults.get(name)
        else:
            results[name] = outcome
    return results


def unwrap(resp: ApiResponse, what: str, key: Optional[str] = None, default: Any = None) -> Any:
    if not resp.success:
        logger.error("Failed to fetch %s: %s", what, resp.message)
        return default
    data = resp.data
    if key is not None:
        data = data.get(key) if isinstance(data, dict) else None
    return default if data is None else data


# ------------------------------------------------------------------ lecturer

@dataclass
class LecturerData:
    files: List[SubmissionRecord] = field(default_factory=list)
    announcements: List[Announcement] = field(default_factory=list)
    system_config: SystemConfig = field(default_factory=SystemConfig)
    standards: List[Standard] = field(default_factory=list)
    criteria: List[Criterion] = field(default_factory=list)


def load_my_files(client: ApiClient) -> List[SubmissionRecord]:
    return parse_many(SubmissionRecord, unwrap(client.get_files({"limit": 100}), "files", default=[]))


def load_system_config(client: ApiClient) -> SystemConfig:
    data = unwrap(client.get_system_config(), "system config", default={})
    return SystemConfig.model_validate(data if isinstance(data, dict) else {})


def load_lecturer_data(client: ApiClient, token: Optional[LoadToken] = None) -> LecturerData:
    empty = LecturerData()
    data = fetch_datasets(
        {
            "files": lambda: load_my_files(client),
            "announcements": lambda: parse_many(
                Announcement,
                unwrap(client.get_announcements({"limit": 10, "sort": "-createdAt"}), "announcements", default=[]),
            ),
            "system_config": lambda: load_system_config(client),
            "standards": lambda: parse_many(
                Standard,
                unwrap(client.get_standards({"pageSize": 100, "isActive": True}), "standards", "standards", []),
            ),
            "criteria": lambda: parse_many(
                Criterion,
                unwrap(client.get_criteria({"pageSize": 500, "isActive": True}), "criteria", "criteria", []),
            ),
        },
        defaults=vars(empty),
        token=token,
    )
    return LecturerData(**data)


# ----------------------------------------------------------- department head

@dataclass
class DepartmentOverview:
    progress: Dict[str, Any] = field(default_factory=dict)
    qa_overview: Dict[str, Any] = field(default_factory=dict)
    timeline: Any = None
    standards: List[Standard] = field(default_factory=list)
    criteria: List[Criterion] = field(default_factory=list)

    def criteria_for(self, standard_id: str) -> List[Criterion]:
        return [c for c in self.criteria if c.standard_id == standard_id]


def load_department_overview(
    client: ApiClient,
    params: Optional[Dict[str, str]] = None,
    token: Optional[LoadToken] = None,
) -> DepartmentOverview:
    params = params or {}
    data = fetch_datasets(
        {
            "progress": lambda: unwrap(client.get_department_progress(params), "progress", default={}),
            "qa_overview": lambda: unwrap(client.get_department_qa_overview(params), "QA overview", default={}),
            "timeline": lambda: unwrap(client.get_department_timeline(params), "timeline"),
            "standards": lambda: parse_many(
                Standard, unwrap(client.get_standards({"pageSize": 100}), "standards", "standards", [])
            ),
        },
        defaults={"progress": {}, "qa_overview": {}, "timeline": None, "standards": []},
        token=token,
    )
    overview = DepartmentOverview(**data)

    per_standard = fetch_datasets(
        {
            s.id: (lambda sid=s.id: parse_many(
                Criterion,
                unwrap(client.get_criteria_by_standard(sid, {"pageSize": 100}), "criteria", "criteria", []),
            ))
            for s in overview.standards
        },
        defaults={},
        token=token,
    )
    for s in overview.standards:
        overview.criteria.extend(per_standard.get(s.id) or [])
    return overview


# -------------------------------------------------------- manager / admin

def load_manager_summary(client: ApiClient, token: Optional[LoadToken] = None) -> ProgressSummary:
    data = fetch_datasets(
        {"progress": lambda: unwrap(client.get_department_progress({}), "progress", default={})},
        defaults={"progress": {}},
        token=token,
    )
    return ProgressSummary.from_progress(data["progress"])


def load_admin_overview(client: ApiClient, token: Optional[LoadToken] = None) -> Dict[str, Any]:
    data = fetch_datasets(
        {"overview": lambda: unwrap(client.get_overview(), "overview", default={})},
        defaults={"overview": {}},
        token=token,
    )
    return data["overview"] or {}


# -------------------------------------------------------- department files

@dataclass
class DepartmentQuery:
    academic_year: str = ""
    semester: str = ""
    submission_status: str = ""
    lecturer_id: str = ""

    def server_params(self) -> Dict[str, str]:
        params = {
            "academicYear": self.academic_year,
            "semester": self.semester,
            "submissionStatus": self.submission_status,
        }
        return {k: v for k, v in params.items() if v}


@dataclass
class DepartmentFiles:
    files: List[SubmissionRecord] = field(default_factory=list)
    lecturer_stats: List[LecturerStats] = field(default_factory=list)
    error: str = ""
    # only an unreachable backend offers the manual retry
    retryable: bool = False


def load_department_files(
    client: ApiClient,
    query: DepartmentQuery,
    token: Optional[LoadToken] = None,
) -> DepartmentFiles:
    params = query.server_params()
    outcomes = run_concurrently(
        {
            "files": lambda: client.get_department_head_files(params),
            "stats": lambda: client.get_lecturer_submission_stats(params),
        },
        token=token,
    )
    failures = [o for o in outcomes.values() if isinstance(o, Exception)]
    if failures:
        e = failures[0]
        logger.error("Failed to fetch department files: %s", e)
        if isinstance(e, requests.ConnectionError):
            return DepartmentFiles(error=BACKEND_UNREACHABLE, retryable=True)
        return DepartmentFiles(error=LOAD_FAILED)

    result = DepartmentFiles()
    files_resp: ApiResponse = outcomes["files"]
    if files_resp.success:
        try:
            records = parse_many(SubmissionRecord, files_resp.data or [])
        except ValidationError as e:
            logger.error("Unreadable department files payload: %s", e)
            return DepartmentFiles(error=LOAD_FAILED)
        result.files = apply_filters(records, search=SearchFilters(lecturer_id=query.lecturer_id))
    else:
        logger.error("Failed to fetch files: %s", files_resp.message)
        result.error = files_resp.message or FILES_LOAD_FAILED

    try:
        result.lecturer_stats = parse_many(
            LecturerStats, unwrap(outcomes["stats"], "lecturer stats", default=[])
        )
    except ValidationError as e:
        logger.error("Unreadable lecturer stats payload: %s", e)
    return result


@dataclass
class DepartmentPeople:
    lecturers: List[Person] = field(default_factory=list)
    teams: List[Dict[str, Any]] = field(default_factory=list)
    error: str = ""


def load_department_people(client: ApiClient, token: Optional[LoadToken] = None) -> DepartmentPeople:
    outcomes = run_concurrently(
        {"lecturers": client.get_department_lecturers, "teams": client.get_teams_and_groups},
        token=token,
    )
    if any(isinstance(o, Exception) for o in outcomes.values()):
        logger.error("Failed to fetch initial data: %s", outcomes)
        return DepartmentPeople(error=INITIAL_LOAD_FAILED)
    try:
        lecturers = parse_many(Person, unwrap(outcomes["lecturers"], "lecturers", default=[]))
    except ValidationError as e:
        logger.error("Unreadable lecturers payload: %s", e)
        return DepartmentPeople(error=INITIAL_LOAD_FAILED)
    return DepartmentPeople(
        lecturers=lecturers,
        teams=list(unwrap(outcomes["teams"], "teams", default=[])),
    )
