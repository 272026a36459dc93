from __future__ import annotations
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

import requests
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential_jitter

from ..config import settings
from ..exceptions import DownloadError
from ..models import ApiResponse
from ..roles import Role, department_endpoint

logger = logging.getLogger(__name__)

# (file name, content, content type)
UploadPart = Tuple[str, bytes, str]

RETRYABLE = (requests.ConnectionError, requests.Timeout)


def _query(params: Optional[Dict[str, Any]]) -> Dict[str, str]:
    """Drop empty values the same way the backend expects absent filters."""
    out: Dict[str, str] = {}
    for key, value in (params or {}).items():
        if value is None or value == "" or value is False:
            continue
        out[key] = "true" if value is True else str(value)
    return out


class ApiClient:
    """Thin wrapper over the QLTL REST API.

    Every JSON endpoint returns an ``ApiResponse``. Transport problems are not
    swallowed: they surface as ``requests`` exceptions so callers can tell an
    unreachable backend from a rejected request. GET calls are retried on
    connection errors; mutations never are.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token_provider: Optional[Callable[[], Optional[str]]] = None,
        role: Role = Role.LECTURER,
        timeout: Optional[float] = None,
        retries: Optional[int] = None,
        backoff: float = 0.5,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.token_provider = token_provider or (lambda: None)
        self.role = role
        self.timeout = timeout if timeout is not None else settings.request_timeout
        self.retries = max(1, retries if retries is not None else settings.get_retries)
        self.backoff = backoff
        self.session = session or requests.Session()

    # ------------------------------------------------------------ plumbing

    def _headers(self) -> Dict[str, str]:
        token = self.token_provider()
        return {"Authorization": f"Bearer {token}"} if token else {}

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    @property
    def _dept(self) -> str:
        return department_endpoint(self.role)

    def _send(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        headers = self._headers()
        headers.update(kwargs.pop("headers", {}))
        return self.session.request(method, self._url(path), headers=headers, timeout=self.timeout, **kwargs)

    @staticmethod
    def _parse(resp: requests.Response) -> ApiResponse:
        try:
            body = resp.json()
        except ValueError:
            return ApiResponse(success=False, message=f"{resp.status_code} {resp.text[:200]}")
        if not isinstance(body, dict):
            return ApiResponse(success=False, message=f"Unexpected response body from {resp.url}")
        return ApiResponse.model_validate(body)

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> ApiResponse:
        retrying = Retrying(
            reraise=True,
            stop=stop_after_attempt(self.retries),
            wait=wait_exponential_jitter(initial=self.backoff, max=10, jitter=self.backoff),
            retry=retry_if_exception_type(RETRYABLE),
        )
        for attempt in retrying:
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    logger.warning("Retrying GET %s (attempt %d)", path, attempt.retry_state.attempt_number)
                resp = self._send("GET", path, params=_query(params))
        return self._parse(resp)

    def _write(self, method: str, path: str, **kwargs: Any) -> ApiResponse:
        return self._parse(self._send(method, path, **kwargs))

    # ---------------------------------------------------------------- auth

    def login(self, email: str, password: str) -> ApiResponse:
        return self._write("POST", "auth/login", json={"email": email, "password": password})

    def get_me(self) -> ApiResponse:
        return self._get("auth/me")

    def get_overview(self) -> ApiResponse:
        return self._get("public/overview")

    # --------------------------------------------------------------- files

    def get_files(self, params: Optional[Dict[str, Any]] = None) -> ApiResponse:
        return self._get("files", params)

    def upload_files(self, files: Iterable[UploadPart], metadata: Dict[str, str]) -> ApiResponse:
        parts: List[Tuple[str, UploadPart]] = [("files", part) for part in files]
        return self._write("POST", "files/upload", files=parts, data=metadata)

    def update_file(self, file_id: str, patch: Dict[str, Any]) -> ApiResponse:
        return self._write("PATCH", f"files/{file_id}", json=patch)

    def delete_file(self, file_id: str) -> ApiResponse:
        return self._write("DELETE", f"files/{file_id}")

    def download_file(self, file_id: str) -> bytes:
        resp = self._send("GET", f"files/{file_id}/stream")
        if not resp.ok:
            raise DownloadError(f"Download failed ({resp.status_code})")
        return resp.content

    # ------------------------------------------------- reference & config

    def get_announcements(self, params: Optional[Dict[str, Any]] = None) -> ApiResponse:
        return self._get("announcements", params)

    def get_system_config(self) -> ApiResponse:
        return self._get("system/config")

    def get_standards(self, params: Optional[Dict[str, Any]] = None) -> ApiResponse:
        return self._get("standards", params)

    def get_criteria(self, params: Optional[Dict[str, Any]] = None) -> ApiResponse:
        return self._get("standards/criteria", params)

    def get_criteria_by_standard(self, standard_id: str, params: Optional[Dict[str, Any]] = None) -> ApiResponse:
        return self._get(f"standards/{standard_id}/criteria", params)

    # -------------------------------------- department head / manager API

    def get_department_head_files(self, params: Optional[Dict[str, Any]] = None) -> ApiResponse:
        return self._get(f"{self._dept}/files", params)

    def review_department_file(self, file_id: str, patch: Dict[str, Any]) -> ApiResponse:
        return self._write("PATCH", f"{self._dept}/files/{file_id}/review", json=patch)

    def get_department_progress(self, params: Optional[Dict[str, Any]] = None) -> ApiResponse:
        return self._get(f"{self._dept}/statistics/progress", params)

    def get_department_qa_overview(self, params: Optional[Dict[str, Any]] = None) -> ApiResponse:
        return self._get(f"{self._dept}/statistics/qa-overview", params)

    def get_department_timeline(self, params: Optional[Dict[str, Any]] = None) -> ApiResponse:
        return self._get(f"{self._dept}/statistics/timeline", params)

    def get_department_lecturers(self) -> ApiResponse:
        return self._get(f"{self._dept}/lecturers")

    def get_teams_and_groups(self) -> ApiResponse:
        return self._get(f"{self._dept}/teams")

    def get_lecturer_submission_stats(self, params: Optional[Dict[str, Any]] = None) -> ApiResponse:
        return self._get(f"{self._dept}/statistics/lecturer-submissions", params)

    def send_reminder_to_lecturers(self, payload: Dict[str, Any]) -> ApiResponse:
        body = {k: v for k, v in payload.items() if v is not None}
        return self._write("POST", f"{self._dept}/reminders/send", json=body)
