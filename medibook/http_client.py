"""HTTP client for the booking backend.

Purpose: Centralize base URL, bearer-token injection, timeouts and error mapping.

Pattern: requests.Session with connection pooling. Every failure is terminal
for the user action that triggered it: no retries, no backoff.
"""
from typing import Any, Dict, List, Optional, Tuple

import requests
from requests.adapters import HTTPAdapter

from medibook import config
from medibook.errors import ApiError
from medibook.logging_config import get_logger

logger = get_logger(__name__)


def create_http_session() -> requests.Session:
    """
    Create HTTP session with connection pooling and retries disabled.

    Returns:
        Configured requests.Session
    """
    session = requests.Session()
    adapter = HTTPAdapter(
        max_retries=0,
        pool_connections=10,
        pool_maxsize=10,
    )
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.headers.update({"Accept": "application/json"})
    return session


def _error_message(response: requests.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        message = body.get("message") or body.get("error")
        return str(message) if message else None
    return None


class ApiClient:
    """
    Thin wrapper over the backend REST API.

    Attaches `Authorization: Bearer <token>` from the injected SessionStore on
    every call unless the call opts out. Raises ApiError on any failure.
    """

    def __init__(
        self,
        base_url: str = config.API_BASE_URL,
        session=None,
        timeout: float = config.REQUEST_TIMEOUT,
        http: Optional[requests.Session] = None,
    ):
        """
        Args:
            base_url: API root, e.g. https://host/api/v1
            session: SessionStore supplying the bearer token (optional)
            timeout: Per-request timeout in seconds
            http: Preconfigured requests.Session (optional)
        """
        self.base_url = base_url.rstrip("/")
        self.session = session
        self.timeout = timeout
        self.http = http or create_http_session()

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
        authenticated: bool = True,
    ) -> Any:
        """
        Perform a request and return the decoded JSON body.

        Args:
            method: HTTP method (GET, POST, PATCH)
            path: Path relative to the base URL
            params: Query parameters; None values are dropped
            json: JSON body
            authenticated: Attach the bearer token when available

        Returns:
            Decoded JSON body ({} for an empty body)

        Raises:
            ApiError: Transport failure, non-2xx status, or undecodable body
        """
        headers = {}
        if authenticated and self.session is not None:
            headers.update(self.session.auth_headers())
        if params:
            params = {k: v for k, v in params.items() if v not in (None, "")}

        url = self.url(path)
        try:
            response = self.http.request(
                method.upper(),
                url,
                params=params or None,
                json=json,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error("request_transport_error", method=method, url=url, error=str(e))
            raise ApiError(original=e) from e

        if not 200 <= response.status_code < 300:
            message = _error_message(response)
            logger.warning(
                "request_rejected",
                method=method,
                url=url,
                status_code=response.status_code,
                server_message=message,
            )
            raise ApiError(message=message, status_code=response.status_code)

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            logger.error("response_not_json", method=method, url=url)
            raise ApiError(
                message="Invalid response from server",
                status_code=response.status_code,
                original=e,
            ) from e

    @staticmethod
    def _data(body: Any, default: Any) -> Any:
        if isinstance(body, dict):
            data = body.get("data")
            if data is not None:
                return data
        return default

    # Authentication

    def login(self, email: str, password: str, role: str) -> Dict[str, Any]:
        """POST /auth/login; returns {user, token}."""
        body = self.request(
            "POST",
            "/auth/login",
            json={"email": email, "password": password, "role": str(role).upper()},
            authenticated=False,
        )
        data = self._data(body, {})
        if not data.get("token") or not data.get("user"):
            raise ApiError(message="Invalid response from server", status_code=200)
        return data

    def register(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """POST /auth/register; payload role is upper-cased."""
        payload = {**payload, "role": str(payload.get("role", "")).upper()}
        body = self.request("POST", "/auth/register", json=payload, authenticated=False)
        return self._data(body, {})

    # Directory

    def list_doctors(self, page: int = 1, limit: int = config.DOCTOR_PAGE_SIZE) -> List[Dict]:
        body = self.request("GET", "/doctors", params={"page": page, "limit": limit})
        data = self._data(body, [])
        return data if isinstance(data, list) else []

    def list_specializations(self) -> List[str]:
        body = self.request("GET", "/specializations", authenticated=False)
        data = self._data(body, [])
        return [str(s) for s in data] if isinstance(data, list) else []

    # Appointments

    def create_appointment(self, doctor_id: str, date_iso: str, reason: str) -> Dict[str, Any]:
        body = self.request(
            "POST",
            "/appointments",
            json={"doctorId": doctor_id, "date": date_iso, "reason": reason},
        )
        return self._data(body, {})

    def list_patient_appointments(self, status: Optional[str] = None) -> List[Dict]:
        body = self.request("GET", "/appointments/patient", params={"status": status})
        data = self._data(body, [])
        return data if isinstance(data, list) else []

    def cancel_appointment(self, appointment_id: str) -> Dict[str, Any]:
        body = self.request("PATCH", f"/appointments/{appointment_id}/cancel")
        return self._data(body, {})

    def list_doctor_appointments(
        self,
        status: Optional[str] = None,
        date: Optional[str] = None,
        page: int = 1,
    ) -> Tuple[List[Dict], int]:
        """GET /appointments/doctor; returns (rows, total_pages)."""
        body = self.request(
            "GET",
            "/appointments/doctor",
            params={"status": status, "date": date, "page": page},
        )
        data = self._data(body, [])
        rows = data if isinstance(data, list) else []
        total_pages = 1
        if isinstance(body, dict):
            try:
                total_pages = max(1, int(body.get("totalPages") or 1))
            except (TypeError, ValueError):
                total_pages = 1
        return rows, total_pages

    def update_appointment_status(self, appointment_id: str, status: str) -> Dict[str, Any]:
        body = self.request(
            "PATCH",
            "/appointments/update-status",
            json={"appointment_id": appointment_id, "status": status},
        )
        return self._data(body, {})
