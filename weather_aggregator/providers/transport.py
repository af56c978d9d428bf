from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Protocol

import requests
import structlog
from requests.adapters import HTTPAdapter
from urllib3.exceptions import HTTPError as Urllib3HTTPError
from urllib3.util.retry import Retry

from ..config import AppSettings
from ..errors import NetworkError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class HttpResponse:
    """Status, headers and the undecoded body of an upstream response."""

    status_code: int
    body: bytes
    headers: Mapping[str, str] = field(default_factory=dict)

    def header(self, name: str, default: str = "") -> str:
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return default


class HttpTransport(Protocol):
    """Issues GET requests. Raises ``NetworkError`` on connectivity failures."""

    def get(
        self,
        url: str,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> HttpResponse:
        ...


@dataclass
class RequestsTransport:
    """`HttpTransport` over requests with retries for transient failures.

    Notes
    -----
    - Retries apply to 429/5xx on GET with exponential backoff.
    - The body is returned exactly as sent (``decode_content=False``), so the
      caller decides how to handle ``Content-Encoding``.
    - Each call uses its own session, so one transport is safe to share
      between fan-out threads.
    """

    timeout_connect: float = 5.0
    timeout_read: float = 15.0
    max_retries: int = 2
    backoff_factor: float = 0.5

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "RequestsTransport":
        return cls(
            timeout_connect=settings.http_timeout_connect,
            timeout_read=settings.http_timeout_read,
            max_retries=settings.http_max_retries,
            backoff_factor=settings.http_backoff_factor,
        )

    def _session(self) -> requests.Session:
        s = requests.Session()
        retries = Retry(
            total=self.max_retries,
            backoff_factor=self.backoff_factor,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["GET"],
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retries)
        s.mount("https://", adapter)
        s.mount("http://", adapter)
        # Only gzip is handled downstream
        s.headers["Accept-Encoding"] = "identity"
        return s

    def get(
        self,
        url: str,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> HttpResponse:
        timeout = (self.timeout_connect, self.timeout_read)
        try:
            with self._session() as s:
                resp = s.get(url, params=params, headers=dict(headers or {}), timeout=timeout, stream=True)
                try:
                    body = resp.raw.read(decode_content=False)
                finally:
                    resp.close()
        except (requests.RequestException, Urllib3HTTPError) as exc:
            logger.warning("http_request_failed", url=url, error=str(exc))
            raise NetworkError(f"GET {url} failed: {exc}") from exc
        response_headers: Dict[str, str] = dict(resp.headers)
        return HttpResponse(status_code=resp.status_code, body=body, headers=response_headers)


__all__ = ["HttpResponse", "HttpTransport", "RequestsTransport"]
