from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable
from urllib.parse import urljoin

import requests
from requests.adapters import HTTPAdapter

from .config import ClientConfig
from .error_mapper import map_error
from .exceptions import TransportError
from .tracing import REQUEST_ID_HEADER, RequestContext

ResponseHook = Callable[[requests.Response], None]
RequestHook = Callable[[str, str, dict[str, Any]], None]


@dataclass
class LastOperation:
    module: str
    operation: str
    duration_ms: int
    result: str
    request_id: str | None


@dataclass
class HttpClient:
    config: ClientConfig
    context: RequestContext | None = None
    session: requests.Session | None = None
    before_request: RequestHook | None = None
    after_response: ResponseHook | None = None
    last_operation: LastOperation | None = None

    def __post_init__(self) -> None:
        if self.session is None:
            self.session = requests.Session()
            adapter = HTTPAdapter(
                pool_connections=self.config.max_connections,
                pool_maxsize=self.config.max_connections,
            )
            self.session.mount("http://", adapter)
            self.session.mount("https://", adapter)
        if self.context is None:
            self.context = RequestContext()

    def _build_url(self, path: str) -> str:
        base = self.config.api_base_url.rstrip("/") + "/"
        return urljoin(base, path.lstrip("/"))

    def request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        json_body: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        files: dict[str, Any] | None = None,
        raw: bool = False,
        module: str = "unknown",
        operation: str = "unknown",
    ) -> dict[str, Any] | list[Any] | bytes | None:
        """Send one request. No retries: a failure is final for the caller."""
        if self.session is None:
            raise RuntimeError("HTTP session not initialized")
        request_headers = {"Accept": "*/*" if raw else "application/json"}
        if headers:
            request_headers.update(headers)
        request_id = self.context.begin()
        request_headers[REQUEST_ID_HEADER] = request_id

        normalized_method = method.upper()
        url = self._build_url(path)
        request_context = {
            "headers": request_headers,
            "json_body": json_body,
            "params": params,
        }
        if self.before_request:
            self.before_request(normalized_method, url, request_context)

        started = time.monotonic()
        try:
            response = self.session.request(
                method=normalized_method,
                url=url,
                headers=request_headers,
                json=json_body,
                params=params,
                files=files,
                timeout=(self.config.connect_timeout_seconds, self.config.read_timeout_seconds),
                verify=self.config.verify_ssl,
            )
        except requests.RequestException as exc:
            self._record_operation(module, operation, started, "error", request_id)
            raise TransportError(
                code="TRANSPORT_ERROR",
                message=str(exc),
                details={"type": type(exc).__name__},
                request_id=request_id,
                status_code=0,
                raw_payload=None,
            ) from exc

        if self.after_response:
            self.after_response(response)
        self.context.update_from_headers(response.headers)
        if response.ok:
            self._record_operation(module, operation, started, "success", request_id)
            if raw:
                return response.content
            if not response.content:
                return None
            return response.json()

        payload = None
        try:
            payload = response.json()
        except ValueError:
            payload = {"details": response.text}
        self._record_operation(module, operation, started, "error", request_id)
        raise map_error(response.status_code, payload if isinstance(payload, dict) else None, request_id)

    def _record_operation(self, module: str, operation: str, started: float, result: str, request_id: str | None) -> None:
        self.last_operation = LastOperation(
            module=module,
            operation=operation,
            duration_ms=int((time.monotonic() - started) * 1000),
            result=result,
            request_id=request_id,
        )
