from __future__ import annotations

import secrets
import time
from dataclasses import dataclass
from typing import Mapping

REQUEST_ID_HEADER = "X-Request-ID"
REQUEST_ID_HEADER_ALIASES = (REQUEST_ID_HEADER, "X-Request-Id", "x-request-id")


def new_request_id() -> str:
    return f"{int(time.time() * 1000)}-{secrets.token_hex(5)}"


@dataclass
class RequestContext:
    """Tracks the request id of the last call made through an HttpClient."""

    request_id: str | None = None

    def begin(self) -> str:
        self.request_id = new_request_id()
        return self.request_id

    def update_from_headers(self, headers: Mapping[str, str]) -> None:
        for key in REQUEST_ID_HEADER_ALIASES:
            request_id = headers.get(key)
            if request_id:
                self.request_id = request_id
                return
