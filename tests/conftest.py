from __future__ import annotations

from typing import Any, Callable

import pytest

from packcrm_client_sdk.config import ClientConfig
from packcrm_client_sdk.http_client import HttpClient
from packcrm_client_sdk.tracing import RequestContext

BASE_URL = "https://api.example.com/api"


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(env_name="test", api_base_url=BASE_URL)


@pytest.fixture
def http(config: ClientConfig) -> HttpClient:
    return HttpClient(config, context=RequestContext())


async def inline_runner(call: Callable[[], Any]) -> Any:
    """Run the blocking call on the loop thread so tests stay deterministic."""
    return call()
