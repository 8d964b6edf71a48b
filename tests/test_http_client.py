from __future__ import annotations

import pytest
import requests
import responses
from responses import matchers

from packcrm_client_sdk.exceptions import NotFoundError, ServerError, TransportError
from packcrm_client_sdk.http_client import HttpClient
from packcrm_client_sdk.tracing import REQUEST_ID_HEADER

from conftest import BASE_URL


@responses.activate
def test_request_returns_json_and_sends_request_id(http: HttpClient) -> None:
    responses.add(responses.GET, f"{BASE_URL}/clients", json={"data": []}, status=200)

    payload = http.request("GET", "/clients", module="clients", operation="clients.list")

    assert payload == {"data": []}
    sent = responses.calls[0].request
    assert sent.headers[REQUEST_ID_HEADER]
    assert sent.headers["Accept"] == "application/json"
    assert http.last_operation is not None
    assert http.last_operation.operation == "clients.list"
    assert http.last_operation.result == "success"


@responses.activate
def test_request_adopts_server_request_id(http: HttpClient) -> None:
    responses.add(
        responses.GET,
        f"{BASE_URL}/events",
        json={"data": []},
        headers={"X-Request-ID": "srv-123"},
        status=200,
    )
    http.request("GET", "/events")
    assert http.context.request_id == "srv-123"


@responses.activate
def test_request_empty_body_returns_none(http: HttpClient) -> None:
    responses.add(responses.DELETE, f"{BASE_URL}/clients/c1", body=b"", status=204)
    assert http.request("DELETE", "/clients/c1") is None


@responses.activate
def test_request_raw_returns_bytes(http: HttpClient) -> None:
    responses.add(
        responses.GET,
        f"{BASE_URL}/export/clients",
        body=b"PK\x03\x04",
        content_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        status=200,
    )
    assert http.request("GET", "/export/clients", raw=True) == b"PK\x03\x04"


@responses.activate
def test_request_maps_error_payload(http: HttpClient) -> None:
    responses.add(
        responses.GET,
        f"{BASE_URL}/clients/missing",
        json={"success": False, "message": "Client not found"},
        status=404,
    )
    with pytest.raises(NotFoundError) as excinfo:
        http.request("GET", "/clients/missing")
    assert excinfo.value.server_message == "Client not found"
    assert http.last_operation.result == "error"


@responses.activate
def test_request_non_json_error_keeps_text_as_details(http: HttpClient) -> None:
    responses.add(responses.GET, f"{BASE_URL}/clients", body="Bad gateway", status=502)
    with pytest.raises(ServerError) as excinfo:
        http.request("GET", "/clients")
    assert excinfo.value.details == "Bad gateway"
    assert excinfo.value.server_message is None


@responses.activate
def test_request_does_not_retry_server_errors(http: HttpClient) -> None:
    responses.add(responses.GET, f"{BASE_URL}/clients", json={"message": "down"}, status=503)
    with pytest.raises(ServerError):
        http.request("GET", "/clients")
    assert len(responses.calls) == 1


@responses.activate
def test_request_transport_failure(http: HttpClient) -> None:
    responses.add(responses.GET, f"{BASE_URL}/clients", body=requests.ConnectionError("refused"))
    with pytest.raises(TransportError) as excinfo:
        http.request("GET", "/clients")
    assert excinfo.value.status_code == 0
    assert excinfo.value.code == "TRANSPORT_ERROR"


@responses.activate
def test_request_passes_query_params(http: HttpClient) -> None:
    responses.add(
        responses.GET,
        f"{BASE_URL}/clients",
        match=[matchers.query_param_matcher({"page": "2", "limit": "10", "search": "acme"})],
        json={"data": []},
        status=200,
    )
    http.request("GET", "/clients", params={"page": 2, "limit": 10, "search": "acme"})
    assert len(responses.calls) == 1
