from __future__ import annotations

import asyncio
import json
from collections.abc import Callable  # noqa: TC003

import httpx
import pytest

from personsync.adapters.directory import DirectoryClient
from personsync.adapters.http_resilience import ResilienceConfig, ResilientClient, RetryPolicy
from personsync.config import DirectoryConfig, build_directory_resilience
from personsync.domain.ports.directory import DirectoryError, DirectoryPerson, DirectoryPort

BASE_URL = "https://directory.test/api/"


def _config() -> DirectoryConfig:
    return DirectoryConfig(
        base_url=BASE_URL,
        api_key="secret-token",
        resilience=build_directory_resilience(
            base_url=BASE_URL, api_key="secret-token", retry=RetryPolicy(total=0)
        ),
    )


def _make_client(
    handler: Callable[[httpx.Request], httpx.Response],
) -> DirectoryClient:
    def factory(resilience: ResilienceConfig) -> ResilientClient:
        return ResilientClient(resilience, transport=httpx.MockTransport(handler))

    return DirectoryClient(config=_config(), client_factory=factory)


def _person_json(person_id: int) -> dict[str, object]:
    return {
        "Id": person_id,
        "FirstName": "Ada",
        "LastName": "Lovelace",
        "Email": "ada@x.com",
        "IsSystem": False,
    }


def test_client_satisfies_directory_port() -> None:
    assert isinstance(_make_client(lambda _: httpx.Response(200)), DirectoryPort)


def test_find_person_sends_filter_and_token() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[_person_json(42), _person_json(43)])

    async def scenario() -> DirectoryPerson | None:
        async with _make_client(handler) as client:
            return await client.find_person("Ada", "O'Neil", "ada@x.com")

    person = asyncio.run(scenario())

    assert person == DirectoryPerson(
        id=42, first_name="Ada", last_name="Lovelace", email="ada@x.com"
    )
    request = seen[0]
    assert request.method == "GET"
    assert request.url.path == "/api/People"
    assert request.url.params["$filter"] == (
        "(Email eq 'ada@x.com') and (FirstName eq 'Ada') and (LastName eq 'O''Neil')"
    )
    assert request.headers["Authorization-Token"] == "secret-token"


def test_find_person_returns_none_for_empty_result() -> None:
    async def scenario() -> DirectoryPerson | None:
        async with _make_client(lambda _: httpx.Response(200, json=[])) as client:
            return await client.find_person("Ada", "Lovelace", "ada@x.com")

    assert asyncio.run(scenario()) is None


def test_find_person_error_status_becomes_directory_error() -> None:
    async def scenario() -> None:
        async with _make_client(lambda _: httpx.Response(500, text="boom")) as client:
            await client.find_person("Ada", "Lovelace", "ada@x.com")

    with pytest.raises(DirectoryError) as excinfo:
        asyncio.run(scenario())

    assert excinfo.value.operation == "find_person"
    assert excinfo.value.status == 500
    assert str(excinfo.value) == "Directory API error (find_person): 500 - boom"


def test_transport_failure_becomes_directory_error_without_status() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async def scenario() -> None:
        async with _make_client(handler) as client:
            await client.find_person("Ada", "Lovelace", "ada@x.com")

    with pytest.raises(DirectoryError) as excinfo:
        asyncio.run(scenario())

    assert excinfo.value.status is None
    assert str(excinfo.value) == "Directory API error (find_person): connection refused"


def test_unexpected_payload_becomes_directory_error() -> None:
    async def scenario() -> None:
        async with _make_client(lambda _: httpx.Response(200, json={"Id": 1})) as client:
            await client.find_person("Ada", "Lovelace", "ada@x.com")

    with pytest.raises(DirectoryError, match="Unexpected response payload"):
        asyncio.run(scenario())


def test_create_person_posts_body_sets_attribute_and_fetches_person() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.method == "POST" and request.url.path == "/api/People":
            return httpx.Response(201, text="42")
        if request.method == "POST" and request.url.path == "/api/People/AttributeValue/42":
            return httpx.Response(204)
        if request.method == "GET" and request.url.path == "/api/People/42":
            return httpx.Response(200, json=_person_json(42))
        return httpx.Response(404)

    async def scenario() -> DirectoryPerson:
        async with _make_client(handler) as client:
            return await client.create_person(
                "Ada", "Lovelace", "ada@x.com", "Imported", "2024 spring"
            )

    person = asyncio.run(scenario())

    assert person.id == 42
    create, attribute, fetch = seen
    body = json.loads(create.content)
    assert body["FirstName"] == "Ada"
    assert body["NickName"] == "Ada"
    assert body["LastName"] == "Lovelace"
    assert body["Email"] == "ada@x.com"
    assert body["RecordTypeValueId"] == 1
    assert body["CommunicationPreference"] == 1
    assert body["IsSystem"] is False
    assert attribute.url.params["attributeKey"] == "Imported"
    assert attribute.url.params["attributeValue"] == "2024 spring"
    assert fetch.method == "GET"


def test_create_person_without_id_in_response_fails() -> None:
    async def scenario() -> None:
        async with _make_client(lambda _: httpx.Response(201, json={"Status": "ok"})) as client:
            await client.create_person("Ada", "Lovelace", "ada@x.com", "Imported", "yes")

    with pytest.raises(DirectoryError) as excinfo:
        asyncio.run(scenario())

    assert excinfo.value.operation == "create_person"
    assert "No ID returned" in str(excinfo.value)


def test_failing_attribute_call_after_create_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/People":
            return httpx.Response(201, json={"Id": 7})
        return httpx.Response(500, text="attribute store down")

    async def scenario() -> None:
        async with _make_client(handler) as client:
            await client.create_person("Ada", "Lovelace", "ada@x.com", "Imported", "yes")

    with pytest.raises(DirectoryError) as excinfo:
        asyncio.run(scenario())

    assert excinfo.value.operation == "set_attribute"


def test_post_requests_are_not_retried() -> None:
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.method)
        return httpx.Response(503, text="unavailable")

    def factory(resilience: ResilienceConfig) -> ResilientClient:
        return ResilientClient(resilience, transport=httpx.MockTransport(handler))

    config = DirectoryConfig(
        base_url=BASE_URL,
        api_key="secret-token",
        resilience=build_directory_resilience(
            base_url=BASE_URL,
            api_key="secret-token",
            retry=RetryPolicy(total=2, backoff_factor=0.0, backoff_jitter=0.0),
        ),
    )

    async def scenario() -> None:
        async with DirectoryClient(config=config, client_factory=factory) as client:
            await client.set_attribute(7, "Imported", "yes")

    with pytest.raises(DirectoryError):
        asyncio.run(scenario())

    assert calls == ["POST"]
