"""HTTP client for the person directory API."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from personsync.adapters.http_resilience import ResilientClient
from personsync.domain.ports.directory import DirectoryError

from .schema import CreatePersonRequest, PersonListAdapter, PersonPayload, parse_created_id
from .translator import build_person_filter, translate_person

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from personsync.config.directory import DirectoryConfig
    from personsync.config.http_resilience import ResilienceConfig
    from personsync.domain.ports.directory import DirectoryId, DirectoryPerson

log = getLogger(__name__)

PEOPLE_PATH = "People"


class DirectoryClient:
    """Async client exposing find/create/set-attribute against the directory.

    Every failure surfaces as :class:`DirectoryError`: transport errors, non-2xx
    responses and payloads that do not decode. One underlying HTTP client (and so
    one rate limiter) is shared by all calls until :meth:`aclose`.
    """

    def __init__(
        self,
        *,
        config: DirectoryConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient
        self._http: ResilientClient | None = None

    async def __aenter__(self) -> DirectoryClient:
        self._ensure_http()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    async def find_person(
        self, first_name: str, last_name: str, email: str
    ) -> DirectoryPerson | None:
        response = await self._request(
            "find_person",
            "GET",
            PEOPLE_PATH,
            params={"$filter": build_person_filter(first_name, last_name, email)},
        )
        try:
            people = PersonListAdapter.validate_json(response.content)
        except ValidationError as exc:
            raise self._decode_error("find_person", response, exc) from exc
        if not people:
            return None
        if len(people) > 1:
            log.debug("Directory returned %s matches; using id %s", len(people), people[0].id)
        return translate_person(people[0])

    async def get_person(self, person_id: DirectoryId) -> DirectoryPerson:
        response = await self._request("get_person", "GET", f"{PEOPLE_PATH}/{person_id}")
        try:
            payload = PersonPayload.model_validate_json(response.content)
        except ValidationError as exc:
            raise self._decode_error("get_person", response, exc) from exc
        return translate_person(payload)

    async def create_person(
        self,
        first_name: str,
        last_name: str,
        email: str,
        attribute_key: str,
        attribute_value: str,
    ) -> DirectoryPerson:
        body = CreatePersonRequest.for_import(first_name, last_name, email)
        response = await self._request(
            "create_person",
            "POST",
            PEOPLE_PATH,
            json=body.model_dump(by_alias=True),
        )
        person_id = parse_created_id(response.text)
        if person_id is None:
            log.error("Directory create response carried no person id: %s", response.text)
            raise DirectoryError(
                "create_person",
                status=response.status_code,
                body=f"No ID returned from person creation: {response.text}",
            )
        log.info("Created directory person %s", person_id)

        await self.set_attribute(person_id, attribute_key, attribute_value)
        return await self.get_person(person_id)

    async def set_attribute(
        self, person_id: DirectoryId, attribute_key: str, attribute_value: str
    ) -> None:
        await self._request(
            "set_attribute",
            "POST",
            f"{PEOPLE_PATH}/AttributeValue/{person_id}",
            params={"attributeKey": attribute_key, "attributeValue": attribute_value},
        )
        log.debug("Set attribute %s on directory person %s", attribute_key, person_id)

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json: object | None = None,
    ) -> httpx.Response:
        client = self._ensure_http()
        try:
            if json is None:
                response = await client.request(method, path, params=params)
            else:
                response = await client.request(method, path, params=params, json=json)
        except httpx.HTTPError as exc:
            log.error("Directory API transport error (%s): %s", operation, exc)
            raise DirectoryError(operation, status=None, body=str(exc) or type(exc).__name__) from exc

        if not response.is_success:
            log.error(
                "Directory API error (%s): %s %s", operation, response.status_code, response.text
            )
            raise DirectoryError(operation, status=response.status_code, body=response.text)
        return response

    def _ensure_http(self) -> ResilientClient:
        if self._http is None:
            self._http = self._client_factory(self._resilience)
        return self._http

    @staticmethod
    def _decode_error(
        operation: str, response: httpx.Response, exc: ValidationError
    ) -> DirectoryError:
        log.error("Unexpected directory payload (%s): %s", operation, exc)
        return DirectoryError(
            operation,
            status=response.status_code,
            body=f"Unexpected response payload: {response.text}",
        )
