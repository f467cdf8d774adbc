"""
Async Cachet API client.

Thin wrapper around a shared aiohttp session that speaks the Cachet v1
REST API:
  - GET requests for ping, listing, searching and fetching by ID
  - POST / PUT requests for incident and component writes

Every response is expected to be a JSON object carrying a ``data`` key.
Anything else, and any network failure, raises TransportError; the caller
never sees a half-decoded response.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Mapping, Optional

import aiohttp

from statushook.errors import ArgumentError, NotFoundError, TransportError
from statushook.models import (
    ClientConfig,
    Component,
    ComponentStatus,
    Incident,
    IncidentStatus,
    ResourceType,
)

DEFAULT_PAGE_SIZE = 100


class CachetClient:
    """
    Client for a single Cachet instance.

    Attributes:
        config: Connection settings (URL and credentials).
        timeout: Total timeout, in seconds, for each request.
        page_size: Records requested per page from list endpoints.
    """

    def __init__(
        self,
        config: ClientConfig,
        session: aiohttp.ClientSession,
        timeout: float = 15.0,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        self.config = config
        self.timeout = timeout
        self.page_size = page_size
        self._session = session

    # ─── Reads ────────────────────────────────────────────────

    async def ping(self) -> Any:
        return await self._request("GET", "ping")

    async def is_working(self) -> bool:
        return await self.ping() == "Pong!"

    async def get_all(self, resource: ResourceType) -> List[Dict[str, Any]]:
        return await self._get_pages(resource, {})

    async def search(
        self,
        resource: ResourceType,
        filters: Mapping[str, Any],
    ) -> List[Dict[str, Any]]:
        """Return all records of ``resource`` whose fields equal ``filters``."""
        params = {key: str(value) for key, value in filters.items()}
        return await self._get_pages(resource, params)

    async def get_by_id(self, resource: ResourceType, record_id: Any) -> Dict[str, Any]:
        if not record_id:
            raise ArgumentError(f"No id supplied for {resource.value} lookup")
        return await self._request("GET", f"{resource.value}/{record_id}")

    async def get_component_by_id(self, component_id: int) -> Component:
        return Component.from_api(await self.get_by_id(ResourceType.COMPONENTS, component_id))

    async def get_incident_by_id(self, incident_id: int) -> Incident:
        return Incident.from_api(await self.get_by_id(ResourceType.INCIDENTS, incident_id))

    # ─── Writes ───────────────────────────────────────────────

    async def create_incident(
        self,
        name: str,
        status: IncidentStatus,
        message: str,
        component_id: int,
        component_status: ComponentStatus,
        notify: bool = False,
        visible: bool = True,
    ) -> Incident:
        payload = _incident_payload(
            name, status, message, component_id, component_status, notify, visible
        )
        data = await self._request("POST", "incidents", json=payload, auth_required=True)
        return Incident.from_api(data)

    async def update_incident(
        self,
        incident_id: int,
        name: str,
        status: IncidentStatus,
        message: str,
        component_id: Optional[int],
        component_status: ComponentStatus,
        notify: bool = False,
        visible: bool = True,
    ) -> Incident:
        if not incident_id:
            raise ArgumentError("No id supplied for incident update")
        payload = _incident_payload(
            name, status, message, component_id, component_status, notify, visible
        )
        data = await self._request(
            "PUT", f"incidents/{incident_id}", json=payload, auth_required=True
        )
        return Incident.from_api(data)

    async def set_component_status(
        self,
        component_id: int,
        status: ComponentStatus,
    ) -> Component:
        if not component_id:
            raise ArgumentError("No id supplied for component status update")
        data = await self._request(
            "PUT",
            f"components/{component_id}",
            json={"status": int(status)},
            auth_required=True,
        )
        return Component.from_api(data)

    # ─── Transport ────────────────────────────────────────────

    async def _get_pages(
        self,
        resource: ResourceType,
        params: Dict[str, str],
    ) -> List[Dict[str, Any]]:
        """
        Fetch every page of a list endpoint.

        Cachet pages list results (20 per page by default) and describes
        the rest in ``meta.pagination``; keep requesting until the last
        page has been read.
        """
        records: List[Dict[str, Any]] = []
        page = 1
        while True:
            page_params = dict(params, per_page=str(self.page_size), page=str(page))
            body = await self._send("GET", resource.value, params=page_params)
            data = body["data"]
            if not isinstance(data, list):
                raise TransportError(
                    f"Expected a list of {resource.value}, got {type(data).__name__}"
                )
            records.extend(data)

            if not data or not _has_next_page(body, page):
                return records
            page += 1

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, str]] = None,
        json: Optional[Dict[str, Any]] = None,
        auth_required: bool = False,
    ) -> Any:
        body = await self._send(
            method, path, params=params, json=json, auth_required=auth_required
        )
        return body["data"]

    async def _send(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, str]] = None,
        json: Optional[Dict[str, Any]] = None,
        auth_required: bool = False,
    ) -> Dict[str, Any]:
        self.config.check(auth_required)

        url = self.config.api_url + path
        headers: Dict[str, str] = {"Accept": "application/json"}
        headers.update(self.config.auth_headers())

        try:
            async with self._session.request(
                method,
                url,
                params=params,
                json=json,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as resp:
                if resp.status == 404:
                    raise NotFoundError(f"{method} {url}: not found")
                if resp.status >= 400:
                    raise TransportError(
                        f"{method} {url} failed with HTTP {resp.status}",
                        status_code=resp.status,
                    )
                body = await resp.json(content_type=None)
        except aiohttp.ClientError as exc:
            raise TransportError(f"{method} {url} failed: {exc}") from exc
        except asyncio.TimeoutError as exc:
            raise TransportError(f"{method} {url} timed out after {self.timeout}s") from exc
        except ValueError as exc:
            raise TransportError(f"{method} {url} returned invalid JSON: {exc}") from exc

        if not isinstance(body, dict) or "data" not in body:
            raise TransportError(f"{method} {url} returned no data")
        return body


def _has_next_page(body: Dict[str, Any], page: int) -> bool:
    """Whether ``meta.pagination`` says there are pages after ``page``."""
    meta = body.get("meta")
    if not isinstance(meta, dict):
        return False
    pagination = meta.get("pagination")
    if not isinstance(pagination, dict):
        return False

    links = pagination.get("links") or {}
    if isinstance(links, dict) and links.get("next_page"):
        return True
    try:
        return int(pagination.get("current_page", page)) < int(pagination.get("total_pages", 0))
    except (TypeError, ValueError) as exc:
        raise TransportError(f"Invalid pagination metadata: {pagination!r}") from exc


def _incident_payload(
    name: str,
    status: IncidentStatus,
    message: str,
    component_id: Optional[int],
    component_status: ComponentStatus,
    notify: bool,
    visible: bool,
) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "name": name,
        "status": int(status),
        "message": message,
        "component_status": int(component_status),
        "notify": notify,
        "visible": 1 if visible else 0,
    }
    if component_id:
        payload["component_id"] = component_id
    return payload
