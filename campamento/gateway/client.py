"""
HierarchyGateway: async httpx client for the hierarchy REST API.

Every response is wrapped as {"data": ...}. HTTP failures are mapped onto the
campamento.exceptions taxonomy; nothing is retried here.
"""
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from campamento.config_manager import CampamentoConfig
from campamento.exceptions import (
    AuthError,
    GatewayError,
    NetworkError,
    NotFoundError,
    ServerError,
    ValidationError,
)
from campamento.gateway import endpoints
from campamento.gateway.parsing import build_tree, node_from_wire
from campamento.gateway.schemas import (
    CreateItemRequest,
    HierarchyPage,
    HierarchyQuery,
    Pagination,
    UpdateItemRequest,
)
from campamento.hierarchy.models import LEVELS, HierarchyNode, Level
from campamento.logger import get_logger

logger = get_logger("gateway")


def build_async_client(
    base_url: str,
    timeout: float = 30.0,
    token: Optional[str] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """Create the httpx.AsyncClient with the API's base URL, headers and timeout."""
    headers = dict(endpoints.COMMON_HEADERS)
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return httpx.AsyncClient(
        base_url=base_url,
        timeout=httpx.Timeout(timeout),
        headers=headers,
        transport=transport,
    )


def _error_detail(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(data, dict):
        return str(data.get("error") or data.get("message") or response.reason_phrase)
    return response.reason_phrase


class HierarchyGateway:
    """CRUD per level plus the nested hierarchy fetch."""

    def __init__(
        self,
        base_url: str = "http://localhost:3000",
        token: Optional[str] = None,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url
        self.timeout = timeout
        self._client = client or build_async_client(base_url, timeout, token, transport)

    @classmethod
    def from_config(
        cls,
        config: CampamentoConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "HierarchyGateway":
        return cls(
            base_url=config.API_BASE_URL,
            token=config.API_TOKEN,
            timeout=float(config.API_TIMEOUT),
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "HierarchyGateway":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------
    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> Any:
        logger.debug("%s %s", method, path)
        try:
            response = await self._client.request(method, path, json=json, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise self._map_status_error(e.response, path)
        except httpx.TimeoutException:
            logger.warning("Timeout (%ss) en %s %s", self.timeout, method, path)
            raise NetworkError(f"Tiempo de espera agotado ({self.timeout}s)", endpoint=path)
        except httpx.TransportError as e:
            logger.warning("Fallo de red en %s %s: %s", method, path, e)
            raise NetworkError(endpoint=path)

        if not response.content:
            return None
        try:
            body = response.json()
        except ValueError:
            raise ServerError("Respuesta no JSON del servidor", response.status_code, path)
        if isinstance(body, dict) and "data" in body:
            return body["data"]
        return body

    @staticmethod
    def _map_status_error(response: httpx.Response, path: str) -> GatewayError:
        status = response.status_code
        detail = _error_detail(response)
        logger.warning("HTTP %s en %s: %s", status, path, detail)
        if status in (401, 403):
            return AuthError(detail, status, path)
        if status == 404:
            return NotFoundError(detail, path)
        if status in (400, 409, 422):
            return ValidationError(detail, status, path)
        if status >= 500:
            return ServerError(detail, status, path)
        return GatewayError(detail, status, path)

    # ------------------------------------------------------------------
    # Hierarchy
    # ------------------------------------------------------------------
    async def get_hierarchy(
        self,
        root_level: Level,
        query: Optional[HierarchyQuery] = None,
    ) -> HierarchyPage:
        """Fully nested tree; pagination applies to the root level only."""
        path = endpoints.hierarchy_path(root_level)
        params = query.to_params() if query else None
        data = await self._request("GET", path, params=params) or {}

        roots = data.get(LEVELS[root_level].plural, [])
        pagination = Pagination.model_validate(data.get("pagination") or {})
        return HierarchyPage(tree=build_tree(roots, root_level), pagination=pagination)

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------
    async def list_items(self, level: Level) -> List[HierarchyNode]:
        data = await self._request("GET", endpoints.collection_path(level)) or []
        return [node_from_wire(item, level) for item in data]

    async def get_item(self, level: Level, node_id: str) -> HierarchyNode:
        data = await self._request("GET", endpoints.item_path(level, node_id))
        return node_from_wire(data, level)

    async def create_item(
        self,
        level: Level,
        titulo: str,
        descripcion: Optional[str] = None,
        parent_id: Optional[str] = None,
    ) -> HierarchyNode:
        """create<Level>: returns the node with the id and timestamps the server assigned."""
        if LEVELS[level].parent_key and level != Level.VISION and not parent_id:
            raise ValidationError(f"Se requiere el padre para crear {LEVELS[level].singular_name}", None)
        try:
            request = CreateItemRequest(titulo=titulo, descripcion=descripcion, parent_id=parent_id)
        except PydanticValidationError as e:
            raise ValidationError(e.errors()[0]["msg"], None, endpoints.collection_path(level))

        data = await self._request("POST", endpoints.collection_path(level), json=request.to_payload(level))
        node = node_from_wire(data, level)
        logger.info("Creado %s %s", level.value, node.id)
        return node

    async def update_item(
        self,
        level: Level,
        node_id: str,
        titulo: Optional[str] = None,
        descripcion: Optional[str] = None,
        is_done: Optional[bool] = None,
    ) -> HierarchyNode:
        """update<Level>: partial patch, only supplied fields change."""
        try:
            request = UpdateItemRequest(id=node_id, titulo=titulo, descripcion=descripcion, is_done=is_done)
        except PydanticValidationError as e:
            raise ValidationError(e.errors()[0]["msg"], None, endpoints.collection_path(level))

        data = await self._request(
            endpoints.update_method(level),
            endpoints.collection_path(level),
            json=request.to_payload(level),
        )
        node = node_from_wire(data, level)
        logger.info("Actualizado %s %s", level.value, node.id)
        return node

    async def delete_item(self, level: Level, node_id: str) -> None:
        await self._request("DELETE", endpoints.item_path(level, node_id))
        logger.info("Eliminado %s %s", level.value, node_id)
