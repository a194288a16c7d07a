import asyncio

import httpx
import pytest

from campamento.exceptions import (
    AuthError,
    GatewayError,
    NetworkError,
    NotFoundError,
    ServerError,
    ValidationError,
)
from campamento.gateway.client import HierarchyGateway
from campamento.gateway.schemas import HierarchyQuery
from campamento.hierarchy.models import Level
from fake_api import FakeCampamentoAPI


def _gateway_answering(status, payload=None):
    def handler(request):
        return httpx.Response(status, json=payload if payload is not None else {"error": "mensaje del servidor"})

    return HierarchyGateway(base_url="http://campamento.test", transport=httpx.MockTransport(handler))


def test_get_hierarchy_builds_tagged_tree():
    api = FakeCampamentoAPI().seed()

    async def run():
        async with api.gateway() as gateway:
            return await gateway.get_hierarchy(Level.ORGANIZACION)

    page = asyncio.run(run())
    tree = page.tree

    assert tree.root_ids == ("org1",)
    assert tree.get("org1").titulo == "Familia"
    assert tree.get("v1").level == Level.VISION
    assert tree.get("m1").parent_id == "v1"
    assert tree.get("o1").level == Level.OBJETIVO
    assert page.pagination.total == 1
    assert page.pagination.has_more is False


def test_hierarchy_query_params():
    seen = {}

    def handler(request):
        seen.update(request.url.params)
        return httpx.Response(200, json={"data": {"visiones": [], "pagination": {}}})

    gateway = HierarchyGateway(base_url="http://campamento.test", transport=httpx.MockTransport(handler))
    query = HierarchyQuery(page=2, limit=10, sort_by="titulo", sort_order="desc", search="", is_done=False)

    page = asyncio.run(gateway.get_hierarchy(Level.VISION, query))

    assert seen == {"page": "2", "limit": "10", "sortBy": "titulo", "sortOrder": "desc", "isDone": "false"}
    assert len(page.tree) == 0


def test_create_sends_parent_fk_and_returns_server_entity():
    api = FakeCampamentoAPI().seed()

    async def run():
        async with api.gateway() as gateway:
            return await gateway.create_item(Level.META, "Nadar", "Dos veces por semana", parent_id="v1")

    node = asyncio.run(run())

    method, path, body = api.requests[-1]
    assert (method, path) == ("POST", "/api/metas")
    assert body == {"titulo": "Nadar", "descripcion": "Dos veces por semana", "visionId": "v1"}
    assert node.level == Level.META
    assert node.parent_id == "v1"
    assert node.id == "meta-1"


def test_create_organizacion_uses_nombre():
    api = FakeCampamentoAPI()

    node = asyncio.run(api.gateway().create_item(Level.ORGANIZACION, "Trabajo"))

    assert api.requests[-1][2] == {"nombre": "Trabajo"}
    assert node.titulo == "Trabajo"
    assert node.is_done is False


def test_empty_titulo_fails_before_request():
    api = FakeCampamentoAPI().seed()

    with pytest.raises(ValidationError):
        asyncio.run(api.gateway().create_item(Level.META, "   ", parent_id="v1"))
    with pytest.raises(ValidationError):
        asyncio.run(api.gateway().update_item(Level.META, "m1", titulo=""))
    assert api.requests == []


def test_create_below_vision_requires_parent():
    with pytest.raises(ValidationError):
        asyncio.run(FakeCampamentoAPI().gateway().create_item(Level.TAREA, "Sin padre"))


def test_update_is_partial_and_uses_put_for_organizaciones():
    api = FakeCampamentoAPI().seed()

    async def run():
        gateway = api.gateway()
        meta = await gateway.update_item(Level.META, "m1", is_done=True)
        org = await gateway.update_item(Level.ORGANIZACION, "org1", titulo="Casa")
        await gateway.close()
        return meta, org

    meta, org = asyncio.run(run())

    assert api.requests[0] == ("POST", "/api/metas", {"id": "m1", "isDone": True})
    assert api.requests[1] == ("PUT", "/api/organizaciones", {"id": "org1", "nombre": "Casa"})
    assert meta.is_done is True
    assert meta.titulo == "Correr"
    assert meta.updated_at == "2024-02-02T00:00:00Z"
    assert org.titulo == "Casa"


def test_delete_unknown_id_is_not_found():
    api = FakeCampamentoAPI().seed()
    with pytest.raises(NotFoundError) as excinfo:
        asyncio.run(api.gateway().delete_item(Level.META, "m404"))
    assert excinfo.value.status_code == 404
    assert excinfo.value.endpoint == "/api/metas/m404"


@pytest.mark.parametrize(
    "status, error_type",
    [
        (400, ValidationError),
        (422, ValidationError),
        (401, AuthError),
        (403, AuthError),
        (404, NotFoundError),
        (500, ServerError),
        (503, ServerError),
        (418, GatewayError),
    ],
)
def test_status_mapping(status, error_type):
    gateway = _gateway_answering(status)
    with pytest.raises(error_type) as excinfo:
        asyncio.run(gateway.get_item(Level.VISION, "v1"))
    assert excinfo.value.status_code == status


def test_validation_error_carries_server_message():
    gateway = _gateway_answering(400, {"success": False, "error": "El título es obligatorio"})
    with pytest.raises(ValidationError) as excinfo:
        asyncio.run(gateway.create_item(Level.VISION, "Algo"))
    assert excinfo.value.message == "El título es obligatorio"
    assert "[400]" in excinfo.value.get_user_message()


def test_transport_failure_is_network_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    gateway = HierarchyGateway(base_url="http://campamento.test", transport=httpx.MockTransport(handler))
    with pytest.raises(NetworkError):
        asyncio.run(gateway.get_hierarchy(Level.ORGANIZACION))


def test_timeout_is_network_error():
    def handler(request):
        raise httpx.ReadTimeout("too slow", request=request)

    gateway = HierarchyGateway(base_url="http://campamento.test", transport=httpx.MockTransport(handler))
    with pytest.raises(NetworkError) as excinfo:
        asyncio.run(gateway.list_items(Level.TAREA))
    assert "30.0" in excinfo.value.message


def test_bearer_token_header():
    seen = {}

    def handler(request):
        seen["auth"] = request.headers.get("Authorization")
        return httpx.Response(200, json={"data": []})

    gateway = HierarchyGateway(
        base_url="http://campamento.test",
        token="secreto",
        transport=httpx.MockTransport(handler),
    )
    assert asyncio.run(gateway.list_items(Level.META)) == []
    assert seen["auth"] == "Bearer secreto"
