# Gateway: the remote hierarchy REST API, treated by the core as a black box.

from campamento.gateway.client import HierarchyGateway, build_async_client
from campamento.gateway.parsing import build_tree, node_from_wire, tree_to_wire
from campamento.gateway.schemas import HierarchyPage, HierarchyQuery, Pagination

__all__ = [
    "HierarchyGateway",
    "HierarchyPage",
    "HierarchyQuery",
    "Pagination",
    "build_async_client",
    "build_tree",
    "node_from_wire",
    "tree_to_wire",
]
