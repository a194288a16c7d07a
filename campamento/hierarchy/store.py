"""
HierarchyStore: owner of the canonical in-memory tree.

The tree is replaced wholesale by fetch_tree() or derived through the pure
functions in campamento.hierarchy.tree; nothing else writes it.
"""
from typing import TYPE_CHECKING, Any, List, Mapping, Optional, Protocol

from campamento.exceptions import CampamentoError
from campamento.hierarchy import tree as tree_ops
from campamento.hierarchy.models import HierarchyNode, Level
from campamento.hierarchy.tree import HierarchyTree
from campamento.logger import get_logger

if TYPE_CHECKING:
    from campamento.gateway.schemas import HierarchyPage, HierarchyQuery, Pagination

logger = get_logger("store")


class HierarchySource(Protocol):
    """The part of the gateway the store needs."""

    async def get_hierarchy(
        self,
        root_level: Level,
        query: Optional["HierarchyQuery"] = None,
    ) -> "HierarchyPage":
        ...


class HierarchyStore:
    """In-memory tree plus the fetch state a UI needs (loading, last error, pagination)."""

    def __init__(
        self,
        source: Optional[HierarchySource] = None,
        root_level: Level = Level.ORGANIZACION,
        tree: Optional[HierarchyTree] = None,
    ):
        self._source = source
        self._tree = tree if tree is not None else HierarchyTree(root_level)
        self.pagination: Optional["Pagination"] = None
        self.loading = False
        self.last_error: Optional[CampamentoError] = None

    @property
    def tree(self) -> HierarchyTree:
        return self._tree

    @property
    def root_level(self) -> Level:
        return self._tree.root_level

    @property
    def is_empty(self) -> bool:
        return len(self._tree) == 0

    # ------------------------------------------------------------------
    # Network
    # ------------------------------------------------------------------
    async def fetch_tree(self, query: Optional["HierarchyQuery"] = None) -> HierarchyTree:
        """
        Replace the whole tree with the API's hierarchy.

        On failure the previous tree is kept and the error is re-raised.
        Concurrent calls are not coalesced: the last one to complete wins.
        """
        page = await self.fetch_page(query)
        self.apply_page(page)
        return self._tree

    async def fetch_page(self, query: Optional["HierarchyQuery"] = None) -> "HierarchyPage":
        """Fetch the hierarchy without applying it."""
        if self._source is None:
            raise CampamentoError("El almacén no tiene una fuente de datos configurada")

        self.loading = True
        try:
            return await self._source.get_hierarchy(self.root_level, query)
        except CampamentoError as e:
            self.last_error = e
            logger.error("Error al cargar la jerarquía: %s", e.message)
            raise
        finally:
            self.loading = False

    def apply_page(self, page: "HierarchyPage") -> None:
        if page.tree.root_level != self.root_level:
            raise CampamentoError(
                f"La jerarquía recibida es de {page.tree.root_level.value}, se esperaba {self.root_level.value}"
            )
        self._tree = page.tree
        self.pagination = page.pagination
        self.last_error = None
        logger.info("Jerarquía cargada: %d raíces, %d nodos", len(page.tree.root_ids), len(page.tree))

    def clear(self) -> None:
        """Drop every node (logout / AuthError)."""
        self._tree = HierarchyTree(self.root_level)
        self.pagination = None
        self.last_error = None

    # ------------------------------------------------------------------
    # Optimistic local mutations
    # ------------------------------------------------------------------
    def insert_node(self, parent_id: Optional[str], node: HierarchyNode) -> HierarchyTree:
        self._tree = tree_ops.insert_node(self._tree, parent_id, node)
        return self._tree

    def update_node(self, node_id: str, patch: Mapping[str, Any]) -> HierarchyTree:
        self._tree = tree_ops.update_node(self._tree, node_id, patch)
        return self._tree

    def delete_node(self, node_id: str) -> HierarchyTree:
        self._tree = tree_ops.delete_node(self._tree, node_id)
        return self._tree

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def find_node(self, node_id: str) -> Optional[HierarchyNode]:
        return self._tree.get(node_id)

    def require_node(self, node_id: str) -> HierarchyNode:
        node = self._tree.get(node_id)
        if node is None:
            raise CampamentoError(f"No existe el elemento {node_id}", hint="Refresca la jerarquía")
        return node

    def get_children(self, node: Optional[HierarchyNode]) -> List[HierarchyNode]:
        return tree_ops.get_children(self._tree, node)
