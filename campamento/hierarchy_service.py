"""
Hierarchy service: CRUD orchestration over the gateway, store and navigation.

Every write goes to the API first. On success the local tree is brought up to
date according to the refresh policy and the navigation stack is reconciled.
"""
from typing import Any, Awaitable, Callable, Dict, Optional

from campamento.config_manager import RefreshPolicy
from campamento.exceptions import AuthError, HierarchyError, NotFoundError
from campamento.gateway.client import HierarchyGateway
from campamento.hierarchy.models import HierarchyNode, Level, child_level
from campamento.hierarchy.navigation import NavigationController
from campamento.hierarchy.store import HierarchyStore
from campamento.logger import get_logger

logger = get_logger("service")


class HierarchyService:
    """Application service for hierarchy writes."""

    def __init__(
        self,
        gateway: HierarchyGateway,
        store: HierarchyStore,
        navigation: NavigationController,
        refresh: Optional[Callable[[], Awaitable[Any]]] = None,
        policy: RefreshPolicy = RefreshPolicy.OPTIMISTIC,
        on_auth_error: Optional[Callable[[], None]] = None,
    ):
        self.gateway = gateway
        self.store = store
        self.navigation = navigation
        self.policy = policy
        self._refresh = refresh
        self._on_auth_error = on_auth_error

    # ---------------------------------------------------------------------
    # Refresh
    # ---------------------------------------------------------------------
    async def refresh(self) -> None:
        """Full refetch plus stack reconciliation."""
        if self._refresh is not None:
            await self._refresh()
            return
        await self._call("recargar", self.store.fetch_tree())
        self.navigation.reconcile()

    async def _after_write(self, apply: Callable[[], Any]) -> None:
        if self.policy == RefreshPolicy.REFETCH:
            await self.refresh()
            return
        try:
            apply()
        except HierarchyError as e:
            # 本地树与服务端不一致，退回整树拉取
            logger.warning("Parche local rechazado (%s); recargando la jerarquía", e.message)
            await self.refresh()
            return
        self.navigation.reconcile()

    async def _call(self, action: str, request: Awaitable[Any], resync_on_missing: bool = False) -> Any:
        try:
            return await request
        except AuthError:
            logger.error("%s: sesión inválida, se descarta el estado local", action)
            if self._on_auth_error is not None:
                self._on_auth_error()
            else:
                self.store.clear()
                self.navigation.reset_navigation()
            raise
        except NotFoundError as e:
            logger.error("%s: %s", action, e.message)
            if resync_on_missing:
                await self.refresh()
            raise

    # ---------------------------------------------------------------------
    # Writes
    # ---------------------------------------------------------------------
    def child_level_of(self, parent: HierarchyNode) -> Level:
        level = child_level(parent.level, self.store.root_level)
        if level is None:
            raise HierarchyError(f"Una {parent.config.singular_name} no puede tener hijos", parent.id)
        return level

    async def create_child(
        self,
        parent: HierarchyNode,
        titulo: str,
        descripcion: Optional[str] = None,
    ) -> HierarchyNode:
        """
        Create a node one level below `parent`.

        With the root marker as parent a root entity (Organización or Visión)
        is created.
        """
        level = self.child_level_of(parent)
        parent_id = None if parent.is_root else parent.id

        node = await self._call(
            "crear",
            self.gateway.create_item(level, titulo, descripcion, parent_id),
        )
        await self._after_write(lambda: self.store.insert_node(parent_id, node))
        return node

    async def update_item(
        self,
        node: HierarchyNode,
        titulo: Optional[str] = None,
        descripcion: Optional[str] = None,
    ) -> HierarchyNode:
        updated = await self._call(
            "actualizar",
            self.gateway.update_item(node.level, node.id, titulo=titulo, descripcion=descripcion),
            resync_on_missing=True,
        )
        await self._after_write(lambda: self.store.update_node(node.id, _patch_from(updated)))
        return updated

    async def toggle_done(self, node: HierarchyNode) -> HierarchyNode:
        """Flip is_done on this node only; descendants are untouched."""
        if node.level == Level.ORGANIZACION:
            raise HierarchyError("Una organización no se puede completar", node.id)
        current = self.store.find_node(node.id) or node
        updated = await self._call(
            "completar",
            self.gateway.update_item(node.level, node.id, is_done=not current.is_done),
            resync_on_missing=True,
        )
        await self._after_write(lambda: self.store.update_node(node.id, _patch_from(updated)))
        return updated

    async def delete_item(self, node: HierarchyNode) -> None:
        await self._call(
            "eliminar",
            self.gateway.delete_item(node.level, node.id),
            resync_on_missing=True,
        )
        await self._after_write(lambda: self.store.delete_node(node.id))


def _patch_from(node: HierarchyNode) -> Dict[str, Any]:
    return {
        "titulo": node.titulo,
        "descripcion": node.descripcion,
        "is_done": node.is_done,
        "updated_at": node.updated_at,
    }
