"""
NavigationController: the drill-down path from the root to the node on screen.

The stack is a tuple replaced wholesale on every change, so an unchanged
stack keeps its identity (callers can use `is` to skip re-rendering).
"""
from typing import List, Optional, Tuple

from campamento.exceptions import NavigationError
from campamento.hierarchy.models import HierarchyNode, Level, child_level, root_node
from campamento.hierarchy.reconciliation import ReconcileOutcome, reconcile_stack
from campamento.hierarchy.store import HierarchyStore
from campamento.logger import get_logger

logger = get_logger("navigation")

HOME_LABEL = "Inicio"


class NavigationController:
    """Stack-based navigation over the tree held by a HierarchyStore."""

    def __init__(self, store: HierarchyStore):
        self._store = store
        self._stack: Tuple[HierarchyNode, ...] = ()

    @property
    def stack(self) -> Tuple[HierarchyNode, ...]:
        return self._stack

    @property
    def depth(self) -> int:
        return len(self._stack)

    @property
    def is_at_root(self) -> bool:
        return not self._stack

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    def navigate_forward(self, node: HierarchyNode) -> None:
        """Push `node`. The caller picks it from current_children()."""
        if self._stack and self._stack[-1].is_leaf:
            logger.warning("Navegando desde una hoja (%s) hacia %s", self._stack[-1].id, node.id)
        self._stack = self._stack + (node,)
        logger.debug("forward -> %s (depth %d)", node.id, len(self._stack))

    def navigate_back(self) -> None:
        if not self._stack:
            return
        self._stack = self._stack[:-1]
        logger.debug("back (depth %d)", len(self._stack))

    def navigate_to_index(self, index: int) -> None:
        """Keep entries [0, index]. -1 returns to the root; past the end is a no-op."""
        if index < -1:
            raise NavigationError(f"Índice de navegación inválido: {index}")
        if index + 1 >= len(self._stack):
            return
        self._stack = self._stack[: index + 1]
        logger.debug("jump -> index %d", index)

    def reset_navigation(self) -> None:
        if self._stack:
            self._stack = ()

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------
    def current_node(self) -> HierarchyNode:
        """Top of the stack, or the root marker when at the root."""
        if self._stack:
            return self._stack[-1]
        return root_node(self._store.tree.root_level)

    def current_children(self) -> List[HierarchyNode]:
        return self._store.get_children(self.current_node())

    def current_level(self) -> Level:
        return self.current_node().level

    def child_level(self) -> Optional[Level]:
        """Level a "create" action at the current node would produce."""
        return child_level(self.current_level(), self._store.tree.root_level)

    def breadcrumbs(self) -> List[Tuple[int, str]]:
        """(index, label) pairs for navigate_to_index; empty at the root."""
        if not self._stack:
            return []
        crumbs = [(-1, HOME_LABEL)]
        crumbs.extend((i, node.titulo) for i, node in enumerate(self._stack))
        return crumbs

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------
    def reconcile(self) -> ReconcileOutcome:
        """Re-point the stack at the store's current tree."""
        new_stack, outcome = reconcile_stack(self._stack, self._store.tree)
        if outcome == ReconcileOutcome.REFRESHED:
            self._stack = tuple(new_stack)
        return outcome
