# Hierarchy core: tree model, store, navigation stack and its reconciliation.

from campamento.hierarchy.models import (
    HIERARCHY_ORDER,
    LEVELS,
    HierarchyNode,
    Level,
    LevelConfig,
    child_level,
    level_from_shape,
    root_node,
)
from campamento.hierarchy.tree import (
    HierarchyTree,
    delete_node,
    find_node,
    get_children,
    insert_node,
    update_node,
)
from campamento.hierarchy.store import HierarchyStore
from campamento.hierarchy.reconciliation import ReconcileOutcome, reconcile_stack
from campamento.hierarchy.navigation import NavigationController

__all__ = [
    "HIERARCHY_ORDER",
    "LEVELS",
    "HierarchyNode",
    "HierarchyStore",
    "HierarchyTree",
    "Level",
    "LevelConfig",
    "NavigationController",
    "ReconcileOutcome",
    "child_level",
    "delete_node",
    "find_node",
    "get_children",
    "insert_node",
    "level_from_shape",
    "reconcile_stack",
    "root_node",
    "update_node",
]
