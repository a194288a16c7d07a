"""
Stack reconciliation.

Every fetch produces brand-new node records, so the navigation stack built
from the previous tree must be re-pointed at the live records by id.
"""
from enum import Enum
from typing import Sequence, Tuple

from campamento.hierarchy.models import HierarchyNode
from campamento.hierarchy.tree import HierarchyTree
from campamento.logger import get_logger

logger = get_logger("reconciliation")


class ReconcileOutcome(str, Enum):
    UNCHANGED = "unchanged"  # 全部找到，无可见变化
    REFRESHED = "refreshed"  # 全部找到，至少一个有变化
    STALE = "stale"          # 有 id 缺失；栈保持原样


def _differs(old: HierarchyNode, new: HierarchyNode) -> bool:
    return (
        old.titulo != new.titulo
        or old.descripcion != new.descripcion
        or len(old.child_ids) != len(new.child_ids)
    )


def reconcile_stack(
    stack: Sequence[HierarchyNode],
    tree: HierarchyTree,
) -> Tuple[Sequence[HierarchyNode], ReconcileOutcome]:
    """
    Resolve each stack entry against `tree` by id.

    Returns the new stack and what happened. The input object itself is
    returned unless every entry was found and at least one changed; a missing
    id never truncates or guesses a fallback.
    """
    if not stack:
        return stack, ReconcileOutcome.UNCHANGED

    matched = []
    for entry in stack:
        live = tree.get(entry.id)
        if live is None:
            logger.warning(
                "Nodo %s (%s) ya no está en la jerarquía; la ruta de navegación queda desactualizada",
                entry.id,
                entry.level.value,
            )
            return stack, ReconcileOutcome.STALE
        matched.append(live)

    if not any(_differs(old, new) for old, new in zip(stack, matched)):
        return stack, ReconcileOutcome.UNCHANGED

    logger.debug("Ruta de navegación actualizada (%d niveles)", len(matched))
    return tuple(matched), ReconcileOutcome.REFRESHED
