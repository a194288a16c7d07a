"""
Wire payload <-> HierarchyNode / HierarchyTree conversion.

The nested hierarchy payload is walked once; each node's level comes from its
position under its parent, so no shape probing is needed except to detect the
root level of an untagged dump.
"""
from dataclasses import replace
from typing import Any, Dict, List, Mapping, Optional, Sequence

from campamento.exceptions import HierarchyError
from campamento.hierarchy.models import (
    LEVELS,
    ROOT_LEVELS,
    HierarchyNode,
    Level,
    child_level,
    level_from_shape,
)
from campamento.hierarchy.tree import HierarchyTree


def _is_done_from_wire(payload: Mapping[str, Any], level: Level) -> bool:
    if level == Level.ORGANIZACION:
        return False
    if "isDone" in payload:
        return bool(payload["isDone"])
    # 旧的任务数据使用 "completada"
    return bool(payload.get("completada", False))


def node_from_wire(
    payload: Mapping[str, Any],
    level: Level,
    parent_id: Optional[str] = None,
) -> HierarchyNode:
    """Build a childless node from one entity payload."""
    if "id" not in payload:
        raise HierarchyError(f"Entidad {level.value} sin id en la respuesta")

    titulo = payload.get("titulo")
    if level == Level.ORGANIZACION:
        titulo = payload.get("nombre", titulo)

    parent_key = LEVELS[level].parent_key
    if parent_id is None and parent_key:
        parent_id = payload.get(parent_key)

    return HierarchyNode(
        id=str(payload["id"]),
        level=level,
        titulo=titulo or "",
        descripcion=payload.get("descripcion"),
        is_done=_is_done_from_wire(payload, level),
        parent_id=parent_id,
        usuario_id=payload.get("usuarioId"),
        created_at=payload.get("createdAt"),
        updated_at=payload.get("updatedAt"),
    )


def node_to_wire(node: HierarchyNode) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "id": node.id,
        "titulo": node.titulo,
        "descripcion": node.descripcion,
        "isDone": node.is_done,
        "createdAt": node.created_at,
        "updatedAt": node.updated_at,
    }
    if node.usuario_id is not None:
        data["usuarioId"] = node.usuario_id
    config = LEVELS.get(node.level)
    if config and config.parent_key and node.parent_id is not None:
        data[config.parent_key] = node.parent_id
    return data


def detect_root_level(roots: Sequence[Mapping[str, Any]]) -> Level:
    """Root level of an untagged nested dump; Organización when it is empty."""
    if not roots:
        return Level.ORGANIZACION
    level = level_from_shape(roots[0])
    if level not in ROOT_LEVELS:
        raise HierarchyError(f"La raíz de la jerarquía no puede ser de tipo {level.value}")
    return level


def build_tree(
    roots: Sequence[Mapping[str, Any]],
    root_level: Optional[Level] = None,
) -> HierarchyTree:
    """
    Parse a nested hierarchy payload into a flat tree.

    A child whose parent FK names a different node than the one it is nested
    under is an orphan and is rejected, as are duplicate ids.
    """
    if root_level is None:
        root_level = detect_root_level(roots)

    nodes: Dict[str, HierarchyNode] = {}
    child_map: Dict[str, List[str]] = {}
    root_ids: List[str] = []

    # (payload, level, parent_id)
    pending = [(p, root_level, None) for p in reversed(roots)]
    while pending:
        payload, level, parent_id = pending.pop()
        node = node_from_wire(payload, level)
        if parent_id is None:
            node = replace(node, parent_id=None)
            root_ids.append(node.id)
        else:
            if node.parent_id not in (None, parent_id):
                raise HierarchyError(
                    f"{level.value} {node.id} apunta a {node.parent_id} pero está anidado bajo {parent_id}",
                    node.id,
                )
            child_map[parent_id].append(node.id)
            node = replace(node, parent_id=parent_id)

        if node.id in nodes:
            raise HierarchyError(f"Id duplicado en la jerarquía: {node.id}", node.id)
        nodes[node.id] = node
        child_map[node.id] = []

        children_key = LEVELS[level].children_key
        if children_key:
            next_level = child_level(level, root_level)
            children = payload.get(children_key) or []
            pending.extend((c, next_level, node.id) for c in reversed(children))

    for node_id, child_ids in child_map.items():
        if child_ids:
            nodes[node_id] = replace(nodes[node_id], child_ids=tuple(child_ids))

    return HierarchyTree(root_level, nodes, root_ids)


def tree_to_wire(tree: HierarchyTree) -> List[Dict[str, Any]]:
    """Nested payload in the same shape get<root>Hierarchy returns."""

    def build(node: HierarchyNode) -> Dict[str, Any]:
        data = node_to_wire(node)
        if node.level == Level.ORGANIZACION:
            data["nombre"] = data.pop("titulo")
        children_key = LEVELS[node.level].children_key
        if children_key:
            data[children_key] = [build(tree.get(c)) for c in node.child_ids]
        return data

    return [build(root) for root in tree.roots()]
