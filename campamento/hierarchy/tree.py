"""
HierarchyTree: flat id -> record index of the whole forest.

Records hold their parent_id and ordered child_ids, so lookups, inserts,
updates and deletes never walk nested arrays. Trees are values: the module
level functions return a new tree and share every untouched record with the
old one.
"""
from dataclasses import replace
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from campamento.exceptions import HierarchyError
from campamento.hierarchy.models import HierarchyNode, Level, child_level


class HierarchyTree:
    """Immutable snapshot of the hierarchy. Use the module functions to derive new ones."""

    __slots__ = ("_root_level", "_nodes", "_root_ids")

    def __init__(
        self,
        root_level: Level = Level.ORGANIZACION,
        nodes: Optional[Mapping[str, HierarchyNode]] = None,
        root_ids: Sequence[str] = (),
    ):
        self._root_level = root_level
        self._nodes: Dict[str, HierarchyNode] = dict(nodes or {})
        self._root_ids: Tuple[str, ...] = tuple(root_ids)

    @classmethod
    def _derive(
        cls,
        base: "HierarchyTree",
        nodes: Dict[str, HierarchyNode],
        root_ids: Tuple[str, ...],
    ) -> "HierarchyTree":
        tree = cls.__new__(cls)
        tree._root_level = base._root_level
        tree._nodes = nodes
        tree._root_ids = root_ids
        return tree

    @property
    def root_level(self) -> Level:
        return self._root_level

    @property
    def root_ids(self) -> Tuple[str, ...]:
        return self._root_ids

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HierarchyTree):
            return NotImplemented
        return (
            self._root_level == other._root_level
            and self._root_ids == other._root_ids
            and self._nodes == other._nodes
        )

    def __repr__(self) -> str:
        return f"HierarchyTree(root_level={self._root_level.value}, roots={len(self._root_ids)}, nodes={len(self._nodes)})"

    def get(self, node_id: str) -> Optional[HierarchyNode]:
        return self._nodes.get(node_id)

    def roots(self) -> List[HierarchyNode]:
        return [self._nodes[i] for i in self._root_ids]

    def children_ids(self, node_id: Optional[str]) -> Tuple[str, ...]:
        if node_id is None:
            return self._root_ids
        node = self._nodes.get(node_id)
        return node.child_ids if node else ()

    def walk(self) -> Iterator[Tuple[HierarchyNode, int]]:
        """Depth-first, pre-order, in child order. Yields (node, depth)."""
        stack = [(i, 0) for i in reversed(self._root_ids)]
        while stack:
            node_id, depth = stack.pop()
            node = self._nodes[node_id]
            yield node, depth
            stack.extend((c, depth + 1) for c in reversed(node.child_ids))

    def path_to(self, node_id: str) -> List[HierarchyNode]:
        """Nodes from the tree root down to node_id inclusive; empty if absent."""
        path: List[HierarchyNode] = []
        current = self._nodes.get(node_id)
        while current is not None:
            path.append(current)
            current = self._nodes.get(current.parent_id) if current.parent_id else None
        path.reverse()
        return path


def find_node(tree: HierarchyTree, node_id: str) -> Optional[HierarchyNode]:
    return tree.get(node_id)


def get_children(tree: HierarchyTree, node: Optional[HierarchyNode]) -> List[HierarchyNode]:
    """
    Immediate children of `node` in the live tree.

    None or the root marker yields the root list; a leaf yields []. A node
    that is no longer in the tree has no children.
    """
    if node is None or node.level == Level.ROOT:
        return tree.roots()
    if node.is_leaf:
        return []
    return [tree.get(i) for i in tree.children_ids(node.id)]


def insert_node(tree: HierarchyTree, parent_id: Optional[str], node: HierarchyNode) -> HierarchyTree:
    """
    Append `node` as the last child of parent_id, or as a new root when None.

    The node must come from the API (id and timestamps assigned). Unknown
    parent_id is a no-op.
    """
    if node.id in tree:
        raise HierarchyError(f"Id duplicado en la jerarquía: {node.id}", node.id)
    if node.child_ids:
        raise HierarchyError("Solo se pueden insertar nodos sin hijos", node.id)

    if parent_id is None:
        if node.level != tree.root_level:
            raise HierarchyError(
                f"Un nodo {node.level.value} no puede ser raíz de una jerarquía de {tree.root_level.value}",
                node.id,
            )
        nodes = dict(tree._nodes)
        nodes[node.id] = node
        return HierarchyTree._derive(tree, nodes, tree.root_ids + (node.id,))

    parent = tree.get(parent_id)
    if parent is None:
        return tree

    expected = child_level(parent.level, tree.root_level)
    if expected is None or node.level != expected:
        raise HierarchyError(
            f"Un nodo {node.level.value} no puede colgar de {parent.level.value}",
            node.id,
        )

    nodes = dict(tree._nodes)
    nodes[parent_id] = replace(parent, child_ids=parent.child_ids + (node.id,))
    nodes[node.id] = replace(node, parent_id=parent_id)
    return HierarchyTree._derive(tree, nodes, tree.root_ids)


def update_node(tree: HierarchyTree, node_id: str, patch: Mapping[str, Any]) -> HierarchyTree:
    """Merge `patch` into the node with node_id. Unknown id, or no real change, is a no-op."""
    node = tree.get(node_id)
    if node is None:
        return tree
    patched = node.with_patch(patch)
    if patched is node:
        return tree
    nodes = dict(tree._nodes)
    nodes[node_id] = patched
    return HierarchyTree._derive(tree, nodes, tree.root_ids)


def delete_node(tree: HierarchyTree, node_id: str) -> HierarchyTree:
    """Remove node_id and its whole subtree. Unknown id is a no-op."""
    node = tree.get(node_id)
    if node is None:
        return tree

    nodes = dict(tree._nodes)
    pending = [node_id]
    while pending:
        removed = nodes.pop(pending.pop())
        pending.extend(removed.child_ids)

    root_ids = tree.root_ids
    parent = nodes.get(node.parent_id) if node.parent_id else None
    if parent is not None and node_id in parent.child_ids:
        nodes[parent.id] = replace(
            parent, child_ids=tuple(i for i in parent.child_ids if i != node_id)
        )
    else:
        root_ids = tuple(i for i in root_ids if i != node_id)
    return HierarchyTree._derive(tree, nodes, root_ids)
