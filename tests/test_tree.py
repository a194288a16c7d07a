import pytest

from campamento.exceptions import HierarchyError
from campamento.hierarchy.models import HierarchyNode, Level, root_node
from campamento.hierarchy.tree import (
    HierarchyTree,
    delete_node,
    find_node,
    get_children,
    insert_node,
    update_node,
)


def _vision_tree():
    """v1 -> (m1 -> o1, m2), v2."""
    tree = HierarchyTree(Level.VISION)
    tree = insert_node(tree, None, HierarchyNode(id="v1", level=Level.VISION, titulo="Salud"))
    tree = insert_node(tree, None, HierarchyNode(id="v2", level=Level.VISION, titulo="Carrera"))
    tree = insert_node(tree, "v1", HierarchyNode(id="m1", level=Level.META, titulo="Correr"))
    tree = insert_node(tree, "v1", HierarchyNode(id="m2", level=Level.META, titulo="Dormir"))
    tree = insert_node(tree, "m1", HierarchyNode(id="o1", level=Level.OBJETIVO, titulo="10K"))
    return tree


def test_insert_meta_under_vision():
    tree = HierarchyTree(Level.VISION)
    tree = insert_node(tree, None, HierarchyNode(id="v1", level=Level.VISION, titulo="V1"))

    meta = HierarchyNode(id="m1", level=Level.META, titulo="Learn X", parent_id="v1")
    tree = insert_node(tree, "v1", meta)

    assert tree.get("v1").child_ids == ("m1",)
    assert [n.id for n in get_children(tree, tree.get("v1"))] == ["m1"]
    assert find_node(tree, "m1").parent_id == "v1"


def test_insert_then_find_under_parent():
    tree = _vision_tree()
    task_parent = insert_node(
        tree, "o1", HierarchyNode(id="mi1", level=Level.MISION, titulo="Plan semanal")
    )

    walked = {node.id: depth for node, depth in task_parent.walk()}
    assert walked["mi1"] == 3
    assert task_parent.path_to("mi1")[0].id == "v1"
    assert "mi1" in [n.id for n in get_children(task_parent, task_parent.get("o1"))]


def test_insert_appends_in_order():
    tree = _vision_tree()
    tree = insert_node(tree, "v1", HierarchyNode(id="m3", level=Level.META, titulo="Comer"))
    assert tree.get("v1").child_ids == ("m1", "m2", "m3")
    assert tree.root_ids == ("v1", "v2")


def test_insert_unknown_parent_is_noop():
    tree = _vision_tree()
    result = insert_node(tree, "nope", HierarchyNode(id="m9", level=Level.META, titulo="X"))
    assert result is tree


def test_insert_rejects_duplicate_id():
    tree = _vision_tree()
    with pytest.raises(HierarchyError):
        insert_node(tree, "v2", HierarchyNode(id="m1", level=Level.META, titulo="Otra"))


def test_insert_rejects_wrong_level():
    tree = _vision_tree()
    with pytest.raises(HierarchyError):
        insert_node(tree, "v1", HierarchyNode(id="t1", level=Level.TAREA, titulo="Tarea"))
    with pytest.raises(HierarchyError):
        insert_node(tree, None, HierarchyNode(id="m9", level=Level.META, titulo="Raíz mala"))


def test_update_touches_only_target():
    tree = _vision_tree()
    updated = update_node(tree, "m1", {"titulo": "Correr más"})

    assert updated.get("m1").titulo == "Correr más"
    assert updated.get("m1").child_ids == ("o1",)
    for node_id in ("v1", "v2", "m2", "o1"):
        assert updated.get(node_id) is tree.get(node_id)
    # 原树不变
    assert tree.get("m1").titulo == "Correr"


def test_update_absent_or_unchanged_is_noop():
    tree = _vision_tree()
    assert update_node(tree, "missing", {"titulo": "X"}) is tree
    assert update_node(tree, "m1", {"titulo": "Correr"}) is tree


def test_update_rejects_structural_fields():
    tree = _vision_tree()
    with pytest.raises(ValueError):
        update_node(tree, "m1", {"parent_id": "v2"})


def test_delete_removes_subtree_and_is_idempotent():
    tree = _vision_tree()
    once = delete_node(tree, "m1")

    assert "m1" not in once
    assert "o1" not in once
    assert once.get("v1").child_ids == ("m2",)

    twice = delete_node(once, "m1")
    assert twice is once
    assert twice == once


def test_delete_root():
    tree = _vision_tree()
    result = delete_node(tree, "v1")
    assert result.root_ids == ("v2",)
    assert len(result) == 1


def test_get_children_edge_cases():
    tree = _vision_tree()
    assert [n.id for n in get_children(tree, None)] == ["v1", "v2"]
    assert [n.id for n in get_children(tree, root_node(Level.VISION))] == ["v1", "v2"]

    leaf = HierarchyNode(id="t1", level=Level.TAREA, titulo="Tarea")
    assert get_children(tree, leaf) == []

    gone = HierarchyNode(id="m404", level=Level.META, titulo="Borrada")
    assert get_children(tree, gone) == []


def test_trees_compare_by_value():
    assert _vision_tree() == _vision_tree()
    assert _vision_tree() != update_node(_vision_tree(), "v2", {"is_done": True})
