import pytest

from campamento.hierarchy.models import (
    HIERARCHY_ORDER,
    LEVELS,
    ROOT_NODE_ID,
    HierarchyNode,
    Level,
    child_level,
    has_children,
    level_depth,
    parent_level,
    root_node,
)


def test_level_chain():
    assert child_level(Level.ROOT) == Level.ORGANIZACION
    assert child_level(Level.ROOT, Level.VISION) == Level.VISION
    assert child_level(Level.MISION) == Level.TAREA
    assert child_level(Level.TAREA) is None

    assert parent_level(Level.META) == Level.VISION
    assert parent_level(Level.ORGANIZACION) is None
    assert parent_level(Level.ROOT) is None

    for level in HIERARCHY_ORDER[1:]:
        assert LEVELS[level].parent_key is not None
        assert child_level(parent_level(level)) == level


def test_level_depth_is_relative_to_root():
    assert level_depth(Level.ROOT) == -1
    assert level_depth(Level.ORGANIZACION) == 0
    assert level_depth(Level.TAREA) == 5
    assert level_depth(Level.VISION, Level.VISION) == 0
    assert level_depth(Level.TAREA, Level.VISION) == 4


def test_leaves_and_labels():
    assert has_children(Level.ROOT)
    assert not has_children(Level.TAREA)
    assert HierarchyNode(id="t", level=Level.TAREA, titulo="T").is_leaf
    assert LEVELS[Level.META].create_label == "+ Nuevo Objetivo"
    assert LEVELS[Level.TAREA].create_label is None


def test_root_marker():
    marker = root_node()
    assert marker.id == ROOT_NODE_ID
    assert marker.is_root
    assert marker.titulo == "Mis Organizaciones"
    assert root_node(Level.VISION).titulo == "Mis Visiones"


def test_with_patch():
    node = HierarchyNode(id="m1", level=Level.META, titulo="Correr")
    assert node.with_patch({"titulo": "Correr"}) is node

    patched = node.with_patch({"is_done": True, "updated_at": "2024-02-02"})
    assert patched.is_done is True
    assert patched.titulo == "Correr"
    assert node.is_done is False

    with pytest.raises(ValueError):
        node.with_patch({"level": Level.TAREA})
