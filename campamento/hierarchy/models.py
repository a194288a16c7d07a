"""
Hierarchy models: Organización -> Visión -> Meta -> Objetivo -> Misión -> Tarea.

Every node carries an explicit Level tag set when it is parsed; the tree and
the navigation controller dispatch on it. level_from_shape() is kept for raw
wire payloads whose level is not known from context.
"""
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple


class Level(str, Enum):
    ROOT = "root"
    ORGANIZACION = "organizacion"
    VISION = "vision"
    META = "meta"
    OBJETIVO = "objetivo"
    MISION = "mision"
    TAREA = "tarea"


@dataclass(frozen=True)
class LevelConfig:
    """Static description of one hierarchy level."""
    plural: str                          # URL 路径段，也是 payload 中的集合名
    singular_name: str
    plural_name: str
    children_key: Optional[str] = None   # 嵌套 payload 中子节点集合的键
    parent_key: Optional[str] = None     # payload 中指向父节点的外键
    create_label: Optional[str] = None   # "新建子项" 按钮的文案


LEVELS: Dict[Level, LevelConfig] = {
    Level.ORGANIZACION: LevelConfig(
        plural="organizaciones",
        singular_name="Organización",
        plural_name="Organizaciones",
        children_key="visiones",
        create_label="+ Nueva Visión",
    ),
    Level.VISION: LevelConfig(
        plural="visiones",
        singular_name="Visión",
        plural_name="Visiones",
        children_key="metas",
        parent_key="organizacionId",
        create_label="+ Nueva Meta",
    ),
    Level.META: LevelConfig(
        plural="metas",
        singular_name="Meta",
        plural_name="Metas",
        children_key="objetivos",
        parent_key="visionId",
        create_label="+ Nuevo Objetivo",
    ),
    Level.OBJETIVO: LevelConfig(
        plural="objetivos",
        singular_name="Objetivo",
        plural_name="Objetivos",
        children_key="misiones",
        parent_key="metaId",
        create_label="+ Nueva Misión",
    ),
    Level.MISION: LevelConfig(
        plural="misiones",
        singular_name="Misión",
        plural_name="Misiones",
        children_key="tareas",
        parent_key="objetivoId",
        create_label="+ Nueva Tarea",
    ),
    Level.TAREA: LevelConfig(
        plural="tareas",
        singular_name="Tarea",
        plural_name="Tareas",
        parent_key="misionId",
    ),
}

# 从上到下
HIERARCHY_ORDER: Tuple[Level, ...] = (
    Level.ORGANIZACION,
    Level.VISION,
    Level.META,
    Level.OBJETIVO,
    Level.MISION,
    Level.TAREA,
)

ROOT_LEVELS = (Level.ORGANIZACION, Level.VISION)

ROOT_NODE_ID = "root-user"

# 应用服务端返回的实体时，updated_at 随补丁一起更新
PATCHABLE_FIELDS = frozenset({"titulo", "descripcion", "is_done", "updated_at"})


def child_level(level: Level, root_level: Level = Level.ORGANIZACION) -> Optional[Level]:
    """Level of the children of `level`; the root marker's children are root_level."""
    if level == Level.ROOT:
        return root_level
    index = HIERARCHY_ORDER.index(level)
    if index == len(HIERARCHY_ORDER) - 1:
        return None
    return HIERARCHY_ORDER[index + 1]


def parent_level(level: Level) -> Optional[Level]:
    if level == Level.ROOT:
        return None
    index = HIERARCHY_ORDER.index(level)
    if index == 0:
        return None
    return HIERARCHY_ORDER[index - 1]


def has_children(level: Level) -> bool:
    return level == Level.ROOT or LEVELS[level].children_key is not None


def level_depth(level: Level, root_level: Level = Level.ORGANIZACION) -> int:
    """0 for the configured root level, -1 for the root marker."""
    if level == Level.ROOT:
        return -1
    return HIERARCHY_ORDER.index(level) - HIERARCHY_ORDER.index(root_level)


def level_from_shape(payload: Mapping[str, Any]) -> Level:
    """
    Infer the level of an untagged wire payload from its keys.

    The key lookup order is load-bearing: Meta, Objetivo and Misión all carry a
    parent FK, so the children-collection key is what tells them apart.
    """
    if payload.get("type") == Level.ROOT.value:
        return Level.ROOT
    if "visiones" in payload:
        return Level.ORGANIZACION
    if "metas" in payload:
        return Level.VISION
    if "visionId" in payload and "objetivos" in payload:
        return Level.META
    if "metaId" in payload and "misiones" in payload:
        return Level.OBJETIVO
    if "objetivoId" in payload and "tareas" in payload:
        return Level.MISION
    return Level.TAREA


@dataclass(frozen=True)
class HierarchyNode:
    """
    One entity of the hierarchy, as held by the tree.

    Immutable; the tree replaces records instead of editing them. child_ids
    keeps the insertion order returned by the API.
    """
    id: str
    level: Level
    titulo: str
    descripcion: Optional[str] = None
    is_done: bool = False
    parent_id: Optional[str] = None
    usuario_id: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    child_ids: Tuple[str, ...] = ()

    @property
    def is_root(self) -> bool:
        return self.level == Level.ROOT

    @property
    def is_leaf(self) -> bool:
        return not has_children(self.level)

    @property
    def config(self) -> Optional[LevelConfig]:
        return LEVELS.get(self.level)

    def with_patch(self, patch: Mapping[str, Any]) -> "HierarchyNode":
        """
        Return a copy with the patch fields merged in.

        Only PATCHABLE_FIELDS may be patched. Returns self when nothing changes.
        """
        unknown = set(patch) - PATCHABLE_FIELDS
        if unknown:
            raise ValueError(f"Campos no editables: {sorted(unknown)}")
        changes = {k: v for k, v in patch.items() if getattr(self, k) != v}
        if not changes:
            return self
        return replace(self, **changes)


def root_node(root_level: Level = Level.ORGANIZACION) -> HierarchyNode:
    """Synthetic node standing for "the user"; its children are the tree roots."""
    plural = LEVELS[root_level].plural_name
    return HierarchyNode(
        id=ROOT_NODE_ID,
        level=Level.ROOT,
        titulo=f"Mis {plural}",
        descripcion=f"Aquí puedes gestionar todas tus {plural.lower()} y sus objetivos",
    )
