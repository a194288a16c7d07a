"""
Request/response schemas for the hierarchy REST API.

Wire names are camelCase; Python attributes are snake_case with aliases.
"""
from dataclasses import dataclass
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from campamento.hierarchy.models import LEVELS, Level
from campamento.hierarchy.tree import HierarchyTree


def _require_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError("titulo no puede estar vacío")
    return value


class CreateItemRequest(BaseModel):
    """Body of create<Level>. parent_id is required for every level below the root."""
    titulo: str
    descripcion: Optional[str] = None
    parent_id: Optional[str] = None

    @field_validator("titulo")
    @classmethod
    def check_titulo(cls, value: Optional[str]) -> Optional[str]:
        return _require_text(value)

    def to_payload(self, level: Level) -> Dict[str, Any]:
        # 后端把组织的标题叫作 "nombre"
        title_key = "nombre" if level == Level.ORGANIZACION else "titulo"
        payload: Dict[str, Any] = {title_key: self.titulo}
        if self.descripcion is not None:
            payload["descripcion"] = self.descripcion
        parent_key = LEVELS[level].parent_key
        if parent_key and self.parent_id is not None:
            payload[parent_key] = self.parent_id
        return payload


class UpdateItemRequest(BaseModel):
    """Partial patch: only the fields that are set are sent."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    titulo: Optional[str] = None
    descripcion: Optional[str] = None
    is_done: Optional[bool] = Field(default=None, alias="isDone")

    @field_validator("titulo")
    @classmethod
    def check_titulo(cls, value: Optional[str]) -> Optional[str]:
        return _require_text(value)

    def to_payload(self, level: Level) -> Dict[str, Any]:
        payload = self.model_dump(by_alias=True, exclude_none=True)
        if level == Level.ORGANIZACION:
            payload.pop("isDone", None)
            if "titulo" in payload:
                payload["nombre"] = payload.pop("titulo")
        return payload

    def patch(self) -> Dict[str, Any]:
        """Tree patch equivalent to this request."""
        return self.model_dump(exclude={"id"}, exclude_none=True)


class HierarchyQuery(BaseModel):
    """Root-level pagination, sorting and filtering for get<root>Hierarchy."""
    model_config = ConfigDict(populate_by_name=True)

    page: Optional[int] = Field(default=None, ge=1)
    limit: Optional[int] = Field(default=None, ge=1)
    sort_by: Optional[str] = Field(default=None, alias="sortBy")
    sort_order: Optional[Literal["asc", "desc"]] = Field(default=None, alias="sortOrder")
    search: Optional[str] = None
    is_done: Optional[bool] = Field(default=None, alias="isDone")

    def to_params(self) -> Dict[str, str]:
        params: Dict[str, str] = {}
        for key, value in self.model_dump(by_alias=True, exclude_none=True).items():
            if value == "":
                continue
            params[key] = str(value).lower() if isinstance(value, bool) else str(value)
        return params


class Pagination(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    page: int = 1
    limit: int = 0
    total: int = 0
    total_pages: int = Field(default=0, alias="totalPages")
    has_more: bool = Field(default=False, alias="hasMore")


@dataclass
class HierarchyPage:
    """Result of get<root>Hierarchy: the parsed tree and root-level pagination."""
    tree: HierarchyTree
    pagination: Pagination
