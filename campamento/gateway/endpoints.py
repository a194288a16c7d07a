"""
API endpoints per hierarchy level.

/api/<plural>            GET list, POST create, POST update (PUT for organizaciones)
/api/<plural>/<id>       GET one, DELETE
/api/<plural>/hierarchy  GET nested tree (organizaciones and visiones only)
"""
from campamento.hierarchy.models import LEVELS, ROOT_LEVELS, Level

API_PREFIX = "/api"

COMMON_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


def collection_path(level: Level) -> str:
    return f"{API_PREFIX}/{LEVELS[level].plural}"


def item_path(level: Level, node_id: str) -> str:
    return f"{collection_path(level)}/{node_id}"


def hierarchy_path(level: Level) -> str:
    if level not in ROOT_LEVELS:
        raise ValueError(f"No hay endpoint de jerarquía para {level.value}")
    return f"{collection_path(level)}/hierarchy"


def update_method(level: Level) -> str:
    # 其余服务通过 POST 做 upsert
    return "PUT" if level == Level.ORGANIZACION else "POST"
