"""
Configuration Manager for Campamento.

集中管理客户端常量和配置参数。

优先级：环境变量 > config/runtime.yaml > 默认值

使用方式:
    from campamento.config_manager import get_config
    config = get_config()
    url = config.API_BASE_URL
"""
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from campamento.exceptions import ConfigError
from campamento.hierarchy.models import ROOT_LEVELS, Level

CONFIG_DIR = Path(__file__).parent.parent / "config"
RUNTIME_CONFIG_PATH = CONFIG_DIR / "runtime.yaml"

ENV_OVERRIDES = {
    "CAMPAMENTO_API_URL": "API_BASE_URL",
    "CAMPAMENTO_API_TOKEN": "API_TOKEN",
    "CAMPAMENTO_HIERARCHY_ROOT": "HIERARCHY_ROOT",
    "CAMPAMENTO_REFRESH_POLICY": "REFRESH_POLICY",
}


class RefreshPolicy(str, Enum):
    OPTIMISTIC = "optimistic"  # 用返回的实体就地修补本地树
    REFETCH = "refetch"        # 每次写入成功后整树重新拉取


@dataclass
class CampamentoConfig:
    """
    客户端运行时配置。
    """

    # === API ===

    # 后端地址；Android 模拟器需要 http://10.0.2.2:3000
    API_BASE_URL: str = "http://localhost:3000"

    # 请求超时（秒）
    API_TIMEOUT: float = 30.0

    # Bearer token，由外部认证流程提供；为空则不发送 Authorization
    API_TOKEN: Optional[str] = None

    # === 层级 ===

    # 根层级: "organizacion" (六层) 或 "vision" (五层)
    HIERARCHY_ROOT: str = Level.ORGANIZACION.value

    # 写操作成功后的刷新策略
    REFRESH_POLICY: str = RefreshPolicy.OPTIMISTIC.value

    # === 分页（仅作用于根层级）===
    PAGE_LIMIT: int = 50
    SORT_BY: str = "createdAt"
    SORT_ORDER: str = "asc"

    @property
    def root_level(self) -> Level:
        return Level(self.HIERARCHY_ROOT)

    @property
    def refresh_policy(self) -> RefreshPolicy:
        return RefreshPolicy(self.REFRESH_POLICY)

    def validate(self, source: Optional[str] = None) -> "CampamentoConfig":
        try:
            level = Level(self.HIERARCHY_ROOT)
        except ValueError:
            level = None
        if level not in ROOT_LEVELS:
            raise ConfigError(f"HIERARCHY_ROOT inválido: {self.HIERARCHY_ROOT!r}", source)
        try:
            RefreshPolicy(self.REFRESH_POLICY)
        except ValueError:
            raise ConfigError(f"REFRESH_POLICY inválido: {self.REFRESH_POLICY!r}", source)
        if self.SORT_ORDER not in ("asc", "desc"):
            raise ConfigError(f"SORT_ORDER inválido: {self.SORT_ORDER!r}", source)
        return self


def _load_runtime_config(path: Path) -> Dict[str, Any]:
    """加载运行时配置覆盖（如果存在）。"""
    if not path.exists():
        return {}

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (yaml.YAMLError, OSError) as e:
        raise ConfigError(f"No se pudo leer la configuración: {e}", str(path))

    if not isinstance(data, dict):
        raise ConfigError("La configuración debe ser un mapa clave/valor", str(path))
    return data


def get_config(path: Optional[Path] = None) -> CampamentoConfig:
    """
    获取客户端配置实例。

    优先级：环境变量 > runtime.yaml > 默认值
    """
    path = path or RUNTIME_CONFIG_PATH
    base = CampamentoConfig()

    for key, value in _load_runtime_config(path).items():
        if hasattr(base, key):
            setattr(base, key, value)

    for env_var, key in ENV_OVERRIDES.items():
        raw = os.getenv(env_var, "").strip()
        if raw:
            setattr(base, key, raw)

    return base.validate(str(path))
