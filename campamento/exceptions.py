"""
Campamento 异常定义模块 / Exception hierarchy.

- CampamentoError: 基类，所有已知错误
- HierarchyError: 树结构不变量被破坏（id 冲突、层级不匹配、孤儿节点）
- NavigationError: 导航栈操作非法
- ConfigError: 配置文件错误
- GatewayError: 远程 API 调用错误的基类
    - NetworkError / ServerError / ValidationError / NotFoundError / AuthError
"""
from typing import Optional


class CampamentoError(Exception):
    """Base class for every expected error in the client core.

    Catching this handles all known failure modes; anything else is a bug.
    """

    def __init__(self, message: str, hint: Optional[str] = None):
        """
        Args:
            message: 错误描述
            hint: 对用户的操作建议
        """
        super().__init__(message)
        self.message = message
        self.hint = hint

    def get_user_message(self) -> str:
        """Return a user-facing message, with the hint appended when present."""
        if self.hint:
            return f"{self.message}\n💡 Sugerencia: {self.hint}"
        return self.message


class HierarchyError(CampamentoError):
    """Raised when a tree operation would break a structural invariant."""

    def __init__(self, message: str, node_id: Optional[str] = None):
        super().__init__(message, hint="Refresca la jerarquía para resincronizar")
        self.node_id = node_id


class NavigationError(CampamentoError):
    """Raised for navigation requests the stack cannot satisfy."""


class ConfigError(CampamentoError):
    """配置文件错误。"""

    def __init__(self, message: str, config_path: Optional[str] = None):
        hint = f"Revisa el archivo de configuración: {config_path}" if config_path else "Revisa la configuración"
        super().__init__(message, hint)
        self.config_path = config_path


class GatewayError(CampamentoError):
    """Base class for failures reported by the remote CRUD API.

    Carries the HTTP status (None when no response arrived) and the endpoint.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        endpoint: Optional[str] = None,
        hint: Optional[str] = None,
    ):
        super().__init__(message, hint)
        self.status_code = status_code
        self.endpoint = endpoint

    def get_user_message(self) -> str:
        base = self.message
        if self.status_code is not None:
            base = f"[{self.status_code}] {base}"
        if self.hint:
            return f"{base}\n💡 Sugerencia: {self.hint}"
        return base


class NetworkError(GatewayError):
    """Transport failure: no response was received."""

    def __init__(self, message: str = "No se pudo conectar con el servidor", endpoint: Optional[str] = None):
        super().__init__(message, None, endpoint, hint="Comprueba tu conexión y reintenta")


class ServerError(GatewayError):
    """5xx response. Treated like NetworkError by the core."""

    def __init__(self, message: str, status_code: int = 500, endpoint: Optional[str] = None):
        super().__init__(message, status_code, endpoint, hint="Reintenta en unos momentos")


class ValidationError(GatewayError):
    """Bad input, rejected either client-side or with a 4xx by the server."""

    def __init__(self, message: str, status_code: Optional[int] = 400, endpoint: Optional[str] = None):
        super().__init__(message, status_code, endpoint)


class NotFoundError(GatewayError):
    """Update/delete target is unknown server-side."""

    def __init__(self, message: str, endpoint: Optional[str] = None):
        super().__init__(message, 404, endpoint, hint="El elemento ya no existe; la jerarquía se recargará")


class AuthError(GatewayError):
    """401/403. Fatal for the current session."""

    def __init__(self, message: str = "Sesión inválida o expirada", status_code: int = 401, endpoint: Optional[str] = None):
        super().__init__(message, status_code, endpoint, hint="Inicia sesión de nuevo")
