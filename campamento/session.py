"""
CampamentoSession: lifetime of one authenticated client.

Owns the gateway, the store, the navigation controller and the service.
Created by start() after the first successful fetch, torn down by close() or
by an AuthError.
"""
from typing import Optional

import httpx

from campamento.config_manager import CampamentoConfig, get_config
from campamento.exceptions import AuthError, CampamentoError
from campamento.gateway.client import HierarchyGateway
from campamento.gateway.schemas import HierarchyQuery
from campamento.hierarchy.navigation import NavigationController
from campamento.hierarchy.reconciliation import ReconcileOutcome
from campamento.hierarchy.store import HierarchyStore
from campamento.hierarchy_service import HierarchyService
from campamento.logger import get_logger

logger = get_logger("session")


class CampamentoSession:
    def __init__(self, config: CampamentoConfig, gateway: HierarchyGateway):
        self.config = config
        self.gateway = gateway
        self.store = HierarchyStore(gateway, root_level=config.root_level)
        self.navigation = NavigationController(self.store)
        self.service = HierarchyService(
            gateway,
            self.store,
            self.navigation,
            refresh=self.refresh,
            policy=config.refresh_policy,
            on_auth_error=self.invalidate,
        )
        self.generation = 0
        self.closed = False

    @classmethod
    async def start(
        cls,
        config: Optional[CampamentoConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        gateway: Optional[HierarchyGateway] = None,
    ) -> "CampamentoSession":
        """Build the session and load the first page of the hierarchy."""
        config = config or get_config()
        gateway = gateway or HierarchyGateway.from_config(config, transport=transport)
        session = cls(config, gateway)
        try:
            await session.refresh()
        except CampamentoError:
            await gateway.close()
            raise
        logger.info("Sesión iniciada contra %s (raíz: %s)", config.API_BASE_URL, config.root_level.value)
        return session

    def default_query(self) -> HierarchyQuery:
        return HierarchyQuery(
            limit=self.config.PAGE_LIMIT,
            sort_by=self.config.SORT_BY,
            sort_order=self.config.SORT_ORDER,
        )

    async def refresh(self, query: Optional[HierarchyQuery] = None) -> ReconcileOutcome:
        """
        Refetch the whole tree and reconcile the navigation stack.

        A fetch that completes after invalidate()/close() is discarded.
        """
        if self.closed:
            raise CampamentoError("La sesión está cerrada", hint="Inicia una nueva sesión")

        generation = self.generation
        try:
            page = await self.store.fetch_page(query or self.default_query())
        except AuthError:
            if generation == self.generation:
                self.invalidate()
            raise

        if generation != self.generation:
            logger.info("Resultado descartado: la sesión cambió durante la carga")
            return ReconcileOutcome.UNCHANGED

        self.store.apply_page(page)
        if page.pagination.has_more:
            logger.warning(
                "Solo se cargó la página %d de %d (%d raíces en total); ajusta PAGE_LIMIT para ver el resto",
                page.pagination.page,
                page.pagination.total_pages,
                page.pagination.total,
            )
        outcome = self.navigation.reconcile()
        if outcome == ReconcileOutcome.STALE:
            logger.warning("La ruta de navegación apunta a elementos que ya no existen")
        return outcome

    @property
    def has_more_roots(self) -> bool:
        """True when the server holds root entities beyond the loaded page."""
        pagination = self.store.pagination
        return bool(pagination and pagination.has_more)

    def invalidate(self) -> None:
        """Drop tree and stack; in-flight fetches become stale."""
        self.generation += 1
        self.store.clear()
        self.navigation.reset_navigation()
        logger.warning("Estado local descartado (generación %d)", self.generation)

    async def close(self) -> None:
        if self.closed:
            return
        self.invalidate()
        self.closed = True
        await self.gateway.close()
        logger.info("Sesión cerrada")

    async def __aenter__(self) -> "CampamentoSession":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
