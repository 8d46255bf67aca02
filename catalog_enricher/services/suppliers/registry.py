"""Strategy registry: supplier identity -> strategy.

Identity lookup is case-insensitive. The set of strategy classes is closed
and registered once in ``catalog_enricher.services.suppliers``; instances are
built per run by ``build_strategy_registry`` so that each run owns its HTTP
clients.
"""
from typing import Dict, Iterator, Optional, Type

import httpx
import structlog

from catalog_enricher.config import settings
from catalog_enricher.errors.exceptions import UnknownSupplierError
from catalog_enricher.services.browser import BrowserLauncher
from catalog_enricher.services.http_client import SupplierHttpClient
from catalog_enricher.services.suppliers.base import SupplierStrategy

logger = structlog.get_logger(__name__)

# Global registry mapping identities to strategy classes
STRATEGY_CLASSES: Dict[str, Type[SupplierStrategy]] = {}


def register_strategy(identity: str, strategy_class: Type[SupplierStrategy]) -> None:
    """Register a strategy class for a supplier identity.

    Raises:
        TypeError: If strategy_class does not inherit from SupplierStrategy
        ValueError: If the identity is already registered
    """
    if not issubclass(strategy_class, SupplierStrategy):
        raise TypeError(
            f"Strategy class {strategy_class.__name__} must inherit from SupplierStrategy"
        )
    key = identity.strip().upper()
    if key in STRATEGY_CLASSES:
        raise ValueError(
            f"Supplier '{key}' is already registered. "
            f"Existing: {STRATEGY_CLASSES[key].__name__}"
        )
    STRATEGY_CLASSES[key] = strategy_class


def get_strategy_class(identity: str) -> Optional[Type[SupplierStrategy]]:
    return STRATEGY_CLASSES.get((identity or "").strip().upper())


class StrategyRegistry:
    """Strategy instances for one run, looked up by identity."""

    def __init__(self, strategies: Optional[Dict[str, SupplierStrategy]] = None):
        self._strategies: Dict[str, SupplierStrategy] = {}
        for identity, strategy in (strategies or {}).items():
            self.add(identity, strategy)

    def add(self, identity: str, strategy) -> None:
        self._strategies[identity.strip().upper()] = strategy

    def get(self, identity: str):
        """Strategy for ``identity``, or None when no strategy handles it."""
        return self._strategies.get((identity or "").strip().upper())

    def require(self, identity: str):
        strategy = self.get(identity)
        if strategy is None:
            available = ", ".join(self._strategies) or "none"
            raise UnknownSupplierError(
                f"No strategy for supplier '{identity}'. Available: {available}"
            )
        return strategy

    def __contains__(self, identity: str) -> bool:
        return self.get(identity) is not None

    def __iter__(self) -> Iterator[str]:
        return iter(self._strategies)

    def __len__(self) -> int:
        return len(self._strategies)

    async def aclose(self) -> None:
        for strategy in self._strategies.values():
            aclose = getattr(strategy, "aclose", None)
            if aclose is not None:
                await aclose()


def build_strategy_registry(
    browser: Optional[BrowserLauncher] = None,
    metric_only: Optional[bool] = None,
    browser_enabled: Optional[bool] = None,
    known_targets: Optional[Dict[str, Dict[str, str]]] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> StrategyRegistry:
    """Instantiate every registered strategy with its own HTTP client.

    Args:
        browser: Shared browser launcher (None disables the rendered step)
        metric_only: Override of the configured metric-only mode
        browser_enabled: Override of the configured browser switch
        known_targets: {SUPPLIER: {DESCRIPTION: url}}, defaults to config file
        transport: HTTP transport for every client (tests)
    """
    if known_targets is None:
        known_targets = settings.load_known_targets()

    registry = StrategyRegistry()
    for identity, strategy_class in STRATEGY_CLASSES.items():
        registry.add(
            identity,
            strategy_class(
                http=SupplierHttpClient(identity, transport=transport),
                browser=browser,
                known_targets=known_targets.get(identity, {}),
                metric_only=metric_only,
                browser_enabled=browser_enabled,
            ),
        )
    logger.info(
        "strategy_registry_built",
        suppliers=list(registry),
        rendering=browser is not None and (
            settings.browser_enabled if browser_enabled is None else browser_enabled
        ),
    )
    return registry
