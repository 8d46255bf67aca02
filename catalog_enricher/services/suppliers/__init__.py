"""Supplier resolution strategies."""
from catalog_enricher.services.suppliers.base import SupplierStrategy, pick_product_link
from catalog_enricher.services.suppliers.registry import (
    STRATEGY_CLASSES,
    StrategyRegistry,
    build_strategy_registry,
    get_strategy_class,
    register_strategy,
)
from catalog_enricher.services.suppliers.seco import SecoStrategy
from catalog_enricher.services.suppliers.kennametal import KennametalStrategy
from catalog_enricher.services.suppliers.sandvik import SandvikStrategy
from catalog_enricher.services.suppliers.walter import WalterStrategy

# Register strategies
register_strategy("SECO", SecoStrategy)
register_strategy("KENNAMETAL", KennametalStrategy)
register_strategy("SANDVIK", SandvikStrategy)
register_strategy("WALTER", WalterStrategy)

__all__ = [
    "SupplierStrategy",
    "pick_product_link",
    "STRATEGY_CLASSES",
    "StrategyRegistry",
    "build_strategy_registry",
    "get_strategy_class",
    "register_strategy",
    "SecoStrategy",
    "KennametalStrategy",
    "SandvikStrategy",
    "WalterStrategy",
]
