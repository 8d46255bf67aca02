"""Unit tests for the strategy registry."""
import httpx
import pytest

from catalog_enricher.errors.exceptions import UnknownSupplierError
from catalog_enricher.services.suppliers import (
    STRATEGY_CLASSES,
    SandvikStrategy,
    SecoStrategy,
    StrategyRegistry,
    WalterStrategy,
    build_strategy_registry,
    get_strategy_class,
    register_strategy,
)


class TestStrategyClasses:
    """Test the closed set of registered strategy classes."""

    def test_all_suppliers_registered(self):
        assert set(STRATEGY_CLASSES) == {"SECO", "KENNAMETAL", "SANDVIK", "WALTER"}

    def test_lookup_is_case_insensitive(self):
        assert get_strategy_class(" walter ") is WalterStrategy
        assert get_strategy_class("Iscar") is None

    def test_duplicate_registration(self):
        with pytest.raises(ValueError, match="already registered"):
            register_strategy("seco", SecoStrategy)

    def test_non_strategy_rejected(self):
        with pytest.raises(TypeError):
            register_strategy("ISCAR", dict)


class TestStrategyRegistry:
    """Test per-run strategy instances."""

    def test_get_and_require(self):
        strategy = object()
        registry = StrategyRegistry({"seco": strategy})

        assert registry.get("SECO") is strategy
        assert "Seco" in registry
        assert registry.get("WALTER") is None
        assert len(registry) == 1
        with pytest.raises(UnknownSupplierError, match="Available: SECO"):
            registry.require("WALTER")

    @pytest.mark.asyncio
    async def test_build(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(404))
        registry = build_strategy_registry(
            metric_only=False,
            browser_enabled=False,
            known_targets={"SECO": {"JS534060D1B.0Z4-NXT": "https://www.secotools.com/article/222"}},
            transport=transport,
        )
        try:
            assert sorted(registry) == ["KENNAMETAL", "SANDVIK", "SECO", "WALTER"]
            seco = registry.require("SECO")
            assert isinstance(seco, SecoStrategy)
            assert seco.known_targets == {
                "JS534060D1B.0Z4-NXT": "https://www.secotools.com/article/222"
            }
            assert registry.require("WALTER").known_targets == {}
            assert not seco.browser_enabled
            assert isinstance(registry.require("sandvik"), SandvikStrategy)
            assert registry.require("SANDVIK").is_metric_only
            assert not seco.is_metric_only
        finally:
            await registry.aclose()
