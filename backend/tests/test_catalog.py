"""Tests for the component catalog: lookups, categories and capacity helpers."""

import logging

import pytest

from archsim.engine.catalog import (
    AI_COMPONENT_KINDS,
    COMPONENT_CATALOG,
    COMPONENT_DEFINITIONS,
    definition_for,
    effective_capacity,
    get_components_by_category,
    get_definition,
    is_ai_kind,
)
from archsim.models.graph import NodeConfig, SystemNode


def _node(kind: str, replicas: int = 1) -> SystemNode:
    return SystemNode(id="n1", component_kind=kind, config=NodeConfig(label="N1", replicas=replicas))


class TestCatalogContents:
    def test_kind_count(self):
        assert len(COMPONENT_DEFINITIONS) == 46
        assert len(COMPONENT_CATALOG) == 46

    def test_kinds_are_unique(self):
        kinds = [d.kind for d in COMPONENT_DEFINITIONS]
        assert len(kinds) == len(set(kinds))

    @pytest.mark.parametrize(
        "category",
        ["clients", "loadbalancing", "compute", "storage", "messaging", "observability", "network", "ai"],
    )
    def test_every_category_populated(self, category):
        assert get_components_by_category(category)

    def test_values_in_range(self):
        for d in COMPONENT_DEFINITIONS:
            assert d.max_throughput > 0, d.kind
            assert d.base_latency >= 0, d.kind
            assert 0 <= d.availability_sla <= 1, d.kind
            assert 0 <= d.failure_rate_at_capacity <= 1, d.kind
            assert d.cost_per_instance_per_month >= 0, d.kind

    def test_definitions_are_frozen(self):
        definition = get_definition("web-server")
        with pytest.raises(Exception):
            definition.max_throughput = 1

    def test_reference_profiles(self):
        server = get_definition("web-server")
        assert server.max_throughput == 1000
        assert server.is_horizontally_scalable is True
        assert server.default_config == {"runtime": "node"}

        db = get_definition("postgresql")
        assert db.is_horizontally_scalable is False
        assert db.cap_alignment == "CP"

        assert get_definition("load-balancer").default_config["algorithm"] == "round-robin"


class TestLookups:
    def test_unknown_kind_returns_none(self):
        assert get_definition("quantum-mainframe") is None

    def test_definition_for_logs_unknown_kind(self, caplog):
        with caplog.at_level(logging.WARNING, logger="archsim.engine.catalog"):
            assert definition_for(_node("quantum-mainframe")) is None
        assert "quantum-mainframe" in caplog.text

    def test_ai_kinds(self):
        assert is_ai_kind("llm-inference")
        assert is_ai_kind("ab-test-controller")
        assert not is_ai_kind("postgresql")
        assert all(get_definition(k).category == "ai" for k in AI_COMPONENT_KINDS)

    def test_effective_capacity_scales_with_replicas(self):
        definition = get_definition("web-server")
        assert effective_capacity(_node("web-server"), definition) == 1000
        assert effective_capacity(_node("web-server", replicas=3), definition) == 3000
