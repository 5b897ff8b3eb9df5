"""Component catalog: static performance, cost and behaviour profiles keyed by component kind."""

from __future__ import annotations

import logging
from typing import Any, Optional

from archsim.models.component import ComponentDefinition
from archsim.models.graph import SystemNode

logger = logging.getLogger(__name__)


def _define(
    kind: str,
    category: str,
    name: str,
    max_throughput: float,
    base_latency: float,
    failure_rate_at_capacity: float,
    is_horizontally_scalable: bool,
    availability_sla: float,
    consistency_model: str,
    cap_alignment: str,
    cost_per_instance_per_month: float,
    description: str = "",
    default_config: dict[str, Any] | None = None,
) -> ComponentDefinition:
    return ComponentDefinition(
        kind=kind,
        category=category,
        name=name,
        description=description,
        max_throughput=max_throughput,
        base_latency=base_latency,
        failure_rate_at_capacity=failure_rate_at_capacity,
        is_horizontally_scalable=is_horizontally_scalable,
        availability_sla=availability_sla,
        consistency_model=consistency_model,
        cap_alignment=cap_alignment,
        cost_per_instance_per_month=cost_per_instance_per_month,
        default_config=default_config or {},
    )


# ---------------------------------------------------------------------------
# Definitions
# ---------------------------------------------------------------------------

COMPONENT_DEFINITIONS: list[ComponentDefinition] = [
    # --- Clients ---
    _define("web-client", "clients", "Web Client", 1_000_000, 5, 0.0, False, 0.99, "eventual", "AP", 0,
            "Browser-based user traffic."),
    _define("mobile-client", "clients", "Mobile Client", 1_000_000, 10, 0.0, False, 0.99, "eventual", "AP", 0,
            "iOS/Android app traffic over cellular networks."),
    _define("api-consumer", "clients", "API Consumer", 1_000_000, 5, 0.0, False, 0.99, "eventual", "AP", 0,
            "Third-party integrations calling the public API."),
    # --- Load balancing ---
    _define("load-balancer", "loadbalancing", "Load Balancer", 50_000, 2, 0.01, True, 0.9999, "strong", "CA", 25,
            "Distributes requests across a pool of instances.",
            {"algorithm": "round-robin"}),
    _define("api-gateway", "loadbalancing", "API Gateway", 20_000, 5, 0.02, True, 0.9995, "strong", "CA", 100,
            "Single ingress for routing, auth and rate limiting.",
            {"rate_limit": 10_000}),
    _define("reverse-proxy", "loadbalancing", "Reverse Proxy", 30_000, 2, 0.01, True, 0.9995, "strong", "CA", 20,
            "Terminates connections in front of origin servers."),
    # --- Compute ---
    _define("web-server", "compute", "Web Server", 1_000, 20, 0.05, True, 0.99, "strong", "CA", 50,
            "Stateless application server.",
            {"runtime": "node"}),
    _define("microservice", "compute", "Microservice", 2_000, 15, 0.04, True, 0.995, "strong", "CA", 75,
            "Independently deployable service."),
    _define("serverless-function", "compute", "Serverless Function", 5_000, 50, 0.03, True, 0.9995, "strong", "CA", 30,
            "Event-driven function with cold starts."),
    _define("container-pod", "compute", "Container Pod", 1_500, 10, 0.04, True, 0.995, "strong", "CA", 40,
            "Orchestrated container workload."),
    # --- Storage ---
    _define("postgresql", "storage", "PostgreSQL", 2_000, 10, 0.08, False, 0.995, "strong", "CP", 200,
            "Relational database with ACID transactions.",
            {"engine": "postgres-16"}),
    _define("mysql", "storage", "MySQL", 2_500, 10, 0.08, False, 0.995, "strong", "CP", 180,
            "Relational database, widely deployed.",
            {"engine": "mysql-8"}),
    _define("mongodb", "storage", "MongoDB", 5_000, 8, 0.06, True, 0.995, "eventual", "AP", 250,
            "Document database with flexible schema."),
    _define("cassandra", "storage", "Cassandra", 20_000, 5, 0.04, True, 0.999, "eventual", "AP", 400,
            "Wide-column store built for write throughput."),
    _define("dynamodb", "storage", "DynamoDB", 40_000, 5, 0.02, True, 0.9999, "eventual", "AP", 300,
            "Managed key-value store."),
    _define("redis-cache", "storage", "Redis Cache", 100_000, 1, 0.02, True, 0.999, "eventual", "AP", 120,
            "In-memory cache for hot reads.",
            {"ttl": 300}),
    _define("memcached", "storage", "Memcached", 80_000, 1, 0.02, True, 0.999, "eventual", "AP", 90,
            "Simple distributed memory cache.",
            {"ttl": 300}),
    _define("object-storage", "storage", "Object Storage", 10_000, 50, 0.01, True, 0.9999, "eventual", "AP", 25,
            "Blob storage for files and backups."),
    _define("data-warehouse", "storage", "Data Warehouse", 500, 200, 0.05, True, 0.999, "strong", "CP", 1_000,
            "Columnar analytics store."),
    # --- Messaging ---
    _define("message-queue", "messaging", "Message Queue", 10_000, 5, 0.02, True, 0.999, "eventual", "AP", 100,
            "Point-to-point work queue."),
    _define("event-stream", "messaging", "Event Stream", 100_000, 5, 0.01, True, 0.9995, "causal", "AP", 300,
            "Partitioned append-only log with replay."),
    _define("pub-sub", "messaging", "Pub/Sub", 50_000, 3, 0.01, True, 0.9995, "eventual", "AP", 80,
            "Topic-based fan-out messaging."),
    # --- Observability ---
    _define("metrics-collector", "observability", "Metrics Collector", 50_000, 1, 0.005, True, 0.999, "eventual", "AP", 60,
            "Scrapes and stores time-series metrics."),
    _define("log-aggregator", "observability", "Log Aggregator", 50_000, 1, 0.005, True, 0.999, "eventual", "AP", 80,
            "Centralised log search."),
    _define("distributed-tracer", "observability", "Distributed Tracer", 50_000, 1, 0.005, True, 0.999, "eventual", "AP", 70,
            "Collects spans across service boundaries."),
    # --- Network ---
    _define("cdn", "network", "CDN", 100_000, 10, 0.005, True, 0.9999, "eventual", "AP", 200,
            "Edge cache for static assets."),
    _define("dns-server", "network", "DNS", 200_000, 1, 0.001, True, 0.99999, "eventual", "AP", 10,
            "Name resolution."),
    _define("firewall-waf", "network", "Firewall / WAF", 50_000, 2, 0.01, True, 0.9999, "strong", "CA", 150,
            "Filters malicious traffic at ingress."),
    _define("vpn-private-network", "network", "VPN / Private Network", 20_000, 3, 0.01, True, 0.9995, "strong", "CA", 100,
            "Private connectivity between networks."),
    # --- AI & ML ---
    _define("llm-inference", "ai", "LLM Inference Server", 50, 800, 0.1, True, 0.995, "eventual", "AP", 2_500,
            "GPU-backed large language model serving.",
            {"model": "llama-3-70b", "max_tokens": 4096, "streaming": True}),
    _define("vector-database", "ai", "Vector Database", 5_000, 15, 0.03, True, 0.999, "eventual", "AP", 400,
            "Approximate nearest-neighbour search over embeddings."),
    _define("embedding-service", "ai", "Embedding Service", 500, 40, 0.03, True, 0.999, "strong", "CA", 300,
            "Turns text into vectors."),
    _define("ai-gateway", "ai", "AI Gateway", 10_000, 5, 0.01, True, 0.9995, "strong", "CA", 150,
            "Rate limiting, cost tracking and routing for model traffic."),
    _define("agent-orchestrator", "ai", "Agent Orchestrator", 200, 100, 0.05, True, 0.995, "causal", "AP", 200,
            "Plans and executes multi-step agent loops."),
    _define("rag-pipeline", "ai", "RAG Pipeline", 300, 60, 0.04, True, 0.995, "eventual", "AP", 250,
            "Retrieves context before generation."),
    _define("guardrails", "ai", "Guardrails Filter", 2_000, 20, 0.02, True, 0.999, "strong", "CA", 100,
            "Validates model output for safety."),
    _define("prompt-cache", "ai", "Prompt Cache", 50_000, 2, 0.01, True, 0.999, "eventual", "AP", 120,
            "Serves repeated prompts without inference."),
    _define("model-registry", "ai", "Model Registry", 1_000, 20, 0.01, False, 0.999, "strong", "CP", 80,
            "Versioned model artefacts."),
    _define("feature-store", "ai", "Feature Store", 10_000, 10, 0.02, True, 0.999, "eventual", "AP", 350,
            "Online/offline feature serving."),
    _define("tool-executor", "ai", "Tool Executor", 500, 150, 0.05, True, 0.995, "strong", "CA", 100,
            "Sandboxed tool calls for agents."),
    _define("memory-store", "ai", "Memory Store", 5_000, 8, 0.02, True, 0.999, "eventual", "AP", 150,
            "Persistent conversational memory."),
    _define("model-router", "ai", "Model Router", 20_000, 3, 0.01, True, 0.9995, "strong", "CA", 90,
            "Routes requests between models with fallback."),
    _define("training-cluster", "ai", "Training Cluster", 10, 5_000, 0.1, True, 0.99, "strong", "CP", 20_000,
            "Distributed GPU training."),
    _define("drift-detector", "ai", "Drift Detector", 1_000, 10, 0.01, False, 0.999, "eventual", "AP", 60,
            "Monitors input and output distributions."),
    _define("llm-observability", "ai", "LLM Observability", 20_000, 1, 0.005, True, 0.999, "eventual", "AP", 120,
            "Token costs, traces and quality metrics for LLM calls."),
    _define("ab-test-controller", "ai", "A/B Test Controller", 10_000, 2, 0.01, True, 0.999, "strong", "CA", 80,
            "Splits traffic between model variants."),
]

COMPONENT_CATALOG: dict[str, ComponentDefinition] = {d.kind: d for d in COMPONENT_DEFINITIONS}

AI_COMPONENT_KINDS: frozenset[str] = frozenset(d.kind for d in COMPONENT_DEFINITIONS if d.category == "ai")

CACHE_KINDS: frozenset[str] = frozenset({"redis-cache", "memcached"})
DATABASE_KINDS: frozenset[str] = frozenset({"postgresql", "mysql", "mongodb", "cassandra", "dynamodb"})
SERVER_KINDS: frozenset[str] = frozenset({"web-server", "microservice", "serverless-function", "container-pod"})
CLIENT_KINDS: frozenset[str] = frozenset({"web-client", "mobile-client", "api-consumer"})


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------

def get_definition(kind: str) -> Optional[ComponentDefinition]:
    """Return the catalog entry for *kind*, or ``None`` when the kind is unknown."""
    return COMPONENT_CATALOG.get(kind)


def definition_for(node: SystemNode) -> Optional[ComponentDefinition]:
    """Resolve a node's catalog entry, logging a warning when its kind is unknown."""
    definition = COMPONENT_CATALOG.get(node.component_kind)
    if definition is None:
        logger.warning(
            "Unknown component kind %r on node %s; skipping", node.component_kind, node.id
        )
    return definition


def get_components_by_category(category: str) -> list[ComponentDefinition]:
    return [d for d in COMPONENT_DEFINITIONS if d.category == category]


def is_ai_kind(kind: str) -> bool:
    return kind in AI_COMPONENT_KINDS


def effective_capacity(node: SystemNode, definition: ComponentDefinition) -> float:
    """Capacity of a node across all of its replicas."""
    return definition.max_throughput * (node.config.replicas or 1)
