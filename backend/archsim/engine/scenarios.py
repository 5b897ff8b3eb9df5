"""Built-in design scenarios and progress scoring against their targets."""

from __future__ import annotations

from typing import Optional, Sequence

from archsim.engine.metrics import round_half_up
from archsim.models.metrics import MetricSnapshot
from archsim.models.scenario import ScenarioDefinition, ScenarioProgress, ScenarioTargets

SCENARIOS: list[ScenarioDefinition] = [
    ScenarioDefinition(
        id="basic-web-app",
        name="Basic Web App",
        description=(
            "Build a simple 3-tier web application with a load balancer, server, cache, and database."
        ),
        difficulty="beginner",
        targets=ScenarioTargets(
            min_availability=0.999, max_latency_p95=200, min_throughput=5000, max_spofs=0
        ),
        starter_kinds=["web-client"],
        hints=[
            "Start by adding a Web Server to handle requests from the client.",
            "Add a PostgreSQL database to store your data. Connect the server to it.",
            "Add a Redis Cache between the server and database to reduce latency. Then add a "
            "Load Balancer before the server and increase server replicas to 2.",
        ],
        completion_message=(
            "Excellent! You've built a classic 3-tier architecture with caching and load balancing. "
            "This pattern powers most of the web."
        ),
        real_world_architecture=(
            "This is the foundation used by companies like GitHub, Stack Overflow, and Basecamp "
            "during their early stages."
        ),
    ),
    ScenarioDefinition(
        id="design-twitter",
        name="Design Twitter",
        description=(
            "Handle 500M users with <200ms P95 latency and 99.99% uptime. Think caching, message "
            "queues, and horizontal scaling."
        ),
        difficulty="advanced",
        targets=ScenarioTargets(
            min_availability=0.9999,
            max_latency_p95=200,
            min_throughput=50000,
            max_spofs=0,
            required_components=["load-balancer", "redis-cache", "message-queue"],
        ),
        starter_kinds=["web-client", "mobile-client"],
        hints=[
            "You need an API Gateway or Load Balancer as the single entry point for both web and mobile clients.",
            "Twitter is read-heavy: add a Redis Cache for timeline data. Use a Message Queue for async "
            "fan-out of tweets.",
            "Add multiple web servers (replicas >= 3) behind the load balancer. Use PostgreSQL for user "
            "data and Cassandra for tweet storage.",
        ],
        completion_message=(
            "You've designed a Twitter-scale architecture! The key insights: read-heavy caching, "
            "fan-out via message queues, and polyglot persistence."
        ),
        real_world_architecture=(
            "Twitter uses MySQL (users), Manhattan (tweets, a Cassandra-like store), Redis (timeline "
            "cache), and Kafka (async fan-out)."
        ),
    ),
    ScenarioDefinition(
        id="netflix-streaming",
        name="Netflix Streaming",
        description="Build a global video delivery system with CDN optimization, caching, and microservices.",
        difficulty="advanced",
        targets=ScenarioTargets(
            min_availability=0.9999,
            max_latency_p95=150,
            min_throughput=100000,
            max_spofs=0,
            required_components=["cdn", "load-balancer", "redis-cache"],
        ),
        starter_kinds=["web-client"],
        hints=[
            "Start with a CDN: video content must be served from edge locations, not your origin servers.",
            "Add an API Gateway for the catalog API, backed by microservices and a cache.",
            "Use object storage for video files, a database for metadata, and give every critical "
            "service replicas.",
        ],
        completion_message=(
            "Your Netflix architecture handles global streaming! CDN edge caching is the key to "
            "low-latency video delivery."
        ),
        real_world_architecture=(
            "Netflix uses Open Connect (custom CDN), AWS for backend, Cassandra, EVCache (memcached), "
            "and 700+ microservices."
        ),
    ),
    ScenarioDefinition(
        id="ride-sharing",
        name="Ride-Sharing Backend",
        description="Real-time matching, geolocation, event-driven architecture. Target: <100ms matching latency.",
        difficulty="advanced",
        targets=ScenarioTargets(
            min_availability=0.9999,
            max_latency_p95=100,
            min_throughput=20000,
            max_spofs=0,
            required_components=["load-balancer", "event-stream", "redis-cache"],
        ),
        starter_kinds=["mobile-client"],
        hints=[
            "Mobile clients need an API Gateway. Ride matching needs real-time data: use Redis for "
            "geolocation caching.",
            "Use an event stream for ride requests, driver updates, and trip events.",
            "Add a microservice for matching logic and another for trip management. Use PostgreSQL "
            "for persistent data.",
        ],
        completion_message=(
            "Ride-sharing backend complete! Event-driven architecture enables real-time matching at scale."
        ),
        real_world_architecture=(
            "Uber uses microservices with Kafka, Redis (geospatial), MySQL/Cassandra, and custom "
            "load balancing (Ringpop)."
        ),
    ),
    ScenarioDefinition(
        id="url-shortener",
        name="URL Shortener",
        description=(
            "Classic interview question: high read, low write, heavy caching. Target: <50ms P95 read latency."
        ),
        difficulty="beginner",
        targets=ScenarioTargets(
            min_availability=0.999,
            max_latency_p95=50,
            min_throughput=10000,
            max_spofs=0,
            required_components=["redis-cache"],
        ),
        starter_kinds=["web-client"],
        hints=[
            "Add a web server to handle redirect requests and a database to store URL mappings.",
            "This is extremely read-heavy: add a Redis cache. Most URLs are accessed many times.",
            "Add a load balancer and scale the web server to handle spikes.",
        ],
        completion_message="URL shortener complete! Key insight: 100:1 read/write ratio means aggressive caching.",
        real_world_architecture="Bitly uses a similar architecture with in-memory caching achieving sub-10ms redirects.",
    ),
    ScenarioDefinition(
        id="flash-sale",
        name="Flash Sale (E-Commerce)",
        description="Handle 100x traffic spikes during a flash sale. Queue-based buffering is essential.",
        difficulty="intermediate",
        targets=ScenarioTargets(
            min_availability=0.999,
            max_latency_p95=500,
            min_throughput=50000,
            max_spofs=0,
            required_components=["load-balancer", "message-queue", "redis-cache"],
        ),
        starter_kinds=["web-client", "mobile-client"],
        hints=[
            "Start with a load balancer and multiple web servers to absorb massive concurrent connections.",
            "Orders must go through a message queue to prevent database overload during the spike.",
            "Use Redis for inventory counting (atomic operations) and rate limiting.",
        ],
        completion_message=(
            "Flash sale system ready! Queue-based buffering prevents cascade failures during 100x traffic spikes."
        ),
        real_world_architecture=(
            "Amazon and Shopify use queue-based order processing, with aggressive caching and "
            "auto-scaling during peak events."
        ),
    ),
    ScenarioDefinition(
        id="rag-enterprise",
        name="Enterprise RAG Assistant",
        description=(
            "Ground an internal assistant in company documents: retrieval, embeddings, guardrails "
            "and an LLM tier that survives a GPU failure."
        ),
        difficulty="intermediate",
        targets=ScenarioTargets(
            min_availability=0.999,
            max_latency_p95=2000,
            min_throughput=100,
            max_spofs=0,
            required_components=["rag-pipeline", "vector-database", "embedding-service", "guardrails"],
        ),
        starter_kinds=["web-client", "api-gateway"],
        starter_edges=[(0, 1)],
        hints=[
            "Put a RAG Pipeline behind the gateway; it queries a Vector Database fed by an Embedding Service.",
            "Validate every LLM answer with a Guardrails filter before it reaches users.",
            "Run at least two LLM replicas, or add a Model Router with a fallback model.",
        ],
        completion_message=(
            "Your assistant answers from verified documents! Retrieval grounding is the cheapest "
            "hallucination fix there is."
        ),
        real_world_architecture=(
            "Enterprise copilots pair a vector store (pgvector, Pinecone) with an embedding model, "
            "an orchestration layer and output moderation."
        ),
    ),
    ScenarioDefinition(
        id="build-chatgpt",
        name="Build ChatGPT",
        description=(
            "Serve a consumer chat product to millions: GPU inference at scale, prompt caching, "
            "model routing and safety filters."
        ),
        difficulty="advanced",
        targets=ScenarioTargets(
            min_availability=0.9999,
            max_latency_p95=3000,
            min_throughput=1000,
            max_spofs=0,
            required_components=["ai-gateway", "llm-inference", "prompt-cache", "guardrails", "model-router"],
        ),
        starter_kinds=["web-client", "mobile-client"],
        hints=[
            "Front the LLM fleet with an AI Gateway for rate limiting and per-user quotas.",
            "A Prompt Cache and a Model Router cut GPU cost by sending easy prompts to smaller models.",
            "Scale LLM Inference replicas until GPU memory pressure stays below 90%.",
        ],
        completion_message=(
            "Chat at scale! Caching, routing and guardrails are what make LLM serving affordable and safe."
        ),
        real_world_architecture=(
            "Large chat products run sharded GPU inference clusters behind gateways with KV/prompt "
            "caching, tiered model routing and moderation models."
        ),
    ),
]

SCENARIOS_BY_ID: dict[str, ScenarioDefinition] = {s.id: s for s in SCENARIOS}


def get_scenario(scenario_id: str) -> Optional[ScenarioDefinition]:
    return SCENARIOS_BY_ID.get(scenario_id)


def compute_scenario_progress(
    scenario: ScenarioDefinition,
    metrics: MetricSnapshot,
    node_kinds: Sequence[str],
    spof_count: int,
) -> ScenarioProgress:
    """Score the fraction of *scenario* targets met, 0-100; 100 means completed.

    Targets are keyed ``availability``, ``latency_p95``, ``throughput``,
    ``cost``, ``spofs`` and ``component:<kind>``; unset targets are skipped.
    """
    targets = scenario.targets
    met: dict[str, bool] = {}

    if targets.min_availability is not None:
        met["availability"] = metrics.availability >= targets.min_availability
    if targets.max_latency_p95 is not None:
        met["latency_p95"] = metrics.latency_p95 <= targets.max_latency_p95
    if targets.min_throughput is not None:
        met["throughput"] = metrics.throughput >= targets.min_throughput
    if targets.max_cost is not None:
        met["cost"] = metrics.monthly_cost <= targets.max_cost
    if targets.max_spofs is not None:
        met["spofs"] = spof_count <= targets.max_spofs

    kinds = set(node_kinds)
    for required in targets.required_components:
        met[f"component:{required}"] = required in kinds

    score = round_half_up(sum(met.values()) / len(met) * 100) if met else 0
    return ScenarioProgress(
        scenario_id=scenario.id,
        score=score,
        completed=score >= 100,
        targets_met=met,
    )
