"""Reliability & availability checks.

All functions follow the uniform signature: (c: CheckContext) -> ValidationCheck | None
"""

from archsim.engine.catalog import DATABASE_KINDS, SERVER_KINDS
from archsim.engine.check_registry import CheckContext, register_check
from archsim.models.validation import ValidationCheck


@register_check("reliability")
def single_points_of_failure(c: CheckContext) -> ValidationCheck:
    """SPOFs are tolerated up to startup tier and fail from growth upwards."""
    count = len(c.spof_ids)
    names = c.labels(c.spof_ids) or "Some components"
    plural = count > 1

    if count == 0:
        return ValidationCheck(
            id="rel-spof",
            name="No Single Points of Failure",
            outcome="pass",
            severity="critical",
            score_impact=40,
            context_note="Your critical path has redundancy at every tier.",
            explanation="All components have at least one parallel redundant instance.",
        )
    if c.ctx.scale_tier in ("prototype", "startup"):
        return ValidationCheck(
            id="rel-spof",
            name=f"{count} Single Point{'s' if plural else ''} of Failure",
            outcome="advisory",
            severity="warning",
            score_impact=10,
            context_note=(
                f"At {c.ctx.scale_tier_label}, single-instance components are common and acceptable."
            ),
            explanation=f"{names} running as single instance{'s' if plural else ''}.",
            advisory_note=(
                "Add redundancy when you target 99.9%+ availability or handle revenue-critical "
                f"traffic. At {c.ctx.current_rps:,.0f} req/s, this is acceptable."
            ),
            scale_tier_trigger="growth",
        )
    return ValidationCheck(
        id="rel-spof",
        name=f"{count} Critical SPOF{'s' if plural else ''}",
        outcome="fail",
        severity="critical",
        score_impact=40,
        context_note=(
            f"At {c.ctx.scale_tier_label}, SPOFs are unacceptable: any failure causes an outage."
        ),
        explanation=(
            f"{names} ha{'ve' if plural else 's'} no redundancy at {c.ctx.current_rps:,.0f} req/s."
        ),
        fix=(
            "Add parallel redundant instances of each SPOF component. For compute, add servers "
            "behind the Load Balancer. For databases, add a read replica with failover."
        ),
    )


@register_check("reliability")
def database_replica(c: CheckContext) -> ValidationCheck | None:
    db_nodes = c.nodes_of_kind(*DATABASE_KINDS)
    if not db_nodes:
        return None

    if len(db_nodes) >= 2 or any(n.config.replicas >= 2 for n in db_nodes):
        return ValidationCheck(
            id="rel-db-replica",
            name="Database Replica Present",
            outcome="pass",
            severity="warning",
            score_impact=20,
            context_note="Database tier has redundancy; a single DB failure won't take down the system.",
            explanation="At least 2 database instances or a configured replica found.",
        )
    if c.ctx.thresholds.replicas_required_for_ha <= 1:
        return ValidationCheck(
            id="rel-db-replica",
            name="Database Has No Replica",
            outcome="advisory",
            severity="info",
            score_impact=5,
            context_note=(
                f"A single database is fine at {c.ctx.scale_tier_label}. "
                "Replicas become important as read traffic grows."
            ),
            explanation=f"{len(db_nodes)} database instance with no replica configured.",
            advisory_note=(
                "Add a read replica when DB read load exceeds 70%, for zero-downtime deployments, "
                "or for 99.9%+ availability. Typically at Growth stage (5K+ req/s)."
            ),
            scale_tier_trigger="growth",
        )
    return ValidationCheck(
        id="rel-db-replica",
        name="Database Lacks Replica",
        outcome="fail",
        severity="critical",
        score_impact=25,
        context_note=f"At {c.ctx.scale_tier_label}, a database without a replica is a critical risk.",
        explanation="Your database has no replica or failover instance.",
        fix=(
            "Add a second database node as a read replica. Route read traffic to the replica, "
            "writes to the primary."
        ),
    )


@register_check("reliability")
def load_balancer(c: CheckContext) -> ValidationCheck:
    servers = c.nodes_of_kind(*SERVER_KINDS)
    total_replicas = sum(n.config.replicas for n in servers)

    if c.has_kind("load-balancer", "api-gateway", "reverse-proxy"):
        return ValidationCheck(
            id="rel-lb",
            name="Load Balancer Present",
            outcome="pass",
            severity="warning",
            score_impact=20,
            context_note="Traffic distribution enables horizontal scaling and eliminates compute SPOFs.",
            explanation="A Load Balancer distributes traffic across your compute tier.",
        )
    if len(servers) > 1 or total_replicas > 1:
        return ValidationCheck(
            id="rel-lb",
            name="Multiple Servers Without Load Balancer",
            outcome="fail",
            severity="critical",
            score_impact=30,
            context_note=(
                "Multiple server instances exist but no traffic distribution; replicas are effectively unused."
            ),
            explanation=(
                f"{len(servers)} server instance(s) with {total_replicas} total replicas "
                "but no Load Balancer routing traffic."
            ),
            fix="Add a Load Balancer between the API Gateway/Client and your server instances.",
        )
    if not c.ctx.thresholds.requires_load_balancer:
        return ValidationCheck(
            id="rel-lb",
            name="No Load Balancer",
            outcome="advisory",
            severity="info",
            score_impact=0,
            context_note=(
                f"At {c.ctx.scale_tier_label} with a single server, a Load Balancer adds complexity without benefit."
            ),
            explanation="No Load Balancer found. All traffic routes directly to your server.",
            advisory_note=(
                "Add a Load Balancer when you need horizontal scaling or zero-downtime deployments. "
                "Typically at Startup-Growth (1K+ req/s)."
            ),
            scale_tier_trigger="startup",
        )
    return ValidationCheck(
        id="rel-lb",
        name="No Load Balancer",
        outcome="advisory",
        severity="warning",
        score_impact=15,
        context_note=f"At {c.ctx.scale_tier_label}, a Load Balancer is recommended for horizontal scaling.",
        explanation="No Load Balancer present.",
        advisory_note="Add a Load Balancer before your server tier to enable horizontal scaling.",
        scale_tier_trigger="growth",
    )


@register_check("reliability")
def all_components_connected(c: CheckContext) -> ValidationCheck:
    linked = {e.source for e in c.edges} | {e.target for e in c.edges}
    isolated = [n for n in c.nodes if n.id not in linked]

    if not isolated:
        return ValidationCheck(
            id="rel-connected",
            name="All Components Connected",
            outcome="pass",
            severity="warning",
            score_impact=15,
            context_note="All components are connected to the graph.",
            explanation="Full graph connectivity verified.",
        )
    verb = "are" if len(isolated) > 1 else "is"
    return ValidationCheck(
        id="rel-connected",
        name="All Components Connected",
        outcome="fail",
        severity="warning",
        score_impact=15,
        context_note=f"{len(isolated)} component{'s' if len(isolated) > 1 else ''} {verb} disconnected.",
        explanation=f"{', '.join(n.config.label for n in isolated)} {verb} not connected.",
        fix="Connect isolated components to the rest of your architecture.",
    )
