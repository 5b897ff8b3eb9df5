"""Data integrity & consistency checks."""

from archsim.engine.catalog import CLIENT_KINDS, DATABASE_KINDS
from archsim.engine.check_registry import CheckContext, register_check
from archsim.models.validation import ValidationCheck


def has_direct_client_db_edge(c: CheckContext) -> bool:
    client_ids = {n.id for n in c.nodes_of_kind(*CLIENT_KINDS)}
    db_ids = {n.id for n in c.nodes_of_kind(*DATABASE_KINDS)}
    return any(e.source in client_ids and e.target in db_ids for e in c.edges)


@register_check("dataIntegrity")
def data_store_present(c: CheckContext) -> ValidationCheck:
    db_nodes = c.nodes_of_kind(*DATABASE_KINDS)
    if db_nodes:
        return ValidationCheck(
            id="data-store",
            name="Data Store Present",
            outcome="pass",
            severity="critical",
            score_impact=30,
            context_note="Persistent data storage present.",
            explanation=f"{len(db_nodes)} database instance(s) found.",
        )
    return ValidationCheck(
        id="data-store",
        name="Data Store Present",
        outcome="fail",
        severity="critical",
        score_impact=30,
        context_note="No persistent data store: data will be lost on restart.",
        explanation="No database found in the architecture.",
        fix="Add a database (PostgreSQL, MongoDB, DynamoDB) to persist data.",
    )


@register_check("dataIntegrity")
def no_direct_client_db(c: CheckContext) -> ValidationCheck:
    if has_direct_client_db_edge(c):
        return ValidationCheck(
            id="data-no-direct",
            name="No Direct Client-to-DB Connection",
            outcome="fail",
            severity="critical",
            score_impact=25,
            context_note="A client accesses the database directly, bypassing auth and validation layers.",
            explanation="Direct client to database edge found.",
            fix="Route all client requests through an API server layer.",
        )
    return ValidationCheck(
        id="data-no-direct",
        name="No Direct Client-to-DB Connection",
        outcome="pass",
        severity="critical",
        score_impact=25,
        context_note="Clients access data through server intermediaries.",
        explanation="All data access goes through server layers.",
    )


@register_check("dataIntegrity")
def backup_path(c: CheckContext) -> ValidationCheck:
    has_object_store = c.has_kind("object-storage")
    db_count = len(c.nodes_of_kind(*DATABASE_KINDS))

    if has_object_store or db_count >= 2:
        return ValidationCheck(
            id="data-backup",
            name="Backup Path Exists",
            outcome="pass",
            severity="warning",
            score_impact=20,
            context_note="Backup or redundant storage available.",
            explanation=(
                "Object storage available for backups."
                if has_object_store
                else "Multiple database instances provide redundancy."
            ),
        )
    if c.ctx.scale_tier in ("prototype", "startup"):
        return ValidationCheck(
            id="data-backup",
            name="No Backup Storage",
            outcome="advisory",
            severity="info",
            score_impact=5,
            context_note=f"Backup storage is recommended but not critical at {c.ctx.scale_tier_label}.",
            explanation="No backup storage or secondary database.",
            advisory_note=(
                "Add Object Storage (S3) for backups or a secondary database "
                "before handling production data."
            ),
            scale_tier_trigger="growth",
        )
    return ValidationCheck(
        id="data-backup",
        name="No Backup Storage",
        outcome="fail",
        severity="warning",
        score_impact=20,
        context_note=f"At {c.ctx.scale_tier_label}, a single database without backup is a data loss risk.",
        explanation="No backup storage or secondary database.",
        fix="Add Object Storage (S3) for backups or a secondary database.",
    )
