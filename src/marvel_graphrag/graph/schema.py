"""Neo4j schema creation and introspection.

Creates the uniqueness constraints that back MERGE-by-id ingestion and
reads back the labels and relationship types present in the graph so
they can be shown to the LLM as query context.

Constraint creation uses IF NOT EXISTS; running create_schema()
multiple times is safe.
"""

import logging
from dataclasses import dataclass, field

from marvel_graphrag.graph.store import GraphStore, GraphStoreError

logger = logging.getLogger(__name__)

# Uniqueness constraints: (label, key_property)
UNIQUENESS_CONSTRAINTS: list[tuple[str, str]] = [
    ("Character", "id"),
    ("Hero", "id"),
    ("Comic", "id"),
    ("Movie", "id"),
    ("Team", "id"),
]

SCHEMA_UNAVAILABLE = "Graph schema unavailable"


@dataclass
class SchemaSummary:
    """Node labels and relationship types present in the graph."""

    labels: list[str] = field(default_factory=list)
    relationship_types: list[str] = field(default_factory=list)
    available: bool = True

    def render(self) -> str:
        """Format the summary as prompt context."""
        if not self.available:
            return SCHEMA_UNAVAILABLE
        return (
            f"Node labels: {self.labels}, "
            f"Relationship types: {self.relationship_types}"
        )


def _existing_constraints(store: GraphStore) -> list[tuple[str, list, list]]:
    """Get (name, labelsOrTypes, properties) for every existing constraint."""
    rows = store.run(
        "SHOW CONSTRAINTS YIELD name, labelsOrTypes, properties "
        "RETURN name, labelsOrTypes, properties"
    )
    return [(row[0], row[1], row[2]) for row in rows]


def create_schema(store: GraphStore) -> dict:
    """Create the uniqueness constraints used by ingestion.

    Args:
        store: Graph store to write to.

    Returns:
        Dictionary with counts of created and already existing constraints.

    Raises:
        GraphStoreError: If Neo4j cannot be reached or rejects a constraint.
    """
    stats = {"constraints_created": 0, "constraints_existing": 0}
    existing = _existing_constraints(store)

    for label, prop in UNIQUENESS_CONSTRAINTS:
        constraint_name = f"{label.lower()}_{prop}_unique"

        already_covered = any(
            name == constraint_name or (labels == [label] and props == [prop])
            for name, labels, props in existing
        )
        if already_covered:
            stats["constraints_existing"] += 1
            logger.debug(f"Constraint already covered for {label}.{prop}")
            continue

        store.run(
            f"CREATE CONSTRAINT {constraint_name} IF NOT EXISTS "
            f"FOR (n:{label}) REQUIRE n.{prop} IS UNIQUE"
        )
        stats["constraints_created"] += 1
        logger.debug(f"Created constraint: {constraint_name}")

    logger.info(
        f"Constraints: {stats['constraints_created']} created, "
        f"{stats['constraints_existing']} already existed"
    )
    return stats


def _collect(store: GraphStore, statement: str) -> list[str]:
    rows = store.run(statement, read_only=True)
    if not rows or not rows[0]:
        return []
    return [str(value) for value in rows[0][0]]


def introspect_schema(store: GraphStore) -> SchemaSummary:
    """Read the node labels and relationship types currently in the graph.

    Returns:
        SchemaSummary reflecting the store at call time, or one marked
        unavailable if Neo4j could not answer.
    """
    try:
        labels = _collect(
            store, "CALL db.labels() YIELD label RETURN collect(label) AS labels"
        )
        relationship_types = _collect(
            store,
            "CALL db.relationshipTypes() YIELD relationshipType "
            "RETURN collect(relationshipType) AS relationships",
        )
    except GraphStoreError as e:
        logger.warning(f"Schema introspection failed: {e}")
        return SchemaSummary(available=False)

    logger.info(
        f"Schema: {len(labels)} labels, {len(relationship_types)} relationship types"
    )
    return SchemaSummary(labels=labels, relationship_types=relationship_types)


def data_present(store: GraphStore) -> bool:
    """Check whether any Character node has been loaded."""
    try:
        rows = store.run(
            "MATCH (c:Character) RETURN count(c) AS count LIMIT 1", read_only=True
        )
    except GraphStoreError as e:
        logger.debug(f"Data check failed: {e}")
        return False
    return bool(rows) and bool(rows[0]) and rows[0][0] > 0
