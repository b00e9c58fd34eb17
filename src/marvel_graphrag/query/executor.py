"""Execution of generated Cypher against the graph store.

The generated text is run verbatim with no parameters. Only the first
column of each row is kept, as a display string.
"""

import logging
from dataclasses import dataclass, field

from marvel_graphrag.graph.store import GraphStore, GraphStoreError

logger = logging.getLogger(__name__)

NO_RESULTS = "No results found."


@dataclass
class ExecutionResult:
    """Rows returned by a query, or the error that stopped it."""

    rows: list[str] = field(default_factory=list)
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def is_empty(self) -> bool:
        return not self.failed and not self.rows

    @property
    def text(self) -> str:
        """Single display string: rows one per line, or the outcome."""
        if self.failed:
            return f"Query execution error: {self.error}"
        if not self.rows:
            return NO_RESULTS
        return "\n".join(self.rows)


def execute_query(store: GraphStore, cypher: str) -> ExecutionResult:
    """Run a generated query and collect the first column of every row.

    Store errors are returned in the result, never raised.
    """
    try:
        records = store.run(cypher, read_only=True)
    except GraphStoreError as e:
        logger.warning(f"Query execution failed: {e}")
        return ExecutionResult(error=str(e))

    rows = [str(values[0]) for values in records if values]
    logger.info(f"Query returned {len(rows)} rows")
    return ExecutionResult(rows=rows)
