"""Thin Neo4j client used by every part of the system.

All statements go through GraphStore.run(), which returns plain rows
(lists of values in column order) and wraps driver failures in
GraphStoreError so callers never handle neo4j exceptions directly.
"""

import logging
from typing import Any

from neo4j import READ_ACCESS, WRITE_ACCESS, GraphDatabase, Query
from neo4j.exceptions import DriverError, Neo4jError

from marvel_graphrag.config import Config

logger = logging.getLogger(__name__)


class GraphStoreError(Exception):
    """Raised when Neo4j rejects a statement or cannot be reached."""


class GraphStore:
    """Runs Cypher statements against Neo4j and returns tabular rows."""

    def __init__(self, config: Config, driver=None):
        self.config = config
        self.driver = driver or GraphDatabase.driver(
            config.neo4j_uri,
            auth=(config.neo4j_user, config.neo4j_password),
        )

    def run(
        self,
        statement: str,
        parameters: dict[str, Any] | None = None,
        *,
        read_only: bool = False,
    ) -> list[list[Any]]:
        """Run a single statement in an auto-commit transaction.

        Args:
            statement: Cypher text.
            parameters: Parameter map bound to the statement ($name placeholders).
            read_only: Open the session in read access mode.

        Returns:
            One list of values per result record, in column order.

        Raises:
            GraphStoreError: If the driver or the server reports an error.
        """
        access_mode = READ_ACCESS if read_only else WRITE_ACCESS
        query = Query(statement, timeout=self.config.query_timeout)
        try:
            with self.driver.session(
                database=self.config.neo4j_database or None,
                default_access_mode=access_mode,
            ) as session:
                result = session.run(query, parameters or {})
                return [list(record.values()) for record in result]
        except (Neo4jError, DriverError) as e:
            logger.debug(f"Statement failed: {statement!r}")
            raise GraphStoreError(str(e)) from e

    def is_available(self) -> bool:
        """Check whether Neo4j is reachable with the configured credentials."""
        try:
            self.driver.verify_connectivity()
            return True
        except (Neo4jError, DriverError) as e:
            logger.debug(f"Neo4j not reachable: {e}")
            return False

    def close(self) -> None:
        """Close the Neo4j driver connection."""
        self.driver.close()
