"""Application context shared by the CLI and the web app.

Built once at process start: one Neo4j driver, one Ollama client and
the schema summary read at startup. The schema is not refreshed after
a data load; restart the process to pick up new labels.
"""

import logging
from dataclasses import dataclass

from marvel_graphrag.config import Config
from marvel_graphrag.graph.schema import SchemaSummary, introspect_schema
from marvel_graphrag.graph.store import GraphStore
from marvel_graphrag.llm import OllamaLLM
from marvel_graphrag.query.engine import QueryEngine

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Long-lived handles used to serve requests."""

    config: Config
    store: GraphStore
    llm: OllamaLLM
    schema: SchemaSummary
    engine: QueryEngine

    @classmethod
    def from_config(cls, config: Config) -> "AppContext":
        store = GraphStore(config)
        llm = OllamaLLM(config)
        schema = introspect_schema(store)
        logger.info(f"Context ready ({config.neo4j_uri}, model {config.ollama_model})")
        return cls(
            config=config,
            store=store,
            llm=llm,
            schema=schema,
            engine=QueryEngine(config, store, llm, schema),
        )

    def close(self) -> None:
        """Release resources."""
        self.store.close()
