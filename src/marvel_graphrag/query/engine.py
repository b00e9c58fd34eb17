"""Question answering pipeline.

Each question runs three strictly sequential stages: Cypher generation,
execution, and narration. Only a generation failure stops the pipeline;
execution errors and empty results still get narrated.
"""

import logging

from marvel_graphrag.config import Config
from marvel_graphrag.graph.schema import SchemaSummary
from marvel_graphrag.graph.store import GraphStore
from marvel_graphrag.llm import OllamaLLM
from marvel_graphrag.models import QueryResponse
from marvel_graphrag.query.cypher_gen import SynthesisError, generate_cypher
from marvel_graphrag.query.executor import execute_query
from marvel_graphrag.query.narrator import narrate

logger = logging.getLogger(__name__)


class QueryEngine:
    """Answers natural language questions over the Marvel graph.

    Holds no per-request state; one instance can serve concurrent
    requests as long as the store and LLM clients can.
    """

    def __init__(
        self,
        config: Config,
        store: GraphStore,
        llm: OllamaLLM,
        schema: SchemaSummary,
    ):
        self.config = config
        self.store = store
        self.llm = llm
        self.schema = schema

    def answer(self, question: str) -> QueryResponse:
        """Answer a question.

        Args:
            question: Natural language question.

        Returns:
            QueryResponse. On generation failure only 'error' is set;
            otherwise cypher, results and narration are filled in.
        """
        logger.info(f"Question: {question}")

        try:
            cypher = generate_cypher(
                question,
                self.schema,
                self.llm,
                row_limit=self.config.query_row_limit,
                temperature=self.config.cypher_temperature,
            )
        except SynthesisError as e:
            logger.warning(f"Failed to generate query: {e}")
            return QueryResponse(
                question=question,
                error=f"Failed to generate query: {e}",
            )

        result = execute_query(self.store, cypher)
        narration = narrate(
            self.llm,
            question,
            cypher,
            result,
            temperature=self.config.narration_temperature,
        )

        return QueryResponse(
            question=question,
            cypher=cypher,
            results=result.text,
            row_count=len(result.rows),
            execution_error=result.error,
            narration=narration,
        )
