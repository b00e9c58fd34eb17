"""Natural language narration of query results.

A second LLM call explains how the executed query answers the
question. Narration never fails: if the model cannot answer, the raw
results are returned in a fixed sentence instead.
"""

import logging

from marvel_graphrag.llm import LLMError, OllamaLLM
from marvel_graphrag.query.executor import ExecutionResult
from marvel_graphrag.query.prompts import NARRATION_FALLBACK, NARRATION_PROMPT

logger = logging.getLogger(__name__)


def fallback_narration(result: ExecutionResult) -> str:
    return NARRATION_FALLBACK.format(results=result.text)


def narrate(
    llm: OllamaLLM,
    question: str,
    cypher: str,
    result: ExecutionResult,
    temperature: float | None = None,
) -> str:
    """Explain query results in prose.

    Args:
        llm: Model client.
        question: The user's original question.
        cypher: The query that was executed.
        result: What the query returned.
        temperature: Sampling temperature for the narration request.

    Returns:
        Narration text, never empty.
    """
    prompt = NARRATION_PROMPT.format(
        question=question,
        cypher=cypher,
        results=result.text,
    )

    try:
        completions = llm.generate(prompt, temperature=temperature)
    except LLMError as e:
        logger.warning(f"Narration failed, returning raw results: {e}")
        return fallback_narration(result)

    text = completions[0].text.strip() if completions else ""
    if not text:
        logger.warning("Narration came back empty, returning raw results")
        return fallback_narration(result)
    return text
