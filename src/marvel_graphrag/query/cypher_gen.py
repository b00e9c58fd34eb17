"""Natural language to Cypher query translation.

Converts user questions into Cypher queries against the Marvel graph
by prompting the LLM with query rules, worked examples and the current
schema. The returned text is only checked syntactically: it must
contain a MATCH clause and no write or admin clauses. It is never
parsed.
"""

import logging
import re

from marvel_graphrag.graph.schema import SchemaSummary
from marvel_graphrag.llm import LLMError, OllamaLLM
from marvel_graphrag.query.prompts import AVENGERS, CYPHER_GENERATION_PROMPT

logger = logging.getLogger(__name__)

REQUIRED_KEYWORD = "MATCH"

# Clauses that modify data or the database; matched as whole words
# outside comments, identifiers and string literals.
FORBIDDEN_CLAUSES: list[str] = [
    "CREATE",
    "MERGE",
    "DELETE",
    "DETACH",
    "SET",
    "REMOVE",
    "DROP",
    "FOREACH",
    r"LOAD\s+CSV",
]

_FORBIDDEN_RE = re.compile(
    r"\b(" + "|".join(FORBIDDEN_CLAUSES) + r")\b", re.IGNORECASE
)

# Procedures a generated query may CALL. Everything else, including the
# db.create* procedures, is rejected.
READ_PROCEDURES: set[str] = {"db.labels", "db.relationshiptypes", "db.propertykeys"}
READ_PROCEDURE_PREFIXES: tuple[str, ...] = ("db.schema.",)

_CALL_RE = re.compile(r"\bCALL\s+([A-Za-z_][\w.]*)", re.IGNORECASE)

# Text that cannot contain clauses: comments, backtick identifiers and
# string literals. One alternation, so whichever starts first wins.
_INERT_TEXT_RE = re.compile(
    r"//[^\n]*"
    r"|/\*.*?\*/"
    r"|`(?:[^`]|``)*`"
    r"|'(?:[^'\\]|\\.)*'"
    r"|\"(?:[^\"\\]|\\.)*\"",
    re.DOTALL,
)

_CODE_FENCE_RE = re.compile(r"^```[A-Za-z]*\s*\n?(.*?)\n?```$", re.DOTALL)


class SynthesisError(Exception):
    """Raised when no usable Cypher query could be generated."""


def build_prompt(question: str, schema: SchemaSummary, row_limit: int = 10) -> str:
    """Build the Cypher generation prompt for a question."""
    return CYPHER_GENERATION_PROMPT.format(
        schema=schema.render(),
        question=question,
        limit=row_limit,
        avengers=AVENGERS,
    )


def clean_query(text: str) -> str:
    """Trim whitespace and a surrounding Markdown code fence, if any."""
    text = text.strip()
    fenced = _CODE_FENCE_RE.match(text)
    if fenced:
        text = fenced.group(1).strip()
    return text


def _is_read_procedure(name: str) -> bool:
    name = name.lower()
    return name in READ_PROCEDURES or name.startswith(READ_PROCEDURE_PREFIXES)


def find_write_clause(query: str) -> str | None:
    """Return the first write/admin clause found in executable query text.

    Comments, backtick-quoted identifiers and string literals are
    ignored; procedure calls outside READ_PROCEDURES count as writes.

    Args:
        query: Cypher text.

    Returns:
        The offending clause as written, or None for a read-only query.
    """
    stripped = _INERT_TEXT_RE.sub(" ", query)
    forbidden = _FORBIDDEN_RE.search(stripped)
    if forbidden:
        return forbidden.group(1)
    for call in _CALL_RE.finditer(stripped):
        if not _is_read_procedure(call.group(1)):
            return f"CALL {call.group(1)}"
    return None


def validate_query(query: str) -> None:
    """Check a generated query against the syntactic gate.

    Raises:
        SynthesisError: If MATCH is missing or a write clause is present.
    """
    if REQUIRED_KEYWORD not in query.upper():
        raise SynthesisError("generated query doesn't contain MATCH clause")

    clause = find_write_clause(query)
    if clause:
        raise SynthesisError(
            f"generated query is not read-only (contains {clause.upper()})"
        )


def generate_cypher(
    question: str,
    schema: SchemaSummary,
    llm: OllamaLLM,
    row_limit: int = 10,
    temperature: float | None = None,
) -> str:
    """Translate a natural language question to a Cypher query.

    Args:
        question: Natural language question.
        schema: Labels and relationship types to show the model.
        llm: Model client.
        row_limit: LIMIT the model is told to apply.
        temperature: Sampling temperature for the generation request.

    Returns:
        Cypher query string, trimmed.

    Raises:
        SynthesisError: If the model fails, returns nothing, or returns
            text that does not pass validate_query().
    """
    prompt = build_prompt(question, schema, row_limit)

    try:
        completions = llm.generate(prompt, temperature=temperature)
    except LLMError as e:
        raise SynthesisError(str(e)) from e

    if not completions:
        raise SynthesisError("empty response from LLM")

    query = clean_query(completions[0].text)
    validate_query(query)

    logger.info(f"Generated Cypher: {query}")
    return query
