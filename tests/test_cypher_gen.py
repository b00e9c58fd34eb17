"""Tests for natural language to Cypher translation."""

import pytest
from stubs import StubLLM

from marvel_graphrag.graph.schema import SchemaSummary
from marvel_graphrag.query.cypher_gen import (
    SynthesisError,
    build_prompt,
    clean_query,
    find_write_clause,
    generate_cypher,
    validate_query,
)

SCHEMA = SchemaSummary(
    labels=["Character", "Hero", "Comic"],
    relationship_types=["PARTNERS_WITH", "KNOWS", "APPEARS_IN"],
)

FIND_CAP = (
    "MATCH (c:Character {id: 'Captain America'}) "
    "RETURN 'Character: ' + c.id + ', Group: ' + c.group as result LIMIT 10"
)


# ------------------------------------------------------------------ #
#  Prompt construction                                                #
# ------------------------------------------------------------------ #


class TestBuildPrompt:

    def test_contains_question_verbatim(self):
        prompt = build_prompt("Who are Spider-Man's partners?", SCHEMA)
        assert "User Question: \"Who are Spider-Man's partners?\"" in prompt

    def test_contains_rendered_schema(self):
        prompt = build_prompt("Find Thor", SCHEMA)
        assert SCHEMA.render() in prompt
        assert "PARTNERS_WITH" in prompt

    def test_unavailable_schema(self):
        prompt = build_prompt("Find Thor", SchemaSummary(available=False))
        assert "Graph schema unavailable" in prompt

    def test_row_limit_directive(self):
        prompt = build_prompt("Find Thor", SCHEMA, row_limit=5)
        assert "Always include LIMIT 5" in prompt
        assert "LIMIT 10" not in prompt

    def test_literal_braces_survive_formatting(self):
        prompt = build_prompt("Find Thor", SCHEMA)
        assert "MATCH (c:Character {id: 'Spider-Man'})" in prompt

    def test_worked_examples_present(self):
        prompt = build_prompt("Find Thor", SCHEMA)
        assert "For character search" in prompt
        assert "For counting relationships" in prompt
        assert "For cross-team partnerships" in prompt
        assert "'Black Widow'" in prompt

    def test_braces_in_question_are_kept(self):
        prompt = build_prompt("What is {id}?", SCHEMA)
        assert '"What is {id}?"' in prompt


# ------------------------------------------------------------------ #
#  Cleanup and validation                                             #
# ------------------------------------------------------------------ #


class TestCleanQuery:

    def test_trims_whitespace(self):
        assert clean_query(f"\n  {FIND_CAP}  \n") == FIND_CAP

    def test_strips_cypher_fence(self):
        assert clean_query(f"```cypher\n{FIND_CAP}\n```") == FIND_CAP

    def test_strips_bare_fence(self):
        assert clean_query(f"```\n{FIND_CAP}\n```") == FIND_CAP

    def test_leaves_plain_text(self):
        assert clean_query("MATCH (n) RETURN n") == "MATCH (n) RETURN n"


class TestFindWriteClause:

    @pytest.mark.parametrize(
        "query, clause",
        [
            ("MATCH (n) DETACH DELETE n", "DETACH"),
            ("MATCH (n) DELETE n", "DELETE"),
            ("MATCH (c:Character) SET c.size = 0 RETURN c", "SET"),
            ("MATCH (c:Character) REMOVE c.group RETURN c", "REMOVE"),
            ("MERGE (c:Character {id: 'X'}) WITH c MATCH (c) RETURN c", "MERGE"),
            ("CREATE (c:Character {id: 'X'}) WITH c MATCH (c) RETURN c", "CREATE"),
            ("match (n) create (m) return m", "create"),
        ],
    )
    def test_detects_write_clauses(self, query, clause):
        assert find_write_clause(query) == clause

    def test_detects_load_csv(self):
        assert find_write_clause("LOAD CSV FROM 'file:///x' AS row MATCH (n) RETURN n")

    def test_detects_non_db_procedure(self):
        assert find_write_clause("MATCH (n) CALL apoc.refactor.rename.label('A', 'B') RETURN n") == (
            "CALL apoc.refactor.rename.label"
        )

    @pytest.mark.parametrize(
        "query",
        [
            "CALL db.labels() YIELD label MATCH (n) RETURN label",
            "CALL db.relationshipTypes() YIELD relationshipType MATCH (n) RETURN relationshipType",
            "CALL db.propertyKeys() YIELD propertyKey MATCH (n) RETURN propertyKey",
            "CALL db.schema.visualization() MATCH (n) RETURN n",
        ],
    )
    def test_allows_read_procedures(self, query):
        assert find_write_clause(query) is None

    @pytest.mark.parametrize(
        "procedure",
        ["db.createLabel", "db.createProperty", "db.createRelationshipType"],
    )
    def test_detects_db_write_procedures(self, procedure):
        query = f"MATCH (n) CALL {procedure}('Hacked') RETURN n.id AS result"
        assert find_write_clause(query) == f"CALL {procedure}"

    def test_quote_in_line_comment_does_not_hide_write(self):
        query = "MATCH (n) // it's fine\nCREATE (m:Hacked) RETURN 'done' AS result"
        assert find_write_clause(query) == "CREATE"

    def test_quote_in_block_comment_does_not_hide_write(self):
        query = "MATCH (n) /* it's fine */ DELETE n RETURN 'done' AS result"
        assert find_write_clause(query) == "DELETE"

    def test_quote_in_backtick_identifier_does_not_hide_write(self):
        query = "MATCH (n:`O'Brien`) DETACH DELETE n RETURN 'x' AS result"
        assert find_write_clause(query) == "DETACH"

    def test_ignores_keywords_in_comments_and_identifiers(self):
        query = (
            "MATCH (c:`Create`) // set nothing here\n"
            "/* delete? no */ RETURN c.id AS result"
        )
        assert find_write_clause(query) is None

    def test_comment_marker_inside_string_is_text(self):
        query = "MATCH (c:Character {id: 'http://x'}) SET c.size = 1 RETURN c"
        assert find_write_clause(query) == "SET"

    def test_ignores_keywords_in_string_literals(self):
        query = "MATCH (c:Character {id: 'Create Man'}) RETURN 'Set ' + c.id + \" delete\" AS result"
        assert find_write_clause(query) is None

    def test_ignores_keywords_inside_identifiers(self):
        assert find_write_clause("MATCH (c:Character) RETURN c.created, c.offset") is None

    def test_read_query(self):
        assert find_write_clause(FIND_CAP) is None


class TestValidateQuery:

    def test_accepts_read_query(self):
        validate_query(FIND_CAP)

    def test_match_check_is_case_insensitive(self):
        validate_query("match (c:Character) return c.id as result limit 10")

    def test_optional_match_counts(self):
        validate_query("OPTIONAL MATCH (c:Character) RETURN c.id AS result")

    def test_rejects_missing_match(self):
        with pytest.raises(SynthesisError, match="MATCH"):
            validate_query("RETURN 'hello' AS result")

    def test_rejects_write_query(self):
        with pytest.raises(SynthesisError, match="not read-only"):
            validate_query("MATCH (n) DETACH DELETE n")

    @pytest.mark.parametrize(
        "query",
        [
            "MATCH (n) // it's fine\nCREATE (m:Hacked) RETURN 'done' AS result",
            "MATCH (n:`O'Brien`) DETACH DELETE n RETURN 'x' AS result",
            "MATCH (n) CALL db.createLabel('Hacked') RETURN n.id AS result",
        ],
    )
    def test_rejects_writes_hidden_behind_quotes(self, query):
        with pytest.raises(SynthesisError, match="not read-only"):
            validate_query(query)


# ------------------------------------------------------------------ #
#  generate_cypher                                                    #
# ------------------------------------------------------------------ #


class TestGenerateCypher:

    def test_returns_trimmed_query(self):
        llm = StubLLM(f"  {FIND_CAP}\n")
        assert generate_cypher("Find Captain America", SCHEMA, llm) == FIND_CAP

    def test_single_prompt_sent(self):
        llm = StubLLM(FIND_CAP)
        generate_cypher("Find Captain America", SCHEMA, llm, row_limit=7, temperature=0.1)
        assert len(llm.prompts) == 1
        assert "Find Captain America" in llm.prompts[0]
        assert "LIMIT 7" in llm.prompts[0]
        assert llm.temperatures == [0.1]

    def test_fenced_completion_is_unwrapped(self):
        llm = StubLLM(f"```cypher\n{FIND_CAP}\n```")
        assert generate_cypher("Find Captain America", SCHEMA, llm) == FIND_CAP

    def test_completion_without_match_fails(self):
        llm = StubLLM("I'm sorry, I can't help with that.")
        with pytest.raises(SynthesisError, match="doesn't contain MATCH"):
            generate_cypher("Find Captain America", SCHEMA, llm)

    def test_llm_error_fails(self, llm_down):
        llm = StubLLM(llm_down)
        with pytest.raises(SynthesisError, match="connection refused"):
            generate_cypher("Find Captain America", SCHEMA, llm)

    def test_no_completions_fails(self):
        llm = StubLLM([])
        with pytest.raises(SynthesisError, match="empty response"):
            generate_cypher("Find Captain America", SCHEMA, llm)

    def test_write_query_fails(self):
        llm = StubLLM("MATCH (c:Character {id: 'Thor'}) SET c.group = 'villain' RETURN c.id")
        with pytest.raises(SynthesisError, match="SET"):
            generate_cypher("Make Thor a villain", SCHEMA, llm)

    def test_no_retry_after_failure(self):
        llm = StubLLM("no query here", FIND_CAP)
        with pytest.raises(SynthesisError):
            generate_cypher("Find Captain America", SCHEMA, llm)
        assert len(llm.prompts) == 1
