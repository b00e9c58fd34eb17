"""Query prompt templates.

All prompts used for Cypher generation and answer narration are
defined here. Prompts contain no logic, only text templates.
"""

CYPHER_GENERATION_PROMPT = """You are a Cypher query generator for a Neo4j Marvel Comics knowledge graph.

Graph Schema:
{schema}

DATA STRUCTURE:
- Character nodes: (c:Character {{id: string, name: string, group: string, size: int}})
- Hero nodes: (h:Hero {{id: string, name: string}})
- Comic nodes: (c:Comic {{id: string, title: string}})
- Relationships: (c1:Character)-[:PARTNERS_WITH]->(c2:Character), \
(h1:Hero)-[:KNOWS]->(h2:Hero), (h:Hero)-[:APPEARS_IN]->(c:Comic)

RULES - FOLLOW EXACTLY:
1. ALWAYS use the id property (c.id, h.id) for every property access
2. NEVER use c.name, h.name or c.title
3. Use single quotes for strings: 'Iron Man'
4. Use EXACT matches: {{id: 'Character Name'}} or WHERE c.id IN ['Name1', 'Name2']
5. NEVER use toLower() or CONTAINS - only exact matches
6. Always include LIMIT {limit}
7. Return a single string column named 'result'
8. Keep queries SIMPLE - avoid complex logic
9. For counting: use WITH count(*) as count, then toString(count) in RETURN
10. NEVER use colons in RETURN strings - use + for concatenation
11. ONLY read data: never CREATE, MERGE, SET, DELETE or REMOVE anything

User Question: "{question}"

Choose the appropriate pattern and return ONLY the Cypher query:

For character partnerships (like "who are spider-man's partners?"):
MATCH (c:Character {{id: 'Spider-Man'}}) OPTIONAL MATCH (c)-[:PARTNERS_WITH]->(partner:Character) \
WITH c, collect(DISTINCT partner.id) as partners \
RETURN 'Character: ' + c.id + ', Partners: ' + partners as result LIMIT {limit}

For Avengers teammates (like "which avengers have fought together?"):
MATCH (c1:Character)-[:PARTNERS_WITH]->(c2:Character) \
WHERE c1.id IN {avengers} AND c2.id IN {avengers} \
RETURN 'Avengers teammates: ' + c1.id + ' and ' + c2.id as result LIMIT {limit}

For character search (like "find spider-man"):
MATCH (c:Character {{id: 'Spider-Man'}}) \
RETURN 'Character: ' + c.id + ', Group: ' + c.group as result LIMIT {limit}

For counting relationships (like "how many heroes does X know?"):
MATCH (h:Hero {{id: 'Human Robot'}})-[:KNOWS]->(other:Hero) WITH count(other) as count \
RETURN 'Human Robot knows ' + toString(count) + ' heroes' as result LIMIT {limit}

For counting partnerships (like "how many avengers partnerships?"):
MATCH (c1:Character)-[:PARTNERS_WITH]->(c2:Character) \
WHERE c1.id IN {avengers} AND c2.id IN {avengers} WITH count(*) as count \
RETURN 'There are ' + toString(count) + ' Avengers partnerships' as result LIMIT {limit}

For cross-team partnerships (like "how many avengers are partners with Spider-Man?"):
MATCH (c1:Character)-[:PARTNERS_WITH]->(c2:Character) \
WHERE c1.id IN {avengers} AND c2.id = 'Spider-Man' WITH count(c1) as count \
RETURN 'There are ' + toString(count) + ' Avengers partnered with Spider-Man' as result LIMIT {limit}

Only return the Cypher query, nothing else."""

AVENGERS = "['Iron Man', 'Captain America', 'Thor', 'Hulk', 'Black Widow', 'Hawkeye']"

NARRATION_PROMPT = """You are a helpful assistant that explains Marvel Comics knowledge graph results \
in natural language.

User Question: "{question}"
Cypher Query Executed: {cypher}
Graph Database Results: {results}

Generate a natural, conversational response that:
1. Directly answers the user's question
2. Explains the results in a friendly, engaging way
3. Highlights key relationships and connections
4. Uses Marvel Comics terminology appropriately
5. Keeps the response concise but informative
6. If no results were found, says so plainly and suggests what the user might ask instead

Write a natural response as if you're a knowledgeable Marvel Comics expert:"""

NARRATION_FALLBACK = (
    "I found some information in the Marvel knowledge graph, but I couldn't "
    "generate a natural response. Here are the raw results: {results}"
)
