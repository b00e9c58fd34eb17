"""Marvel Comics GraphRAG System.

Loads Marvel character, hero and comic relationship data into Neo4j
and answers natural language questions over the graph with a local LLM.
"""

__version__ = "0.1.0"
