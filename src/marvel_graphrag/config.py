"""Central configuration for the Marvel GraphRAG system."""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load .env file from project root
load_dotenv()


class Config(BaseModel):
    """All configuration for the Marvel GraphRAG system.

    Paths are relative to the working directory unless absolute.
    Neo4j credentials and the Ollama endpoint should be overridden via
    environment or .env file.
    """

    # Paths
    dataset_dir: Path = Field(default=Path(os.getenv("DATASET_DIR", "dataset")))

    # Neo4j
    neo4j_uri: str = Field(default=os.getenv("NEO4J_URI", "bolt://localhost:7687"))
    neo4j_user: str = Field(default=os.getenv("NEO4J_USER", "neo4j"))
    neo4j_password: str = Field(default=os.getenv("NEO4J_PASSWORD", "password"))
    neo4j_database: str = Field(default=os.getenv("NEO4J_DATABASE", ""))
    query_timeout: float = 30.0  # seconds per Cypher statement

    # Ollama
    ollama_host: str = Field(default=os.getenv("OLLAMA_HOST", "http://localhost:11434"))
    ollama_model: str = Field(default=os.getenv("OLLAMA_MODEL", "llama3.2"))
    llm_timeout: float = 120.0  # seconds per generation request
    cypher_temperature: float = 0.1
    narration_temperature: float = 0.7

    # Query engine
    query_row_limit: int = 10

    # Ingestion
    batch_size: int = 500

    # Web UI
    web_host: str = Field(default=os.getenv("WEB_HOST", "127.0.0.1"))
    web_port: int = Field(default=int(os.getenv("WEB_PORT", "8080")))
