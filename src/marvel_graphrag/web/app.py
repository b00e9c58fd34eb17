"""Web UI and JSON API for the question answering pipeline.

Routes:
  GET  /               chat page
  POST /api/query      answer a question
  GET  /api/status     Neo4j / LLM / data status
  POST /api/load-data  (re)load the CSV datasets
"""

import logging
from pathlib import Path

from fastapi import FastAPI
from fastapi.responses import HTMLResponse, JSONResponse

from marvel_graphrag.context import AppContext
from marvel_graphrag.graph.ingest import GraphIngestor
from marvel_graphrag.graph.schema import data_present
from marvel_graphrag.graph.store import GraphStoreError
from marvel_graphrag.models import (
    LoadResponse,
    QueryRequest,
    QueryResponse,
    StatusResponse,
)

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).parent / "static"


def create_app(context: AppContext) -> FastAPI:
    """Build the FastAPI app around an application context."""
    app = FastAPI(title="Marvel Comics GraphRAG")
    index_html = (STATIC_DIR / "index.html").read_text(encoding="utf-8")

    @app.get("/", response_class=HTMLResponse)
    def home():
        return HTMLResponse(index_html)

    @app.post("/api/query", response_model=QueryResponse)
    def query(request: QueryRequest) -> QueryResponse:
        return context.engine.answer(request.question)

    @app.get("/api/status", response_model=StatusResponse)
    def status() -> StatusResponse:
        return StatusResponse(
            neo4j_connected=context.store.is_available(),
            llm_connected=context.llm.is_available(),
            data_loaded=data_present(context.store),
        )

    @app.post("/api/load-data", response_model=LoadResponse)
    def load_data():
        data_dir = context.config.dataset_dir
        if not data_dir.is_dir():
            message = f"Dataset directory not found: {data_dir}"
            logger.error(message)
            return JSONResponse(
                status_code=500,
                content=LoadResponse(success=False, message=message).model_dump(),
            )

        ingestor = GraphIngestor(context.config, context.store, progress=False)
        try:
            stats = ingestor.ingest_directory(data_dir)
        except GraphStoreError as e:
            logger.error(f"Data load failed: {e}")
            return JSONResponse(
                status_code=500,
                content=LoadResponse(
                    success=False, message=f"Data load failed: {e}"
                ).model_dump(),
            )

        message = "Data loaded successfully"
        if stats.errors:
            message = f"Data loaded with {len(stats.errors)} errors"
        return LoadResponse(
            success=True,
            message=message,
            nodes_merged=stats.nodes_merged,
            relationships_merged=stats.relationships_merged,
            rows_skipped=stats.rows_skipped,
            errors=len(stats.errors),
        )

    return app
