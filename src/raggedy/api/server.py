"""FastAPI server with POST /query endpoint."""

from __future__ import annotations

import logging
import time
from pathlib import Path

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from raggedy import config
from raggedy.agent.strategy import QueryResult, strategy_registry
from raggedy.errors import (
    IndexingError,
    ModelCallError,
    RetrievalParseError,
    UnknownModelError,
)

# Configure logging on import, before anything else logs
logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)-5s [%(name)s] %(message)s",
    datefmt="%H:%M:%S",
)

logger = logging.getLogger(__name__)

app = FastAPI(title="raggedy", description="Question answering over a directory of text files")


class QueryRequest(BaseModel):
    directory: str
    question: str
    strategy: str = "two-stage"
    model: str | None = None
    inline: bool = False


class CallResponse(BaseModel):
    model: str
    cost: float
    elapsed: float
    input_tokens: int
    output_tokens: int
    cache_read_tokens: int
    cache_write_tokens: int
    meta: str


class QueryResponse(BaseModel):
    answer: str
    documents: list[str]
    notice: str | None = None
    strategy: str
    calls: list[CallResponse]


def _to_response(result: QueryResult) -> QueryResponse:
    return QueryResponse(
        answer=result.answer,
        documents=result.documents,
        notice=result.notice.message if result.notice else None,
        strategy=result.strategy_name,
        calls=[CallResponse(**c.to_dict()) for c in result.calls],
    )


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/strategies")
def strategies():
    return {"strategies": strategy_registry.list_strategies()}


@app.post("/query", response_model=QueryResponse)
def query(req: QueryRequest):
    logger.info("POST /query dir=%s question=%r", req.directory, req.question[:120])
    if not req.question.strip():
        raise HTTPException(status_code=400, detail="question is required")

    t0 = time.perf_counter()
    try:
        strategy = strategy_registry.create(
            req.strategy,
            directory=Path(req.directory).expanduser(),
            model=req.model,
            answer_mode="inline" if req.inline else "separate",
        )
        result = strategy.run(req.question)
    except (ValueError, IndexingError, UnknownModelError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (RetrievalParseError, ModelCallError) as e:
        logger.exception("Query failed after %.2fs", time.perf_counter() - t0)
        raise HTTPException(status_code=502, detail=str(e))

    logger.info(
        "Query complete: %d document(s), %d char answer, %.2fs total",
        len(result.documents), len(result.answer), time.perf_counter() - t0,
    )
    return _to_response(result)


def main() -> None:
    import uvicorn

    uvicorn.run(app, host=config.HOST, port=config.PORT)
