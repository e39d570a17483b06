# main.py
import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import FastAPI, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

import config
import quizzes
import registry
import schemas
import store
from db import Base, engine, get_db
from errors import QuizError, StorageFailure
from llm import GeminiGenerator
from scraper import PageFetcher
from utils import shuffle_options

logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    app.state.fetcher = PageFetcher()
    app.state.generator = GeminiGenerator()
    yield
    logger.info("Shutting down...")


# -----------------------------------------------------------------------------
# App & CORS
# -----------------------------------------------------------------------------
app = FastAPI(title="QuizForge – web page quiz generator", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# -----------------------------------------------------------------------------
# Outbound clients (overridden in tests)
# -----------------------------------------------------------------------------
def get_fetcher(request: Request) -> PageFetcher:
    return request.app.state.fetcher


def get_generator(request: Request) -> GeminiGenerator:
    return request.app.state.generator


# -----------------------------------------------------------------------------
# Errors: log the detail, return only a generic message
# -----------------------------------------------------------------------------
@app.exception_handler(QuizError)
def quiz_error_handler(request: Request, exc: QuizError):
    level = logging.WARNING if exc.status_code < 500 else logging.ERROR
    logger.log(level, "%s %s failed: %s: %s", request.method, request.url.path, type(exc).__name__, exc)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.public_message})


@app.exception_handler(RequestValidationError)
def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.warning("%s %s rejected: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"error": "Invalid request"})


@app.exception_handler(SQLAlchemyError)
def storage_error_handler(request: Request, exc: SQLAlchemyError):
    return quiz_error_handler(request, StorageFailure(str(exc)))


@app.exception_handler(Exception)
def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("%s %s crashed", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": QuizError.public_message})


# -----------------------------------------------------------------------------
# Health
# -----------------------------------------------------------------------------
@app.get("/api/health")
def health():
    return {"status": "ok"}


# -----------------------------------------------------------------------------
# Read
# -----------------------------------------------------------------------------
@app.get("/api/quizzes", response_model=List[schemas.QuizOut])
def list_quizzes(db: Session = Depends(get_db)):
    return [store.quiz_with_source(q) for q in store.list_published(db)]


@app.get("/api/quiz/{slug}", response_model=schemas.QuizOut)
def get_quiz(slug: str, seed: Optional[int] = None, db: Session = Depends(get_db)):
    out = store.quiz_with_source(store.get_quiz_by_slug(db, slug))
    if seed is not None:
        out["items"] = shuffle_options(out["items"], seed)
    return out


@app.get("/api/quiz/{slug}/revisions", response_model=List[schemas.RevisionOut])
def quiz_revisions(slug: str, db: Session = Depends(get_db)):
    chain = store.revision_chain(db, store.get_quiz_by_slug(db, slug))
    return [
        {"id": q.id, "slug": q.slug, "parent_id": q.parent_id, "created_at": q.created_at}
        for q in chain
    ]


# -----------------------------------------------------------------------------
# Create (dedup page by url, then quiz by source)
# -----------------------------------------------------------------------------
@app.post("/api/create_quiz", response_model=schemas.QuizSlugOut)
def create_quiz(
    payload: schemas.CreateQuizIn,
    db: Session = Depends(get_db),
    fetcher: PageFetcher = Depends(get_fetcher),
    generator: GeminiGenerator = Depends(get_generator),
):
    webpage = registry.ingest(db, fetcher, str(payload.url))
    quiz = quizzes.get_or_create_quiz(db, generator, webpage)
    return {"quiz_slug": quiz.slug}


# -----------------------------------------------------------------------------
# Edit (new revision) and publish
# -----------------------------------------------------------------------------
@app.post("/api/edit_quiz", response_model=schemas.QuizSlugOut)
def edit_quiz(
    payload: schemas.EditQuizIn,
    db: Session = Depends(get_db),
    generator: GeminiGenerator = Depends(get_generator),
):
    quiz = quizzes.revise_quiz(
        db,
        generator,
        payload.quiz_id,
        payload.deleted_item_idxs,
        payload.additional_instructions,
    )
    return {"quiz_slug": quiz.slug}


@app.post("/api/toggle_publish_quiz", response_model=schemas.PublishOut)
def toggle_publish_quiz(payload: schemas.TogglePublishIn, db: Session = Depends(get_db)):
    return {"published_at": quizzes.toggle_publish(db, payload.quiz_id)}


def run():
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)


if __name__ == "__main__":
    run()
