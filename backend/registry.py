# registry.py
"""Source registry: one Webpage row per distinct URL, captured once and never refreshed."""
import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

import models
from db import dialect_insert
from errors import StorageFailure

logger = logging.getLogger(__name__)


def get_webpage_by_url(db: Session, url: str):
    return db.execute(select(models.Webpage).where(models.Webpage.url == url)).scalar_one_or_none()


def ingest(db: Session, fetcher, url: str) -> models.Webpage:
    try:
        existing = get_webpage_by_url(db, url)
    except SQLAlchemyError as e:
        raise StorageFailure(f"webpage lookup failed for {url}: {e}") from e
    if existing:
        logger.info("Reusing webpage %s for %s", existing.id, url)
        return existing

    page = fetcher.fetch(url)

    # A concurrent request may have inserted the same URL since the lookup;
    # the unique index on url decides and both requests read back the winner.
    stmt = dialect_insert(db, models.Webpage).values(
        url=url,
        title=page.title,
        text=page.text,
        favicon=page.favicon,
    ).on_conflict_do_nothing(index_elements=["url"])
    try:
        db.execute(stmt)
        db.commit()
        webpage = get_webpage_by_url(db, url)
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageFailure(f"webpage insert failed for {url}: {e}") from e
    if webpage is None:
        raise StorageFailure(f"webpage for {url} missing after insert")

    logger.info("Ingested webpage %s for %s", webpage.id, url)
    return webpage
