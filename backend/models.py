# models.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, Text, DateTime, ForeignKey, JSON, Index, Uuid
from sqlalchemy.orm import relationship

from db import Base


def utcnow():
    return datetime.now(timezone.utc)


class Webpage(Base):
    __tablename__ = "webpage"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    url = Column(String(2048), unique=True, index=True, nullable=False)
    title = Column(Text, nullable=False)
    text = Column(Text, nullable=False)
    favicon = Column(Text)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    quizzes = relationship("Quiz", back_populates="source")


class Quiz(Base):
    __tablename__ = "quiz"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(Text, nullable=False)
    slug = Column(String(128), unique=True, nullable=False)
    items = Column(JSON, nullable=False)                    # [{stem, options, correctOption, sourceSnippet}]
    deleted_items = Column(JSON, nullable=False, default=list)
    source_id = Column(Uuid, ForeignKey("webpage.id"), index=True, nullable=False)
    parent_id = Column(Uuid, ForeignKey("quiz.id"))
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    published_at = Column(DateTime(timezone=True))

    source = relationship("Webpage", back_populates="quizzes")

    __table_args__ = (
        # one root revision per source page
        Index(
            "uq_quiz_root_per_source",
            "source_id",
            unique=True,
            postgresql_where=parent_id.is_(None),
            sqlite_where=parent_id.is_(None),
        ),
    )
