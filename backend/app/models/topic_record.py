"""SQLAlchemy ORM model for the Topic table."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from backend.app.db.base import Base


class Topic(Base):
    __tablename__ = "topics"

    tid: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    cid: Mapped[int] = mapped_column(
        ForeignKey("categories.cid", ondelete="CASCADE"), nullable=False, index=True,
    )
    uid: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    # JSON-encoded list of tag strings
    tags: Mapped[str | None] = mapped_column(Text, nullable=True)
    thumb: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    main_pid: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
