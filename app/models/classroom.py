"""
Classroom — a group of children owned by one educator.

stressors: JSON-encoded list of profile stressor tags stored as Text.
"""
import uuid
from datetime import datetime
from sqlalchemy import String, Text, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class Classroom(Base):
    __tablename__ = "classrooms"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    educator_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    grade_band: Mapped[str | None] = mapped_column(String(128), nullable=True)
    stressors: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
