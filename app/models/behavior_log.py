"""
BehaviorLog — one child-scoped behavior incident.

Append-only. The insight engine reads these rows through
app/services/record_store.py and never writes them.

severity is stored as free String so upstream casing ("HIGH") survives;
the engine parses it case-insensitively and drops unparseable rows.
stressors: JSON-encoded list stored as Text (no external deps).
"""
import uuid
from datetime import datetime
from sqlalchemy import Integer, String, Text, DateTime, ForeignKey, func
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class BehaviorLog(Base):
    __tablename__ = "behavior_logs"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    educator_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    child_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("children.id"), nullable=True, index=True
    )
    classroom_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("classrooms.id"), nullable=True, index=True
    )
    behavior_description: Mapped[str] = mapped_column(Text, nullable=False)
    context: Mapped[str | None] = mapped_column(String(128), nullable=True)
    time_of_day: Mapped[str | None] = mapped_column(String(32), nullable=True)
    severity: Mapped[str | None] = mapped_column(String(16), nullable=True)
    stressors: Mapped[str | None] = mapped_column(Text, nullable=True)
    selected_strategy: Mapped[str | None] = mapped_column(String(512), nullable=True)
    confidence_rating: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False, index=True
    )
