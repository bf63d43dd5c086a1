import uuid
from datetime import datetime
from typing import Optional
from sqlalchemy import Boolean, DateTime, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSON, UUID
from sqlalchemy.orm import Mapped, mapped_column
from storefront.models.base import Base, UUIDMixin, utcnow


class SearchAnalytics(Base, UUIDMixin):
    """Append-only record of one executed search."""

    __tablename__ = "search_analytics"

    search_query: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    filters: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    results_count: Mapped[int] = mapped_column(Integer, nullable=False)
    used_fuzzy_search: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), nullable=True, index=True)
    session_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    __table_args__ = (
        Index("idx_search_analytics_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<SearchAnalytics(query={self.search_query}, results={self.results_count})>"
