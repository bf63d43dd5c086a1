import uuid
from typing import List, Optional
from sqlalchemy import Boolean, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.dialects.postgresql import ARRAY, TSVECTOR, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship
from storefront.models.base import Base, TimestampMixin, UUIDMixin


class Origin(Base, UUIDMixin, TimestampMixin):
    """Geographic origin of a gemstone."""

    __tablename__ = "origins"

    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    country: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    def __repr__(self) -> str:
        return f"<Origin(id={self.id}, name={self.name})>"


class Gemstone(Base, UUIDMixin, TimestampMixin):
    """A sellable gemstone with its derived search vectors."""

    __tablename__ = "gemstones"

    serial_number: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)

    # Legacy enumerated attributes
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    color: Mapped[str] = mapped_column(String(50), nullable=False)
    cut: Mapped[str] = mapped_column(String(50), nullable=False)
    clarity: Mapped[str] = mapped_column(String(50), nullable=False)

    # Codes joined against the translation tables
    type_code: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    color_code: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    cut_code: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    clarity_code: Mapped[str] = mapped_column(String(50), nullable=False, index=True)

    # Physical attributes
    weight_carats: Mapped[float] = mapped_column(Numeric(8, 3), nullable=False)
    length_mm: Mapped[Optional[float]] = mapped_column(Numeric(8, 2), nullable=True)
    width_mm: Mapped[Optional[float]] = mapped_column(Numeric(8, 2), nullable=True)
    depth_mm: Mapped[Optional[float]] = mapped_column(Numeric(8, 2), nullable=True)

    # Price information (minor units)
    price_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    price_currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")

    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    in_stock: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    primary_image_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    primary_video_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    origin_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("origins.id", ondelete="SET NULL"), nullable=True
    )

    # AI shadow fields, populated by the offline analysis pipeline
    ai_analyzed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    ai_color: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    ai_cut: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    ai_color_confidence: Mapped[Optional[float]] = mapped_column(Numeric(4, 3), nullable=True)
    ai_cut_confidence: Mapped[Optional[float]] = mapped_column(Numeric(4, 3), nullable=True)
    ai_confidence_score: Mapped[Optional[float]] = mapped_column(Numeric(4, 3), nullable=True)
    technical_description_en: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    technical_description_ru: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    narrative_story_en: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    narrative_story_ru: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    promotional_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    promotional_text_ru: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    marketing_highlights: Mapped[Optional[List[str]]] = mapped_column(ARRAY(Text), nullable=True)
    marketing_highlights_ru: Mapped[Optional[List[str]]] = mapped_column(ARRAY(Text), nullable=True)

    # Derived search vectors, maintained by SearchVectorMaintainer
    search_vector_en: Mapped[Optional[str]] = mapped_column(TSVECTOR, nullable=True)
    search_vector_ru: Mapped[Optional[str]] = mapped_column(TSVECTOR, nullable=True)
    description_vector_en: Mapped[Optional[str]] = mapped_column(TSVECTOR, nullable=True)
    description_vector_ru: Mapped[Optional[str]] = mapped_column(TSVECTOR, nullable=True)

    # Loaded eagerly by GemstoneCatalog queries; predicates read them in memory
    origin: Mapped[Optional[Origin]] = relationship()
    images: Mapped[List["GemstoneImage"]] = relationship(
        back_populates="gemstone",
        cascade="all, delete-orphan",
        order_by="GemstoneImage.image_order"
    )
    certifications: Mapped[List["Certification"]] = relationship(
        back_populates="gemstone",
        cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("idx_gemstones_search_vector_en", "search_vector_en", postgresql_using="gin"),
        Index("idx_gemstones_search_vector_ru", "search_vector_ru", postgresql_using="gin"),
        Index("idx_gemstones_description_vector_en", "description_vector_en", postgresql_using="gin"),
        Index("idx_gemstones_description_vector_ru", "description_vector_ru", postgresql_using="gin"),
        Index("idx_gemstones_visible", "price_amount", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Gemstone(id={self.id}, serial_number={self.serial_number}, name={self.name})>"


class GemstoneImage(Base, UUIDMixin, TimestampMixin):
    """An image attached to a gemstone."""

    __tablename__ = "gemstone_images"

    gemstone_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("gemstones.id", ondelete="CASCADE"), nullable=False, index=True
    )
    image_url: Mapped[str] = mapped_column(Text, nullable=False)
    image_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_primary: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    gemstone: Mapped[Gemstone] = relationship(back_populates="images")


class Certification(Base, UUIDMixin, TimestampMixin):
    """A laboratory certificate for a gemstone."""

    __tablename__ = "certifications"

    gemstone_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("gemstones.id", ondelete="CASCADE"), nullable=False, index=True
    )
    lab_name: Mapped[str] = mapped_column(String(100), nullable=False)
    certificate_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    certificate_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    gemstone: Mapped[Gemstone] = relationship(back_populates="certifications")
