from typing import Optional
from sqlalchemy import String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, synonym
from storefront.models.base import Base, UUIDMixin


class TranslationMixin:
    """Localized display name for one code of a controlled vocabulary."""

    # Vocabulary family reported by the suggestion engine
    category: str = ""

    locale: Mapped[str] = mapped_column(String(8), nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class GemstoneTypeTranslation(Base, UUIDMixin, TranslationMixin):
    __tablename__ = "gemstone_type_translations"
    category = "type"

    type_code: Mapped[str] = mapped_column(String(50), nullable=False)
    code = synonym("type_code")

    __table_args__ = (UniqueConstraint("type_code", "locale"),)


class GemColorTranslation(Base, UUIDMixin, TranslationMixin):
    __tablename__ = "gem_color_translations"
    category = "color"

    color_code: Mapped[str] = mapped_column(String(50), nullable=False)
    code = synonym("color_code")

    __table_args__ = (UniqueConstraint("color_code", "locale"),)


class GemCutTranslation(Base, UUIDMixin, TranslationMixin):
    __tablename__ = "gem_cut_translations"
    category = "cut"

    cut_code: Mapped[str] = mapped_column(String(50), nullable=False)
    code = synonym("cut_code")

    __table_args__ = (UniqueConstraint("cut_code", "locale"),)


class GemClarityTranslation(Base, UUIDMixin, TranslationMixin):
    __tablename__ = "gem_clarity_translations"
    category = "clarity"

    clarity_code: Mapped[str] = mapped_column(String(50), nullable=False)
    code = synonym("clarity_code")

    __table_args__ = (UniqueConstraint("clarity_code", "locale"),)


# Vocabulary families in suggestion order
TRANSLATION_MODELS = (
    GemstoneTypeTranslation,
    GemColorTranslation,
    GemCutTranslation,
    GemClarityTranslation,
)
