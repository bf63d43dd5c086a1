"""
Search-vector maintenance for the gemstone write path.

Vectors are rebuilt from the gemstone's own fields plus the Russian display
names of its type, color, cut and clarity codes. The output is a pure
function of those inputs, so rebuilding an unchanged row yields identical
serialized vectors.
"""

import logging
from functools import reduce
from typing import Dict, Iterable, Optional, Tuple
from sqlalchemy import inspect, select
from sqlalchemy.ext.asyncio import AsyncSession
from storefront.models.gemstone import Gemstone, Origin
from storefront.models.translation import (
    GemClarityTranslation,
    GemColorTranslation,
    GemCutTranslation,
    GemstoneTypeTranslation,
)
from storefront.search.vector import SearchVector

logger = logging.getLogger(__name__)

# Columns whose change makes the stored vectors stale
SEARCHABLE_FIELDS = (
    "serial_number",
    "name",
    "type_code",
    "color",
    "color_code",
    "cut",
    "clarity",
    "clarity_code",
    "cut_code",
    "origin_id",
    "description",
    "technical_description_en",
    "technical_description_ru",
    "narrative_story_en",
    "narrative_story_ru",
    "promotional_text",
    "promotional_text_ru",
    "marketing_highlights",
    "marketing_highlights_ru",
)

# (names key, translation model, gemstone code attribute, legacy attribute)
_NAME_SOURCES = (
    ("type", GemstoneTypeTranslation, "type_code", "name"),
    ("color", GemColorTranslation, "color_code", "color"),
    ("cut", GemCutTranslation, "cut_code", "cut"),
    ("clarity", GemClarityTranslation, "clarity_code", "clarity"),
)


def _weighted(parts: Iterable[Tuple[Optional[str], str]], language: str) -> SearchVector:
    vectors = [SearchVector.from_text(text, language, weight) for text, weight in parts]
    return reduce(lambda left, right: left | right, vectors, SearchVector())


def _joined(*parts) -> str:
    pieces = []
    for part in parts:
        if not part:
            continue
        if isinstance(part, (list, tuple)):
            pieces.extend(item for item in part if item)
        else:
            pieces.append(part)
    return " ".join(pieces)


def needs_refresh(gemstone: Gemstone) -> bool:
    """True for new rows and for rows with a pending change to a searchable field."""
    state = inspect(gemstone)
    if state.transient or state.pending:
        return True
    if state.attrs.origin.history.has_changes():
        return True
    return any(state.attrs[field].history.has_changes() for field in SEARCHABLE_FIELDS)


class SearchVectorMaintainer:
    """Keeps the four stored search vectors of a gemstone current."""

    def build(self, gemstone: Gemstone, names: Optional[Dict[str, Optional[str]]] = None) -> Gemstone:
        """
        Compute and assign the serialized vectors.

        Args:
            gemstone: Row to update in place
            names: Russian display names keyed by "type", "color", "cut" and
                "clarity"; a missing or empty entry falls back to the raw value

        Returns:
            The same gemstone
        """
        names = names or {}
        origin_name = gemstone.origin.name if gemstone.origin is not None else None

        def localized(key: str, raw: Optional[str]) -> Optional[str]:
            return names.get(key) or raw

        english = _weighted([
            (gemstone.serial_number, "A"),
            (gemstone.name, "A"),
            (gemstone.color, "B"),
            (gemstone.cut, "B"),
            (gemstone.clarity, "B"),
            (origin_name, "B"),
            (gemstone.description, "B"),
            (gemstone.technical_description_en, "C"),
            (gemstone.narrative_story_en, "D"),
        ], "en")

        russian = _weighted([
            (gemstone.serial_number, "A"),
            (localized("type", gemstone.name), "A"),
            (localized("color", gemstone.color), "B"),
            (localized("cut", gemstone.cut), "B"),
            (localized("clarity", gemstone.clarity), "B"),
            (origin_name, "B"),
            (gemstone.description, "B"),
            (gemstone.technical_description_ru, "C"),
            (gemstone.narrative_story_ru, "D"),
        ], "ru")

        description_en = SearchVector.from_text(_joined(
            gemstone.description,
            gemstone.technical_description_en,
            gemstone.promotional_text,
            gemstone.marketing_highlights,
        ), "en")
        description_ru = SearchVector.from_text(_joined(
            gemstone.description,
            gemstone.technical_description_ru,
            gemstone.promotional_text_ru,
            gemstone.marketing_highlights_ru,
        ), "ru")

        gemstone.search_vector_en = english.serialize()
        gemstone.search_vector_ru = russian.serialize()
        gemstone.description_vector_en = description_en.serialize()
        gemstone.description_vector_ru = description_ru.serialize()
        return gemstone

    async def russian_names(self, db: AsyncSession, gemstone: Gemstone) -> Dict[str, Optional[str]]:
        """Look up the Russian display name of each code, one row per lookup."""
        names: Dict[str, Optional[str]] = {}
        for key, model, code_attribute, legacy_attribute in _NAME_SOURCES:
            code = getattr(gemstone, code_attribute) or getattr(gemstone, legacy_attribute)
            if not code:
                names[key] = None
                continue
            result = await db.execute(
                select(model.name).where(model.code == code, model.locale == "ru").limit(1)
            )
            names[key] = result.scalars().first()
            if names[key] is None:
                logger.debug(f"No Russian {key} name for code '{code}', using raw value")
        return names

    async def refresh(self, db: AsyncSession, gemstone: Gemstone) -> Gemstone:
        """
        Fetch translations and rebuild the vectors inside the caller's transaction.

        Args:
            db: Session of the write being performed
            gemstone: Row being inserted or updated

        Returns:
            The same gemstone with fresh vectors
        """
        state = inspect(gemstone)
        if gemstone.origin_id is not None and "origin" in state.unloaded:
            gemstone.origin = await db.get(Origin, gemstone.origin_id)
        names = await self.russian_names(db, gemstone)
        return self.build(gemstone, names)
