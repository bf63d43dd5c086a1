import logging
from typing import Dict, List, Optional, Sequence, Tuple
from uuid import UUID
from sqlalchemy import cast, func, literal, select
from sqlalchemy.dialects.postgresql import TSQUERY, TSVECTOR
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from storefront.exceptions import NotFoundError
from storefront.models.gemstone import Certification, Gemstone, GemstoneImage, Origin
from storefront.models.translation import TRANSLATION_MODELS
from storefront.schemas.gemstone import GemstoneCreate, GemstoneUpdate
from storefront.schemas.search import SearchFilters
from storefront.search.filters import FilterCompositor
from storefront.search.maintainer import SearchVectorMaintainer, needs_refresh
from storefront.search.query import QueryTerm
from storefront.search.suggestions import VocabularyEntry
from storefront.search.trigram import SIMILARITY_THRESHOLD

logger = logging.getLogger(__name__)

# Gemstone code column backfilled from each legacy column
_CODE_BACKFILL = (
    ("type_code", "name"),
    ("color_code", "color"),
    ("cut_code", "cut"),
    ("clarity_code", "clarity"),
)

_FACET_COLUMNS = (
    ("gemstone_types", Gemstone.type_code),
    ("colors", Gemstone.color_code),
    ("cuts", Gemstone.cut_code),
    ("clarities", Gemstone.clarity_code),
)


def _with_relations(statement):
    return statement.options(
        selectinload(Gemstone.origin),
        selectinload(Gemstone.images),
        selectinload(Gemstone.certifications),
    )


def _vector_column(language: str, include_descriptions: bool):
    empty = cast(literal(""), TSVECTOR)
    if language == "ru":
        base, extra = Gemstone.search_vector_ru, Gemstone.description_vector_ru
    else:
        base, extra = Gemstone.search_vector_en, Gemstone.description_vector_en
    column = func.coalesce(base, empty)
    if include_descriptions:
        column = column.op("||")(func.coalesce(extra, empty))
    return column


def _fuzzy_clause(text: str):
    """Best pg_trgm similarity of serial number, type name and description."""
    best = func.greatest(
        func.similarity(Gemstone.serial_number, text),
        func.similarity(Gemstone.name, text),
        func.similarity(func.coalesce(Gemstone.description, ""), text),
    )
    return best >= SIMILARITY_THRESHOLD


def backfill_codes(gemstone: Gemstone) -> None:
    """Fill any missing code from its legacy value."""
    for code_attribute, legacy_attribute in _CODE_BACKFILL:
        if not getattr(gemstone, code_attribute):
            setattr(gemstone, code_attribute, getattr(gemstone, legacy_attribute))


def build_images(image_urls: Sequence[str], primary_image_url: Optional[str]) -> Tuple[List[GemstoneImage], Optional[str]]:
    """
    Image rows for a new gemstone and the primary image URL to store.

    Exactly one row is primary and the returned URL is that row's URL. Without
    an explicit primary URL the first image is primary. A primary URL missing
    from the list is put first.
    """
    urls = list(dict.fromkeys(url for url in image_urls if url))
    if primary_image_url and primary_image_url not in urls:
        urls.insert(0, primary_image_url)
    if not urls:
        return [], primary_image_url

    primary = primary_image_url or urls[0]
    images = [
        GemstoneImage(image_url=url, image_order=index, is_primary=(url == primary))
        for index, url in enumerate(urls)
    ]
    return images, primary


class GemstoneCatalog:
    """Database access for gemstones and the search read/write paths."""

    def __init__(self, db: AsyncSession, maintainer: Optional[SearchVectorMaintainer] = None):
        self.db = db
        self.maintainer = maintainer or SearchVectorMaintainer()

    async def load_candidates(
        self,
        filters: Optional[SearchFilters] = None,
        query: Optional[QueryTerm] = None,
        include_descriptions: bool = False,
        fuzzy_text: Optional[str] = None
    ) -> Sequence[Gemstone]:
        """
        Load gemstones that can satisfy a search.

        The filter predicates are pushed into SQL, together with the tsquery
        match for full-text queries or the pg_trgm similarity cut for fuzzy
        ones. The engine re-checks both in memory, so the result only has to
        be a superset of the final match set.

        Args:
            filters: Structured filters
            query: Parsed full-text query, or None for browse and fuzzy modes
            include_descriptions: Match against base plus description vectors
            fuzzy_text: Raw search text in fuzzy mode

        Returns:
            Gemstones with origin, images and certifications loaded
        """
        statement = _with_relations(FilterCompositor(filters).apply(select(Gemstone)))

        if query is not None and not query.is_empty:
            vector = _vector_column(query.language, include_descriptions)
            statement = statement.where(vector.op("@@")(cast(query.to_tsquery(), TSQUERY)))
        elif fuzzy_text:
            statement = statement.where(_fuzzy_clause(fuzzy_text))

        result = await self.db.execute(statement)
        return result.scalars().unique().all()

    async def get(self, gemstone_id: UUID) -> Gemstone:
        result = await self.db.execute(
            _with_relations(select(Gemstone).where(Gemstone.id == gemstone_id))
        )
        gemstone = result.scalar_one_or_none()
        if gemstone is None:
            raise NotFoundError("Gemstone", gemstone_id)
        return gemstone

    async def get_many(self, gemstone_ids: Sequence[UUID]) -> Dict[UUID, Gemstone]:
        if not gemstone_ids:
            return {}
        result = await self.db.execute(
            _with_relations(select(Gemstone).where(Gemstone.id.in_(list(gemstone_ids))))
        )
        return {gemstone.id: gemstone for gemstone in result.scalars().unique().all()}

    async def _origin(self, name: Optional[str]) -> Optional[Origin]:
        if not name:
            return None
        result = await self.db.execute(select(Origin).where(Origin.name == name))
        origin = result.scalar_one_or_none()
        if origin is None:
            origin = Origin(name=name)
            self.db.add(origin)
            await self.db.flush()
            logger.info(f"Created origin '{name}'")
        return origin

    async def save(self, gemstone: Gemstone) -> Gemstone:
        """
        Persist a gemstone, rebuilding its search vectors when needed.

        Vectors are refreshed in the same transaction as the write, on insert
        and whenever a searchable field changed.
        """
        backfill_codes(gemstone)
        if needs_refresh(gemstone):
            await self.maintainer.refresh(self.db, gemstone)
        self.db.add(gemstone)
        await self.db.commit()
        return await self.get(gemstone.id)

    async def create(self, data: GemstoneCreate) -> Gemstone:
        fields = data.model_dump(exclude={"origin", "images", "certifications"})
        gemstone = Gemstone(**fields)
        gemstone.origin = await self._origin(data.origin)
        gemstone.images, gemstone.primary_image_url = build_images(data.images, data.primary_image_url)
        gemstone.certifications = [Certification(**c.model_dump()) for c in data.certifications]

        gemstone = await self.save(gemstone)
        logger.info(f"Created gemstone {gemstone.serial_number} (ID: {gemstone.id})")
        return gemstone

    async def update(self, gemstone_id: UUID, data: GemstoneUpdate) -> Gemstone:
        gemstone = await self.get(gemstone_id)
        changes = data.model_dump(exclude_unset=True)

        if "origin" in changes:
            gemstone.origin = await self._origin(changes.pop("origin"))
        for field, value in changes.items():
            setattr(gemstone, field, value)

        gemstone = await self.save(gemstone)
        logger.info(f"Updated gemstone {gemstone.serial_number}: {sorted(changes)}")
        return gemstone

    async def load_vocabulary(self, locale: str) -> List[VocabularyEntry]:
        """Localized names of every vocabulary family for a locale."""
        vocabulary: List[VocabularyEntry] = []
        for model in TRANSLATION_MODELS:
            result = await self.db.execute(
                select(model.name, model.code).where(model.locale == locale)
            )
            vocabulary.extend(
                VocabularyEntry(text=name, category=model.category, code=code)
                for name, code in result.all()
            )
        return vocabulary

    async def serial_numbers(self) -> List[str]:
        """Serial numbers of gemstones visible in search."""
        statement = FilterCompositor().apply(select(Gemstone.serial_number))
        result = await self.db.execute(statement.order_by(Gemstone.serial_number))
        return list(result.scalars().all())

    async def facet_counts(self, filters: Optional[SearchFilters] = None) -> Dict[str, object]:
        """
        Count visible gemstones per filter value under the given filters.

        Args:
            filters: Filters that constrain every facet

        Returns:
            Mapping of facet name to {value: count}, plus total_count
        """
        compositor = FilterCompositor(filters)
        counts: Dict[str, object] = {}

        for facet, column in _FACET_COLUMNS:
            result = await self.db.execute(
                compositor.apply(select(column, func.count(Gemstone.id)))
                .group_by(column)
                .order_by(column)
            )
            counts[facet] = {value: count for value, count in result.all() if value is not None}

        origins_result = await self.db.execute(
            compositor.apply(
                select(Origin.name, func.count(Gemstone.id)).select_from(Gemstone).join(Gemstone.origin)
            )
            .group_by(Origin.name)
            .order_by(Origin.name)
        )
        counts["origins"] = {name: count for name, count in origins_result.all()}

        total_result = await self.db.execute(compositor.apply(select(func.count(Gemstone.id))))
        counts["total_count"] = total_result.scalar() or 0
        return counts

    async def reindex_all(self, batch_size: int = 200) -> int:
        """
        Recompute the search vectors of every gemstone.

        Returns:
            Number of gemstones reindexed
        """
        count = 0
        offset = 0
        while True:
            result = await self.db.execute(
                select(Gemstone)
                .options(selectinload(Gemstone.origin))
                .order_by(Gemstone.id)
                .limit(batch_size)
                .offset(offset)
            )
            batch = result.scalars().all()
            if not batch:
                break
            for gemstone in batch:
                backfill_codes(gemstone)
                await self.maintainer.refresh(self.db, gemstone)
            await self.db.commit()
            count += len(batch)
            offset += batch_size
            logger.info(f"Reindexed {count} gemstones")
        return count
