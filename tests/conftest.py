"""
Shared fixtures.

Gemstones are built as transient ORM instances with their search vectors
computed by the real maintainer, so the search path runs end to end without
a database. The in-memory catalog stands in for GemstoneCatalog at the HTTP
layer through dependency overrides.
"""

import uuid
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from storefront.api.deps import get_analytics_service, get_catalog, get_search_service
from storefront.config import Settings
from storefront.exceptions import NotFoundError
from storefront.main import app
from storefront.models.gemstone import Certification, Gemstone, GemstoneImage, Origin
from storefront.schemas.search import SearchFilters
from storefront.search.filters import FilterCompositor
from storefront.search.maintainer import SearchVectorMaintainer
from storefront.search.suggestions import VocabularyEntry
from storefront.services.search import SearchService

BASE_TIME = datetime(2025, 10, 1, 12, 0, tzinfo=timezone.utc)

# Russian display names keyed by legacy value
RUSSIAN_NAMES = {
    "ruby": "Рубин",
    "sapphire": "Сапфир",
    "emerald": "Изумруд",
    "diamond": "Бриллиант",
    "red": "Красный",
    "blue": "Синий",
    "green": "Зелёный",
    "oval": "Овал",
    "round": "Круглая",
}


def build_gemstone(
    serial_number: str,
    name: str = "ruby",
    color: str = "red",
    cut: str = "oval",
    clarity: str = "VS1",
    price_amount: int = 100000,
    weight_carats: float = 1.0,
    in_stock: bool = True,
    primary_image_url: Optional[str] = "https://cdn.example.com/img.jpg",
    description: Optional[str] = None,
    origin: Optional[str] = None,
    images: int = 0,
    certified: bool = False,
    ai_analyzed: bool = False,
    created_offset_days: int = 0,
    russian_names: Optional[Dict[str, str]] = None,
    **extra
) -> Gemstone:
    """Transient gemstone with search vectors already built."""
    gemstone = Gemstone(
        id=extra.pop("id", uuid.uuid4()),
        serial_number=serial_number,
        name=name,
        color=color,
        cut=cut,
        clarity=clarity,
        type_code=extra.pop("type_code", name),
        color_code=extra.pop("color_code", color),
        cut_code=extra.pop("cut_code", cut),
        clarity_code=extra.pop("clarity_code", clarity),
        weight_carats=weight_carats,
        price_amount=price_amount,
        price_currency="USD",
        quantity=1,
        in_stock=in_stock,
        description=description,
        primary_image_url=primary_image_url,
        ai_analyzed=ai_analyzed,
        created_at=BASE_TIME - timedelta(days=created_offset_days),
        updated_at=BASE_TIME - timedelta(days=created_offset_days),
        **extra
    )
    gemstone.origin = Origin(name=origin) if origin else None
    gemstone.images = [
        GemstoneImage(image_url=f"https://cdn.example.com/{serial_number}/{i}.jpg", image_order=i, is_primary=i == 0)
        for i in range(images)
    ]
    gemstone.certifications = [Certification(lab_name="GIA", certificate_number="123")] if certified else []

    if russian_names is None:
        russian_names = {
            "type": RUSSIAN_NAMES.get(name),
            "color": RUSSIAN_NAMES.get(color),
            "cut": RUSSIAN_NAMES.get(cut),
        }
    return SearchVectorMaintainer().build(gemstone, russian_names)


def build_vocabulary(locale: str) -> List[VocabularyEntry]:
    categories = {
        "ruby": "type", "sapphire": "type", "emerald": "type", "diamond": "type",
        "red": "color", "blue": "color", "green": "color",
        "oval": "cut", "round": "cut",
    }
    if locale == "ru":
        return [VocabularyEntry(text=RUSSIAN_NAMES[code], category=category, code=code)
                for code, category in categories.items()]
    return [VocabularyEntry(text=code, category=category, code=code) for code, category in categories.items()]


class InMemoryCatalog:
    """GemstoneCatalog read API over a list of transient gemstones."""

    def __init__(self, gemstones: List[Gemstone]):
        self.gemstones = list(gemstones)

    async def get(self, gemstone_id) -> Gemstone:
        for gemstone in self.gemstones:
            if gemstone.id == gemstone_id:
                return gemstone
        raise NotFoundError("Gemstone", gemstone_id)

    async def load_candidates(self, filters=None, query=None, include_descriptions=False, fuzzy_text=None):
        return list(self.gemstones)

    async def load_vocabulary(self, locale: str) -> List[VocabularyEntry]:
        return build_vocabulary(locale)

    async def serial_numbers(self) -> List[str]:
        compositor = FilterCompositor()
        return sorted(g.serial_number for g in self.gemstones if compositor.matches(g))

    async def facet_counts(self, filters: Optional[SearchFilters] = None) -> Dict[str, object]:
        compositor = FilterCompositor(filters)
        visible = [g for g in self.gemstones if compositor.matches(g)]
        return {
            "gemstone_types": dict(Counter(g.type_code for g in visible)),
            "colors": dict(Counter(g.color_code for g in visible)),
            "cuts": dict(Counter(g.cut_code for g in visible)),
            "clarities": dict(Counter(g.clarity_code for g in visible)),
            "origins": dict(Counter(g.origin.name for g in visible if g.origin is not None)),
            "total_count": len(visible),
        }


class _ScriptedResult:
    def __init__(self, value):
        self.value = value

    def scalars(self):
        return self

    def all(self):
        if self.value is None:
            return []
        return list(self.value) if isinstance(self.value, (list, tuple)) else [self.value]

    def first(self):
        rows = self.all()
        return rows[0] if rows else None

    def unique(self):
        return self

    def scalar(self):
        return self.first()

    def scalar_one_or_none(self):
        return self.value


class ScriptedSession:
    """
    AsyncSession stand-in that answers execute() calls from a script.

    Each script entry is the value of one execute() call, in order; a callable
    entry is called with the session first, so it can return rows added
    earlier in the same unit of work.
    """

    def __init__(self, *script, objects: Optional[Dict] = None):
        self.script = list(script)
        self.objects = objects or {}
        self.statements = []
        self.added = []
        self.flushes = 0
        self.commits = 0
        self.rollbacks = 0

    async def execute(self, statement):
        self.statements.append(statement)
        value = self.script.pop(0)
        if callable(value):
            value = value(self)
        return _ScriptedResult(value)

    async def get(self, model, key):
        return self.objects.get(key)

    def add(self, obj):
        self.added.append(obj)

    async def flush(self):
        self.flushes += 1

    async def commit(self):
        self.commits += 1

    async def rollback(self):
        self.rollbacks += 1


class RecordingAnalytics:
    """Collects tracked searches instead of writing them."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.tracked: List[Dict] = []
        self.db = ScriptedSession()

    async def track(self, **kwargs):
        if self.fail:
            raise RuntimeError("analytics table unavailable")
        self.tracked.append(kwargs)


@pytest.fixture
def make_gemstone():
    return build_gemstone


@pytest.fixture
def make_catalog():
    return InMemoryCatalog


@pytest.fixture
def make_session():
    return ScriptedSession


@pytest.fixture
def make_analytics():
    return RecordingAnalytics


@pytest.fixture
def catalog_gemstones() -> List[Gemstone]:
    return [
        build_gemstone("RB-0001", "ruby", "red", "oval", description="Pigeon blood ruby from Burma",
                       origin="Myanmar", images=2, certified=True, created_offset_days=1),
        build_gemstone("SP-0002", "sapphire", "blue", "round", description="Cornflower blue sapphire",
                       origin="Sri Lanka", images=1, created_offset_days=2),
        build_gemstone("EM-0003", "emerald", "green", "oval", description="Colombian emerald with jardin",
                       origin="Colombia", in_stock=False, created_offset_days=3),
        build_gemstone("DM-0004", "diamond", "white", "round", description="Brilliant round diamond",
                       created_offset_days=4, ai_analyzed=True),
    ]


@pytest.fixture
def in_memory_catalog(catalog_gemstones) -> InMemoryCatalog:
    return InMemoryCatalog(catalog_gemstones)


@pytest.fixture
def analytics_recorder() -> RecordingAnalytics:
    return RecordingAnalytics()


@pytest.fixture
def search_service(in_memory_catalog, analytics_recorder) -> SearchService:
    return SearchService(in_memory_catalog, analytics_recorder, settings=Settings())


@pytest.fixture
def client(search_service, in_memory_catalog):
    """HTTP client with services backed by the in-memory catalog."""
    app.dependency_overrides[get_search_service] = lambda: search_service
    app.dependency_overrides[get_catalog] = lambda: in_memory_catalog
    app.dependency_overrides[get_analytics_service] = lambda: None
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
