"""
Filter composition shared by every search path.

Each predicate knows how to test a loaded gemstone in memory and how to
render itself as a SQLAlchemy clause, so the database prefilter and the
in-process check can never disagree about what a filter means.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional
from sqlalchemy import Select
from sqlalchemy.sql.elements import ColumnElement
from storefront.models.gemstone import Gemstone, Origin
from storefront.schemas.search import SearchFilters


@dataclass(frozen=True)
class Predicate:
    """A named, independent constraint on gemstones."""
    name: str
    test: Callable[[Gemstone], bool]
    render: Callable[[], ColumnElement]

    def matches(self, gemstone: Gemstone) -> bool:
        return bool(self.test(gemstone))

    def clause(self) -> ColumnElement:
        return self.render()


VISIBILITY_PREDICATES = (
    Predicate(
        "positive_price",
        lambda g: g.price_amount is not None and g.price_amount > 0,
        lambda: Gemstone.price_amount > 0,
    ),
    Predicate(
        "has_primary_image",
        lambda g: g.primary_image_url is not None,
        lambda: Gemstone.primary_image_url.isnot(None),
    ),
)


def _code_in(name: str, attribute: str, values: List[str]) -> Predicate:
    allowed = frozenset(values)
    column = getattr(Gemstone, attribute)
    return Predicate(
        name,
        lambda g: getattr(g, attribute) in allowed,
        lambda: column.in_(list(values)),
    )


class FilterCompositor:
    """Turns a SearchFilters value into a conjunction of predicates."""

    def __init__(self, filters: Optional[SearchFilters] = None, include_visibility: bool = True):
        self.filters = filters or SearchFilters()
        self.include_visibility = include_visibility

    def predicates(self) -> List[Predicate]:
        """
        Build the active predicates.

        Returns:
            Visibility predicates followed by one predicate per present filter
        """
        f = self.filters
        predicates: List[Predicate] = list(VISIBILITY_PREDICATES) if self.include_visibility else []

        if f.min_price is not None:
            min_price = f.min_price
            predicates.append(Predicate(
                "min_price",
                lambda g: g.price_amount >= min_price,
                lambda: Gemstone.price_amount >= min_price,
            ))
        if f.max_price is not None:
            max_price = f.max_price
            predicates.append(Predicate(
                "max_price",
                lambda g: g.price_amount <= max_price,
                lambda: Gemstone.price_amount <= max_price,
            ))
        if f.min_weight is not None:
            min_weight = f.min_weight
            predicates.append(Predicate(
                "min_weight",
                lambda g: float(g.weight_carats) >= min_weight,
                lambda: Gemstone.weight_carats >= min_weight,
            ))
        if f.max_weight is not None:
            max_weight = f.max_weight
            predicates.append(Predicate(
                "max_weight",
                lambda g: float(g.weight_carats) <= max_weight,
                lambda: Gemstone.weight_carats <= max_weight,
            ))

        if f.gemstone_types:
            predicates.append(_code_in("gemstone_types", "type_code", f.gemstone_types))
        if f.colors:
            predicates.append(_code_in("colors", "color_code", f.colors))
        if f.cuts:
            predicates.append(_code_in("cuts", "cut_code", f.cuts))
        if f.clarities:
            predicates.append(_code_in("clarities", "clarity_code", f.clarities))
        if f.origins:
            origins = list(f.origins)
            allowed = frozenset(origins)
            predicates.append(Predicate(
                "origins",
                lambda g: g.origin is not None and g.origin.name in allowed,
                lambda: Gemstone.origin.has(Origin.name.in_(origins)),
            ))

        if f.in_stock_only:
            predicates.append(Predicate(
                "in_stock_only",
                lambda g: g.in_stock is True,
                lambda: Gemstone.in_stock.is_(True),
            ))
        if f.has_images:
            predicates.append(Predicate(
                "has_images",
                lambda g: len(g.images) > 0,
                lambda: Gemstone.images.any(),
            ))
        if f.has_certification:
            predicates.append(Predicate(
                "has_certification",
                lambda g: len(g.certifications) > 0,
                lambda: Gemstone.certifications.any(),
            ))
        if f.has_ai_analysis:
            predicates.append(Predicate(
                "has_ai_analysis",
                lambda g: g.ai_analyzed is True,
                lambda: Gemstone.ai_analyzed.is_(True),
            ))

        return predicates

    def matches(self, gemstone: Gemstone) -> bool:
        return all(predicate.matches(gemstone) for predicate in self.predicates())

    def clauses(self) -> List[ColumnElement]:
        return [predicate.clause() for predicate in self.predicates()]

    def apply(self, statement: Select) -> Select:
        """Add every predicate to a SELECT as a WHERE clause."""
        clauses = self.clauses()
        if not clauses:
            return statement
        return statement.where(*clauses)
