from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field, field_validator


class SearchFilters(BaseModel):
    """
    Structured search filters.

    Keys use the camelCase names the storefront client sends. Unknown keys are
    ignored. An absent key, a null value, an empty list and a false flag all
    mean "no constraint".
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    min_price: Optional[float] = Field(None, alias="minPrice", ge=0)
    max_price: Optional[float] = Field(None, alias="maxPrice", ge=0)
    min_weight: Optional[float] = Field(None, alias="minWeight", ge=0)
    max_weight: Optional[float] = Field(None, alias="maxWeight", ge=0)

    gemstone_types: Optional[List[str]] = Field(None, alias="gemstoneTypes")
    colors: Optional[List[str]] = None
    cuts: Optional[List[str]] = None
    clarities: Optional[List[str]] = None
    origins: Optional[List[str]] = None

    in_stock_only: Optional[bool] = Field(None, alias="inStockOnly")
    has_images: Optional[bool] = Field(None, alias="hasImages")
    has_certification: Optional[bool] = Field(None, alias="hasCertification")
    has_ai_analysis: Optional[bool] = Field(None, alias="hasAIAnalysis")

    use_fuzzy: bool = Field(False, alias="useFuzzy")
    search_descriptions: bool = Field(False, alias="searchDescriptions")

    @field_validator("gemstone_types", "colors", "cuts", "clarities", "origins", mode="after")
    @classmethod
    def _empty_list_is_absent(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        if not value:
            return None
        return value

    def to_payload(self) -> Dict:
        """Client-facing form without unset constraints, for analytics records."""
        return self.model_dump(by_alias=True, exclude_none=True, exclude_defaults=True)


class SearchRequest(BaseModel):
    """Schema for a search request."""

    model_config = ConfigDict(populate_by_name=True)

    query: Optional[str] = Field(None, max_length=500)
    locale: Optional[str] = Field(None, max_length=10)
    filters: SearchFilters = Field(default_factory=SearchFilters)
    page: int = Field(1, ge=1)
    page_size: int = Field(24, alias="pageSize", ge=1, le=100)
    search_descriptions: bool = Field(False, alias="searchDescriptions")
    session_id: Optional[str] = Field(None, alias="sessionId", max_length=128)
    user_id: Optional[UUID] = Field(None, alias="userId")

    @field_validator("filters", mode="before")
    @classmethod
    def _null_filters_are_empty(cls, value):
        return {} if value is None else value


class GemstoneSearchResult(BaseModel):
    """One ranked gemstone row."""

    id: UUID
    serial_number: str
    name: str
    type_code: str
    color: str
    color_code: str
    cut: str
    cut_code: str
    clarity: str
    clarity_code: str
    weight_carats: float
    price_amount: int
    price_currency: str
    description: Optional[str] = None
    in_stock: bool
    origin: Optional[str] = None
    primary_image_url: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    has_certification: bool
    has_ai_analysis: bool
    ai_color: Optional[str] = None
    ai_cut: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    relevance_score: float
    total_count: int

    @classmethod
    def from_ranked(cls, gemstone, relevance_score: float, total_count: int) -> "GemstoneSearchResult":
        """Flatten a loaded gemstone into a result row."""
        return cls(
            id=gemstone.id,
            serial_number=gemstone.serial_number,
            name=gemstone.name,
            type_code=gemstone.type_code,
            color=gemstone.color,
            color_code=gemstone.color_code,
            cut=gemstone.cut,
            cut_code=gemstone.cut_code,
            clarity=gemstone.clarity,
            clarity_code=gemstone.clarity_code,
            weight_carats=float(gemstone.weight_carats),
            price_amount=gemstone.price_amount,
            price_currency=gemstone.price_currency,
            description=gemstone.description,
            in_stock=gemstone.in_stock,
            origin=gemstone.origin.name if gemstone.origin is not None else None,
            primary_image_url=gemstone.primary_image_url,
            images=[image.image_url for image in gemstone.images],
            has_certification=len(gemstone.certifications) > 0,
            has_ai_analysis=bool(gemstone.ai_analyzed),
            ai_color=gemstone.ai_color,
            ai_cut=gemstone.ai_cut,
            created_at=gemstone.created_at,
            updated_at=gemstone.updated_at,
            relevance_score=relevance_score,
            total_count=total_count,
        )


class Pagination(BaseModel):
    """Schema for pagination metadata."""

    model_config = ConfigDict(populate_by_name=True)

    page: int
    page_size: int = Field(..., alias="pageSize")
    total_count: int = Field(..., alias="totalCount")
    total_pages: int = Field(..., alias="totalPages")
    has_next_page: bool = Field(..., alias="hasNextPage")
    has_prev_page: bool = Field(..., alias="hasPrevPage")


class SearchResponse(BaseModel):
    """Schema for a search response."""

    model_config = ConfigDict(populate_by_name=True)

    results: List[GemstoneSearchResult]
    pagination: Pagination
    used_fuzzy_search: bool = Field(False, alias="usedFuzzySearch")
    locale: str
    message: Optional[str] = None


class Suggestion(BaseModel):
    """Schema for a did-you-mean or autocomplete suggestion."""
    suggestion: str
    similarity_score: float
    category: str


class SuggestionsResponse(BaseModel):
    suggestions: List[Suggestion]


class LocaleResponse(BaseModel):
    locale: str


class FilterCountsResponse(BaseModel):
    """Facet counts for the filter sidebar."""

    model_config = ConfigDict(populate_by_name=True)

    gemstone_types: Dict[str, int] = Field(default_factory=dict, alias="gemstoneTypes")
    colors: Dict[str, int] = Field(default_factory=dict)
    cuts: Dict[str, int] = Field(default_factory=dict)
    clarities: Dict[str, int] = Field(default_factory=dict)
    origins: Dict[str, int] = Field(default_factory=dict)
    total_count: int = Field(0, alias="totalCount")
