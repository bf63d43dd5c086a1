from datetime import datetime
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, Field, model_validator


class ImageResponse(BaseModel):
    """Schema for a gemstone image."""
    image_url: str
    image_order: int
    is_primary: bool

    model_config = {"from_attributes": True}


class CertificationSchema(BaseModel):
    """Schema for a laboratory certificate."""
    lab_name: str = Field(..., max_length=100)
    certificate_number: Optional[str] = Field(None, max_length=100)
    certificate_url: Optional[str] = None

    model_config = {"from_attributes": True}


class GemstoneBase(BaseModel):
    """Fields shared by create and response schemas."""
    serial_number: str = Field(..., min_length=1, max_length=64)
    name: str = Field(..., min_length=1, max_length=50, description="Gemstone type, e.g. ruby")
    color: str = Field(..., max_length=50)
    cut: str = Field(..., max_length=50)
    clarity: str = Field(..., max_length=50)
    type_code: Optional[str] = Field(None, max_length=50)
    color_code: Optional[str] = Field(None, max_length=50)
    cut_code: Optional[str] = Field(None, max_length=50)
    clarity_code: Optional[str] = Field(None, max_length=50)
    weight_carats: float = Field(..., gt=0)
    length_mm: Optional[float] = None
    width_mm: Optional[float] = None
    depth_mm: Optional[float] = None
    price_amount: int = Field(..., ge=0, description="Price in minor currency units")
    price_currency: str = Field("USD", min_length=3, max_length=3)
    quantity: int = Field(1, ge=0)
    in_stock: bool = True
    description: Optional[str] = None
    primary_image_url: Optional[str] = None
    primary_video_url: Optional[str] = None


class GemstoneCreate(GemstoneBase):
    """Schema for creating a gemstone."""
    origin: Optional[str] = Field(None, max_length=100, description="Origin name")
    images: List[str] = Field(default_factory=list)
    certifications: List[CertificationSchema] = Field(default_factory=list)


# Columns a PATCH may omit but never clear
NON_NULL_FIELDS = frozenset({
    "serial_number",
    "name",
    "color",
    "cut",
    "clarity",
    "weight_carats",
    "price_amount",
    "price_currency",
    "quantity",
    "in_stock",
})


class GemstoneUpdate(BaseModel):
    """Partial update. Only fields present in the body are written."""
    serial_number: Optional[str] = Field(None, min_length=1, max_length=64)
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    color: Optional[str] = Field(None, max_length=50)
    cut: Optional[str] = Field(None, max_length=50)
    clarity: Optional[str] = Field(None, max_length=50)
    type_code: Optional[str] = Field(None, max_length=50)
    color_code: Optional[str] = Field(None, max_length=50)
    cut_code: Optional[str] = Field(None, max_length=50)
    clarity_code: Optional[str] = Field(None, max_length=50)
    weight_carats: Optional[float] = Field(None, gt=0)
    price_amount: Optional[int] = Field(None, ge=0)
    price_currency: Optional[str] = Field(None, min_length=3, max_length=3)
    quantity: Optional[int] = Field(None, ge=0)
    in_stock: Optional[bool] = None
    description: Optional[str] = None
    primary_image_url: Optional[str] = None
    primary_video_url: Optional[str] = None
    origin: Optional[str] = Field(None, max_length=100)
    technical_description_en: Optional[str] = None
    technical_description_ru: Optional[str] = None
    narrative_story_en: Optional[str] = None
    narrative_story_ru: Optional[str] = None
    promotional_text: Optional[str] = None
    promotional_text_ru: Optional[str] = None
    marketing_highlights: Optional[List[str]] = None
    marketing_highlights_ru: Optional[List[str]] = None

    @model_validator(mode="after")
    def _reject_null_required(self) -> "GemstoneUpdate":
        nulls = sorted(
            field for field in self.model_fields_set & NON_NULL_FIELDS if getattr(self, field) is None
        )
        if nulls:
            raise ValueError(f"Fields cannot be null: {', '.join(nulls)}")
        return self


class GemstoneResponse(GemstoneBase):
    """Schema for gemstone response."""
    id: UUID
    type_code: str
    color_code: str
    cut_code: str
    clarity_code: str
    origin: Optional[str] = None
    images: List[ImageResponse] = Field(default_factory=list)
    certifications: List[CertificationSchema] = Field(default_factory=list)
    ai_analyzed: bool = False
    ai_color: Optional[str] = None
    ai_cut: Optional[str] = None
    technical_description_en: Optional[str] = None
    technical_description_ru: Optional[str] = None
    narrative_story_en: Optional[str] = None
    narrative_story_ru: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, gemstone) -> "GemstoneResponse":
        return cls(
            id=gemstone.id,
            serial_number=gemstone.serial_number,
            name=gemstone.name,
            color=gemstone.color,
            cut=gemstone.cut,
            clarity=gemstone.clarity,
            type_code=gemstone.type_code,
            color_code=gemstone.color_code,
            cut_code=gemstone.cut_code,
            clarity_code=gemstone.clarity_code,
            weight_carats=float(gemstone.weight_carats),
            length_mm=float(gemstone.length_mm) if gemstone.length_mm is not None else None,
            width_mm=float(gemstone.width_mm) if gemstone.width_mm is not None else None,
            depth_mm=float(gemstone.depth_mm) if gemstone.depth_mm is not None else None,
            price_amount=gemstone.price_amount,
            price_currency=gemstone.price_currency,
            quantity=gemstone.quantity,
            in_stock=gemstone.in_stock,
            description=gemstone.description,
            primary_image_url=gemstone.primary_image_url,
            primary_video_url=gemstone.primary_video_url,
            origin=gemstone.origin.name if gemstone.origin is not None else None,
            images=[ImageResponse.model_validate(image) for image in gemstone.images],
            certifications=[CertificationSchema.model_validate(c) for c in gemstone.certifications],
            ai_analyzed=gemstone.ai_analyzed,
            ai_color=gemstone.ai_color,
            ai_cut=gemstone.ai_cut,
            technical_description_en=gemstone.technical_description_en,
            technical_description_ru=gemstone.technical_description_ru,
            narrative_story_en=gemstone.narrative_story_en,
            narrative_story_ru=gemstone.narrative_story_ru,
            created_at=gemstone.created_at,
            updated_at=gemstone.updated_at,
        )
