"""Models for third-party product and nutrition lookups."""

from pydantic import BaseModel, Field


class ProductInfo(BaseModel):
    """A packaged product with nutrition facts per 100 g."""

    barcode: str
    name: str
    brand: str | None = None
    image_url: str | None = None
    calories_100g: float = Field(default=0.0, ge=0.0)
    protein_100g: float = Field(default=0.0, ge=0.0)
    carbs_100g: float = Field(default=0.0, ge=0.0)
    fat_100g: float = Field(default=0.0, ge=0.0)


class NutritionEstimate(BaseModel):
    """Estimated nutrition facts per 100 units of an ingredient."""

    calories: float = Field(ge=0.0)
    protein: float = Field(ge=0.0)
    carbs: float = Field(ge=0.0)
    fat: float = Field(ge=0.0)
    unit: str
