from datetime import timedelta
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Serving(BaseModel):
    """A purchasable variant of a meal (e.g. a size)."""

    model_config = ConfigDict(frozen=True)

    kind: str = Field(..., description="Variant label, e.g. 'Large'")
    price: int = Field(..., ge=0, description="Price in the smallest currency unit")


class Meal(BaseModel):
    """One item on a restaurant's menu."""

    model_config = ConfigDict(frozen=True)

    category: str = Field(default="", description="Menu section the item is listed under")
    name: str
    description: Optional[str] = None
    servings: tuple[Serving, ...] = ()


class Restaurant(BaseModel):
    """A restaurant card from the listing plus the menu from its detail page."""

    model_config = ConfigDict(frozen=True)

    url: str = Field(default="", description="Detail page path as linked from the listing")
    title: str = ""
    image_url: Optional[str] = None
    cuisine: str = ""
    rating: int = Field(default=0, ge=0, le=5)
    delivery_time: timedelta = timedelta(0)
    menu: tuple[Meal, ...] = Field(
        default=(), description="Menu items in document order"
    )

    @property
    def servings_count(self) -> int:
        return sum(len(meal.servings) for meal in self.menu)
