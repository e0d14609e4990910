"""Map marker styles per listing category."""

from typing import Union

from pydantic import BaseModel, ConfigDict

from storefront.models.listing import Category
from storefront.services.listing_normalizer import resolve_category

CATEGORY_COLORS = {
    Category.RESTAURANT: "#3B82F6",
    Category.EVENT: "#8B5CF6",
    Category.CULTURAL: "#10B981",
}

FALLBACK_COLOR = "#6B7280"


class MarkerStyle(BaseModel):
    """Render-ready description of a category marker."""
    model_config = ConfigDict(frozen=True)

    category: Category
    color: str
    size: tuple[int, int] = (24, 24)
    anchor: tuple[int, int] = (12, 12)


class MarkerStyleCache:
    """Memoizes one MarkerStyle per category for the lifetime of a map view."""

    def __init__(self):
        self._styles: dict[Category, MarkerStyle] = {}

    def __len__(self) -> int:
        return len(self._styles)

    def get(self, category: Union[Category, str]) -> MarkerStyle:
        category = resolve_category(category)
        style = self._styles.get(category)
        if style is None:
            style = MarkerStyle(category=category, color=CATEGORY_COLORS.get(category, FALLBACK_COLOR))
            self._styles[category] = style
        return style

    def clear(self) -> None:
        self._styles.clear()
