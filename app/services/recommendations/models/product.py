"""
Catalog product model
"""
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional, Tuple

from app.services.recommendations.models.enums import SkinConcern, SkinType

# Canonical product identifier, resolved once at the boundary
ProductId = str


def to_product_id(value: Any) -> ProductId:
    """Convert a store identifier (int, ObjectId, str) to a ProductId"""
    if value is None:
        raise ValueError("Product identifier is missing")
    return str(value)


def parse_skin_types(values: Optional[Iterable[str]]) -> FrozenSet[SkinType]:
    """Validate loosely typed skin type tags"""
    return frozenset(SkinType(value) for value in (values or ()))


def parse_skin_concerns(values: Optional[Iterable[str]]) -> FrozenSet[SkinConcern]:
    """Validate loosely typed skin concern tags"""
    return frozenset(SkinConcern(value) for value in (values or ()))


@dataclass(frozen=True)
class Product:
    """Catalog product, immutable for the duration of a request"""
    id: ProductId
    brand: str
    price: float
    rating: float
    ingredients: Tuple[str, ...] = ()
    skin_types: FrozenSet[SkinType] = field(default_factory=frozenset)
    skin_concerns: FrozenSet[SkinConcern] = field(default_factory=frozenset)
    is_sustainable: bool = False
    name: Optional[str] = None

    def __post_init__(self):
        if self.price < 0:
            raise ValueError(f"Product {self.id}: price must be non-negative")
        if not 0.0 <= self.rating <= 5.0:
            raise ValueError(f"Product {self.id}: rating must be within 0-5")

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "Product":
        """
        Build a product from a store document

        Accepts either `_id` or `id` as identifier and the camelCase
        field names used by the catalog store.
        """
        raw_id = doc.get("_id", doc.get("id"))
        return cls(
            id=to_product_id(raw_id),
            brand=str(doc.get("brand") or ""),
            price=float(doc.get("price") or 0.0),
            rating=float(doc.get("rating") or 0.0),
            ingredients=tuple(doc.get("ingredient_list") or doc.get("ingredients") or ()),
            skin_types=parse_skin_types(doc.get("skinTypes", doc.get("skin_types"))),
            skin_concerns=parse_skin_concerns(doc.get("skinConcerns", doc.get("skin_concerns"))),
            is_sustainable=bool(doc.get("isSustainable", doc.get("is_sustainable", False))),
            name=doc.get("name"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "id": self.id,
            "name": self.name,
            "brand": self.brand,
            "price": self.price,
            "rating": self.rating,
            "ingredient_list": list(self.ingredients),
            "skinTypes": sorted(t.value for t in self.skin_types),
            "skinConcerns": sorted(c.value for c in self.skin_concerns),
            "isSustainable": self.is_sustainable,
        }
