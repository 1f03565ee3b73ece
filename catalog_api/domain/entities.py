"""Product entity."""

from dataclasses import dataclass, field, replace
from decimal import Decimal


@dataclass
class Product:
    """A catalog entry.

    Attributes:
        id: Opaque, stable identifier assigned at creation.
        name: Display name, never empty.
        description: Free text, may be empty.
        price: Non-negative price.
        images: Ordered image URLs. Duplicates are allowed.
        quantity: Stock level, or None when stock is not tracked.
    """

    id: str
    name: str
    description: str
    price: Decimal
    images: list[str] = field(default_factory=list)
    quantity: int | None = None

    def copy(self) -> "Product":
        """Return an independent copy (the image list is not shared)."""
        return replace(self, images=list(self.images))

    def to_dict(self) -> dict:
        """Serialize to plain JSON-compatible types."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "price": str(self.price),
            "images": list(self.images),
            "quantity": self.quantity,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Product":
        """Build a product from the output of ``to_dict``."""
        return cls(
            id=data["id"],
            name=data["name"],
            description=data.get("description", ""),
            price=Decimal(str(data["price"])),
            images=list(data.get("images") or []),
            quantity=data.get("quantity"),
        )
