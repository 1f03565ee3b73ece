"""Tests for the product service."""

from decimal import Decimal

import pytest

from catalog_api.application.product_service import ProductService
from catalog_api.domain.exceptions import InvalidInputError, ProductNotFoundError
from catalog_api.infrastructure.product_store import InMemoryProductStore


@pytest.fixture
def svc() -> ProductService:
    """Service over a private in-memory store."""
    return ProductService(store=InMemoryProductStore())


class TestCreateAndRead:
    """Tests for create, get and list."""

    def test_create_assigns_id(self, svc):
        """Created products get a fresh id."""
        first = svc.create_product("A", "", 1)
        second = svc.create_product("B", "", 2)
        assert first.id
        assert first.id != second.id

    def test_read_back_matches_create(self, svc):
        """A product read by id has exactly the created fields."""
        created = svc.create_product(
            name="Widget",
            description="a spec item",
            price=Decimal("12.34"),
            images=["x", "y", "x"],
            quantity=7,
        )
        product = svc.get_product(created.id)

        assert product.name == "Widget"
        assert product.description == "a spec item"
        assert product.price == Decimal("12.34")
        assert product.images == ["x", "y", "x"]
        assert product.quantity == 7

    def test_create_without_optional_fields(self, svc):
        """Images default to empty and quantity to untracked."""
        product = svc.create_product("Widget", "", 0)
        assert product.images == []
        assert product.quantity is None

    @pytest.mark.parametrize("price", [-1, "10", None, True, float("nan")])
    def test_create_rejects_bad_price(self, svc, price):
        """Price must be a finite, non-negative number."""
        with pytest.raises(InvalidInputError):
            svc.create_product("Widget", "", price)

    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_create_rejects_blank_name(self, svc, name):
        """Name must be non-empty."""
        with pytest.raises(InvalidInputError):
            svc.create_product(name, "", 1)

    def test_list_returns_all_in_order(self, svc):
        """List is unfiltered and keeps creation order."""
        ids = [svc.create_product(f"P{i}", "", i).id for i in range(3)]
        assert [p.id for p in svc.list_products()] == ids

    def test_get_missing(self, svc):
        """Unknown ids raise ProductNotFoundError."""
        with pytest.raises(ProductNotFoundError) as exc_info:
            svc.get_product("missing")
        assert exc_info.value.product_id == "missing"


class TestUpdate:
    """Tests for full-entity update."""

    def test_update_replaces_core_fields(self, svc):
        """Name, description and price are replaced."""
        product = svc.create_product("Old", "old", 1)
        updated = svc.update_product(product.id, "New", "new", Decimal("2.50"))

        assert updated.name == "New"
        assert updated.description == "new"
        assert updated.price == Decimal("2.50")

    def test_update_keeps_images_and_quantity(self, svc):
        """Images and quantity are never touched by update."""
        product = svc.create_product("Old", "", 1, images=["a", "b"], quantity=4)
        svc.update_product(product.id, "New", "", 3)

        stored = svc.get_product(product.id)
        assert stored.images == ["a", "b"]
        assert stored.quantity == 4

    def test_update_without_description(self, svc):
        """A None description keeps the stored description."""
        product = svc.create_product("Old", "keep me", 1)
        updated = svc.update_product(product.id, "New", None, 2)

        assert updated.name == "New"
        assert updated.description == "keep me"
        assert updated.price == Decimal("2")

    def test_update_missing(self, svc):
        """Updating an unknown id raises ProductNotFoundError."""
        with pytest.raises(ProductNotFoundError):
            svc.update_product("missing", "Name", "", 1)


class TestDelete:
    """Tests for delete."""

    def test_delete_then_get(self, svc):
        """A deleted product can no longer be read."""
        product = svc.create_product("Widget", "", 1)
        svc.delete_product(product.id)

        with pytest.raises(ProductNotFoundError):
            svc.get_product(product.id)

    def test_delete_missing(self, svc):
        """Deleting an unknown id raises ProductNotFoundError."""
        with pytest.raises(ProductNotFoundError):
            svc.delete_product("missing")

    def test_delete_leaves_others(self, svc):
        """Only the target product is removed."""
        keep = svc.create_product("Keep", "", 1)
        drop = svc.create_product("Drop", "", 1)
        svc.delete_product(drop.id)

        assert [p.id for p in svc.list_products()] == [keep.id]


class TestImages:
    """Tests for image sub-resource operations."""

    def test_add_appends_in_order(self, svc):
        """New images follow existing ones in the given order."""
        product = svc.create_product("W", "", 1, images=["a", "b"])
        updated = svc.add_images(product.id, ["c", "d"])
        assert updated.images == ["a", "b", "c", "d"]

    def test_add_keeps_duplicates(self, svc):
        """Duplicates are appended as-is."""
        product = svc.create_product("W", "", 1, images=["a"])
        updated = svc.add_images(product.id, ["a", "a"])
        assert updated.images == ["a", "a", "a"]

    def test_add_missing(self, svc):
        """Adding to an unknown id raises ProductNotFoundError."""
        with pytest.raises(ProductNotFoundError):
            svc.add_images("missing", ["a"])

    def test_remove_all_occurrences(self, svc):
        """Every occurrence of a removed URL goes."""
        product = svc.create_product("W", "", 1, images=["a", "b", "a"])
        updated = svc.remove_images(product.id, ["a"])
        assert updated.images == ["b"]

    def test_remove_preserves_survivor_order(self, svc):
        """Remaining images keep their relative order."""
        product = svc.create_product("W", "", 1, images=["c", "a", "b", "d", "a"])
        updated = svc.remove_images(product.id, ["a", "d"])
        assert updated.images == ["c", "b"]

    def test_remove_absent_is_noop(self, svc):
        """Removing URLs that are not present is not an error."""
        product = svc.create_product("W", "", 1, images=["a"])
        updated = svc.remove_images(product.id, ["zzz"])
        assert updated.images == ["a"]

    def test_image_ops_leave_other_fields(self, svc):
        """Image edits do not change core fields or quantity."""
        product = svc.create_product("W", "d", 5, images=["a"], quantity=2)
        svc.add_images(product.id, ["b"])
        svc.remove_images(product.id, ["a"])

        stored = svc.get_product(product.id)
        assert (stored.name, stored.description, stored.price, stored.quantity) == (
            "W",
            "d",
            Decimal("5"),
            2,
        )


class TestSetQuantity:
    """Tests for the quantity sub-resource operation."""

    def test_set_quantity(self, svc):
        """A valid integer is stored."""
        product = svc.create_product("W", "", 1)
        updated = svc.set_quantity(product.id, 12)
        assert updated.quantity == 12

    def test_set_quantity_zero(self, svc):
        """Zero is a valid quantity."""
        product = svc.create_product("W", "", 1, quantity=3)
        assert svc.set_quantity(product.id, 0).quantity == 0

    def test_integral_float_accepted(self, svc):
        """A whole-number float is stored as an int."""
        product = svc.create_product("W", "", 1)
        updated = svc.set_quantity(product.id, 4.0)
        assert updated.quantity == 4
        assert isinstance(updated.quantity, int)

    @pytest.mark.parametrize("quantity", ["x", "3", 2.5, None, True, -1, [1]])
    def test_rejects_invalid_and_keeps_quantity(self, svc, quantity):
        """Invalid values raise and leave the stored quantity alone."""
        product = svc.create_product("W", "", 1, quantity=9)

        with pytest.raises(InvalidInputError) as exc_info:
            svc.set_quantity(product.id, quantity)

        assert exc_info.value.field == "quantity"
        assert svc.get_product(product.id).quantity == 9

    def test_invalid_value_reported_before_missing_id(self, svc):
        """A bad value on an unknown id is invalid input, not not-found."""
        with pytest.raises(InvalidInputError):
            svc.set_quantity("missing", "x")

    def test_set_quantity_missing(self, svc):
        """A valid value on an unknown id raises ProductNotFoundError."""
        with pytest.raises(ProductNotFoundError):
            svc.set_quantity("missing", 1)

    def test_set_quantity_leaves_images(self, svc):
        """Quantity changes do not touch images."""
        product = svc.create_product("W", "", 1, images=["a", "b"])
        svc.set_quantity(product.id, 3)
        assert svc.get_product(product.id).images == ["a", "b"]


class TestLastWriteWins:
    """Read-modify-write behaviour across interleaved writers."""

    def test_interleaved_image_writes_lose_earlier_change(self):
        """Two writers that read the same state: the later save wins."""
        store = InMemoryProductStore()
        svc = ProductService(store=store)
        product = svc.create_product("W", "", 1, images=["a"])

        first = store.get_product(product.id)
        second = store.get_product(product.id)
        first.images.append("from-first")
        second.images.append("from-second")
        store.save_product(first)
        store.save_product(second)

        assert svc.get_product(product.id).images == ["a", "from-second"]
