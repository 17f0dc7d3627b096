import json
from dataclasses import dataclass

import pytest

from showerconfig_backend.render.catalog_types import Category, Product, Subcategory, Variant
from showerconfig_backend.render.design_state import (
    Design,
    base_image_for,
    is_door_or_rod,
    selection_key,
)
from showerconfig_backend.render.plumbing import PlumbingSide, ShowerSymmetry

CDN = "https://res.cloudinary.com/demo/image/upload/v1"


@dataclass
class FakeShowerType:
    image_url: str | None = None
    base_image_left: str | None = None
    base_image_right: str | None = None


def make_product(id, category_id, category_slug, name="Painel", subcategory_id=None, subcategory_slug="", variants=()):
    subcategory = None
    if subcategory_id is not None:
        subcategory = Subcategory(id=subcategory_id, category_id=category_id, slug=subcategory_slug)
    return Product(
        id=id,
        name=name,
        category_id=category_id,
        subcategory_id=subcategory_id,
        slug=name.lower().replace(" ", "-"),
        category=Category(id=category_id, slug=category_slug),
        subcategory=subcategory,
        variants=tuple(variants),
    )


LEFT = Variant(id=1, color_name="Chrome", image_url=f"{CDN}/left.png", orientation=PlumbingSide.LEFT)
RIGHT = Variant(id=2, color_name="Chrome", image_url=f"{CDN}/right.png", orientation=PlumbingSide.RIGHT)


def test_selection_key_prefers_subcategory():
    assert selection_key(make_product(1, 3, "walls")) == "category-3"
    assert selection_key(make_product(1, 3, "walls", subcategory_id=8)) == "subcategory-8"


def test_door_or_rod_detection():
    assert is_door_or_rod(make_product(1, 1, "doors"))
    assert is_door_or_rod(make_product(1, 1, "hardware", subcategory_id=2, subcategory_slug="rods"))
    assert is_door_or_rod(make_product(1, 1, "hardware", name="Curved Rod"))
    assert not is_door_or_rod(make_product(1, 1, "walls", name="Wall Panel"))


class TestBaseImageFor:
    def test_side_specific(self):
        shower = FakeShowerType(image_url="generic.jpg", base_image_left="l.jpg", base_image_right="r.jpg")
        assert base_image_for(shower, "left") == "l.jpg"
        assert base_image_for(shower, PlumbingSide.RIGHT) == "r.jpg"

    def test_falls_back_to_generic(self):
        shower = FakeShowerType(image_url="generic.jpg", base_image_left="l.jpg")
        assert base_image_for(shower, "right") == "generic.jpg"

    def test_rejects_both(self):
        with pytest.raises(ValueError):
            base_image_for(FakeShowerType(), PlumbingSide.BOTH)


def test_design_rejects_both_side():
    with pytest.raises(ValueError):
        Design(shower_type_id=1, plumbing_side="both")


def test_select_product_resolves_variant_for_side():
    design = Design(shower_type_id=1, plumbing_side="right", symmetry=ShowerSymmetry.ASYMMETRIC)
    selected = design.select_product(make_product(1, 1, "walls", variants=[LEFT, RIGHT]))
    assert selected.variant is RIGHT
    assert design.selections == {"category-1": selected}


def test_select_product_replaces_slot():
    design = Design(shower_type_id=1, plumbing_side="left")
    design.select_product(make_product(1, 1, "walls", variants=[LEFT]))
    design.select_product(make_product(2, 1, "walls", variants=[RIGHT]))
    assert list(design.selections) == ["category-1"]
    assert design.selections["category-1"].product.id == 2


def test_doors_and_rods_are_exclusive():
    design = Design(shower_type_id=1, plumbing_side="left")
    design.select_product(make_product(1, 1, "walls", name="Wall Panel"))
    design.select_product(make_product(2, 2, "doors", name="Sliding Door"))
    design.select_product(make_product(3, 3, "rods", name="Curved Rod"))

    assert sorted(design.selections) == ["category-1", "category-3"]


def test_remove_returns_selection():
    design = Design(shower_type_id=1, plumbing_side="left")
    selected = design.select_product(make_product(1, 1, "walls", variants=[LEFT, RIGHT]))

    assert design.remove("category-99") is None
    assert design.remove("category-1") is selected
    assert design.selections == {}


def test_words_containing_rod_are_not_exclusive():
    assert not is_door_or_rod(make_product(1, 1, "walls", name="Product"))
    assert not is_door_or_rod(make_product(1, 1, "walls", name="Produto"))
    assert not is_door_or_rod(make_product(1, 1, "walls", name="Product Rack"))
    assert is_door_or_rod(make_product(1, 1, "hardware", name="Shower Rod"))
    assert is_door_or_rod(make_product(1, 1, "hardware", name="Doors"))


def test_product_named_product_keeps_selected_door():
    design = Design(shower_type_id=1, plumbing_side="left")
    design.select_product(make_product(1, 2, "doors", name="Sliding Door"))
    design.select_product(make_product(2, 5, "shelves", name="Produto"))

    assert sorted(design.selections) == ["category-2", "category-5"]


@pytest.mark.parametrize(
    "blob",
    [
        {},
        {"shower_type_id": "x", "plumbing_side": "left"},
        {"shower_type_id": 1, "plumbing_side": "both"},
        {"shower_type_id": 1, "plumbing_side": "left", "selections": {"category-1": {"product": {"id": "abc"}}}},
    ],
)
def test_from_dict_rejects_malformed_blobs(blob):
    with pytest.raises((KeyError, ValueError)):
        Design.from_dict(blob)


def test_composite_places_base_first():
    design = Design(shower_type_id=1, plumbing_side="right", base_image=f"{CDN}/base.jpg")
    design.select_product(make_product(1, 1, "walls", variants=[LEFT]))
    layers = design.composite()
    assert layers[0].is_base
    assert layers[1].image.flipped is True


def test_round_trip_through_json():
    design = Design(
        shower_type_id=4,
        plumbing_side="right",
        base_image=f"{CDN}/base.jpg",
        symmetry=ShowerSymmetry.ASYMMETRIC,
    )
    design.select_product(make_product(1, 1, "walls", subcategory_id=5, subcategory_slug="tiles", variants=[LEFT, RIGHT]))
    design.select_product(make_product(2, 2, "doors", name="Pivot Door"))

    blob = json.loads(json.dumps(design.to_dict()))
    assert blob["plumbing_side"] == "RIGHT"
    assert blob["selections"]["subcategory-5"]["variant"]["orientation"] == "RIGHT"

    restored = Design.from_dict(blob)
    assert restored == design


def test_neo_angle_right_side_scenarios():
    design = Design(
        shower_type_id=1,
        plumbing_side="right",
        base_image=f"{CDN}/base.jpg",
        symmetry=ShowerSymmetry.ASYMMETRIC,
    )
    panel_left = Variant(id=11, color_name="A", image_url=f"{CDN}/a.png", orientation=PlumbingSide.LEFT)
    panel_both = Variant(id=12, color_name="B", image_url=f"{CDN}/b.png", orientation=PlumbingSide.BOTH)
    door_left = Variant(id=13, color_name="C", image_url=f"{CDN}/c.png", orientation=PlumbingSide.LEFT)

    panel = design.select_product(make_product(1, 1, "walls", name="Wall Panel", variants=[panel_left, panel_both]))
    door = design.select_product(make_product(2, 2, "doors", name="Door", variants=[door_left]))
    assert panel.variant is panel_both
    assert door.variant is door_left

    layers = {layer.product_id: layer.image for layer in design.composite() if not layer.is_base}
    assert layers[1].url == f"{CDN}/b.png"
    assert layers[1].flipped is False
    assert layers[2].url == "https://res.cloudinary.com/demo/image/upload/a_hflip/v1/c.png"
    assert layers[2].flipped is True
