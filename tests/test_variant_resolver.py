from showerconfig_backend.render.catalog_types import Category, Product, Variant
from showerconfig_backend.render.plumbing import PlumbingSide, ShowerSymmetry
from showerconfig_backend.render.variant_resolver import resolve_for_product, resolve_variant

LEFT = Variant(id=1, color_name="Chrome", image_url="left.png", orientation=PlumbingSide.LEFT)
RIGHT = Variant(id=2, color_name="Chrome", image_url="right.png", orientation=PlumbingSide.RIGHT)
BOTH = Variant(id=3, color_name="Chrome", image_url="both.png", orientation=PlumbingSide.BOTH)


def test_no_variants_returns_none():
    assert resolve_variant([], PlumbingSide.LEFT, ShowerSymmetry.ASYMMETRIC) is None
    assert resolve_variant(None, PlumbingSide.RIGHT, ShowerSymmetry.SYMMETRIC) is None


def test_symmetric_always_takes_first():
    variants = [RIGHT, LEFT, BOTH]
    assert resolve_variant(variants, PlumbingSide.LEFT, ShowerSymmetry.SYMMETRIC) is RIGHT
    assert resolve_variant(variants, PlumbingSide.RIGHT, ShowerSymmetry.SYMMETRIC) is RIGHT


def test_asymmetric_prefers_exact_orientation():
    variants = [LEFT, BOTH, RIGHT]
    assert resolve_variant(variants, PlumbingSide.RIGHT, ShowerSymmetry.ASYMMETRIC) is RIGHT
    assert resolve_variant(variants, PlumbingSide.LEFT, ShowerSymmetry.ASYMMETRIC) is LEFT


def test_asymmetric_falls_back_to_both():
    assert resolve_variant([LEFT, BOTH], PlumbingSide.RIGHT, ShowerSymmetry.ASYMMETRIC) is BOTH


def test_asymmetric_falls_back_to_first():
    assert resolve_variant([LEFT], PlumbingSide.RIGHT, ShowerSymmetry.ASYMMETRIC) is LEFT


def test_legacy_variant_without_orientation_counts_as_left():
    legacy = Variant(id=9, color_name="Matte Black", image_url="legacy.png", orientation=None)
    assert legacy.orientation is PlumbingSide.LEFT
    assert resolve_variant([RIGHT, legacy], PlumbingSide.LEFT, ShowerSymmetry.ASYMMETRIC) is legacy


def test_resolve_for_product_uses_product_variants():
    product = Product(
        id=10,
        name="Curved Panel",
        category_id=1,
        category=Category(id=1, slug="panels"),
        variants=(LEFT, RIGHT),
    )
    assert resolve_for_product(product, PlumbingSide.RIGHT, ShowerSymmetry.ASYMMETRIC) is RIGHT
    assert resolve_for_product(Product(id=11, name="Empty", category_id=1), PlumbingSide.LEFT, ShowerSymmetry.SYMMETRIC) is None
