from __future__ import annotations

from dataclasses import dataclass, field

from showerconfig_backend.render.plumbing import PlumbingSide, normalize_orientation


@dataclass(frozen=True)
class Category:
    id: int
    name: str = ""
    slug: str = ""
    stack_order: int | None = None
    shower_type_id: int | None = None


@dataclass(frozen=True)
class Subcategory:
    id: int
    category_id: int
    name: str = ""
    slug: str = ""
    stack_order: int | None = None


@dataclass(frozen=True)
class Variant:
    id: int
    color_name: str
    image_url: str | None
    orientation: PlumbingSide = PlumbingSide.LEFT
    color_code: str | None = None
    product_id: int | None = None

    def __post_init__(self):
        object.__setattr__(self, "orientation", normalize_orientation(self.orientation))


@dataclass(frozen=True)
class Product:
    id: int
    name: str
    category_id: int
    subcategory_id: int | None = None
    stack_order: int | None = None
    slug: str = ""
    image_url: str | None = None
    thumbnail_url: str | None = None
    category: Category | None = None
    subcategory: Subcategory | None = None
    variants: tuple[Variant, ...] = field(default_factory=tuple)

    def variant_by_id(self, variant_id: int | None) -> Variant | None:
        if variant_id is None:
            return None
        return next((v for v in self.variants if v.id == variant_id), None)


def variant_from_row(row) -> Variant:
    return Variant(
        id=row.id,
        color_name=row.color_name,
        image_url=row.image_url,
        orientation=normalize_orientation(row.plumbing_config),
        color_code=row.color_code,
        product_id=row.product_id,
    )


def product_from_row(row) -> Product:
    """
    Converte um Product do ORM (com category, subcategory e variants já
    carregados) no registro imutável usado pelo render.
    """
    category = None
    if row.category is not None:
        category = Category(
            id=row.category.id,
            name=row.category.name,
            slug=row.category.slug,
            stack_order=row.category.stack_order,
            shower_type_id=row.category.shower_type_id,
        )

    subcategory = None
    if row.subcategory is not None:
        subcategory = Subcategory(
            id=row.subcategory.id,
            category_id=row.subcategory.category_id,
            name=row.subcategory.name,
            slug=row.subcategory.slug,
            stack_order=row.subcategory.stack_order,
        )

    variants = tuple(
        variant_from_row(v) for v in sorted(row.variants, key=lambda v: (v.color_name, v.id))
    )

    return Product(
        id=row.id,
        name=row.name,
        category_id=row.category_id,
        subcategory_id=row.subcategory_id,
        stack_order=row.stack_order,
        slug=row.slug,
        image_url=row.image_url,
        thumbnail_url=row.thumbnail_url,
        category=category,
        subcategory=subcategory,
        variants=variants,
    )
