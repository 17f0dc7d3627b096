from dataclasses import dataclass, field


@dataclass
class FakeCategoryRow:
    id: int
    name: str = "Walls"
    slug: str = "walls"
    shower_type_id: int = 1
    has_subcategories: bool = False
    stack_order: int | None = None


@dataclass
class FakeSubcategoryRow:
    id: int
    category_id: int
    name: str = "Tiles"
    slug: str = "tiles"
    stack_order: int | None = None


@dataclass
class FakeVariantRow:
    id: int
    product_id: int
    color_name: str
    image_url: str
    plumbing_config: str | None = None
    color_code: str | None = None
    public_id: str | None = None


@dataclass
class FakeProductRow:
    id: int
    name: str
    category_id: int
    category: FakeCategoryRow | None = None
    subcategory_id: int | None = None
    subcategory: FakeSubcategoryRow | None = None
    slug: str = "produto"
    description: str | None = None
    image_url: str | None = None
    thumbnail_url: str | None = None
    stack_order: int | None = None
    variants: list = field(default_factory=list)


@dataclass
class FakeShowerTypeRow:
    id: int
    slug: str
    project_type_id: int = 1
    name: str = "Shower"
    symmetry: str | None = None
    image_url: str | None = None
    base_image_left: str | None = None
    base_image_right: str | None = None


@dataclass
class FakeProjectTypeRow:
    id: int
    name: str = "Box"
    slug: str = "box"
    image_url: str | None = None
