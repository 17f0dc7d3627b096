from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from pydantic import TypeAdapter

from showerconfig_backend.render.catalog_types import Product, Variant
from showerconfig_backend.render.image_transform import ImageTransformCache
from showerconfig_backend.render.layer_compositor import composite_layers
from showerconfig_backend.render.plumbing import (
    PlumbingSide,
    ShowerSymmetry,
    parse_target_side,
)
from showerconfig_backend.render.variant_resolver import resolve_for_product

logger = logging.getLogger(__name__)

EXCLUSIVE_SLUGS = ("doors", "rods")
# palavra inteira: "product" e "produto" não contam como "rod"
EXCLUSIVE_NAME_RE = re.compile(r"\b(doors?|rods?)\b")

_product_adapter = TypeAdapter(Product)
_variant_adapter = TypeAdapter(Variant)


def selection_key(product) -> str:
    if product.subcategory_id:
        return f"subcategory-{product.subcategory_id}"
    return f"category-{product.category_id}"


def is_door_or_rod(product) -> bool:
    category_slug = (product.category.slug if product.category else "").lower()
    subcategory_slug = (product.subcategory.slug if product.subcategory else "").lower()
    if category_slug in EXCLUSIVE_SLUGS or subcategory_slug in EXCLUSIVE_SLUGS:
        return True
    name = (product.name or "").lower()
    slug = (product.slug or "").lower()
    return bool(EXCLUSIVE_NAME_RE.search(name) or EXCLUSIVE_NAME_RE.search(slug))


def base_image_for(shower_type, side) -> str | None:
    side = parse_target_side(side)
    if side is PlumbingSide.LEFT:
        specific = getattr(shower_type, "base_image_left", None)
    else:
        specific = getattr(shower_type, "base_image_right", None)
    return specific or getattr(shower_type, "image_url", None)


@dataclass(frozen=True)
class SelectedProduct:
    product: Product | None
    variant: Variant | None = None

    @property
    def key(self) -> str | None:
        if self.product is None:
            return None
        return selection_key(self.product)


@dataclass
class Design:
    shower_type_id: int
    plumbing_side: PlumbingSide
    base_image: str | None = None
    symmetry: ShowerSymmetry = ShowerSymmetry.SYMMETRIC
    selections: dict[str, SelectedProduct] = field(default_factory=dict)

    def __post_init__(self):
        self.plumbing_side = parse_target_side(self.plumbing_side)
        self.symmetry = ShowerSymmetry(self.symmetry)

    def select_product(self, product: Product, variant: Variant | None = None) -> SelectedProduct:
        if variant is None:
            variant = resolve_for_product(product, self.plumbing_side, self.symmetry)

        if is_door_or_rod(product):
            for key in [k for k, s in self.selections.items() if s.product is None or is_door_or_rod(s.product)]:
                logger.debug("Removendo %s: porta/barra já selecionada", key)
                self.remove(key)

        selected = SelectedProduct(product=product, variant=variant)
        self.selections[selected.key] = selected
        return selected

    def remove(self, key: str) -> SelectedProduct | None:
        return self.selections.pop(key, None)

    def composite(self, cache: ImageTransformCache | None = None):
        return composite_layers(self.base_image, self.selections, self.plumbing_side, cache=cache)

    def to_dict(self) -> dict:
        selections = {}
        for key, selected in self.selections.items():
            selections[key] = {
                "product": _product_adapter.dump_python(selected.product, mode="json") if selected.product else None,
                "variant": _variant_adapter.dump_python(selected.variant, mode="json") if selected.variant else None,
            }
        return {
            "shower_type_id": self.shower_type_id,
            "plumbing_side": self.plumbing_side.value,
            "symmetry": self.symmetry.value,
            "base_image": self.base_image,
            "selections": selections,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Design":
        selections = {}
        for key, raw in (data.get("selections") or {}).items():
            raw = raw or {}
            product = _product_adapter.validate_python(raw["product"]) if raw.get("product") else None
            variant = _variant_adapter.validate_python(raw["variant"]) if raw.get("variant") else None
            selections[key] = SelectedProduct(product=product, variant=variant)
        return cls(
            shower_type_id=int(data["shower_type_id"]),
            plumbing_side=data["plumbing_side"],
            base_image=data.get("base_image"),
            symmetry=data.get("symmetry") or ShowerSymmetry.SYMMETRIC,
            selections=selections,
        )
