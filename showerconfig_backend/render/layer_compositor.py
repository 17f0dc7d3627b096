from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from showerconfig_backend.render.image_transform import ImageRef, ImageTransformCache, adjust_image
from showerconfig_backend.render.plumbing import PlumbingSide

logger = logging.getLogger(__name__)

DEFAULT_STACK_ORDER = 50
BASE_LAYER_Z = 0.0


@dataclass(frozen=True)
class OrderedLayer:
    image: ImageRef
    z_index: float
    key: str | None = None
    product_id: int | None = None
    is_base: bool = False


def base_stack_order(product) -> int:
    # 0 vindo do admin significa "herdar", igual a vazio
    subcategory_order = product.subcategory.stack_order if product.subcategory else None
    category_order = product.category.stack_order if product.category else None
    return round(product.stack_order or subcategory_order or category_order or DEFAULT_STACK_ORDER)


def compute_z_index(product) -> float:
    """
    z = stack order herdado + desempate pela hierarquia do catálogo.

    O desempate não é arredondado: dois produtos com o mesmo stack order
    ficam sempre na mesma ordem entre renders.
    """
    tie_break = (
        (product.category_id or 0) * 0.01
        + (product.subcategory_id or 0) * 0.001
        + (product.id % 100) * 0.0001
    )
    return base_stack_order(product) + tie_break


def layer_image_url(selection) -> str | None:
    variant = selection.variant
    product = selection.product
    return (
        (variant.image_url if variant else None)
        or product.image_url
        or product.thumbnail_url
        or None
    )


def _has_catalog_metadata(product) -> bool:
    if product is None or product.category is None:
        return False
    if product.category.id != product.category_id:
        return False
    if product.subcategory_id is not None:
        subcategory = product.subcategory
        if subcategory is None or subcategory.id != product.subcategory_id:
            return False
        if subcategory.category_id != product.category_id:
            return False
    return True


def _iter_selections(selections):
    if isinstance(selections, Mapping):
        return list(selections.items())
    return [(getattr(s, "key", None), s) for s in selections]


def composite_layers(
    base_image,
    selections,
    target_side,
    cache: ImageTransformCache | None = None,
) -> list[OrderedLayer]:
    """
    Monta as camadas do preview: imagem base primeiro, depois os produtos
    em ordem crescente de z. Seleções quebradas (produto sem metadados do
    catálogo ou sem imagem) são descartadas sem interromper o composite.
    """
    target = PlumbingSide.parse(target_side)
    layers: list[OrderedLayer] = []
    dropped: list[str] = []

    for key, selection in _iter_selections(selections):
        product = getattr(selection, "product", None)
        if not _has_catalog_metadata(product):
            dropped.append(str(key))
            continue

        url = layer_image_url(selection)
        if not url:
            logger.debug("Seleção %s sem imagem, camada ignorada", key)
            continue

        orientation = selection.variant.orientation if selection.variant else None
        if cache is not None:
            image = cache.get_or_adjust(url, orientation, target)
        else:
            image = adjust_image(url, orientation, target)

        layers.append(
            OrderedLayer(
                image=image,
                z_index=compute_z_index(product),
                key=key,
                product_id=product.id,
            )
        )

    if dropped:
        logger.warning("⚠️ Seleções sem metadados do catálogo (ignoradas): %s", dropped)

    layers.sort(key=lambda layer: (layer.z_index, layer.product_id, layer.key or ""))

    if not base_image:
        logger.warning("⚠️ Design sem imagem base")
        return layers

    base = base_image if isinstance(base_image, ImageRef) else ImageRef.of(base_image)
    return [OrderedLayer(image=base, z_index=BASE_LAYER_Z, is_base=True), *layers]
