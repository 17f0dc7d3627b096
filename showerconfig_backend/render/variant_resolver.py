import logging

from showerconfig_backend.render.plumbing import PlumbingSide, ShowerSymmetry

logger = logging.getLogger(__name__)


def resolve_variant(variants, plumbing_side: PlumbingSide, symmetry: ShowerSymmetry):
    """
    Escolhe a variante a exibir para o lado de plumbing do usuário.

    Chuveiros simétricos ignoram orientação e usam a primeira variante.
    Nos assimétricos a ordem é: orientação exata, depois BOTH, depois a
    primeira (o espelhamento fica a cargo do image_transform).
    Retorna None quando não há variantes.
    """
    variants = list(variants or ())
    if not variants:
        return None

    if ShowerSymmetry(symmetry) is ShowerSymmetry.SYMMETRIC:
        return variants[0]

    side = PlumbingSide.parse(plumbing_side)

    exact = next((v for v in variants if v.orientation is side), None)
    if exact is not None:
        return exact

    both = next((v for v in variants if v.orientation is PlumbingSide.BOTH), None)
    if both is not None:
        return both

    return variants[0]


def resolve_for_product(product, plumbing_side: PlumbingSide, symmetry: ShowerSymmetry):
    variant = resolve_variant(product.variants, plumbing_side, symmetry)
    if variant is None:
        logger.debug("Produto %s sem variantes", product.id)
    else:
        logger.debug(
            "Produto %s (%s/%s) -> variante %s [%s]",
            product.id,
            symmetry.value if isinstance(symmetry, ShowerSymmetry) else symmetry,
            plumbing_side,
            variant.id,
            variant.orientation.value,
        )
    return variant
