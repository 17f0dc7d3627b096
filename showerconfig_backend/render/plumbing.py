from enum import Enum


class PlumbingSide(str, Enum):
    LEFT = "LEFT"
    RIGHT = "RIGHT"
    BOTH = "BOTH"

    @classmethod
    def parse(cls, value, default=None):
        """
        Converte entrada externa (string em qualquer caixa ou membro) para
        PlumbingSide. Vazio/None retorna ``default``.
        """
        if isinstance(value, cls):
            return value
        if value is None:
            return default
        if not isinstance(value, str):
            raise ValueError(f"plumbing inválido: {value!r}")
        text = value.strip().upper()
        if not text:
            return default
        try:
            return cls(text)
        except ValueError:
            raise ValueError(f"plumbing inválido: {value!r}") from None


class ShowerSymmetry(str, Enum):
    SYMMETRIC = "symmetric"
    ASYMMETRIC = "asymmetric"


ASYMMETRIC_SLUG_MARKERS = ("curved", "neo-angle", "neo_angle", "neoangle")


def normalize_orientation(value) -> PlumbingSide:
    # variantes antigas não têm orientação: foram todas autoradas para LEFT
    return PlumbingSide.parse(value, default=PlumbingSide.LEFT)


def parse_target_side(value) -> PlumbingSide:
    side = PlumbingSide.parse(value)
    if side is None or side is PlumbingSide.BOTH:
        raise ValueError(f"lado de plumbing do usuário deve ser LEFT ou RIGHT: {value!r}")
    return side


def classify_shower_type(slug: str | None, explicit=None) -> ShowerSymmetry:
    if explicit:
        if isinstance(explicit, ShowerSymmetry):
            return explicit
        return ShowerSymmetry(str(explicit).strip().lower())

    slug = (slug or "").lower()
    if any(marker in slug for marker in ASYMMETRIC_SLUG_MARKERS):
        return ShowerSymmetry.ASYMMETRIC
    return ShowerSymmetry.SYMMETRIC
