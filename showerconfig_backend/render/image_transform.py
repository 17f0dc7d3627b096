from __future__ import annotations

import os
import re
import logging
from dataclasses import dataclass
from urllib.parse import urlsplit, urlunsplit

from showerconfig_backend.render.plumbing import PlumbingSide, normalize_orientation

logger = logging.getLogger(__name__)

# CDN de imagens (estilo Cloudinary: /<cloud>/image/upload/<transformações>/<arquivo>)
IMAGE_CDN_HOST = os.getenv("IMAGE_CDN_HOST", "res.cloudinary.com")
IMAGE_CDN_MARKER = os.getenv("IMAGE_CDN_MARKER", "upload")

FLIP_DIRECTIVE = "a_hflip"
THUMBNAIL_SIZE = (200, 200)
VERSION_RE = re.compile(r"^v\d+$")


@dataclass(frozen=True)
class ImageRef:
    """
    Referência final de uma imagem.

    ``flipped``: o flip foi inserido na URL do CDN por este ajuste.
    ``mirror``: a imagem de origem precisa ser espelhada para o lado alvo;
    o render local usa este campo, já que sempre baixa ``source_url``.
    """

    url: str
    source_url: str
    flipped: bool = False
    passthrough: bool = False
    reason: str | None = None
    mirror: bool = False

    @classmethod
    def of(cls, url: str) -> "ImageRef":
        return cls(url=url, source_url=url)


def should_mirror(variant_orientation, target_side) -> bool:
    """
    LEFT é a orientação canônica dos assets: nunca espelha.
    RIGHT espelha apenas variantes LEFT (ou sem orientação, dado legado).
    """
    target = PlumbingSide.parse(target_side)
    if target is PlumbingSide.LEFT:
        return False
    if target is PlumbingSide.RIGHT:
        return normalize_orientation(variant_orientation) is PlumbingSide.LEFT
    return False


def _passthrough(source: str, reason: str, mirror: bool) -> ImageRef:
    return ImageRef(url=source, source_url=source, passthrough=True, reason=reason, mirror=mirror)


def _directive_tokens(mirror: bool, width, height, quality, fmt) -> list[str]:
    tokens: list[str] = []
    if mirror:
        tokens.append(FLIP_DIRECTIVE)
    if quality:
        tokens.append(f"q_{quality}")
    if width and height:
        tokens.append(f"w_{width},h_{height},c_fill")
    elif width:
        tokens.append(f"w_{width}")
    elif height:
        tokens.append(f"h_{height}")
    if fmt:
        tokens.append(f"f_{fmt}")
    return tokens


def _has_flip(segments: list[str]) -> bool:
    # transformações encadeadas ficam entre o marcador e a versão/arquivo
    for segment in segments[:-1]:
        if VERSION_RE.match(segment):
            break
        if FLIP_DIRECTIVE in segment.split(","):
            return True
    return False


def adjust_image(
    image,
    variant_orientation,
    target_side,
    width: int | None = None,
    height: int | None = None,
    quality=None,
    fmt: str | None = None,
) -> ImageRef:
    """
    Gera a referência final da imagem de uma variante para o lado alvo.

    Sempre parte da URL de origem, então ajustar duas vezes o mesmo ImageRef
    não acumula flips. URLs fora do CDN ou inválidas voltam inalteradas com
    ``passthrough=True`` (mantendo a decisão de espelhar em ``mirror``);
    esta função não levanta exceção por URL ruim.
    """
    source = image.source_url if isinstance(image, ImageRef) else image
    mirror = should_mirror(variant_orientation, target_side)

    if not source:
        return _passthrough(source or "", "empty", mirror)

    try:
        parts = urlsplit(source)
    except ValueError as exc:
        logger.warning("⚠️ URL de imagem inválida (%s): %s", exc, source)
        return _passthrough(source, "malformed", mirror)

    if not parts.scheme or not parts.netloc:
        logger.warning("⚠️ URL de imagem inválida: %s", source)
        return _passthrough(source, "malformed", mirror)

    if parts.hostname != IMAGE_CDN_HOST:
        logger.debug("Imagem fora do CDN, sem transformação: %s", source)
        return _passthrough(source, "non_cdn", mirror)

    segments = parts.path.split("/")
    try:
        marker_idx = segments.index(IMAGE_CDN_MARKER)
    except ValueError:
        logger.warning("⚠️ URL do CDN sem segmento '%s': %s", IMAGE_CDN_MARKER, source)
        return _passthrough(source, "no_marker", mirror)

    next_idx = marker_idx + 1
    already_flipped = _has_flip(segments[next_idx:])

    # flip já presente na origem conta como aplicado: dois flips se anulam
    add_flip = mirror and not already_flipped
    tokens = _directive_tokens(add_flip, width, height, quality, fmt)
    if not tokens:
        return ImageRef(url=source, source_url=source)

    segments.insert(next_idx, ",".join(tokens))
    url = urlunsplit(parts._replace(path="/".join(segments)))
    return ImageRef(url=url, source_url=source, flipped=add_flip, mirror=add_flip)


def thumbnail_image(image, target_side=PlumbingSide.LEFT, variant_orientation=None, size=THUMBNAIL_SIZE) -> ImageRef:
    width, height = size
    return adjust_image(
        image,
        variant_orientation,
        target_side,
        width=width,
        height=height,
        quality="auto",
        fmt="auto",
    )


class ImageTransformCache:
    """
    Memo de um render: (url, orientação, lado) -> ImageRef.
    Trocar o lado alvo descarta tudo.
    """

    def __init__(self, target_side=None) -> None:
        self._entries: dict[str, ImageRef] = {}
        self.target_side = PlumbingSide.parse(target_side)

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def bind_target(self, target_side) -> None:
        side = PlumbingSide.parse(target_side)
        if side is not self.target_side:
            self.clear()
            self.target_side = side

    @staticmethod
    def key(source_url: str, variant_orientation, target_side, **options) -> str:
        orientation = normalize_orientation(variant_orientation).value
        target = PlumbingSide.parse(target_side).value
        extra = ",".join(f"{k}={v}" for k, v in sorted(options.items()) if v is not None)
        return f"{source_url}|{orientation}|{target}|{extra}"

    def get_or_adjust(self, image, variant_orientation, target_side, **options) -> ImageRef:
        self.bind_target(target_side)
        source = image.source_url if isinstance(image, ImageRef) else image
        cache_key = self.key(source, variant_orientation, target_side, **options)
        cached = self._entries.get(cache_key)
        if cached is not None:
            return cached
        ref = adjust_image(image, variant_orientation, target_side, **options)
        self._entries[cache_key] = ref
        return ref
