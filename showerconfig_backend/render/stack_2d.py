from __future__ import annotations

import hashlib
import logging

from PIL import Image, UnidentifiedImageError

from showerconfig_backend.render.image_compat import load_rgba, resize_to_match, resolve_image

logger = logging.getLogger(__name__)


def preview_key(layers) -> str:
    """Chave estável do preview: muda sempre que alguma camada muda."""
    payload = "\n".join(
        f"{layer.image.source_url}|{int(layer.image.mirror)}|{int(layer.is_base)}" for layer in layers
    )
    return hashlib.sha1(payload.encode("utf-8")).hexdigest()[:16]


def _load_layer(layer):
    return load_rgba(resolve_image(layer.image.source_url), mirror=layer.image.mirror)


def render_layers(layers, output_path=None, size=None, quality=90):
    """
    Rasteriza as camadas (base + produtos) numa única imagem RGB.

    Cada camada é carregada da URL de origem e espelhada localmente quando
    ``ImageRef.mirror`` pede, inclusive para URLs fora do CDN. Camadas
    ausentes ou ilegíveis são ignoradas; sem a base não há preview.
    """
    base_layer = next((layer for layer in layers if layer.is_base), None)
    if base_layer is None:
        raise FileNotFoundError("Design sem imagem base")

    try:
        base = _load_layer(base_layer)
    except FileNotFoundError:
        raise
    except (OSError, UnidentifiedImageError) as exc:
        raise FileNotFoundError(f"Imagem base ilegível: {base_layer.image.source_url}") from exc
    if size:
        base = resize_to_match(base, tuple(size))

    missing = []
    overlays = sorted((layer for layer in layers if not layer.is_base), key=lambda layer: layer.z_index)
    for layer in overlays:
        try:
            overlay = _load_layer(layer)
        except (OSError, UnidentifiedImageError) as exc:
            logger.debug("Camada %s indisponível: %s", layer.key, exc)
            missing.append(layer.key)
            continue

        base = Image.alpha_composite(base, resize_to_match(overlay, base.size))

    if missing:
        logger.warning("⚠️ Camadas ausentes (ignoradas): %s", missing)

    result = base.convert("RGB")
    if output_path is not None:
        result.save(output_path, "JPEG", quality=quality)
        logger.info("✅ Preview gerado: %s %s", output_path, result.size)
    return result
