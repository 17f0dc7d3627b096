from __future__ import annotations

import os
import hashlib
import logging
from pathlib import Path
from urllib.parse import urlsplit

import requests
from PIL import Image, ImageOps

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = (".png", ".jpg", ".jpeg", ".webp")
IMAGE_CACHE_DIR = Path(os.getenv("IMAGE_CACHE_DIR", "showerconfig_cache/images"))
DOWNLOAD_TIMEOUT = 30


def is_remote(ref: str) -> bool:
    return urlsplit(ref).scheme in ("http", "https")


def cache_path_for(url: str) -> Path:
    suffix = Path(urlsplit(url).path).suffix.lower()
    if suffix not in SUPPORTED_EXTENSIONS:
        suffix = ".png"
    digest = hashlib.sha1(url.encode("utf-8")).hexdigest()
    return IMAGE_CACHE_DIR / f"{digest}{suffix}"


def resolve_image(ref: str) -> Path:
    """
    Resolve uma imagem para um arquivo local.

    Caminhos locais são usados diretamente; URLs remotas são baixadas uma
    vez para IMAGE_CACHE_DIR.

    Raises:
        FileNotFoundError: se a imagem não existe localmente nem remotamente
    """
    if not ref:
        raise FileNotFoundError("Referência de imagem vazia")

    if not is_remote(ref):
        path = Path(ref)
        if path.exists():
            return path
        raise FileNotFoundError(f"Imagem não encontrada: {ref}")

    candidate = cache_path_for(ref)
    if candidate.exists():
        return candidate

    logger.info("📥 Baixando imagem: %s", ref)
    candidate.parent.mkdir(parents=True, exist_ok=True)
    partial = candidate.with_name(f"{candidate.name}.part")
    try:
        response = requests.get(ref, timeout=DOWNLOAD_TIMEOUT, stream=True)
        if response.status_code != 200:
            logger.warning("⚠️ Status %s para %s", response.status_code, ref)
            raise FileNotFoundError(f"Imagem não encontrada: {ref}")

        with open(partial, "wb") as f:
            for chunk in response.iter_content(chunk_size=8192):
                if chunk:
                    f.write(chunk)
    except requests.RequestException as e:
        partial.unlink(missing_ok=True)
        logger.warning("⚠️ Falha ao baixar %s: %s", ref, e)
        raise FileNotFoundError(f"Imagem indisponível: {ref}") from e

    # só um download completo entra no cache
    os.replace(partial, candidate)
    logger.info("✅ Imagem em cache: %s", candidate)
    return candidate


def load_rgba(path: str | Path, mirror: bool = False) -> Image.Image:
    img = Image.open(path).convert("RGBA")
    if mirror:
        img = ImageOps.mirror(img)
    return img


def resize_to_match(img: Image.Image, size: tuple[int, int]) -> Image.Image:
    if img.size == size:
        return img
    return img.resize(size, Image.BICUBIC)
