import os
import logging
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)

STORAGE_ROOT = Path(os.getenv("LOCAL_STORAGE_ROOT", "showerconfig_cache/storage"))
LOCAL_PUBLIC_URL = os.getenv("LOCAL_PUBLIC_URL", "/storage")


def _resolve_path(key: str) -> Path:
    if ".." in Path(key).parts:
        raise ValueError(f"chave inválida: {key}")
    return STORAGE_ROOT / key


def exists(key: str) -> bool:
    return _resolve_path(key).exists()


def upload_file(file_path: str, key: str, content_type: str = "application/octet-stream"):
    dest = _resolve_path(key)
    dest.parent.mkdir(parents=True, exist_ok=True)
    _ = content_type  # ignorado localmente, mantido pela interface

    try:
        shutil.copyfile(file_path, dest)
        logger.info("💾 Salvo localmente: %s", key)
    except OSError as e:
        logger.error("❌ Falha ao salvar %s: %s", key, e)
        raise


def get_public_url(key: str) -> str:
    return f"{LOCAL_PUBLIC_URL.rstrip('/')}/{key}"


def delete_file(key: str) -> bool:
    path = _resolve_path(key)
    if not path.exists():
        return False
    path.unlink()
    logger.info("🗑️ Removido localmente: %s", key)
    return True


def key_from_public_url(url: str) -> str | None:
    prefix = f"{LOCAL_PUBLIC_URL.rstrip('/')}/"
    if not url or not url.startswith(prefix):
        return None
    return url[len(prefix):] or None
