import os
import uuid
import shutil
import asyncio
import logging
import tempfile
from pathlib import PurePosixPath

from .. import schemas
from ..storage import factory as default_storage
from ..utils.validation import validate_slug
from .catalog_service import DomainError, NotFoundError

logger = logging.getLogger(__name__)

UPLOAD_PREFIX = "uploads"
IMAGE_CONTENT_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
}


def upload_folder(folder: str) -> str:
    """Pasta de upload: segmentos em formato de slug, ex. "products/doors"."""
    parts = [p for p in (folder or "").strip().strip("/").split("/") if p]
    if not parts:
        raise DomainError("pasta de upload é obrigatória")
    try:
        return "/".join(validate_slug(p) for p in parts)
    except ValueError as exc:
        raise DomainError(f"pasta de upload inválida: {exc}") from exc


class UploadService:
    def __init__(self, storage=default_storage) -> None:
        self.storage = storage

    async def save_image(self, fileobj, filename: str | None, folder: str, existing_image_url: str | None = None) -> schemas.UploadOutput:
        suffix = PurePosixPath(filename or "").suffix.lower()
        content_type = IMAGE_CONTENT_TYPES.get(suffix)
        if content_type is None:
            raise DomainError(f"formato de imagem não suportado: {filename}")

        key = f"{UPLOAD_PREFIX}/{upload_folder(folder)}/{uuid.uuid4().hex}{suffix}"
        with tempfile.NamedTemporaryFile(suffix=suffix, delete=False) as tmp:
            shutil.copyfileobj(fileobj, tmp)
            tmp_path = tmp.name
        try:
            await asyncio.to_thread(self.storage.upload_file, tmp_path, key, content_type)
        finally:
            os.remove(tmp_path)

        if existing_image_url:
            await self._delete_if_owned(existing_image_url)

        logger.info("📤 Upload salvo: %s", key)
        return schemas.UploadOutput(image_url=self.storage.get_public_url(key), key=key)

    async def delete_image(self, image_url: str) -> None:
        key = self._owned_key(image_url)
        if key is None:
            raise DomainError("imagem não pertence ao storage de uploads")
        if not await asyncio.to_thread(self.storage.delete_file, key):
            raise NotFoundError("imagem não encontrada")

    async def _delete_if_owned(self, image_url: str) -> None:
        key = self._owned_key(image_url)
        if key is None:
            # imagem externa (ex.: CDN): não é nossa para remover
            logger.debug("Imagem anterior fora do storage: %s", image_url)
            return
        await asyncio.to_thread(self.storage.delete_file, key)

    def _owned_key(self, image_url: str) -> str | None:
        key = self.storage.key_from_public_url(image_url)
        if key is None or not key.startswith(f"{UPLOAD_PREFIX}/"):
            return None
        return key
