"""
Seleciona o backend de storage pela variável STORAGE_BACKEND
("local", padrão, ou "r2").
"""
import os
import logging

logger = logging.getLogger(__name__)

STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "local")

if STORAGE_BACKEND == "r2":
    from showerconfig_backend.storage.storage_r2 import (
        delete_file,
        exists,
        get_public_url,
        key_from_public_url,
        upload_file,
    )
else:
    from showerconfig_backend.storage.storage_local import (
        delete_file,
        exists,
        get_public_url,
        key_from_public_url,
        upload_file,
    )

logger.info("📂 Storage backend: %s", STORAGE_BACKEND)

__all__ = [
    "STORAGE_BACKEND",
    "exists",
    "upload_file",
    "get_public_url",
    "delete_file",
    "key_from_public_url",
]
