"""
Storage R2 via boto3 (API compatível com S3).
Guarda os previews renderizados dos designs.
"""
import os
import logging

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)

R2_ACCOUNT_ID = os.getenv("R2_ACCOUNT_ID")
R2_ACCESS_KEY_ID = os.getenv("R2_ACCESS_KEY_ID")
R2_SECRET_ACCESS_KEY = os.getenv("R2_SECRET_ACCESS_KEY")
R2_BUCKET_NAME = os.getenv("R2_BUCKET_NAME", "showerconfig-previews")
R2_ENDPOINT_URL = os.getenv(
    "R2_ENDPOINT_URL",
    f"https://{R2_ACCOUNT_ID}.r2.cloudflarestorage.com" if R2_ACCOUNT_ID else None
)
R2_PUBLIC_URL = os.getenv("R2_PUBLIC_URL", "https://cdn.example.com")

s3_client = None
if R2_ENDPOINT_URL and R2_ACCESS_KEY_ID and R2_SECRET_ACCESS_KEY:
    s3_client = boto3.client(
        "s3",
        endpoint_url=R2_ENDPOINT_URL,
        aws_access_key_id=R2_ACCESS_KEY_ID,
        aws_secret_access_key=R2_SECRET_ACCESS_KEY,
        region_name="auto",
        config=Config(max_pool_connections=10),
    )
    logger.info("✅ Cliente R2 inicializado (bucket %s)", R2_BUCKET_NAME)
else:
    logger.error("❌ Credenciais R2 ausentes. Defina R2_ACCOUNT_ID, R2_ACCESS_KEY_ID, R2_SECRET_ACCESS_KEY")


def _client():
    if not s3_client:
        raise RuntimeError("R2 client not initialized")
    return s3_client


def exists(key: str) -> bool:
    client = _client()
    try:
        client.head_object(Bucket=R2_BUCKET_NAME, Key=key)
        return True
    except ClientError as e:
        if e.response["Error"]["Code"] in {"404", "NoSuchKey", "NotFound"}:
            return False
        raise


def upload_file(file_path: str, key: str, content_type: str = "application/octet-stream"):
    client = _client()
    extra_args = {"ContentType": content_type}
    if key.endswith((".jpg", ".jpeg", ".png")):
        extra_args["CacheControl"] = "public, max-age=31536000, immutable"

    try:
        client.upload_file(file_path, R2_BUCKET_NAME, key, ExtraArgs=extra_args)
        logger.info("☁️ Enviado ao R2: %s", key)
    except ClientError as e:
        logger.error("❌ Falha no upload para o R2 %s: %s", key, e)
        raise


def get_public_url(key: str) -> str:
    return f"{R2_PUBLIC_URL}/{key}"


def delete_file(key: str) -> bool:
    client = _client()
    try:
        client.delete_object(Bucket=R2_BUCKET_NAME, Key=key)
        logger.info("🗑️ Removido do R2: %s", key)
        return True
    except ClientError as e:
        logger.error("❌ Falha ao remover do R2 %s: %s", key, e)
        raise


def key_from_public_url(url: str) -> str | None:
    prefix = f"{R2_PUBLIC_URL.rstrip('/')}/"
    if not url or not url.startswith(prefix):
        return None
    return url[len(prefix):] or None
