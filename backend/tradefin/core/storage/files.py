from __future__ import annotations

import os
import tempfile
import uuid
from dataclasses import dataclass
from pathlib import Path

from azure.core.exceptions import ResourceNotFoundError
from azure.identity import DefaultAzureCredential
from azure.storage.blob import BlobServiceClient, ContentSettings

from tradefin.core.config import settings
from tradefin.core.middleware.context import get_logger


log = get_logger(__name__)

AZURE_SCHEME = "azure://"


@dataclass(frozen=True)
class StoredFile:
    path: str
    size_bytes: int


def _use_local_storage() -> bool:
    if settings.STORAGE_ACCOUNT_URL and "example.blob.core.windows.net" in settings.STORAGE_ACCOUNT_URL:
        return True
    return not (settings.STORAGE_ACCOUNT_URL or settings.AZURE_STORAGE_ACCOUNT)


def _account_url() -> str:
    if settings.STORAGE_ACCOUNT_URL:
        return settings.STORAGE_ACCOUNT_URL.rstrip("/")
    if not settings.AZURE_STORAGE_ACCOUNT:
        raise ValueError("STORAGE_ACCOUNT_URL or AZURE_STORAGE_ACCOUNT not configured")
    return f"https://{settings.AZURE_STORAGE_ACCOUNT}.blob.core.windows.net"


def _service_client() -> BlobServiceClient:
    cred = DefaultAzureCredential(exclude_interactive_browser_credential=True)
    return BlobServiceClient(account_url=_account_url(), credential=cred)


def _local_base_dir() -> Path:
    base = Path(settings.upload_dir).resolve()
    base.mkdir(parents=True, exist_ok=True)
    return base


def storage_name(original_name: str | None) -> str:
    """Random file name that keeps the original extension."""
    suffix = Path(original_name or "").suffix
    return f"{uuid.uuid4()}{suffix}"


def store(data: bytes, suggested_name: str | None, content_type: str | None = None) -> StoredFile:
    name = storage_name(suggested_name)

    if _use_local_storage():
        target = _local_base_dir() / name
        fd, tmp_path = tempfile.mkstemp(dir=target.parent, prefix=".upload-", suffix=".part")
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
                fh.flush()
                os.fsync(fh.fileno())
            # Readers only ever see the complete file.
            os.replace(tmp_path, target)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise
        log.info("storage.stored", backend="local", path=str(target), size=len(data))
        return StoredFile(path=str(target), size_bytes=len(data))

    container = settings.AZURE_STORAGE_DOCUMENTS_CONTAINER
    bc = _service_client().get_blob_client(container=container, blob=name)
    content_settings = ContentSettings(content_type=content_type) if content_type else None
    # Block blob commit is atomic; overwrite=False guards the random name.
    bc.upload_blob(data, overwrite=False, content_settings=content_settings)
    path = f"{AZURE_SCHEME}{container}/{name}"
    log.info("storage.stored", backend="azure", path=path, size=len(data))
    return StoredFile(path=path, size_bytes=len(data))


def _split_azure_path(path: str) -> tuple[str, str]:
    container, _, blob_name = path[len(AZURE_SCHEME):].partition("/")
    return container, blob_name


def read(path: str) -> bytes:
    if path.startswith(AZURE_SCHEME):
        container, blob_name = _split_azure_path(path)
        bc = _service_client().get_blob_client(container=container, blob=blob_name)
        return bc.download_blob().readall()
    return Path(path).read_bytes()


def delete(path: str | None) -> bool:
    """Remove a stored file; returns False when it was already gone."""
    if not path:
        return False
    if path.startswith(AZURE_SCHEME):
        container, blob_name = _split_azure_path(path)
        bc = _service_client().get_blob_client(container=container, blob=blob_name)
        try:
            bc.delete_blob()
        except ResourceNotFoundError:
            log.info("storage.delete_missing", path=path)
            return False
        return True

    try:
        Path(path).unlink()
    except FileNotFoundError:
        log.info("storage.delete_missing", path=path)
        return False
    return True
