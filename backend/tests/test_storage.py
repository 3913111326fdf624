from __future__ import annotations

from pathlib import Path

from tradefin.core.config import settings
from tradefin.core.storage import files


def test_store_keeps_extension_and_leaves_no_partial_files(local_storage):
    stored = files.store(b"hello", "scan.final.PDF", "application/pdf")
    path = Path(stored.path)

    assert stored.size_bytes == 5
    assert path.parent == Path(local_storage).resolve()
    assert path.suffix == ".PDF"
    assert path.stem != "scan.final"
    assert [p.name for p in path.parent.iterdir()] == [path.name]
    assert files.read(stored.path) == b"hello"


def test_storage_names_are_unique():
    assert files.storage_name("a.txt") != files.storage_name("a.txt")
    assert Path(files.storage_name(None)).suffix == ""


def test_delete_reports_missing_files(local_storage):
    stored = files.store(b"x", "a.bin")
    assert files.delete(stored.path) is True
    assert files.delete(stored.path) is False
    assert files.delete(None) is False


def test_placeholder_account_url_falls_back_to_local(monkeypatch):
    monkeypatch.setattr(settings, "STORAGE_ACCOUNT_URL", "https://example.blob.core.windows.net")
    assert files._use_local_storage() is True
    monkeypatch.setattr(settings, "STORAGE_ACCOUNT_URL", "https://tradefinprod.blob.core.windows.net")
    assert files._use_local_storage() is False


def test_azure_paths_split_into_container_and_blob():
    assert files._split_azure_path("azure://trade-documents/abc/def.pdf") == ("trade-documents", "abc/def.pdf")
