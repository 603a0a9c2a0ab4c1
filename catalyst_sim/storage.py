"""Where ledger snapshots live: a local directory or a GCS bucket.

A snapshot is a JSON document addressed by a relative key such as
``ledger_state.json`` or ``ledger_archive/20261019.json``. Backends do the
JSON encoding themselves, so the ledger store only ever hands over dicts.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable, TYPE_CHECKING

if TYPE_CHECKING:
    from catalyst_sim.config import SimulationConfig

SnapshotDocument = Dict[str, Any]


@runtime_checkable
class SnapshotBackend(Protocol):
    def read_document(self, key: str) -> Optional[SnapshotDocument]: ...
    def write_document(self, key: str, document: SnapshotDocument) -> None: ...
    def list_keys(self, folder: str) -> List[str]: ...


class LocalSnapshots:
    """Snapshots as ``.json`` files under ``root``.

    A document is written to a sibling temp file first and swapped in with
    ``os.replace``, so a reader never sees half a snapshot.
    """

    def __init__(self, root: str = "."):
        self.root = Path(root)

    def _file(self, key: str) -> Path:
        return self.root / key

    def read_document(self, key: str) -> Optional[SnapshotDocument]:
        try:
            with open(self._file(key), "r") as f:
                return json.load(f)
        except FileNotFoundError:
            return None

    def write_document(self, key: str, document: SnapshotDocument) -> None:
        target = self._file(key)
        target.parent.mkdir(parents=True, exist_ok=True)
        tmp = tempfile.NamedTemporaryFile(
            "w", dir=target.parent, prefix=f".{target.name}.", suffix=".tmp", delete=False,
        )
        try:
            with tmp:
                json.dump(document, tmp, indent=2)
            os.replace(tmp.name, target)
        except BaseException:
            os.unlink(tmp.name)
            raise

    def list_keys(self, folder: str) -> List[str]:
        directory = self._file(folder)
        if not directory.is_dir():
            return []
        return sorted(
            p.relative_to(self.root).as_posix()
            for p in directory.glob("*.json")
            if p.is_file()
        )


class GCSSnapshots:
    """Snapshots as JSON blobs in a bucket, under an optional key prefix."""

    def __init__(self, bucket_name: str, prefix: str = "", client=None):
        if client is None:
            from google.cloud import storage
            client = storage.Client()
        self._bucket = client.bucket(bucket_name)
        self._prefix = prefix.strip("/")

    def _blob_name(self, key: str) -> str:
        return "/".join(part for part in (self._prefix, key.strip("/")) if part)

    def read_document(self, key: str) -> Optional[SnapshotDocument]:
        blob = self._bucket.get_blob(self._blob_name(key))
        if blob is None:
            return None
        return json.loads(blob.download_as_bytes())

    def write_document(self, key: str, document: SnapshotDocument) -> None:
        blob = self._bucket.blob(self._blob_name(key))
        blob.upload_from_string(json.dumps(document, indent=2), content_type="application/json")

    def list_keys(self, folder: str) -> List[str]:
        skip = len(self._prefix) + 1 if self._prefix else 0
        return sorted(
            blob.name[skip:]
            for blob in self._bucket.list_blobs(prefix=self._blob_name(folder) + "/")
            if blob.name.endswith(".json")
        )


def build_snapshot_backend(config: SimulationConfig) -> SnapshotBackend:
    """Backend for ``config.storage_backend``; local files sit beside ``state_path``."""
    if config.storage_backend == "gcs":
        if not config.gcs_bucket_name:
            raise ValueError("gcs_bucket_name is required when storage_backend='gcs'")
        return GCSSnapshots(config.gcs_bucket_name, config.gcs_prefix)
    if config.storage_backend == "local":
        return LocalSnapshots(os.path.dirname(config.state_path) or ".")
    raise ValueError(f"Unknown storage_backend: {config.storage_backend!r}")
