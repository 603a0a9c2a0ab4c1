"""Ledger snapshot store: the current ledger plus dated archive copies."""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from catalyst_sim.config import SimulationConfig
from catalyst_sim.storage import LocalSnapshots, SnapshotBackend
from catalyst_sim.trading.ledger import Ledger
from catalyst_sim.trading.notifications import NotificationSink

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1


class LedgerStore:
    """Saves and restores ledger state through a snapshot backend.

    The ledger only exposes its state as data; this store wraps it in a
    versioned document and decides the keys. Archived copies go under
    ``archive_folder``.
    """

    def __init__(
        self,
        backend: Optional[SnapshotBackend] = None,
        key: str = "ledger_state.json",
        archive_folder: str = "ledger_archive",
    ):
        self.key = key
        self.archive_folder = archive_folder
        self._backend = backend or LocalSnapshots()

    # ── Write operations ────────────────────────────────────────

    def save(self, ledger: Ledger) -> None:
        self._backend.write_document(self.key, self._wrap(ledger.to_dict()))

    def archive(self, ledger: Ledger, label: Optional[str] = None) -> str:
        """Write a dated copy of the ledger; returns its key."""
        label = label or datetime.now().strftime("%Y%m%dT%H%M%S")
        key = f"{self.archive_folder}/{label}.json"
        self._backend.write_document(key, self._wrap(ledger.to_dict()))
        return key

    # ── Read operations ─────────────────────────────────────────

    def exists(self) -> bool:
        return self._backend.read_document(self.key) is not None

    def load_state(self) -> Optional[Dict[str, Any]]:
        """Raw ledger state, or None when nothing has been saved yet."""
        document = self._backend.read_document(self.key)
        if document is None:
            return None
        version = document.get("schema_version")
        if version != SCHEMA_VERSION:
            logger.warning("Ledger snapshot %s has schema_version %s, expected %s",
                           self.key, version, SCHEMA_VERSION)
        return document["ledger"]

    def load(
        self,
        config: Optional[SimulationConfig] = None,
        notifier: Optional[NotificationSink] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> Optional[Ledger]:
        """Restore the saved ledger, or None when there is no snapshot."""
        state = self.load_state()
        if state is None:
            return None
        return Ledger.from_dict(state, config=config, notifier=notifier, clock=clock)

    def load_or_create(
        self,
        config: Optional[SimulationConfig] = None,
        notifier: Optional[NotificationSink] = None,
    ) -> Ledger:
        ledger = self.load(config=config, notifier=notifier)
        if ledger is None:
            logger.info("No ledger snapshot at %s; starting a new account", self.key)
            ledger = Ledger(config=config, notifier=notifier)
        return ledger

    def list_archives(self) -> List[str]:
        return self._backend.list_keys(self.archive_folder)

    @staticmethod
    def _wrap(state: Dict[str, Any]) -> Dict[str, Any]:
        return {"schema_version": SCHEMA_VERSION, "ledger": state}
