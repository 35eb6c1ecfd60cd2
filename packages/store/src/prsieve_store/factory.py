from __future__ import annotations

from prsieve_store.base import BaseStore
from prsieve_store.noop import NoOpStore

STORES = ("noop", "sqlite")


def build_store(config: dict) -> BaseStore:
    """Instantiate the configured store from .prsieve.yml settings.

    Store selection:
      store: sqlite → SQLiteStore (uses store_path, default .prsieve.db)
      (default)     → NoOpStore  (no persistence)

    Takes the plain config dict so prsieve_store never imports prsieve_core.
    """
    store_type = config.get("store") or "noop"

    if store_type == "sqlite":
        from prsieve_store.sqlite import SQLiteStore

        return SQLiteStore(db_path=config.get("store_path") or ".prsieve.db")

    if store_type != "noop":
        raise ValueError(f"store must be one of {', '.join(STORES)}, got {store_type!r}")
    return NoOpStore()
