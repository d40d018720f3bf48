import json
from pathlib import Path

from vaultshare.kv_store.base import KeyValueStore

SCOPED = "scoped"
SHARED = "shared"


class LocalKeyValueStore(KeyValueStore):
    """Local key-value store that keeps its entries in a JSON file.

    Scoped and shared entries live in separate namespaces, so the same key can
    hold different values depending on the flag.
    """

    def __init__(self, filepath: str | Path | None = None) -> None:
        """Initialize LocalKeyValueStore.

        Args:
            filepath: Path to store file. If provided and exists, will auto-load.
                     If provided, every set() is written through to this path.
                     If not provided, the store lives in memory only.
        """
        self._filepath = str(filepath) if filepath else None

        if self._filepath and Path(self._filepath).exists():
            with open(self._filepath, "r") as f:
                data = json.load(f)
            self._entries = {
                SCOPED: dict(data.get(SCOPED, {})),
                SHARED: dict(data.get(SHARED, {})),
            }
        else:
            self._entries = {SCOPED: {}, SHARED: {}}

    def get(self, key: str, scoped: bool) -> str | None:
        """Get the value stored under a key, or None if nothing is stored."""
        return self._entries[SCOPED if scoped else SHARED].get(key)

    def set(self, key: str, value: str, scoped: bool) -> None:
        """Store a value under a key and write the store file."""
        self._entries[SCOPED if scoped else SHARED][key] = value
        if self._filepath:
            self.save()

    def keys(self, scoped: bool) -> list[str]:
        """Get all keys in one namespace."""
        return list(self._entries[SCOPED if scoped else SHARED].keys())

    def save(self, filepath: str | None = None) -> None:
        """Save the store to a JSON file.

        Args:
            filepath: Path to save to. If not provided, uses the filepath from initialization.
        """
        save_path = filepath or self._filepath
        if not save_path:
            raise ValueError(
                "No filepath provided and no default filepath set during initialization"
            )

        Path(save_path).parent.mkdir(parents=True, exist_ok=True)
        with open(save_path, "w") as f:
            json.dump(self._entries, f)
