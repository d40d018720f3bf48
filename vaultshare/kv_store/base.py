from typing import Protocol


class KeyValueStore(Protocol):
    """Protocol for the external key-value service a vault is persisted in.

    The meaning of ``scoped`` belongs to the store; callers only pass it through.
    """

    def get(self, key: str, scoped: bool) -> str | None:
        """Get the value stored under a key, or None if nothing is stored."""
        ...

    def set(self, key: str, value: str, scoped: bool) -> None:
        """Store a value under a key, replacing any previous value."""
        ...
