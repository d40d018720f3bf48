"""Typed load/save of vaults on top of a raw key-value store."""

import json
import logging
from hashlib import sha256

from pydantic import ValidationError

from vaultshare.domain.vault import Vault
from vaultshare.errors import CorruptVaultError, StoreUnavailableError, VaultConflictError
from vaultshare.kv_store.base import KeyValueStore

logger = logging.getLogger(__name__)

KEY_PREFIX = "vault_"


def vault_key(vault_id: str) -> str:
    """Derive the store key for a vault. The id is used verbatim."""
    return f"{KEY_PREFIX}{vault_id}"


def serialize_vault(vault: Vault) -> str:
    """Serialize a vault to its stored JSON form.

    Keys are sorted and separators compact, so equal vaults always produce
    identical text.
    """
    data = vault.model_dump(mode="json", by_alias=True)
    return json.dumps(data, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def deserialize_vault(value: str, key: str = "") -> Vault:
    """Parse a stored value back into a vault.

    Raises:
        CorruptVaultError: if the value is not JSON or not shaped like a vault
    """
    try:
        data = json.loads(value)
    except json.JSONDecodeError as e:
        raise CorruptVaultError(key, f"invalid JSON ({e.msg})") from e
    except (ValueError, RecursionError) as e:
        # Oversized integer literals and runaway nesting
        raise CorruptVaultError(key, f"unreadable JSON ({type(e).__name__})") from e

    if not isinstance(data, dict):
        raise CorruptVaultError(key, f"expected an object, got {type(data).__name__}")

    try:
        return Vault.model_validate(data)
    except ValidationError as e:
        raise CorruptVaultError(key, f"{e.error_count()} validation errors") from e


def fingerprint(value: str | None) -> str | None:
    """Hash a raw stored value. None stands for "nothing stored"."""
    if value is None:
        return None
    return sha256(value.encode("utf-8")).hexdigest()


class VaultStore:
    """Loads and saves whole vaults. No merging happens here: a save replaces
    whatever is stored, so concurrent writers are last-write-wins."""

    def __init__(self, kv_store: KeyValueStore) -> None:
        self.kv_store = kv_store

    def _get(self, key: str) -> str | None:
        try:
            value = self.kv_store.get(key, scoped=True)
        except Exception as e:
            raise StoreUnavailableError(f"Failed to read {key}: {e}") from e
        # An empty value is treated like a missing one
        if value is None or not value.strip():
            return None
        return value

    def _set(self, key: str, value: str) -> None:
        try:
            self.kv_store.set(key, value, scoped=True)
        except Exception as e:
            raise StoreUnavailableError(f"Failed to write {key}: {e}") from e

    def load_versioned(self, vault_id: str) -> tuple[Vault, str | None]:
        """Load a vault together with the fingerprint of the stored value.

        Returns:
            The vault and the fingerprint, which is None for a never-written key.
        """
        key = vault_key(vault_id)
        value = self._get(key)
        if value is None:
            logger.info(f"No stored value for {key}, starting a new vault")
            return Vault(), None

        vault = deserialize_vault(value, key)
        logger.debug(f"Loaded {key}: {len(vault.folders)} folders, {len(vault.notes)} notes")
        return vault, fingerprint(value)

    def load(self, vault_id: str) -> Vault:
        """Load a vault, returning an empty one if nothing is stored yet.

        Raises:
            CorruptVaultError: if a stored value exists but cannot be parsed
            StoreUnavailableError: if the store cannot be read
        """
        vault, _ = self.load_versioned(vault_id)
        return vault

    def save(self, vault_id: str, vault: Vault) -> str:
        """Replace the stored vault.

        Returns:
            Fingerprint of the written value.

        Raises:
            StoreUnavailableError: if the store rejects the write
        """
        key = vault_key(vault_id)
        value = serialize_vault(vault)
        self._set(key, value)
        logger.info(f"Saved {key} ({len(value)} bytes)")
        return fingerprint(value)

    def save_if_unchanged(self, vault_id: str, vault: Vault, expected: str | None) -> str:
        """Save only if the stored value still has the expected fingerprint.

        The check and the write are two separate store calls, so this narrows
        but does not close the window for a lost update.

        Raises:
            VaultConflictError: if another writer saved since ``expected`` was taken
            StoreUnavailableError: if the store cannot be read or written
        """
        key = vault_key(vault_id)
        current = fingerprint(self._get(key))
        if current != expected:
            logger.warning(f"Refusing to save {key}: stored value changed since load")
            raise VaultConflictError(f"Vault {vault_id} was changed by another writer")
        return self.save(vault_id, vault)
