from vaultshare.kv_store.base import KeyValueStore

__all__ = ["KeyValueStore"]
