import sys

from loguru import logger

from vaultshare.api import create_app
from vaultshare.config import settings
from vaultshare.kv_store.local import LocalKeyValueStore

logger.configure(handlers=[{"sink": sys.stderr, "level": settings.log_level}])

logger.info(f"Serving vaults from {settings.local_kv_store_path}")
kv_store = LocalKeyValueStore(settings.local_kv_store_path)
app = create_app(kv_store=kv_store, use_fingerprint=settings.use_fingerprint)
