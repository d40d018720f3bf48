from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.sessions import SessionMiddleware

from vaultshare.api.auth import SessionRegistry
from vaultshare.api.endpoints import get_endpoints_router
from vaultshare.config import settings
from vaultshare.kv_store import KeyValueStore
from vaultshare.session import VaultSession
from vaultshare.vault_store import VaultStore


def create_app(
    *,
    kv_store: KeyValueStore,
    use_fingerprint: bool = False,
) -> FastAPI:
    """Create FastAPI app."""
    app = FastAPI()
    vault_store = VaultStore(kv_store)
    app.state.sessions = SessionRegistry(
        lambda: VaultSession(vault_store, use_fingerprint=use_fingerprint)
    )

    # Add session middleware first
    app.add_middleware(SessionMiddleware, secret_key=settings.session_secret)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router=get_endpoints_router())

    return app
