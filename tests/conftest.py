import tempfile
from pathlib import Path
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from vaultshare.api import create_app
from vaultshare.domain.ids import IdGenerator
from vaultshare.domain.vault import Comment, Folder, Note, Vault
from vaultshare.session import VaultSession
from vaultshare.vault_store import VaultStore
from tests.fakes import FakeKeyValueStore


@pytest.fixture
def ids() -> IdGenerator:
    """Id generator with a frozen clock, so uniqueness rests on the counter."""
    return IdGenerator(clock=lambda: 1700000000.0, suffix=lambda: "abcd")


@pytest.fixture
def fake_kv_store() -> FakeKeyValueStore:
    return FakeKeyValueStore()


@pytest.fixture
def vault_store(fake_kv_store: FakeKeyValueStore) -> VaultStore:
    return VaultStore(fake_kv_store)


@pytest.fixture
def sample_vault() -> Vault:
    """A vault with one folder holding one note, and one root-level note."""
    return Vault(
        folders=[Folder(id="folder1", name="Research", notes=["note1"])],
        notes=[
            Note(
                id="note1",
                title="Plan",
                content="First steps",
                folder_id="folder1",
                created="2024-01-01T10:00:00.000Z",
                comments=[
                    Comment(
                        id="comment1",
                        text="Looks good",
                        author="alice",
                        timestamp="2024-01-01T11:00:00.000Z",
                    )
                ],
            ),
            Note(id="note2", title="Loose ends", created="2024-01-02T10:00:00.000Z"),
        ],
    )


@pytest.fixture
def vault_session(vault_store: VaultStore, ids: IdGenerator) -> VaultSession:
    return VaultSession(vault_store, ids=ids)


@pytest.fixture
def test_client(fake_kv_store: FakeKeyValueStore) -> TestClient:
    """Create test client backed by the fake key-value store."""
    app = create_app(kv_store=fake_kv_store)
    return TestClient(app)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)
