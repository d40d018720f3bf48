"""CLI for printing a stored vault as a folder tree or raw JSON and checking its references"""

import argparse
import sys

from vaultshare.config import settings
from vaultshare.domain.vault import Vault
from vaultshare.errors import VaultError
from vaultshare.kv_store.local import LocalKeyValueStore
from vaultshare.vault_store import VaultStore, serialize_vault


def format_tree(vault: Vault) -> str:
    lines = []
    for folder in vault.folders:
        lines.append(f"{folder.name}/ [{folder.id}]")
        for note in vault.folder_notes(folder.id):
            lines.append(f"  {note.title} [{note.id}] ({len(note.comments)} comments)")
    for note in vault.root_notes():
        lines.append(f"{note.title} [{note.id}] ({len(note.comments)} comments)")
    return "\n".join(lines)


def main(vault_id: str, store_path: str, as_json: bool) -> int:
    vault_store = VaultStore(LocalKeyValueStore(filepath=store_path))
    try:
        vault = vault_store.load(vault_id)
    except VaultError as e:
        print(f"Could not load vault {vault_id}: {e}", file=sys.stderr)
        return 1

    print(serialize_vault(vault) if as_json else format_tree(vault))

    errors = vault.integrity_errors()
    for error in errors:
        print(f"integrity: {error}", file=sys.stderr)
    return 2 if errors else 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("--vault-id", type=str, required=True, help="ID of the vault to print")
    parser.add_argument(
        "--store-path",
        type=str,
        required=False,
        help="Local key-value store file",
        default=settings.local_kv_store_path,
    )
    parser.add_argument("--json", action="store_true", help="Print the stored JSON instead")

    args = parser.parse_args()

    sys.exit(main(vault_id=args.vault_id, store_path=args.store_path, as_json=args.json))
