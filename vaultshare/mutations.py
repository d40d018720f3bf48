"""Structural operations on a vault.

Every function takes a vault and returns a new one; the input is never
modified. Arguments are validated before anything is built, so a failing
call leaves no partial change behind.
"""

from datetime import datetime, timezone
from typing import Callable

from vaultshare.domain.ids import IdGenerator
from vaultshare.domain.vault import AudioNote, Comment, Folder, Image, Link, Note, Vault
from vaultshare.errors import FolderNotFoundError, NoteNotFoundError, VaultValidationError


def iso_timestamp(now: datetime | None = None) -> str:
    """Format a UTC timestamp as ISO-8601 with milliseconds and a Z suffix."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _require_text(value: str | None, field: str) -> str:
    if value is None or not value.strip():
        raise VaultValidationError(f"{field} must not be empty")
    return value


def _require_note(vault: Vault, note_id: str) -> Note:
    note = vault.get_note(note_id)
    if note is None:
        raise NoteNotFoundError(note_id)
    return note


def _require_folder(vault: Vault, folder_id: str) -> Folder:
    folder = vault.get_folder(folder_id)
    if folder is None:
        raise FolderNotFoundError(folder_id)
    return folder


def _replace_note(vault: Vault, note_id: str, change: Callable[[Note], Note]) -> Vault:
    _require_note(vault, note_id)
    notes = [change(note) if note.id == note_id else note for note in vault.notes]
    return vault.model_copy(update={"notes": notes})


def create_folder(vault: Vault, name: str, *, ids: IdGenerator) -> tuple[Vault, Folder]:
    """Append a new, empty folder."""
    _require_text(name, "Folder name")
    folder = Folder(id=ids.new_id(), name=name, notes=[])
    return vault.model_copy(update={"folders": [*vault.folders, folder]}), folder


def create_note(
    vault: Vault,
    title: str,
    folder_id: str | None = None,
    *,
    ids: IdGenerator,
    now: datetime | None = None,
) -> tuple[Vault, Note]:
    """Append a new note, optionally listing it in a folder.

    Raises:
        VaultValidationError: if the title is empty or the folder does not exist
    """
    _require_text(title, "Note title")
    if folder_id is not None and vault.get_folder(folder_id) is None:
        raise VaultValidationError(f"Folder {folder_id} does not exist")

    note = Note(
        id=ids.new_id(),
        title=title,
        content="",
        folder_id=folder_id,
        created=iso_timestamp(now),
    )
    folders = vault.folders
    if folder_id is not None:
        folders = [
            folder.model_copy(update={"notes": [*folder.notes, note.id]})
            if folder.id == folder_id
            else folder
            for folder in vault.folders
        ]
    return vault.model_copy(update={"folders": folders, "notes": [*vault.notes, note]}), note


def update_note_content(vault: Vault, note_id: str, content: str) -> Vault:
    """Replace the content of a note."""
    return _replace_note(vault, note_id, lambda note: note.model_copy(update={"content": content}))


def delete_note(vault: Vault, note_id: str) -> Vault:
    """Remove a note and every folder reference to it."""
    _require_note(vault, note_id)
    return vault.model_copy(
        update={
            "notes": [note for note in vault.notes if note.id != note_id],
            "folders": [
                folder.model_copy(update={"notes": [n for n in folder.notes if n != note_id]})
                for folder in vault.folders
            ],
        }
    )


def delete_folder_cascade(vault: Vault, folder_id: str) -> Vault:
    """Remove a folder together with every note it lists or that points to it."""
    folder = _require_folder(vault, folder_id)
    doomed = set(folder.notes) | {n.id for n in vault.notes if n.folder_id == folder_id}
    return vault.model_copy(
        update={
            "notes": [note for note in vault.notes if note.id not in doomed],
            "folders": [
                f.model_copy(update={"notes": [n for n in f.notes if n not in doomed]})
                for f in vault.folders
                if f.id != folder_id
            ],
        }
    )


def delete_folder_keep_notes(vault: Vault, folder_id: str) -> Vault:
    """Remove a folder; the notes it listed become root-level."""
    folder = _require_folder(vault, folder_id)
    released = set(folder.notes)
    return vault.model_copy(
        update={
            "notes": [
                note.model_copy(update={"folder_id": None})
                if note.id in released or note.folder_id == folder_id
                else note
                for note in vault.notes
            ],
            "folders": [f for f in vault.folders if f.id != folder_id],
        }
    )


def append_comment(
    vault: Vault,
    note_id: str,
    text: str,
    author: str,
    *,
    ids: IdGenerator,
    now: datetime | None = None,
) -> tuple[Vault, Comment]:
    """Append a comment by ``author`` to a note."""
    _require_text(text, "Comment text")
    _require_note(vault, note_id)
    comment = Comment(id=ids.new_id(), text=text, author=author, timestamp=iso_timestamp(now))
    updated = _replace_note(
        vault, note_id, lambda note: note.model_copy(update={"comments": [*note.comments, comment]})
    )
    return updated, comment


def append_image(vault: Vault, note_id: str, url: str, *, ids: IdGenerator) -> tuple[Vault, Image]:
    """Append an image reference to a note."""
    _require_text(url, "Image URL")
    _require_note(vault, note_id)
    image = Image(id=ids.new_id(), url=url)
    updated = _replace_note(
        vault, note_id, lambda note: note.model_copy(update={"images": [*note.images, image]})
    )
    return updated, image


def append_link(
    vault: Vault,
    note_id: str,
    url: str,
    title: str | None = None,
    *,
    ids: IdGenerator,
) -> tuple[Vault, Link]:
    """Append a link to a note. A missing or blank title falls back to the URL."""
    _require_text(url, "Link URL")
    _require_note(vault, note_id)
    link = Link(id=ids.new_id(), url=url, title=title if title and title.strip() else url)
    updated = _replace_note(
        vault, note_id, lambda note: note.model_copy(update={"links": [*note.links, link]})
    )
    return updated, link


def append_audio_note(
    vault: Vault,
    note_id: str,
    url: str,
    *,
    ids: IdGenerator,
    now: datetime | None = None,
) -> tuple[Vault, AudioNote]:
    """Attach a recorded audio resource to a note."""
    _require_text(url, "Audio URL")
    _require_note(vault, note_id)
    audio = AudioNote(id=ids.new_id(), url=url, timestamp=iso_timestamp(now))
    updated = _replace_note(
        vault,
        note_id,
        lambda note: note.model_copy(update={"audio_notes": [*note.audio_notes, audio]}),
    )
    return updated, audio
