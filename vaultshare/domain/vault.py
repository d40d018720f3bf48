"""Vault domain models."""

from collections import Counter
from typing import Annotated, TypeVar

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

T = TypeVar("T")

# Older vaults may store null instead of an empty sequence.
NullableList = Annotated[list[T], BeforeValidator(lambda x: [] if x is None else x)]


class VaultModel(BaseModel):
    """Base for every persisted entity.

    Field names are snake_case in Python and camelCase in the stored JSON.
    Unknown fields in stored data are ignored.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class Comment(VaultModel):
    id: str
    text: str
    author: str
    timestamp: str


class Image(VaultModel):
    id: str
    url: str


class Link(VaultModel):
    id: str
    url: str
    title: str


class AudioNote(VaultModel):
    """A recorded audio clip attached to a note.

    Attributes:
        id: Unique identifier
        url: Reference to the assembled audio resource
        timestamp: ISO-8601 time the recording was attached
    """

    id: str
    url: str
    timestamp: str


class Note(VaultModel):
    """The primary content unit of a vault.

    Attributes:
        id: Unique identifier
        title: Note title, non-empty at creation
        content: Free text, interpreted by the rendering layer
        folder_id: Id of the owning folder, None for root-level notes
        created: ISO-8601 creation timestamp, never changed afterwards
        comments: Comments in the order they were added
        images: Image references in the order they were added
        links: Links in the order they were added
        audio_notes: Audio clips in the order they were recorded
    """

    id: str
    title: str
    content: str = ""
    folder_id: str | None = Field(default=None, alias="folderId")
    created: str
    comments: NullableList[Comment] = []
    images: NullableList[Image] = []
    links: NullableList[Link] = []
    audio_notes: NullableList[AudioNote] = Field(default=[], alias="audioNotes")


class Folder(VaultModel):
    """A named group of notes, referenced by id."""

    id: str
    name: str
    notes: NullableList[str] = []


class Vault(VaultModel):
    """Root aggregate persisted under a single store key."""

    folders: list[Folder] = []
    notes: list[Note] = []

    def get_note(self, note_id: str) -> Note | None:
        """Get a note by its ID."""
        for note in self.notes:
            if note.id == note_id:
                return note
        return None

    def get_folder(self, folder_id: str) -> Folder | None:
        """Get a folder by its ID."""
        for folder in self.folders:
            if folder.id == folder_id:
                return folder
        return None

    def folder_notes(self, folder_id: str) -> list[Note]:
        """Resolve the member notes of a folder in folder order.

        Ids that no longer resolve to a note are skipped.
        """
        folder = self.get_folder(folder_id)
        if folder is None:
            return []
        notes_by_id = {note.id: note for note in self.notes}
        return [notes_by_id[note_id] for note_id in folder.notes if note_id in notes_by_id]

    def root_notes(self) -> list[Note]:
        """Get notes that no folder references."""
        referenced = {note_id for folder in self.folders for note_id in folder.notes}
        return [note for note in self.notes if note.id not in referenced]

    def all_ids(self) -> set[str]:
        """Get every entity id used anywhere in the vault."""
        ids = {folder.id for folder in self.folders}
        for note in self.notes:
            ids.add(note.id)
            for children in (note.comments, note.images, note.links, note.audio_notes):
                ids.update(child.id for child in children)
        return ids

    def integrity_errors(self) -> list[str]:
        """Describe every broken folder/note reference, empty if consistent."""
        errors = []
        note_ids = {note.id for note in self.notes}
        folders_by_id = {folder.id: folder for folder in self.folders}
        listings = Counter(note_id for folder in self.folders for note_id in folder.notes)

        for folder in self.folders:
            for note_id in folder.notes:
                if note_id not in note_ids:
                    errors.append(f"Folder {folder.id} references missing note {note_id}")

        for note_id, count in listings.items():
            if count > 1:
                errors.append(f"Note {note_id} is listed by {count} folders")

        for note in self.notes:
            if note.folder_id is None:
                continue
            folder = folders_by_id.get(note.folder_id)
            if folder is None:
                errors.append(f"Note {note.id} points to missing folder {note.folder_id}")
            elif note.id not in folder.notes:
                errors.append(f"Note {note.id} is not listed by its folder {note.folder_id}")

        return errors
