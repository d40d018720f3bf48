"""Per-client session: the open vault, the selected note and save status."""

import logging
from enum import Enum

from vaultshare import mutations
from vaultshare.domain.ids import IdGenerator
from vaultshare.domain.vault import AudioNote, Comment, Folder, Image, Link, Note, Vault
from vaultshare.errors import (
    NoteNotFoundError,
    NotLoggedInError,
    RecordingError,
    VaultValidationError,
)
from vaultshare.recording import AudioRecorder
from vaultshare.vault_store import VaultStore

logger = logging.getLogger(__name__)


class SaveStatus(str, Enum):
    IDLE = "idle"
    IN_PROGRESS = "in_progress"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class VaultSession:
    """Holds one client's copy of a vault and applies user intents to it.

    The selected note is stored as an id and resolved against the current
    vault on every read, so it always reflects the latest mutation.
    """

    def __init__(
        self,
        vault_store: VaultStore,
        *,
        ids: IdGenerator | None = None,
        recorder: AudioRecorder | None = None,
        use_fingerprint: bool = False,
    ) -> None:
        """Initialize VaultSession.

        Args:
            vault_store: Store adapter used for load and save
            ids: Id generator shared by every mutation of this session
            recorder: Audio recorder, required only for audio notes
            use_fingerprint: Refuse to save over changes made by another writer
                since the last load or save
        """
        self.vault_store = vault_store
        self.ids = ids or IdGenerator()
        self.recorder = recorder
        self.use_fingerprint = use_fingerprint

        self.username = ""
        self.vault_id = ""
        self.vault = Vault()
        self.selected_note_id: str | None = None
        self.expanded_folders: set[str] = set()
        self.save_status = SaveStatus.IDLE
        self._fingerprint: str | None = None
        self._recording_note_id: str | None = None

    @property
    def is_logged_in(self) -> bool:
        return bool(self.username and self.vault_id)

    @property
    def selected_note(self) -> Note | None:
        if self.selected_note_id is None:
            return None
        return self.vault.get_note(self.selected_note_id)

    @property
    def is_recording(self) -> bool:
        return self.recorder is not None and self.recorder.is_recording

    def login(self, username: str, vault_id: str) -> Vault:
        """Open a vault as ``username`` and load it.

        If the load fails the session stays logged out, so an empty vault is
        never saved over data that could not be read.
        """
        username, vault_id = username.strip(), vault_id.strip()
        if not username or not vault_id:
            raise VaultValidationError("Username and vault ID are required")

        vault, fingerprint = self.vault_store.load_versioned(vault_id)
        self.username = username
        self.vault_id = vault_id
        self._set_loaded(vault, fingerprint)
        self.selected_note_id = None
        self.expanded_folders = set()
        logger.info(f"{username} opened vault {vault_id}")
        return vault

    def logout(self) -> None:
        self.username = ""
        self.vault_id = ""
        self.vault = Vault()
        self.selected_note_id = None
        self.expanded_folders = set()
        self.save_status = SaveStatus.IDLE
        self._fingerprint = None

    def refresh(self) -> Vault:
        """Reload the vault from the store, discarding unsaved local changes.

        On failure the current vault is kept and the error propagates.
        """
        self._require_login()
        vault, fingerprint = self.vault_store.load_versioned(self.vault_id)
        self._set_loaded(vault, fingerprint)
        if self.selected_note is None:
            self.selected_note_id = None
        return vault

    def save(self) -> None:
        """Persist the current vault, tracking progress in ``save_status``."""
        self._require_login()
        self.save_status = SaveStatus.IN_PROGRESS
        try:
            if self.use_fingerprint:
                fingerprint = self.vault_store.save_if_unchanged(
                    self.vault_id, self.vault, self._fingerprint
                )
            else:
                fingerprint = self.vault_store.save(self.vault_id, self.vault)
        except Exception:
            self.save_status = SaveStatus.FAILED
            logger.exception(f"Saving vault {self.vault_id} failed")
            raise
        self._fingerprint = fingerprint
        self.save_status = SaveStatus.SUCCEEDED

    def select_note(self, note_id: str | None) -> Note | None:
        if note_id is not None and self.vault.get_note(note_id) is None:
            raise NoteNotFoundError(note_id)
        self.selected_note_id = note_id
        return self.selected_note

    def toggle_folder(self, folder_id: str) -> bool:
        """Expand or collapse a folder. Returns True if it is now expanded."""
        if folder_id in self.expanded_folders:
            self.expanded_folders.discard(folder_id)
            return False
        self.expanded_folders.add(folder_id)
        return True

    def create_folder(self, name: str) -> Folder:
        self._require_login()
        vault, folder = mutations.create_folder(self.vault, name, ids=self.ids)
        self._apply(vault)
        return folder

    def create_note(self, title: str, folder_id: str | None = None) -> Note:
        """Create a note and select it."""
        self._require_login()
        vault, note = mutations.create_note(self.vault, title, folder_id, ids=self.ids)
        self._apply(vault)
        self.selected_note_id = note.id
        return note

    def update_note(self, note_id: str, content: str) -> Note:
        self._require_login()
        self._apply(mutations.update_note_content(self.vault, note_id, content))
        return self.vault.get_note(note_id)

    def delete_note(self, note_id: str) -> None:
        self._require_login()
        self._apply(mutations.delete_note(self.vault, note_id))

    def delete_folder_cascade(self, folder_id: str) -> None:
        self._require_login()
        self._apply(mutations.delete_folder_cascade(self.vault, folder_id))
        self.expanded_folders.discard(folder_id)

    def delete_folder_keep_notes(self, folder_id: str) -> None:
        self._require_login()
        self._apply(mutations.delete_folder_keep_notes(self.vault, folder_id))
        self.expanded_folders.discard(folder_id)

    def add_comment(self, text: str) -> Comment:
        """Comment on the selected note as the session user."""
        note_id = self._require_selection()
        vault, comment = mutations.append_comment(
            self.vault, note_id, text, self.username, ids=self.ids
        )
        self._apply(vault)
        return comment

    def add_image(self, url: str) -> Image:
        note_id = self._require_selection()
        vault, image = mutations.append_image(self.vault, note_id, url, ids=self.ids)
        self._apply(vault)
        return image

    def add_link(self, url: str, title: str | None = None) -> Link:
        note_id = self._require_selection()
        vault, link = mutations.append_link(self.vault, note_id, url, title, ids=self.ids)
        self._apply(vault)
        return link

    def start_recording(self) -> None:
        """Start recording an audio note for the selected note.

        Raises:
            DeviceDeniedError: if the device refuses access; nothing changes
        """
        note_id = self._require_selection()
        if self.recorder is None:
            raise RecordingError("No audio recorder configured")
        self.recorder.start()
        self._recording_note_id = note_id

    def feed_audio(self, chunk: bytes) -> None:
        if self.recorder is None:
            raise RecordingError("No audio recorder configured")
        self.recorder.add_chunk(chunk)

    def stop_recording(self) -> AudioNote:
        """Stop recording and attach it to the note selected at start.

        If that note is gone by now the recording is discarded and
        NoteNotFoundError is raised.
        """
        if self.recorder is None or self._recording_note_id is None:
            raise RecordingError("Not recording")
        note_id, self._recording_note_id = self._recording_note_id, None
        if self.vault.get_note(note_id) is None:
            self.recorder.cancel()
            raise NoteNotFoundError(note_id)
        url = self.recorder.stop()
        vault, audio = mutations.append_audio_note(self.vault, note_id, url, ids=self.ids)
        self._apply(vault)
        return audio

    def _set_loaded(self, vault: Vault, fingerprint: str | None) -> None:
        self.vault = vault
        self._fingerprint = fingerprint
        self.ids.reserve(vault.all_ids(), replace=True)

    def _apply(self, vault: Vault) -> None:
        self.vault = vault
        if self.selected_note_id is not None and self.selected_note is None:
            self.selected_note_id = None

    def _require_login(self) -> None:
        if not self.is_logged_in:
            raise NotLoggedInError("No vault is open")

    def _require_selection(self) -> str:
        self._require_login()
        if self.selected_note is None:
            raise NoteNotFoundError(self.selected_note_id)
        return self.selected_note_id
