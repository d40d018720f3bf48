"""Exceptions raised by the vault core."""


class VaultError(Exception):
    """Base class for all vault errors."""


class VaultValidationError(VaultError):
    """Input rejected before any state change (empty name, unknown folder, ...)."""


class NotFoundError(VaultError):
    """A referenced entity does not exist in the vault."""


class NoteNotFoundError(NotFoundError):
    def __init__(self, note_id: str | None) -> None:
        self.note_id = note_id
        super().__init__(f"Note {note_id} not found" if note_id else "No note selected")


class FolderNotFoundError(NotFoundError):
    def __init__(self, folder_id: str) -> None:
        self.folder_id = folder_id
        super().__init__(f"Folder {folder_id} not found")


class CorruptVaultError(VaultError):
    """The store holds a value for the vault key that cannot be deserialized."""

    def __init__(self, key: str, reason: str) -> None:
        self.key = key
        super().__init__(f"Stored value for {key} is corrupt: {reason}")


class StoreUnavailableError(VaultError):
    """The key-value store failed to answer a get or set."""


class VaultConflictError(VaultError):
    """The stored vault changed since it was loaded by this session."""


class IdCollisionError(VaultError):
    """A generated id was already issued or already present in the vault."""


class RecordingError(VaultError):
    """Audio recording could not be started or finished."""


class DeviceDeniedError(RecordingError):
    """Access to the audio input device was refused."""


class NotLoggedInError(VaultError):
    """An operation needs an open vault but the session has none."""
