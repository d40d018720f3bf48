"""Boundary to the audio input device used for audio notes."""

import logging
from pathlib import Path
from typing import Protocol

from vaultshare.domain.ids import IdGenerator
from vaultshare.errors import DeviceDeniedError, RecordingError

logger = logging.getLogger(__name__)


class AudioDevice(Protocol):
    """Protocol for an audio input device."""

    def open_stream(self) -> None:
        """Request the input stream. Raises PermissionError if access is refused."""
        ...

    def close_stream(self) -> None:
        """Release the input stream."""
        ...


class AudioRecorder:
    """Collects chunks from an audio device and assembles them into one file."""

    def __init__(
        self,
        device: AudioDevice,
        output_dir: str | Path,
        *,
        ids: IdGenerator | None = None,
        extension: str = "webm",
    ) -> None:
        self.device = device
        self.output_dir = Path(output_dir)
        self.extension = extension
        self._ids = ids or IdGenerator()
        self._chunks: list[bytes] = []
        self._recording = False

    @property
    def is_recording(self) -> bool:
        return self._recording

    def start(self) -> None:
        """Open the device and start collecting chunks.

        Raises:
            DeviceDeniedError: if the device refuses access
            RecordingError: if a recording is already running
        """
        if self._recording:
            raise RecordingError("Recording already in progress")
        try:
            self.device.open_stream()
        except PermissionError as e:
            logger.warning(f"Audio device access denied: {e}")
            raise DeviceDeniedError("Microphone access denied") from e
        self._chunks = []
        self._recording = True

    def add_chunk(self, chunk: bytes) -> None:
        if not self._recording:
            raise RecordingError("Not recording")
        self._chunks.append(chunk)

    def stop(self) -> str:
        """Stop recording and write the collected audio.

        Returns:
            ``file://`` URL of the assembled recording.
        """
        if not self._recording:
            raise RecordingError("Not recording")
        self._recording = False
        try:
            self.device.close_stream()
        finally:
            chunks, self._chunks = self._chunks, []

        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.output_dir / f"{self._ids.new_id()}.{self.extension}"
        path.write_bytes(b"".join(chunks))
        logger.info(f"Stored recording {path} ({len(chunks)} chunks)")
        return path.resolve().as_uri()

    def cancel(self) -> None:
        """Stop recording and drop the collected audio without writing it."""
        if not self._recording:
            raise RecordingError("Not recording")
        self._recording = False
        try:
            self.device.close_stream()
        finally:
            self._chunks = []
        logger.info("Discarded recording")
