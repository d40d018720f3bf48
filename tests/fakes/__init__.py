from tests.fakes.fake_audio_device import FakeAudioDevice
from tests.fakes.fake_kv_store import FakeKeyValueStore

__all__ = ["FakeAudioDevice", "FakeKeyValueStore"]
