"""Pytest configuration and fixtures for biliverec-hooks tests."""

import pytest
import tempfile
import json
import logging
from concurrent.futures import Future
from pathlib import Path
from typing import List, Tuple

from biliverec_hooks.models.events import RoomEvent
from biliverec_hooks.models.results import NotifyResult, TranscodeResult
from biliverec_hooks.transcode.ffmpeg import derive_output_path
from biliverec_hooks.transcode.queue import TranscodeQueue


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without network or subprocesses")
    config.addinivalue_line("markers", "integration: tests that run the HTTP app end to end")


class FakeNotifier:
    """Records notify() calls instead of talking to a bot."""

    def __init__(self, success: bool = True):
        self.success = success
        self.calls: List[Tuple[int, RoomEvent]] = []

    async def notify(self, room_id: int, event: RoomEvent) -> NotifyResult:
        self.calls.append((room_id, event))
        if self.success:
            return NotifyResult(room_id, event, success=True, status=200)
        return NotifyResult(room_id, event, success=False, error="connection refused")


class CapturingQueue(TranscodeQueue):
    """Synchronous queue that just remembers admissions."""

    def __init__(self):
        self.submitted: List[str] = []
        self.closed = False

    def admit(self, path: str) -> Future:
        self.submitted.append(path)
        claimed = Future()
        claimed.set_result(path)
        return claimed

    def claim(self):
        if self.closed or not self.submitted:
            return None
        return self.submitted.pop(0)

    def close(self) -> None:
        self.closed = True


class RecordingTranscoder:
    """Stands in for ffmpeg; remembers the order jobs arrive in."""

    def __init__(self, fail_on=()):
        self.fail_on = set(fail_on)
        self.sources: List[str] = []

    def transcode(self, source: str) -> TranscodeResult:
        self.sources.append(source)
        output = derive_output_path(source)
        if source in self.fail_on:
            return TranscodeResult(source=source, output=output, success=False,
                                   return_code=1, error="exit status 1")
        return TranscodeResult(source=source, output=output, success=True, return_code=0)


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture
def fake_notifier():
    return FakeNotifier()


@pytest.fixture
def failing_notifier():
    return FakeNotifier(success=False)


@pytest.fixture
def capturing_queue():
    return CapturingQueue()


@pytest.fixture
def recording_transcoder():
    return RecordingTranscoder()


@pytest.fixture
def failing_transcoder():
    return RecordingTranscoder(fail_on={"/rec/bad.flv"})


@pytest.fixture
def event_body():
    """Build a recorder webhook body the way the recorder sends it."""
    def make(event_type: str = "SessionStarted", room_id: int = 100,
             relative_path: str = "100-streamer/record-20230215-201500.flv") -> str:
        payload = {
            "EventType": event_type,
            "EventTimestamp": "2023-02-15T20:15:00.1234567+08:00",
            "EventId": "8f0cbd0e-6d8b-4c89-9e8b-6a2f2b1b8f11",
            "EventData": {
                "RelativePath": relative_path,
                "FileSize": 1048576,
                "Duration": 3600.5,
                "FileOpenTime": "2023-02-15T20:15:00+08:00",
                "FileCloseTime": "2023-02-15T21:15:00+08:00",
                "SessionId": "7c1a9a52-3a0e-4a7e-8a35-3f3f1d7f7c2e",
                "RoomId": room_id,
                "ShortId": 0,
                "Name": "streamer",
                "Title": "late night stream",
                "AreaNameParent": "Games",
                "AreaNameChild": "Retro",
            },
        }
        return json.dumps(payload)

    return make


@pytest.fixture
def recorder_log_dir(temp_data_dir):
    """Directory with recorder status logs; returns a writer helper."""
    log_dir = Path(temp_data_dir) / "logs"
    log_dir.mkdir()

    def write(name: str, content: str) -> Path:
        path = log_dir / name
        path.write_text(content, encoding="utf-8")
        return path

    write.path = log_dir
    return write
