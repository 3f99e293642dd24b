"""Transcode pipeline: hand-off queue, single worker and ffmpeg runner."""

from .queue import TranscodeQueue, HandoffQueue, QueueClosedError
from .ffmpeg import FfmpegTranscoder, derive_output_path, build_ffmpeg_command
from .worker import TranscodeWorker

__all__ = [
    "TranscodeQueue",
    "HandoffQueue",
    "QueueClosedError",
    "FfmpegTranscoder",
    "derive_output_path",
    "build_ffmpeg_command",
    "TranscodeWorker",
]
