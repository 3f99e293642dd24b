"""ffmpeg invocation for HEVC transcodes."""

import os
import time
import logging
import subprocess
from pathlib import Path
from typing import List, Dict, Optional

from ..models.results import TranscodeResult

logger = logging.getLogger(__name__)

OUTPUT_SUFFIX = "-hevc.mp4"
FFMPEG_LOG_DIRNAME = "ffmpeg-logs"


def derive_output_path(source: str) -> str:
    """Replace the last extension of ``source`` with ``-hevc.mp4``.

    Only a dot inside the final path component counts as an extension:
    ``a/b/test.flv`` -> ``a/b/test-hevc.mp4``, ``noext`` -> ``noext-hevc.mp4``.
    """
    head, sep, name = source.rpartition("/")
    dot = name.rfind(".")
    if dot != -1:
        name = name[:dot]
    return f"{head}{sep}{name}{OUTPUT_SUFFIX}"


def build_ffmpeg_command(source: str, output: str, ffmpeg_path: str = "ffmpeg") -> List[str]:
    """Fixed argument set: x265 10-bit 4:2:0 video, audio copied as-is."""
    return [
        ffmpeg_path,
        "-nostdin",
        "-loglevel", "quiet",
        "-i", source,
        "-c:v", "libx265",
        "-x265-params", "log-level=none",
        "-pix_fmt", "yuv420p10le",
        "-tag:v", "hvc1",
        "-max_muxing_queue_size", "4096",
        "-c:a", "copy",
        output,
    ]


class FfmpegTranscoder:
    """Runs one ffmpeg process per job and reports the outcome."""

    def __init__(self, base_dir: str, ffmpeg_path: str = "ffmpeg"):
        """Initialize transcoder.

        Args:
            base_dir: Base directory; per-run reports go to ``<base_dir>/ffmpeg-logs``
            ffmpeg_path: ffmpeg executable name or path
        """
        self.base_dir = base_dir
        self.ffmpeg_path = ffmpeg_path
        self.report_dir = Path(base_dir) / FFMPEG_LOG_DIRNAME

    def prepare(self) -> None:
        """Ensure the report directory exists; ffmpeg will not create it."""
        try:
            self.report_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning(f"Cannot create ffmpeg report directory {self.report_dir}: {e}")

    def report_env(self) -> Dict[str, str]:
        # %p and %t are expanded by ffmpeg to program/pid and timestamp
        env = dict(os.environ)
        env["FFREPORT"] = f"file={self.base_dir}/{FFMPEG_LOG_DIRNAME}/%p-%t.log:level=32"
        return env

    def transcode(self, source: str) -> TranscodeResult:
        """Transcode ``source`` synchronously. Never raises for ffmpeg failures."""
        output = derive_output_path(source)
        command = build_ffmpeg_command(source, output, self.ffmpeg_path)
        logger.debug(f"Running: {' '.join(command)}")

        start_time = time.time()
        return_code: Optional[int] = None
        try:
            completed = subprocess.run(
                command,
                env=self.report_env(),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
            return_code = completed.returncode
        except OSError as e:
            return TranscodeResult(source=source, output=output, success=False,
                                   error=f"failed to launch {self.ffmpeg_path}: {e}",
                                   duration_seconds=time.time() - start_time)

        elapsed = time.time() - start_time
        if return_code != 0:
            return TranscodeResult(source=source, output=output, success=False,
                                   return_code=return_code,
                                   error=f"exit status {return_code}",
                                   duration_seconds=elapsed)

        return TranscodeResult(source=source, output=output, success=True,
                               return_code=return_code, duration_seconds=elapsed)
