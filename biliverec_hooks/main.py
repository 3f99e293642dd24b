"""Main application entry point for biliverec-hooks."""

import sys
import argparse
import logging
from pathlib import Path
from typing import Optional

from aiohttp import web

from biliverec_hooks.dispatch.dispatcher import EventDispatcher, ROOM_TOPIC
from biliverec_hooks.dispatch.room_state import RoomStateTracker
from biliverec_hooks.http_api import build_app
from biliverec_hooks.notify.notifier import RoomNotifier
from biliverec_hooks.status.probe import StatusProbe
from biliverec_hooks.transcode.ffmpeg import FfmpegTranscoder
from biliverec_hooks.transcode.queue import HandoffQueue
from biliverec_hooks.transcode.worker import TranscodeWorker

from . import __version__
from .config import HooksConfig

logger = logging.getLogger(__name__)


class Server:

    def __init__(self, config: HooksConfig):
        self.config = config
        self.room_tracker: Optional[RoomStateTracker] = None

    def init(self) -> web.Application:
        """Wire the notifier, transcode pipeline, dispatcher and probe into an app."""
        logger.info("Initializing services...")

        base_dir = self.config.get_base_directory()
        logger.info(f"Base directory: {base_dir}, recorder logs: {self.config.get_log_directory()}")

        self.notifier = RoomNotifier(
            self.config.get('notify.bot_api'),
            timeout_seconds=self.config.get('notify.timeout_seconds'),
        )

        self.job_queue = HandoffQueue()
        self.transcoder = FfmpegTranscoder(base_dir, ffmpeg_path=self.config.get('transcode.ffmpeg_path', 'ffmpeg'))
        self.worker = TranscodeWorker(self.job_queue, self.transcoder)

        topic = None
        if self.config.get('rooms.track_state', True):
            topic = ROOM_TOPIC
            self.room_tracker = RoomStateTracker(topic)
            self.room_tracker.subscribe()

        self.dispatcher = EventDispatcher(self.notifier, self.job_queue, base_dir, topic=topic)
        self.status_probe = StatusProbe(
            self.config.get_log_directory(),
            prefix=self.config.get('status.log_prefix', 'bilirec'),
            suffix=self.config.get('status.log_suffix', '.txt'),
        )

        app = build_app(self.dispatcher, self.status_probe)
        app.on_startup.append(self._start_worker)
        app.on_shutdown.append(self._close_queue)
        app.on_cleanup.append(self._stop_worker)
        return app

    async def _start_worker(self, _: web.Application) -> None:
        self.worker.start()

    async def _close_queue(self, _: web.Application) -> None:
        # Fails hand-offs still waiting so their requests answer 503
        self.job_queue.close()

    async def _stop_worker(self, _: web.Application) -> None:
        self.cleanup()

    def run(self) -> None:
        app = self.init()
        host = self.config.get('server.host') or None
        port = int(self.config.get('server.port', 8080))

        logger.info(f"Listening at \"{self.config.get_listen_address()}\"")
        web.run_app(app, host=host, port=port, print=None)

    def cleanup(self) -> None:
        self.worker.shutdown(timeout=5.0)
        if self.room_tracker:
            self.room_tracker.unsubscribe()


def setup_logging(config: HooksConfig, level: str = "INFO") -> None:
    """Set up logging configuration from YAML config."""
    log_file_path = config.get('logging.file_path')
    console_output = config.get('logging.console_output', True)

    handlers = []

    # File handler - only when a log file is configured
    if log_file_path:
        Path(log_file_path).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file_path)
        file_handler.setLevel(logging.DEBUG)
        file_formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
        )
        file_handler.setFormatter(file_formatter)
        handlers.append(file_handler)

    if console_output or not handlers:
        console_handler = logging.StreamHandler(sys.stdout)
        console_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger.info("=" * 50)
    logger.info(f"biliverec-hooks v{__version__} starting up")
    if log_file_path:
        logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("=" * 50)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="biliverec-hooks - recorder webhook relay and HEVC transcode queue"
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file (optional; flags override it)"
    )

    parser.add_argument("-H", "--host", type=str, help="Host for listen (default: all interfaces)")
    parser.add_argument("-p", "--port", type=int, help="Port for listen (default: 8080)")
    parser.add_argument("-d", "--base-dir", type=str, help="Base directory (default: .)")
    parser.add_argument("-b", "--bot-api", type=str, help="Bot API URL (default: http://localhost:8888)")
    parser.add_argument("-l", "--log-dir", type=str, help="Recorder logs directory (default: .)")

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (default: INFO)"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"biliverec-hooks v{__version__}"
    )
    return parser


def load_config(args: argparse.Namespace) -> HooksConfig:
    config = HooksConfig(args.config)
    config.apply_overrides({
        'server.host': args.host,
        'server.port': args.port,
        'storage.base_dir': args.base_dir,
        'notify.bot_api': args.bot_api,
        'status.log_dir': args.log_dir,
        'logging.level': args.log_level,
    })
    return config


def main() -> None:
    """Main entry point for biliverec-hooks."""
    args = build_parser().parse_args()

    try:
        config = load_config(args)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)

    setup_logging(config, config.get('logging.level', 'INFO'))

    server = Server(config)
    try:
        server.run()
    except OSError as e:
        logger.error(f"Cannot listen at \"{config.get_listen_address()}\": {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
