"""Command-line host for the videos widget."""

from __future__ import annotations

import argparse
import dataclasses
import logging
import pprint
import time
from pathlib import Path
from typing import List, Optional

from .config import parse_widget_config
from .errors import UpdateCancelledError, VideoFeedsError
from .renderers import render_json
from .widget import VideosWidget

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser."""
    parser = argparse.ArgumentParser(
        description="Fetch the newest videos from configured YouTube and Rumble channels."
    )
    parser.add_argument(
        "--config",
        default="configs/videos.xml",
        help="Path to the widget configuration XML file.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (e.g. DEBUG, INFO, WARNING). Overrides config.",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Optional path to a log file. Overrides config.",
    )
    parser.add_argument(
        "--format",
        choices=("html", "json"),
        default="html",
        help="Output format for the rendered widget.",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Abort an update cycle after this many seconds.",
    )
    parser.add_argument(
        "--watch",
        action="store_true",
        help="Keep refreshing on the widget's refresh interval.",
    )
    return parser


def configure_logging(level_name: str, log_file: Optional[str] = None) -> None:
    """Initialise logging according to options."""
    log_level = getattr(logging, level_name.upper(), None)
    if not isinstance(log_level, int):
        raise ValueError(f"Unsupported log level: {level_name}")

    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    root_logger.setLevel(log_level)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    root_logger.addHandler(stream_handler)

    if log_file:
        log_path = Path(log_file)
        if log_path.parent and not log_path.parent.exists():
            log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
        logger.debug(
            "Logger initialised with level %s and file output to %s",
            level_name.upper(),
            log_path,
        )
    else:
        logger.debug(
            "Logger initialised with console output at level %s", level_name.upper()
        )


def _emit(widget: VideosWidget, output_format: str) -> None:
    if output_format == "json":
        print(render_json(widget.state))
    else:
        print(widget.render())


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        widget_config = parse_widget_config(args.config)

        # CLI overrides config
        log_level = args.log_level or widget_config.logging.level
        log_file = args.log_file or widget_config.logging.file
        configure_logging(log_level, log_file)

        widget = VideosWidget(widget_config)
        logger.info(
            "Active Configuration:\n%s", pprint.pformat(dataclasses.asdict(widget.config))
        )

        while True:
            try:
                widget.update(timeout=args.timeout)
            except UpdateCancelledError:
                logger.warning("Update cycle timed out after %s seconds", args.timeout)
                if not args.watch:
                    return 1
            _emit(widget, args.format)
            if not args.watch:
                break
            interval = widget.refresh_interval.total_seconds()
            logger.info("Next refresh in %d seconds", interval)
            time.sleep(interval)
    except ValueError as exc:
        parser.error(str(exc))
    except (VideoFeedsError, FileNotFoundError) as exc:
        logger.error("%s", exc)
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 0
    except Exception:  # noqa: BLE001
        logger.exception("Unexpected error during execution.")
        return 1

    return 0
