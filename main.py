"""Thin shim for IDEs and direct execution."""

from video_feeds.cli import main

if __name__ == "__main__":
    import sys

    # Default to debug logging when run directly; --log-level still wins.
    if not any(arg.startswith("--log-level") for arg in sys.argv):
        sys.argv.extend(["--log-level", "DEBUG"])

    sys.exit(main())
