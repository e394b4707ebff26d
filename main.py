#!/usr/bin/env python3
"""Wall Switcher — Entry point.

Runs the content wall: cycles through the configured playlist and swaps
modules at precise deadlines.

Usage:
    python3 main.py                    # Headless loop
    python3 main.py --gui              # Tk preview window
    python3 main.py --web --port 5000  # Also serve the HTTP control API
    python3 main.py --log-level DEBUG  # Verbose logging
"""

__version__ = "1.0.0"

import argparse
import logging
import threading

from config import load_config


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Wall Switcher — deadline-driven module switching for a content wall",
    )
    parser.add_argument(
        "--config", default="wall.yaml",
        help="Path to wall YAML config (default: wall.yaml)",
    )
    parser.add_argument(
        "--gui", action="store_true",
        help="Show a Tk preview window of the wall",
    )
    parser.add_argument(
        "--web", action="store_true",
        help="Serve the HTTP control API",
    )
    parser.add_argument(
        "--port", type=int, default=None,
        help="Port for the HTTP control API (default from config)",
    )
    parser.add_argument(
        "--no-autoplay", action="store_true",
        help="Don't start the playlist; wait for switch requests",
    )
    parser.add_argument(
        "--log-level", default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set the logging verbosity (default: INFO)",
    )
    parser.add_argument(
        "--version", action="version",
        version=f"Wall Switcher {__version__}",
    )
    return parser.parse_args(argv)


def setup_logging(level_name: str) -> None:
    """Configure root logger with a consistent format."""
    level = getattr(logging, level_name.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s  %(levelname)-7s  %(name)s  %(message)s",
        datefmt="%H:%M:%S",
    )


def start_web(wall, config, port=None):
    """Serve the control API from a daemon thread."""
    from flask_app import create_app

    web_cfg = config.get("web", {})
    app = create_app(wall)
    thread = threading.Thread(
        target=app.run,
        kwargs={
            "host": web_cfg.get("host", "0.0.0.0"),
            "port": port or web_cfg.get("port", 5000),
            "threaded": True,
            "use_reloader": False,
        },
        daemon=True,
        name="web",
    )
    thread.start()
    return thread


def main(argv=None):
    args = parse_args(argv)
    setup_logging(args.log_level)

    logger = logging.getLogger(__name__)
    logger.info("Wall Switcher v%s starting", __version__)

    config = load_config(args.config)

    from core.wall import Wall

    if args.gui:
        import tkinter as tk
        from core.timers import TkTimerService
        from ui.wall_view import WallView

        root = tk.Tk()
        timers = TkTimerService(root)
        wall = Wall(config, timers)
        WallView(root, wall)
        run, quit_loop = root.mainloop, root.quit
    else:
        from core.timers import LoopTimerService

        timers = LoopTimerService()
        wall = Wall(config, timers)
        run, quit_loop = timers.run_forever, timers.stop

    if args.web:
        start_web(wall, config, args.port)

    wall.start(autoplay=not args.no_autoplay)
    try:
        run()
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        quit_loop()
    finally:
        wall.stop()
        logger.info("Shutdown complete")


if __name__ == "__main__":
    main()
