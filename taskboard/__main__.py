#!/usr/bin/env python3
"""
Task board server: entry point

Usage:
    python -m taskboard                          # defaults / taskboard.yaml
    python -m taskboard --config board.yaml
    python -m taskboard --db /tmp/board.db --port 8080
"""
import argparse
import logging
import sys

from .config import Config
from .controller import BoardController
from .server import create_app
from .store import SQLiteBoardStore

logger = logging.getLogger("taskboard")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Task board server")
    parser.add_argument("--config", help="Path to taskboard.yaml")
    parser.add_argument("--db", help="Path to board.db (overrides config and TASKBOARD_DB)")
    parser.add_argument("--host", help="Bind address (use 0.0.0.0 to expose on network)")
    parser.add_argument("--port", type=int)
    args = parser.parse_args(argv)

    cfg = Config.load(args.config)
    if args.db:
        cfg.db_path = args.db
    if args.host:
        cfg.host = args.host
    if args.port:
        cfg.port = args.port

    logging.basicConfig(
        level=getattr(logging, str(cfg.log_level).upper(), logging.INFO),
        format="%(asctime)s [taskboard] %(levelname)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    store = SQLiteBoardStore(cfg.db_path or None)
    controller = BoardController(store)
    if not controller.load():
        logger.warning(f"Starting with default board: {controller.error}")

    logger.info(f"Serving on http://{cfg.host}:{cfg.port} (db={store.db_path})")
    app = create_app(controller)
    # Single writer: the board assumes one dispatch completes before the next
    app.run(host=cfg.host, port=cfg.port, debug=False, threaded=False)


if __name__ == "__main__":
    main()
