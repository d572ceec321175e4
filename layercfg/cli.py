#!/usr/bin/env python3
"""
layercfg CLI
============

Load one or more config files and print the merged result as JSON.

Usage:
    layercfg base.yaml local.yaml              # print merged config
    layercfg --allow-empty missing.yaml        # print {} instead of failing
    layercfg --watch base.yaml local.yaml      # re-print on every change (Ctrl-C to stop)
"""
from __future__ import annotations

import argparse
import logging
import sys
import threading
from typing import List, Optional

from .errors import NoSourcesFound
from .hotreload import DEFAULT_POLL_INTERVAL
from .loader import load


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="layercfg", description="Print merged layered configuration as JSON")
    p.add_argument("paths", nargs="*", help="config files, lowest precedence first")
    p.add_argument("--allow-empty", action="store_true", help="do not fail when no file exists")
    p.add_argument("--watch", action="store_true", help="keep running and re-print after each change")
    p.add_argument("--poll", type=float, default=DEFAULT_POLL_INTERVAL, help="watch poll interval in seconds")
    p.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    log = logging.getLogger("layercfg.cli")

    try:
        container = load(args.paths, log=log, allow_empty=args.allow_empty, poll_interval_sec=args.poll)
    except NoSourcesFound as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    container.dump()
    if not args.watch:
        container.stop_watching()
        return 0

    settings = container.get_settings()
    if not settings.config_files:
        print("error: nothing to watch", file=sys.stderr)
        return 1
    if settings.watcher is None:
        # single-file containers are not watched by default
        container.watch_config(args.poll)
    container.add_observer_func(lambda c, errs: c.dump())

    stop = threading.Event()
    try:
        stop.wait()
    except KeyboardInterrupt:
        pass
    finally:
        container.stop_watching()
    return 0


if __name__ == "__main__":
    sys.exit(main())
