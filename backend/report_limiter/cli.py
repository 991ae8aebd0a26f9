from __future__ import annotations

import argparse
from dataclasses import replace
import logging
from typing import Callable, Mapping, Optional, Sequence

import uvicorn

from .application import create_app
from .config import ConfigError, Settings, load_settings, parse_duration, parse_threshold
from .logging_utils import configure_logging

logger = logging.getLogger("report_limiter.cli")


def _argument(parse: Callable[[str], object]) -> Callable[[str], object]:
    def convert(value: str) -> object:
        try:
            return parse(value)
        except ConfigError as exc:
            raise argparse.ArgumentTypeError(str(exc)) from exc

    convert.__name__ = parse.__name__
    return convert


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="report-limiter",
        description="Flag URLs that are reported at least <threshold> times per <ttl> window.",
    )
    parser.add_argument("threshold", type=_argument(parse_threshold), help="Reports per window before a URL is blocked")
    parser.add_argument("ttl", type=_argument(parse_duration), help='Window length, e.g. "30s" or "1m30s"')
    parser.add_argument("--rate", type=_argument(parse_threshold), default=None, help="Overrides the threshold")
    parser.add_argument(
        "--ttl",
        dest="ttl_override",
        type=_argument(parse_duration),
        default=None,
        help="Overrides the ttl",
    )
    parser.add_argument("--host", default=None, help="Defaults to HOST or 0.0.0.0")
    parser.add_argument("--port", type=int, default=None, help="Defaults to PORT or 8080")
    parser.add_argument("--log-level", default=None, help="Defaults to LOG_LEVEL or INFO")
    return parser


def settings_from_args(args: argparse.Namespace, environ: Optional[Mapping[str, str]] = None) -> Settings:
    base = load_settings(
        environ,
        threshold=args.rate if args.rate is not None else args.threshold,
        ttl_seconds=args.ttl_override if args.ttl_override is not None else args.ttl,
    )
    resolved = replace(
        base,
        host=args.host if args.host is not None else base.host,
        port=args.port if args.port is not None else base.port,
        log_level=(args.log_level or base.log_level).upper(),
    )
    resolved.validate()
    return resolved


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        cfg = settings_from_args(args)
    except ConfigError as exc:
        parser.error(str(exc))

    configure_logging(cfg.log_level)

    logger.info(
        "Listening on %s:%d",
        cfg.host,
        cfg.port,
        extra={"event": "listen", "host": cfg.host, "port": cfg.port, "threshold": cfg.threshold},
    )
    uvicorn.run(create_app(cfg), host=cfg.host, port=cfg.port, log_config=None)


if __name__ == "__main__":
    main()
