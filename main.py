from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys

from livechart.backend import PageBackend, RasterPageBackend, SvgPageBackend
from livechart.config import BACKENDS, ViewerConfig, load_config
from livechart.dispatch import StreamDispatcher
from livechart.errors import FeedError
from livechart.feed import EventSourceClient, replay_capture
from livechart.session import StreamSession

LOGGER = logging.getLogger("livechart")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="livechart")
    parser.add_argument("--verbose", action="store_true", help="Log every dispatched event.")
    sub = parser.add_subparsers(dest="command", required=True)

    watch = sub.add_parser("watch", help="Render charts from a live server-sent-events feed.")
    watch.add_argument("--url", default=None, help="Feed URL. Default: LIVECHART_URL or http://localhost:8080/data.")
    _add_output_args(watch)
    watch.add_argument("--max-retries", type=int, default=None, help="Reconnect attempts before giving up (0 = none).")
    watch.add_argument("--timeout", type=float, default=None, help="Connection timeout in seconds. Default: none.")

    replay = sub.add_parser("replay", help="Render charts from a captured text/event-stream file.")
    replay.add_argument("capture", type=Path)
    _add_output_args(replay)
    return parser


def _add_output_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--backend", choices=list(BACKENDS), default=None)
    parser.add_argument("--out", type=Path, default=None, help="Snapshot written after every redraw.")
    parser.add_argument("--config", type=Path, default=None, help="TOML file with a [livechart] table.")


def build_backend(config: ViewerConfig) -> PageBackend:
    backend_cls = RasterPageBackend if config.backend == "raster" else SvgPageBackend
    return backend_cls(
        output_path=config.resolved_output_path,
        font_family=config.font_family,
        font_size_px=config.font_size_px,
    )


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_config(args.config).with_overrides(backend=args.backend, output_path=args.out)
    if args.command == "watch":
        config = config.with_overrides(
            url=args.url,
            max_retries=args.max_retries,
            connect_timeout_s=args.timeout,
        )

    session = StreamSession(backend=build_backend(config))
    dispatcher = StreamDispatcher(session)

    if args.command == "replay":
        count = replay_capture(args.capture, dispatcher)
        LOGGER.info("replayed %d event(s) into %s", count, config.resolved_output_path)
        return 0

    client = EventSourceClient(
        config.url,
        dispatcher,
        policy=config.reconnect_policy(),
        timeout=config.connect_timeout_s,
    )
    LOGGER.info("watching %s, writing %s", config.url, config.resolved_output_path)
    try:
        client.run()
    except KeyboardInterrupt:
        client.close()
    except FeedError as exc:
        LOGGER.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
