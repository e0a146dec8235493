from __future__ import annotations

import argparse
import json
import logging
import sys
import threading
from typing import Callable, List, Optional, TextIO

from .applications.base import DaprApplication, DaprApplicationProvider
from .applications.factory import create_application_provider
from .config.config_parser import ConfigError, load_config
from .config.config_schema import STRATEGIES, DiscoveryConfig
from .config.logging_config import init_logging
from .mdns.client import QueryError
from .processes import ProcessListError

logger = logging.getLogger("daprlens.main")

ProviderFactory = Callable[[DiscoveryConfig], DaprApplicationProvider]


def format_applications(applications: List[DaprApplication], as_json: bool = False) -> str:
    """Brief: Render applications as a table-ish text block or a JSON array.

    Inputs:
      - applications: Applications to render.
      - as_json: Emit a JSON array of objects instead of text.

    Outputs:
      - str without a trailing newline.

    Example:
      >>> format_applications([DaprApplication("orders", 3600, 42)])
      'orders 3600 42'
    """

    if as_json:
        return json.dumps([a.to_dict() for a in applications])
    lines = []
    for app in sorted(applications, key=lambda a: a.app_id):
        pid = "-" if app.pid is None else str(app.pid)
        lines.append(f"{app.app_id} {app.http_port} {pid}")
    return "\n".join(lines)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="daprlens", description="List running Dapr applications"
    )
    parser.add_argument("-c", "--config", default=None, help="Path to YAML config")
    parser.add_argument(
        "--strategy",
        choices=STRATEGIES,
        default=None,
        help="Discovery strategy (overrides config and DAPRLENS_DISCOVERY)",
    )
    parser.add_argument(
        "--wait",
        type=float,
        default=2.0,
        help="Seconds to collect mDNS answers before printing (mdns strategy only)",
    )
    parser.add_argument(
        "--watch",
        action="store_true",
        help="Keep running and print the list every time it changes",
    )
    parser.add_argument(
        "--duration",
        type=float,
        default=0.0,
        help="Stop watching after this many seconds (0 = until interrupted)",
    )
    parser.add_argument("--json", action="store_true", help="Print JSON output")
    parser.add_argument("--log-level", default=None, help="debug, info, warn, error, crit")
    return parser


def main(
    argv: Optional[List[str]] = None,
    *,
    out: Optional[TextIO] = None,
    provider_factory: Optional[ProviderFactory] = None,
    wait: Optional[Callable[[Optional[float]], object]] = None,
) -> int:
    """Brief: CLI entrypoint; print discovered Dapr applications.

    Inputs:
      - argv: Argument list (defaults to sys.argv[1:]).
      - out: Stream for results (defaults to sys.stdout).
      - provider_factory: Callable building the provider from a
        DiscoveryConfig (tests inject fakes).
      - wait: Callable blocking for the given seconds (tests inject a no-op).

    Outputs:
      - int: 0 on success, 1 on configuration errors, 2 on discovery errors.
    """

    args = _build_parser().parse_args(argv)
    out = out or sys.stdout

    try:
        cfg = load_config(args.config)
    except ConfigError as exc:
        print(str(exc), file=sys.stderr)
        return 1

    if args.log_level:
        cfg.logging.level = args.log_level
    if args.strategy:
        cfg.discovery.strategy = args.strategy
    init_logging(cfg.logging)
    if args.config:
        logger.info("Loaded config from %s", args.config)

    stop_event = threading.Event()
    if wait is None:
        wait = stop_event.wait

    if provider_factory is None:
        # An explicit --strategy beats the environment variable.
        env = {"DAPRLENS_DISCOVERY": args.strategy} if args.strategy else None
        provider_factory = lambda c: create_application_provider(c, environ=env)  # noqa: E731

    try:
        provider = provider_factory(cfg.discovery)
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        return 1

    printed_lock = threading.Lock()

    def _print_current() -> None:
        try:
            apps = provider.get_applications()
        except (QueryError, ProcessListError) as exc:
            logger.warning("Discovery failed: %s", exc)
            return
        with printed_lock:
            text = format_applications(apps, as_json=args.json)
            if text:
                print(text, file=out)
            if args.watch:
                print("--", file=out)
            out.flush()

    subscription = None
    try:
        try:
            provider.get_applications()
        except (QueryError, ProcessListError) as exc:
            print(f"Discovery failed: {exc}", file=sys.stderr)
            return 2

        if cfg.discovery.strategy == "mdns" and args.wait > 0:
            wait(args.wait)

        _print_current()

        if args.watch:
            subscription = provider.on_did_change(lambda _: _print_current())
            try:
                wait(args.duration if args.duration > 0 else None)
            except KeyboardInterrupt:
                pass
        return 0
    finally:
        if subscription is not None:
            subscription.dispose()
        provider.close()


def console_main() -> None:  # pragma: no cover - thin wrapper
    try:
        raise SystemExit(main())
    except KeyboardInterrupt:
        raise SystemExit(130)


if __name__ == "__main__":
    console_main()  # pragma: no cover
