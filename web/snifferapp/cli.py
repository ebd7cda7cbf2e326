"""
Command-line entry point.

    payload-sniffer [--config config.json] [--full] [--keyword K]
                    [--path-filter S ...] [--no-publish] [-v] [PORT ...]

Ports given on the command line replace the ports from the config file.
Ctrl+C stops capture after the frame being processed.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional, Set, Tuple

from payload_router import SnifferSettings, load_settings
from payload_router.errors import CaptureOpenError, ConfigError, NoDeviceError

from snifferapp.managers.pipeline_bridge import build_pipeline
from snifferapp.managers.sniffer_manager import SnifferManager
from snifferapp.sinks.console import ConsolePresenter
from snifferapp.utils import init_logging


def parse_ports(values: List[str]) -> Tuple[Set[int], List[str]]:
    """Split positional args into valid ports (1-65535) and rejected strings."""
    ports: Set[int] = set()
    rejected: List[str] = []
    for v in values:
        try:
            port = int(v)
        except ValueError:
            rejected.append(v)
            continue
        if 0 < port <= 65535:
            ports.add(port)
        else:
            rejected.append(v)
    return ports, rejected


def build_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="payload-sniffer",
        description="Capture traffic, classify payloads (JSON/HTTP/binary) and forward accepted records.",
    )
    p.add_argument("ports", nargs="*", help="Ports to listen on (default: all ports)")
    p.add_argument("--config", default="config.json", help="Path to the JSON settings file")
    p.add_argument("-f", "--full", action="store_true", help="Print every frame in full instead of detecting")
    p.add_argument("--keyword", help="Device keyword (overrides the config file)")
    p.add_argument("--path-filter", action="append", dest="path_filters", metavar="SUBSTRING",
                   help="Only show HTTP requests whose path contains SUBSTRING (repeatable)")
    p.add_argument("--no-publish", action="store_true", help="Do not publish to RabbitMQ")
    p.add_argument("--list-devices", action="store_true", help="List capture devices and exit")
    p.add_argument("-v", "--verbose", action="store_true", help="Dump all fields of HTTP requests")
    p.add_argument("--log-level", default="INFO")
    p.add_argument("--log-file", default=None)
    return p


def apply_overrides(settings: SnifferSettings, args: argparse.Namespace, log: logging.Logger) -> SnifferSettings:
    update = {}
    if args.ports:
        ports, rejected = parse_ports(args.ports)
        for r in rejected:
            log.warning("Invalid port '%s' ignored", r)
        if ports:
            update["ports"] = sorted(ports)
    if args.keyword:
        update["device_keyword"] = args.keyword
    if args.path_filters:
        update["http_path_filters"] = list(args.path_filters)
    if args.no_publish or args.full:
        update["publish_enabled"] = False
    return settings.model_copy(update=update) if update else settings


def _describe_filters(settings: SnifferSettings, log: logging.Logger) -> None:
    if settings.ports:
        log.info(
            "Port filter enabled: %s (source=%s, destination=%s)",
            ", ".join(str(p) for p in sorted(settings.ports)),
            settings.filter_source_port,
            settings.filter_destination_port,
        )
    else:
        log.info("Port filter disabled (listening on all ports)")
    if settings.http_path_filters:
        log.info("HTTP path filter: %s", ", ".join(settings.http_path_filters))


def main(argv: Optional[List[str]] = None) -> int:
    args = build_argparser().parse_args(argv)
    log = init_logging(args.log_level, args.log_file)

    try:
        settings = apply_overrides(load_settings(args.config), args, log)
    except ConfigError as e:
        log.error("%s", e)
        return 2

    presenter = ConsolePresenter(verbose=args.verbose)
    bundle = build_pipeline(settings, presenters=[presenter], dump_frames=args.full)
    mgr = SnifferManager(logger=log, settings=settings, bundle=bundle)

    try:
        if args.list_devices:
            devices, selected = mgr.list_devices()
            for d in devices:
                mark = "*" if selected is not None and d == selected else " "
                print(f"{mark} [{d.kind.upper()}] {d.name}  {d.description}")
            return 0

        _describe_filters(settings, log)
        mode = "full packet" if args.full else "protocol parse"
        log.info("=== Packet Sniffer - %s mode ===", mode)

        try:
            mgr.start()
        except (NoDeviceError, CaptureOpenError) as e:
            log.error("%s", e)
            return 1

        log.info("Press Ctrl+C to stop...")
        try:
            while mgr.active:
                mgr.wait(timeout=0.5)
        except KeyboardInterrupt:
            log.info("Stopping packet capture...")
        counters = mgr.stop()
        log.info("Counters: %s", counters)
        return 1 if mgr.error else 0
    finally:
        bundle.close()


if __name__ == "__main__":
    sys.exit(main())
