"""Command line entry point: ``artifact-sync``."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from artifact_sync.config_loader import ArtifactSyncConfig, load_sync_config
from artifact_sync.dom.soup import SoupDocument
from artifact_sync.exceptions import ConfigLoadError, PersistenceError
from artifact_sync.runtime.command_handler import CommandHandler
from artifact_sync.runtime.sync_client import ArtifactSyncClient, SyncService
from artifact_sync.schemas import Settings
from artifact_sync.telemetry import EventBus

logger = logging.getLogger(__name__)


def _settings(config: ArtifactSyncConfig, args: argparse.Namespace) -> Settings:
    update = {}
    if getattr(args, "project_path", None):
        update["project_path"] = args.project_path
    if getattr(args, "server_url", None):
        update["server_url"] = args.server_url
    if getattr(args, "url", None) is None:
        # Local snapshots carry no address to check against.
        update["allowed_hosts"] = []
    return config.settings.model_copy(update=update)


def _client(config: ArtifactSyncConfig, settings: Settings) -> ArtifactSyncClient:
    return ArtifactSyncClient(settings.server_url, timeout=config.sync.timeout, health_timeout=config.sync.health_timeout)


def _print_event(event) -> None:
    print(json.dumps(event.to_wire()), flush=True)


async def _scan_file(config: ArtifactSyncConfig, args: argparse.Namespace):
    html = Path(args.file).read_text(encoding="utf-8")
    document = SoupDocument(html, url=args.url)
    pipeline = config.build_pipeline()
    result = await pipeline.scan(document, settings=_settings(config, args))
    await pipeline.revealer.drain()
    return result


def cmd_scan(config: ArtifactSyncConfig, args: argparse.Namespace) -> int:
    result = asyncio.run(_scan_file(config, args))
    output = {"artifacts": [artifact.to_wire() for artifact in result.artifacts]}
    if args.show_rejections:
        output["rejections"] = [
            {"reason": item.reason, "preview": item.preview, "selector": item.selector} for item in result.rejections
        ]
    print(json.dumps(output, indent=2))
    return 0


def cmd_sync(config: ArtifactSyncConfig, args: argparse.Namespace) -> int:
    settings = _settings(config, args)

    async def run() -> int:
        result = await _scan_file(config, args)
        bus = EventBus()
        bus.subscribe(_print_event)
        service = SyncService(_client(config, settings), bus, pace_delay=config.sync.pace_delay)
        await service.save_all(result.artifacts, settings)
        return 0 if not any(event.action == "syncError" for event in bus.events) else 1

    return asyncio.run(run())


def cmd_serve(config: ArtifactSyncConfig, args: argparse.Namespace) -> int:
    import uvicorn

    from artifact_sync.server.app import create_app

    host = args.host or config.server.host
    port = args.port or config.server.port
    logger.info("Artifact Sync server running on http://%s:%d", host, port)
    uvicorn.run(create_app(), host=host, port=port)
    return 0


def cmd_health(config: ArtifactSyncConfig, args: argparse.Namespace) -> int:
    client = _client(config, _settings(config, args))
    try:
        body = client.health()
    except PersistenceError as exc:
        print(f"Server unavailable: {exc}", file=sys.stderr)
        return 1
    print(json.dumps(body))
    return 0


def cmd_watch(config: ArtifactSyncConfig, args: argparse.Namespace) -> int:
    from playwright.async_api import async_playwright

    from artifact_sync.dom.live import LiveDocument

    settings = _settings(config, args).model_copy(update={"is_enabled": True, "auto_sync": args.auto_sync})

    async def run() -> int:
        async with async_playwright() as playwright:
            browser = await playwright.chromium.launch(headless=not args.headed)
            try:
                page = await browser.new_page()
                await page.goto(args.url)
                bus = EventBus()
                bus.subscribe(_print_event)
                handler = CommandHandler(
                    LiveDocument.from_page(page),
                    pipeline=config.build_pipeline(),
                    sync=SyncService(_client(config, settings), bus, pace_delay=config.sync.pace_delay),
                    settings=settings,
                    startup_delay=config.monitor.startup_delay,
                    debounce_delay=config.monitor.debounce_delay,
                )
                await handler.handle({"action": "toggleMonitoring", "enabled": True})
                try:
                    if args.duration:
                        await asyncio.sleep(args.duration)
                    else:
                        await asyncio.Event().wait()
                finally:
                    await handler.close()
                    print(json.dumps({"artifactsFound": len(handler.store.current)}))
            finally:
                await browser.close()
        return 0

    try:
        return asyncio.run(run())
    except KeyboardInterrupt:
        return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="artifact-sync", description="Detect and save generated artifacts from chat pages.")
    parser.add_argument("--config", type=Path, help="YAML config file (default: $ARTIFACT_SYNC_CONFIG)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    scan = subparsers.add_parser("scan", help="Scan a saved HTML page and print its artifacts as JSON")
    scan.add_argument("file", help="HTML file to scan")
    scan.add_argument("--url", help="Address the page was saved from (enables host gating)")
    scan.add_argument("--show-rejections", action="store_true", help="Include rejected candidates")
    scan.set_defaults(handler=cmd_scan)

    sync = subparsers.add_parser("sync", help="Scan a saved HTML page and save every artifact")
    sync.add_argument("file", help="HTML file to scan")
    sync.add_argument("--url", help="Address the page was saved from (enables host gating)")
    sync.add_argument("--project-path", help="Directory the server writes into")
    sync.add_argument("--server-url", help="Persistence service base URL")
    sync.set_defaults(handler=cmd_sync)

    serve = subparsers.add_parser("serve", help="Run the persistence service")
    serve.add_argument("--host", help="Bind address")
    serve.add_argument("--port", type=int, help="Port")
    serve.set_defaults(handler=cmd_serve)

    health = subparsers.add_parser("health", help="Probe the persistence service")
    health.add_argument("--server-url", help="Persistence service base URL")
    health.set_defaults(handler=cmd_health)

    watch = subparsers.add_parser("watch", help="Monitor a live page in a browser (needs the 'live' extra)")
    watch.add_argument("url", help="Page to open")
    watch.add_argument("--project-path", help="Directory the server writes into")
    watch.add_argument("--server-url", help="Persistence service base URL")
    watch.add_argument("--auto-sync", action="store_true", help="Save newly detected artifacts automatically")
    watch.add_argument("--headed", action="store_true", help="Show the browser window")
    watch.add_argument("--duration", type=float, help="Stop after this many seconds")
    watch.set_defaults(handler=cmd_watch)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config, error = load_sync_config(args.config)
    if error is not None:
        source = str(args.config) if args.config else "config"
        print(str(ConfigLoadError(source, error.message)), file=sys.stderr)
        return 2
    return args.handler(config, args)


if __name__ == "__main__":
    raise SystemExit(main())
