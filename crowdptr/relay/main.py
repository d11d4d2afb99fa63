"""crowdptr relay main entry point"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import NoReturn

from crowdptr import __version__
from crowdptr.common.config import Config, ConfigLoader
from crowdptr.common.settings import settings
from crowdptr.ingest.loop import IngestionLoop
from crowdptr.ingest.notifications import NotificationHub, NotificationName
from crowdptr.input.backend import DispatchSink, LogDispatchSink
from crowdptr.pointer.cursor_state import CursorStateTracker
from crowdptr.protocol.packet import RemotePacket
from crowdptr.relay.relay_logging import logging_setup
from crowdptr.transport.channel import ChannelTransport
from crowdptr.x11.display import DisplayManager
from crowdptr.x11.sink import X11DispatchSink

logger = logging.getLogger(__name__)


def configWithSettings_load(args: argparse.Namespace) -> Config:
    """
    Load relay config, apply CLI overrides and initialize settings.

    Args:
        args: Parsed CLI args.

    Returns:
        Loaded config.
    """
    config_path: Path | None = Path(args.config) if args.config else None
    try:
        config: Config = ConfigLoader.configWithOverrides_load(
            file_path=config_path,
            channel=args.channel,
            endpoint=args.endpoint,
            display=args.display,
            simulating_input=True if args.simulate else None,
            verbose=args.verbose,
        )
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        print("Create a config.yml file or specify path with --config", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)
    settings.initialize(config)
    return config


def sink_create(
    config: Config, dry_run: bool
) -> tuple[DispatchSink, DisplayManager | None]:
    """
    Create the dispatch sink for synthesized events.

    X11 is only opened when input simulation is enabled and this is not a
    dry run.

    Args:
        config: Loaded config.
        dry_run: Log events instead of injecting them.

    Returns:
        Sink and the display manager it owns, if any.
    """
    if dry_run or not config.relay.simulating_input:
        return LogDispatchSink(config.viewport.fallback), None

    display_manager = DisplayManager(config.viewport.display)
    display_manager.connection_establish()
    sink = X11DispatchSink(display_manager)
    if not sink.xtestExtension_verify():
        display_manager.connection_close()
        raise RuntimeError("XTest extension not available on X11 display")
    geometry = sink.screenGeometry_get()
    logger.info("Viewport: %sx%s", geometry.width, geometry.height)
    return sink, display_manager


def packetLogging_connect(hub: NotificationHub) -> None:
    """
    Log raw notifications when synthesis is disabled.

    Args:
        hub: Notification hub.
    """
    def _packet_log(packet: RemotePacket) -> None:
        logger.info(
            "%s from %s at (%.3f, %.3f)", packet.kind.value, packet.session_id, packet.x, packet.y
        )

    for name in (NotificationName.CLICK, NotificationName.DRAG, NotificationName.RELEASE):
        hub.listener_connect(name, _packet_log)


def ingestionLoop_create(
    config: Config, transport: ChannelTransport, sink: DispatchSink
) -> IngestionLoop:
    """
    Wire the ingestion loop from config.

    Args:
        config: Loaded config.
        transport: Channel transport.
        sink: Dispatch sink.

    Returns:
        Configured ingestion loop.
    """
    hub = NotificationHub()
    if not config.relay.simulating_input:
        packetLogging_connect(hub)
    return IngestionLoop(
        transport=transport,
        notifications=hub,
        cursor_state=CursorStateTracker(max_sessions=settings.maxSessions_get()),
        sink=sink,
        region=config.mapping.region,
        detecting=config.relay.detecting,
        simulating_input=config.relay.simulating_input,
        design_time=config.relay.design_time,
        verbose=config.relay.verbose,
    )


def relay_run(args: argparse.Namespace) -> NoReturn:
    """
    Run the relay until interrupted.

    Args:
        args: Parsed CLI args.
    """
    config = configWithSettings_load(args)
    log_level: str = getattr(args, "log_level", None) or config.logging.level
    logging_setup(
        log_level, config.logging.format, config.logging.file, verbose=config.relay.verbose
    )

    logger.info("crowdptr v%s starting, channel %s", __version__, config.relay.channel)
    logger.info(
        "detecting=%s simulating_input=%s region=%s",
        config.relay.detecting,
        config.relay.simulating_input,
        config.mapping.region,
    )

    sink, display_manager = sink_create(config, args.dry_run)
    transport = ChannelTransport(config.relay.endpoint, config.relay.channel)
    transport.connection_start(design_time=config.relay.design_time)
    loop = ingestionLoop_create(config, transport, sink)
    interval: float = config.relay.poll_interval_ms / settings.POLL_INTERVAL_DIVISOR

    try:
        while True:
            loop.tick()
            time.sleep(interval)
    except KeyboardInterrupt:
        logger.info("Shutting down relay")
    finally:
        transport.connection_close()
        if display_manager is not None:
            display_manager.connection_close()
        logger.info(
            "Frames received=%s dropped=%s events dispatched=%s",
            loop.stats.frames_received,
            loop.stats.frames_dropped,
            loop.stats.events_dispatched,
        )
    sys.exit(0)
