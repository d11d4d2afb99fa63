"""Unit tests for CLI parsing, settings and relay wiring."""

from __future__ import annotations

import logging

import pytest

from crowdptr.cli import arguments_parse, logLevelOverride_get
from crowdptr.common.config import ConfigLoader
from crowdptr.common.settings import settings
from crowdptr.input.backend import LogDispatchSink
from crowdptr.protocol.packet import PacketDecoder
from crowdptr.relay.main import ingestionLoop_create, sink_create
from crowdptr.relay.relay_logging import logFormatWithVersion_get, logLevel_resolve
from crowdptr.transport.channel import ChannelTransport


class TestArguments:
    """Tests for CLI argument parsing."""

    def test_defaults(self) -> None:
        """No flags leaves every override unset."""
        args = arguments_parse([])

        assert args.channel is None
        assert args.simulate is False
        assert args.dry_run is False
        assert logLevelOverride_get(args) is None

    def test_flags(self) -> None:
        """Flags are parsed into the namespace."""
        args = arguments_parse(["--channel", "42", "--simulate", "--dry-run", "--debug"])

        assert args.channel == "42"
        assert args.simulate is True
        assert args.dry_run is True
        assert logLevelOverride_get(args) == "DEBUG"

    def test_most_severe_level_wins(self) -> None:
        """Error beats debug when both are given."""
        args = arguments_parse(["--debug", "--error"])

        assert logLevelOverride_get(args) == "ERROR"


class TestSettings:
    """Tests for the settings singleton."""

    def test_uninitialized_raises(self, reset_settings) -> None:
        """Accessing config before initialize raises."""
        with pytest.raises(RuntimeError, match="not initialized"):
            _ = settings.config

    def test_default_session_cap(self, reset_settings) -> None:
        """Unset cap falls back to the default."""
        settings.initialize(ConfigLoader.config_parse({"relay": {"channel": "1"}}))

        assert settings.maxSessions_get() == settings.DEFAULT_MAX_SESSIONS

    def test_configured_session_cap(self, reset_settings) -> None:
        """Configured cap is used."""
        settings.initialize(
            ConfigLoader.config_parse({"relay": {"channel": "1"}, "cursor_state": {"max_sessions": 8}})
        )

        assert settings.maxSessions_get() == 8


class TestRelayWiring:
    """Tests for relay bootstrap helpers."""

    def test_dry_run_uses_log_sink(self) -> None:
        """Dry run never touches X11."""
        config = ConfigLoader.config_parse({"relay": {"channel": "1", "simulating_input": True}})

        sink, display_manager = sink_create(config, dry_run=True)

        assert isinstance(sink, LogDispatchSink)
        assert display_manager is None

    def test_loop_from_config(self, reset_settings, frame, caplog) -> None:
        """Loop picks up flags and region from config and logs notifications."""
        config = ConfigLoader.config_parse(
            {
                "relay": {"channel": "1", "verbose": True},
                "mapping": {"region": {"x": 0, "y": 0, "width": 10, "height": 10}},
                "cursor_state": {"max_sessions": 3},
            }
        )
        settings.initialize(config)
        sink, _ = sink_create(config, dry_run=True)
        transport = ChannelTransport(config.relay.endpoint, config.relay.channel)

        loop = ingestionLoop_create(config, transport, sink)

        assert loop.simulating_input is False
        assert loop.verbose is True
        assert loop.cursor_state.max_sessions == 3
        assert loop.region is not None
        assert loop.tick() == 0  # transport never connected

        with caplog.at_level(logging.INFO):
            loop.packet_handle(PacketDecoder.packet_decode(frame("click")))
        assert "click from viewer-1" in caplog.text

    def test_log_format_version(self) -> None:
        """Version tag follows the timestamp."""
        assert logFormatWithVersion_get("%(asctime)s %(message)s").startswith("%(asctime)s [v")

    def test_verbose_lowers_level_to_info(self) -> None:
        """Per-packet INFO logs are not filtered when verbose."""
        assert logLevel_resolve("warning", verbose=True) == logging.INFO
        assert logLevel_resolve("WARNING", verbose=False) == logging.WARNING

    def test_verbose_keeps_debug(self) -> None:
        assert logLevel_resolve("DEBUG", verbose=True) == logging.DEBUG

    def test_unknown_level_rejected(self) -> None:
        with pytest.raises(ValueError):
            logLevel_resolve("LOUD", verbose=False)
