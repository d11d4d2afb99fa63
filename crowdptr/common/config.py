"""Configuration file loading and management"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from crowdptr.common.types import MappingRegion, ScreenGeometry

DEFAULT_ENDPOINT = "wss://heat-api.j38.net/channel/"
DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass
class RelayConfig:
    """Ingestion and synthesis settings"""
    channel: str
    endpoint: str
    detecting: bool
    simulating_input: bool
    poll_interval_ms: int
    verbose: bool
    design_time: bool  # Host is in an authoring context: no connection, no ingestion


@dataclass
class MappingConfig:
    """Coordinate mapping settings"""
    region: Optional[MappingRegion]


@dataclass
class ViewportConfig:
    """Local display settings"""
    display: Optional[str]
    fallback: ScreenGeometry  # Used when no X11 display is attached


@dataclass
class CursorStateConfig:
    """Per-session cursor state settings"""
    max_sessions: Optional[int]


@dataclass
class LoggingConfig:
    """Logging configuration settings"""
    level: str
    file: Optional[str]
    format: str


@dataclass
class Config:
    """Complete application configuration"""
    relay: RelayConfig
    mapping: MappingConfig
    viewport: ViewportConfig
    cursor_state: CursorStateConfig
    logging: LoggingConfig


class ConfigLoader:
    """Loads and parses configuration from YAML files"""

    DEFAULT_CONFIG_PATHS = [
        "config.yml",
        "~/.config/crowdptr/config.yml",
        "/etc/crowdptr/config.yml",
    ]

    @staticmethod
    def configFile_find() -> Optional[Path]:
        """
        Find configuration file in standard locations

        Returns:
            Path to config file, or None if not found
        """
        for config_path in ConfigLoader.DEFAULT_CONFIG_PATHS:
            path = Path(config_path).expanduser().resolve()
            if path.exists() and path.is_file():
                return path
        return None

    @staticmethod
    def yaml_load(file_path: Path) -> Dict[str, Any]:
        """
        Load YAML configuration file

        Args:
            file_path: Path to YAML file

        Returns:
            Parsed configuration dictionary

        Raises:
            FileNotFoundError: If file does not exist
            yaml.YAMLError: If file is not valid YAML
        """
        with open(file_path, "r") as f:
            data = yaml.safe_load(f)

        if not isinstance(data, dict):
            raise ValueError(f"Config file {file_path} must contain a YAML dictionary")

        return data

    @staticmethod
    def region_parse(region_data: Optional[Dict[str, Any]]) -> Optional[MappingRegion]:
        """
        Parse optional mapping region

        Args:
            region_data: Mapping with x, y, width, height, or None

        Returns:
            MappingRegion, or None when unset or degenerate

        Raises:
            KeyError: If a region is given without all four keys
        """
        if region_data is None:
            return None
        region = MappingRegion(
            x=float(region_data["x"]),
            y=float(region_data["y"]),
            width=float(region_data["width"]),
            height=float(region_data["height"]),
        )
        if region.isDegenerate():
            return None
        return region

    @staticmethod
    def config_parse(data: Dict[str, Any]) -> Config:
        """
        Parse configuration dictionary into Config object

        Args:
            data: Raw configuration dictionary

        Returns:
            Parsed Config object

        Raises:
            KeyError: If required configuration keys are missing
            ValueError: If a value is out of range
        """
        # Parse relay config
        relay_data = data["relay"]
        relay = RelayConfig(
            channel=str(relay_data["channel"]),
            endpoint=relay_data.get("endpoint", DEFAULT_ENDPOINT),
            detecting=bool(relay_data.get("detecting", True)),
            simulating_input=bool(relay_data.get("simulating_input", False)),
            poll_interval_ms=int(relay_data.get("poll_interval_ms", 16)),
            verbose=bool(relay_data.get("verbose", False)),
            design_time=bool(relay_data.get("design_time", False)),
        )
        if relay.poll_interval_ms <= 0:
            raise ValueError(f"relay.poll_interval_ms must be positive, got {relay.poll_interval_ms}")

        # Parse mapping config
        mapping_data = data.get("mapping") or {}
        mapping = MappingConfig(region=ConfigLoader.region_parse(mapping_data.get("region")))

        # Parse viewport config
        viewport_data = data.get("viewport") or {}
        viewport = ViewportConfig(
            display=viewport_data.get("display"),
            fallback=ScreenGeometry(
                width=float(viewport_data.get("width", 1920)),
                height=float(viewport_data.get("height", 1080)),
            ),
        )

        # Parse cursor state config
        cursor_data = data.get("cursor_state") or {}
        max_sessions = cursor_data.get("max_sessions")
        if max_sessions is not None:
            max_sessions = int(max_sessions)
            if max_sessions <= 0:
                raise ValueError(f"cursor_state.max_sessions must be positive, got {max_sessions}")
        cursor_state = CursorStateConfig(max_sessions=max_sessions)

        # Parse logging config
        logging_data = data.get("logging") or {}
        logging = LoggingConfig(
            level=logging_data.get("level", "INFO"),
            file=logging_data.get("file"),
            format=logging_data.get("format", DEFAULT_LOG_FORMAT),
        )

        return Config(
            relay=relay,
            mapping=mapping,
            viewport=viewport,
            cursor_state=cursor_state,
            logging=logging,
        )

    @staticmethod
    def config_load(file_path: Optional[Path] = None) -> Config:
        """
        Load configuration from file

        Args:
            file_path: Optional path to config file. If None, searches standard locations.

        Returns:
            Parsed Config object

        Raises:
            FileNotFoundError: If config file not found
            ValueError: If config file is invalid
        """
        if file_path is None:
            file_path = ConfigLoader.configFile_find()
            if file_path is None:
                raise FileNotFoundError(
                    f"Config file not found in standard locations: "
                    f"{ConfigLoader.DEFAULT_CONFIG_PATHS}"
                )

        data = ConfigLoader.yaml_load(file_path)
        return ConfigLoader.config_parse(data)

    @staticmethod
    def configWithOverrides_load(
        file_path: Optional[Path] = None,
        **overrides: Any
    ) -> Config:
        """
        Load configuration and apply command-line overrides

        Args:
            file_path: Optional path to config file
            **overrides: Key-value pairs to override config values

        Returns:
            Config object with overrides applied

        Example:
            config = ConfigLoader.configWithOverrides_load(
                channel="12345",
                simulating_input=True
            )
        """
        config = ConfigLoader.config_load(file_path)

        # Apply overrides to relay config
        if overrides.get("channel") is not None:
            config.relay.channel = str(overrides["channel"])
        if overrides.get("endpoint") is not None:
            config.relay.endpoint = overrides["endpoint"]
        if overrides.get("simulating_input") is not None:
            config.relay.simulating_input = overrides["simulating_input"]
        if overrides.get("verbose"):
            config.relay.verbose = True

        # Apply overrides to viewport config
        if overrides.get("display") is not None:
            config.viewport.display = overrides["display"]

        return config
