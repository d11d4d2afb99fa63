"""Application settings singleton - single source of truth for configuration

This module provides a singleton Settings class that consolidates:
1. Application constants (timing, storage caps)
2. Runtime configuration from config.yml

Usage:
    from crowdptr.common.settings import settings

    # Initialize once at startup with loaded config
    config = ConfigLoader.config_load()
    settings.initialize(config)

    # Use anywhere in the application
    time.sleep(settings.config.relay.poll_interval_ms / settings.POLL_INTERVAL_DIVISOR)
"""

from typing import Optional

from crowdptr.common.config import Config


class Settings:
    """Singleton settings manager combining config.yml and application constants

    The singleton pattern ensures all parts of the application use the same
    configuration values.
    """

    _instance: Optional["Settings"] = None

    def __new__(cls) -> "Settings":
        """Ensure only one Settings instance exists"""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        """Initialize settings singleton (only runs once)"""
        if hasattr(self, "_initialized"):
            return
        self._initialized = True
        self._config: Optional[Config] = None

    def initialize(self, config: Config) -> None:
        """
        Initialize with loaded configuration

        Args:
            config: Loaded configuration.
        """
        self._config = config

    # =========================================================================
    # Relay Constants
    # =========================================================================

    POLL_INTERVAL_DIVISOR: float = 1000.0
    """Convert poll_interval_ms from config to seconds for time.sleep()"""

    DEFAULT_MAX_SESSIONS: int = 4096
    """Session cap applied when cursor_state.max_sessions is not configured

    Remote sessions are never closed explicitly, so the cursor map would
    otherwise grow for the lifetime of the process. The least recently
    updated session is evicted once the cap is reached.
    """

    CONNECT_THREAD_NAME: str = "crowdptr-connect"
    """Name of the one-shot background thread that opens the channel"""

    # =========================================================================
    # Runtime Configuration Access
    # =========================================================================

    @property
    def config(self) -> Config:
        """
        Get loaded configuration object

        Returns:
            Loaded configuration.

        Raises:
            RuntimeError: If settings were not initialized
        """
        if self._config is None:
            raise RuntimeError("Settings not initialized. Call settings.initialize(config) first.")
        return self._config

    def maxSessions_get(self) -> int:
        """Effective cursor-state session cap"""
        configured = self.config.cursor_state.max_sessions
        return configured if configured is not None else self.DEFAULT_MAX_SESSIONS


# Global singleton instance
settings = Settings()
"""Global settings singleton instance

Import this anywhere in the application:
    from crowdptr.common.settings import settings
"""
