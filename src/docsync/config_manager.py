"""Configuration management module.

This module handles persistent configuration storage using TOML format.
Stores the generator command, models, skip rules and hook settings.

Security:
- Config file permissions: 0600 (owner read/write only)
- Atomic writes (temp file + rename)
"""

import logging
import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

try:
    import tomli  # type: ignore[import]
except ImportError:
    # Fallback for older Python versions
    try:
        import tomllib as tomli  # type: ignore[import]
    except ImportError as e:
        raise ImportError("toml library not available. Install with: pip install tomli") from e

try:
    import tomlkit
except ImportError as e:
    raise ImportError("tomlkit library not available. Install with: pip install tomlkit") from e

from docsync.exceptions import DocsyncError
from docsync.skip_rules import (
    DEFAULT_SKIP_ENV_VAR,
    DEFAULT_SKIP_MARKER,
    DEFAULT_SKIP_PATTERNS,
    SkipRules,
)

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "DOCSYNC_CONFIG"
FREQUENCY_ENV_VAR = "DOCSYNC_AUTODOC_FREQUENCY"
GENERATOR_ENV_VAR = "DOCSYNC_GENERATOR"


class ConfigError(DocsyncError):
    """Raised when configuration operations fail."""

    pass


@dataclass
class DocsyncConfig:
    """docsync configuration data."""

    default_branch: str = "main"
    skip_patterns: list[str] = field(default_factory=lambda: list(DEFAULT_SKIP_PATTERNS))
    skip_marker: str = DEFAULT_SKIP_MARKER
    skip_env_var: str = DEFAULT_SKIP_ENV_VAR
    artifact_name: str = "index.md"
    session_artifact: str = "session-overview.md"
    generator_command: str = "claude"
    index_model: str = "haiku"
    session_model: str = "haiku"
    autodoc_frequency: int = 5  # Tool uses between session updates
    guard_env_var: str = "CLAUDE_HOOK_INTERNAL"
    log_dir: str = "~/.docsync/logs"
    log_level: str = "INFO"

    @property
    def skip_rules(self) -> SkipRules:
        return SkipRules(
            patterns=list(self.skip_patterns),
            marker=self.skip_marker,
            env_var=self.skip_env_var,
        )

    @property
    def log_path(self) -> Path:
        return Path(self.log_dir).expanduser()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DocsyncConfig":
        """Create from dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning(f"Ignoring unknown config keys: {', '.join(unknown)}")

        config = cls(**{k: v for k, v in data.items() if k in known})

        for f in fields(cls):
            if f.type is str and not isinstance(getattr(config, f.name), str):
                raise ConfigError(f"{f.name} must be a string")
        if not isinstance(config.skip_patterns, list) or not all(
            isinstance(p, str) for p in config.skip_patterns
        ):
            raise ConfigError("skip_patterns must be a list of glob patterns")
        try:
            config.autodoc_frequency = int(config.autodoc_frequency)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"autodoc_frequency must be an integer: {e}") from e
        if config.autodoc_frequency < 1:
            raise ConfigError("autodoc_frequency must be at least 1")

        return config


class ConfigManager:
    """Manage the docsync configuration file.

    Configuration is stored at ~/.docsync/config.toml with secure permissions.
    """

    DEFAULT_CONFIG_DIR = Path.home() / ".docsync"
    DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.toml"

    @classmethod
    def get_config_path(cls, custom_path: str | None = None) -> Path:
        """Get configuration file path.

        Precedence: custom_path, then $DOCSYNC_CONFIG, then the default file.

        Raises:
            ConfigError: If an explicitly given config file does not exist
        """
        if custom_path:
            path = Path(custom_path).expanduser().resolve()
            if not path.exists():
                raise ConfigError(f"Config file not found: {path}")
            return path

        env_path = os.environ.get(CONFIG_ENV_VAR)
        if env_path:
            return Path(env_path).expanduser()

        return cls.DEFAULT_CONFIG_FILE

    @classmethod
    def load_config(cls, custom_path: str | None = None, apply_env: bool = True) -> DocsyncConfig:
        """Load configuration from file, then apply environment overrides.

        Args:
            custom_path: Custom config file path (optional)
            apply_env: Apply DOCSYNC_* environment overrides

        Returns:
            DocsyncConfig object

        Raises:
            ConfigError: If loading fails
        """
        config_path = cls.get_config_path(custom_path)

        if not config_path.exists():
            logger.debug("Config file not found, using defaults")
            config = DocsyncConfig()
        else:
            try:
                mode = config_path.stat().st_mode & 0o777
                if mode & 0o077:  # Check if group/other have any permissions
                    logger.warning(
                        f"Config file has insecure permissions: {oct(mode)}. Fixing to 0600..."
                    )
                    os.chmod(config_path, 0o600)

                with open(config_path, "rb") as f:
                    data = tomli.load(f)  # type: ignore[attr-defined]
            except Exception as e:
                raise ConfigError(f"Failed to load config: {e}") from e

            logger.debug(f"Loaded config from: {config_path}")
            config = DocsyncConfig.from_dict(data)

        return cls.apply_env_overrides(config) if apply_env else config

    @classmethod
    def apply_env_overrides(
        cls, config: DocsyncConfig, environ: dict[str, str] | None = None
    ) -> DocsyncConfig:
        """Apply DOCSYNC_AUTODOC_FREQUENCY and DOCSYNC_GENERATOR."""
        env = os.environ if environ is None else environ

        frequency = env.get(FREQUENCY_ENV_VAR)
        if frequency:
            try:
                value = int(frequency)
            except ValueError:
                value = 0
            if value > 0:
                config.autodoc_frequency = value
            else:
                logger.warning(f"Ignoring invalid {FREQUENCY_ENV_VAR}={frequency!r}")

        generator = env.get(GENERATOR_ENV_VAR)
        if generator:
            config.generator_command = generator

        return config

    @classmethod
    def save_config(cls, config: DocsyncConfig, custom_path: str | None = None) -> Path:
        """Save configuration to file.

        Args:
            config: Configuration to save
            custom_path: Custom config file path (optional)

        Returns:
            Path written

        Raises:
            ConfigError: If saving fails
        """
        temp_path: Path | None = None
        try:
            if custom_path:
                config_path = Path(custom_path).expanduser().resolve()
            else:
                config_path = cls.get_config_path()
            config_path.parent.mkdir(parents=True, exist_ok=True)

            temp_path = config_path.with_suffix(".tmp")

            # Load existing file if it exists (preserves comments/formatting)
            if config_path.exists():
                with open(config_path) as f:
                    doc = tomlkit.load(f)
            else:
                doc = tomlkit.document()
            for key, value in config.to_dict().items():
                doc[key] = value

            with open(temp_path, "w") as f:
                tomlkit.dump(doc, f)

            # Set secure permissions before moving
            os.chmod(temp_path, 0o600)
            temp_path.replace(config_path)

            logger.debug(f"Saved config to: {config_path}")
            return config_path

        except Exception as e:
            if temp_path and temp_path.exists():
                temp_path.unlink()
            raise ConfigError(f"Failed to save config: {e}") from e

    @classmethod
    def update_config(cls, custom_path: str | None = None, **updates: Any) -> DocsyncConfig:
        """Update configuration values and save.

        Raises:
            ConfigError: If a key is unknown or the update fails
        """
        config = cls.load_config(custom_path, apply_env=False)
        data = config.to_dict()

        for key, value in updates.items():
            if key not in data:
                raise ConfigError(f"Unknown config key: {key}")
            data[key] = value

        config = DocsyncConfig.from_dict(data)
        cls.save_config(config, custom_path)
        return config


__all__ = ["ConfigError", "ConfigManager", "DocsyncConfig"]
