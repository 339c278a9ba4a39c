"""Configuration management module.

This module handles persistent configuration storage using TOML format.
The configuration holds the directory rules to scan, the explicit session
names always offered, and the environment given to new tmux sessions.

Config file: ~/.sessionizer/config.toml (override with --config or
SESSIONIZER_CONFIG)

Security:
- Config file permissions: 0600 (owner read/write only)
- Atomic writes (temporary file + rename)
- Rules are validated before any directory is scanned
"""

import logging
import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import click
import tomlkit
from tomlkit import TOMLDocument
from tomlkit.exceptions import ParseError

from sessionizer.errors import SessionizerError
from sessionizer.models import DirectoryRule

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_TEMPLATE = """\
# sessionizer configuration
#
# Each [[directories]] table is a scanning rule:
#   path      root directory to scan
#   mindepth  minimum depth of listed directories (0 = the path itself)
#   maxdepth  maximum depth of listed directories
#   grep      regular expression a directory name must match in full
#   id        unique rule id (defaults to the path)
#
# [[directories]]
# path = "~/projects"
# mindepth = 1
# maxdepth = 1

# Session names always offered, even without a matching directory
sessions = []

# Environment of new sessions: "NAME=value", or "NAME" to copy it from your shell
env = []
"""


class ConfigError(SessionizerError):
    """Raised when configuration operations fail."""

    pass


class ConfigInvalidError(ConfigError):
    """Raised when the configuration content is invalid."""

    pass


@dataclass
class SessionizerConfig:
    """Sessionizer configuration data."""

    directories: list[DirectoryRule] = field(default_factory=list)
    sessions: list[str] = field(default_factory=list)
    env: list[str] = field(default_factory=list)

    def get_rule(self, rule_id: str) -> DirectoryRule | None:
        """Find a rule by id."""
        for rule in self.directories:
            if rule.id == rule_id:
                return rule
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "sessions": list(self.sessions),
            "env": list(self.env),
            "directories": [rule.to_dict() for rule in self.directories],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SessionizerConfig":
        """Create from dictionary.

        Raises:
            ConfigInvalidError: If a rule is invalid or rule ids collide
        """
        raw_rules = data.get("directories", [])
        if not isinstance(raw_rules, list):
            raise ConfigInvalidError("'directories' must be an array of tables")

        rules: list[DirectoryRule] = []
        seen: set[str] = set()
        for index, raw in enumerate(raw_rules):
            if not isinstance(raw, dict):
                raise ConfigInvalidError(f"directories[{index}] must be a table")
            try:
                rule = DirectoryRule.from_dict(raw)
            except (TypeError, ValueError) as e:
                raise ConfigInvalidError(f"Invalid directories[{index}]: {e}") from e
            if rule.id in seen:
                raise ConfigInvalidError(f"Duplicate directory rule id: {rule.id}")
            seen.add(rule.id)
            rules.append(rule)

        for key in ("sessions", "env"):
            value = data.get(key, [])
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise ConfigInvalidError(f"'{key}' must be an array of strings")

        return cls(
            directories=rules,
            sessions=list(data.get("sessions", [])),
            env=list(data.get("env", [])),
        )


class ConfigManager:
    """Manage sessionizer configuration file.

    Configuration is stored at ~/.sessionizer/config.toml with secure permissions.
    """

    DEFAULT_CONFIG_DIR = Path.home() / ".sessionizer"
    DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.toml"
    ENV_VAR = "SESSIONIZER_CONFIG"

    @classmethod
    def get_config_path(cls, custom_path: str | None = None) -> Path:
        """Get configuration file path.

        Args:
            custom_path: Custom config file path (optional, takes precedence
                over SESSIONIZER_CONFIG)

        Returns:
            Path to config file (may not exist yet)
        """
        if custom_path:
            return Path(custom_path).expanduser().resolve()

        env_path = os.environ.get(cls.ENV_VAR)
        if env_path:
            return Path(env_path).expanduser().resolve()

        return cls.DEFAULT_CONFIG_FILE

    @classmethod
    def ensure_config_dir(cls, config_path: Path) -> Path:
        """Ensure the config file's directory exists.

        The default directory is restricted to its owner (0700).

        Raises:
            ConfigError: If directory creation fails
        """
        config_dir = config_path.parent
        try:
            config_dir.mkdir(parents=True, exist_ok=True)
            if config_dir == cls.DEFAULT_CONFIG_DIR:
                os.chmod(config_dir, 0o700)

            logger.debug(f"Config directory ready: {config_dir}")
            return config_dir

        except OSError as e:
            raise ConfigError(f"Failed to create config directory: {e}") from e

    @classmethod
    def load_config(cls, custom_path: str | None = None) -> SessionizerConfig:
        """Load configuration from file.

        A missing file yields the default (empty) configuration.

        Args:
            custom_path: Custom config file path (optional)

        Returns:
            SessionizerConfig object

        Raises:
            ConfigInvalidError: If the file is not valid TOML or holds invalid rules
            ConfigError: If the file cannot be read
        """
        config_path = cls.get_config_path(custom_path)

        if not config_path.exists():
            logger.debug(f"Config file not found at {config_path}, using defaults")
            return SessionizerConfig()

        try:
            mode = config_path.stat().st_mode & 0o777
            if mode & 0o077:
                logger.warning(
                    f"Config file has insecure permissions: {oct(mode)}. Fixing to 0600..."
                )
                os.chmod(config_path, 0o600)

            with open(config_path, "rb") as f:
                data = tomllib.load(f)

        except tomllib.TOMLDecodeError as e:
            raise ConfigInvalidError(f"Invalid TOML in {config_path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to load config: {e}") from e

        config = SessionizerConfig.from_dict(data)
        logger.debug(f"Loaded config from: {config_path}")
        return config

    @classmethod
    def save_config(cls, config: SessionizerConfig, custom_path: str | None = None) -> None:
        """Save configuration to file, keeping comments outside the saved keys.

        Args:
            config: Configuration to save
            custom_path: Custom config file path (optional)

        Raises:
            ConfigError: If saving fails
        """
        config_path = cls.get_config_path(custom_path)
        doc = cls._load_document(config_path)

        for key, value in config.to_dict().items():
            if key == "directories":
                continue
            doc[key] = value

        rules = tomlkit.aot()
        for rule in config.directories:
            rules.append(cls._rule_table(rule))
        if "directories" in doc:
            del doc["directories"]
        if config.directories:
            doc["directories"] = rules

        cls._write_document(config_path, doc)

    @classmethod
    def init_config(cls, custom_path: str | None = None, force: bool = False) -> Path:
        """Write a commented default configuration file.

        Args:
            custom_path: Custom config file path (optional)
            force: Overwrite an existing file

        Returns:
            Path to the written config file

        Raises:
            ConfigError: If the file exists and force is False, or writing fails
        """
        config_path = cls.get_config_path(custom_path)

        if config_path.exists() and not force:
            raise ConfigError(
                f"Config file already exists: {config_path}\n"
                "Use --force to overwrite it."
            )

        cls._write_document(config_path, tomlkit.parse(DEFAULT_CONFIG_TEMPLATE))
        logger.info(f"Created config file: {config_path}")
        return config_path

    @classmethod
    def edit_config(cls, custom_path: str | None = None) -> SessionizerConfig:
        """Open the config file in $VISUAL/$EDITOR and validate the result.

        The file is created from the default template when missing.

        Returns:
            The configuration as saved by the editor

        Raises:
            ConfigError: If the editor fails
            ConfigInvalidError: If the edited file is invalid
        """
        config_path = cls.get_config_path(custom_path)
        if not config_path.exists():
            cls.init_config(custom_path)

        logger.debug(f"Opening {config_path} in editor")
        try:
            click.edit(filename=str(config_path))
        except click.ClickException as e:
            raise ConfigError(f"Failed to edit config: {e.format_message()}") from e

        return cls.load_config(custom_path)

    @classmethod
    def add_directory(
        cls, rule: DirectoryRule, custom_path: str | None = None
    ) -> SessionizerConfig:
        """Append a directory rule to the config file.

        Raises:
            ConfigInvalidError: If a rule with the same id already exists
        """
        config = cls.load_config(custom_path)
        if config.get_rule(rule.id) is not None:
            raise ConfigInvalidError(f"Directory rule already exists: {rule.id}")

        config_path = cls.get_config_path(custom_path)
        doc = cls._load_document(config_path)
        if "directories" in doc:
            doc["directories"].append(cls._rule_table(rule))
        else:
            rules = tomlkit.aot()
            rules.append(cls._rule_table(rule))
            doc["directories"] = rules

        cls._write_document(config_path, doc)
        logger.debug(f"Added directory rule '{rule.id}' to {config_path}")

        config.directories.append(rule)
        return config

    @classmethod
    def remove_directory(cls, target: str, custom_path: str | None = None) -> DirectoryRule:
        """Remove the directory rule matching an id or a path.

        Args:
            target: Rule id, or the rule's path
            custom_path: Custom config file path (optional)

        Returns:
            The removed rule

        Raises:
            ConfigError: If no rule matches
        """
        config = cls.load_config(custom_path)
        index = cls._find_rule_index(config, target)
        if index is None:
            available = ", ".join(rule.id for rule in config.directories) or "none"
            raise ConfigError(
                f"Directory rule '{target}' not found.\nConfigured rules: {available}"
            )

        config_path = cls.get_config_path(custom_path)
        doc = cls._load_document(config_path)
        rules = doc["directories"]
        del rules[index]
        if len(rules) == 0:
            del doc["directories"]

        cls._write_document(config_path, doc)
        removed = config.directories[index]
        logger.debug(f"Removed directory rule '{removed.id}' from {config_path}")
        return removed

    @classmethod
    def resolve_environment(
        cls, config: SessionizerConfig, environ: Mapping[str, str] | None = None
    ) -> dict[str, str]:
        """Resolve the environment entries of the config.

        "NAME=value" entries are taken literally; a bare "NAME" copies the
        caller's value and is skipped when unset.
        """
        if environ is None:
            environ = os.environ

        resolved: dict[str, str] = {}
        for entry in config.env:
            name, sep, value = entry.partition("=")
            name = name.strip()
            if not name:
                logger.warning(f"Ignoring malformed env entry: {entry!r}")
                continue
            if sep:
                resolved[name] = value
            elif name in environ:
                resolved[name] = environ[name]
            else:
                logger.debug(f"Environment variable {name} not set, skipping")
        return resolved

    @classmethod
    def _find_rule_index(cls, config: SessionizerConfig, target: str) -> int | None:
        for index, rule in enumerate(config.directories):
            if rule.id == target:
                return index

        target_path = Path(target).expanduser()
        if target_path.is_absolute() or target.startswith("."):
            target_path = target_path.resolve()
        for index, rule in enumerate(config.directories):
            if rule.path == target_path:
                return index
        return None

    @classmethod
    def _rule_table(cls, rule: DirectoryRule) -> Any:
        table = tomlkit.table()
        for key, value in rule.to_dict().items():
            table.add(key, value)
        return table

    @classmethod
    def _load_document(cls, config_path: Path) -> TOMLDocument:
        if not config_path.exists():
            return tomlkit.document()
        try:
            with open(config_path) as f:
                return tomlkit.load(f)
        except OSError as e:
            raise ConfigError(f"Failed to load config: {e}") from e
        except ParseError as e:
            raise ConfigInvalidError(f"Invalid TOML in {config_path}: {e}") from e

    @classmethod
    def _write_document(cls, config_path: Path, doc: TOMLDocument) -> None:
        temp_path: Path | None = None
        try:
            cls.ensure_config_dir(config_path)
            temp_path = config_path.with_suffix(".tmp")

            with open(temp_path, "w") as f:
                tomlkit.dump(doc, f)

            os.chmod(temp_path, 0o600)
            temp_path.replace(config_path)

            logger.debug(f"Saved config to: {config_path}")

        except OSError as e:
            if temp_path and temp_path.exists():
                temp_path.unlink()
            raise ConfigError(f"Failed to save config: {e}") from e


__all__ = [
    "DEFAULT_CONFIG_TEMPLATE",
    "ConfigError",
    "ConfigInvalidError",
    "ConfigManager",
    "SessionizerConfig",
]
