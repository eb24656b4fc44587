"""Configuration management for schemaport."""

import configparser
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from schemaport.exceptions import ConfigError
from schemaport.schema.models import DumpOptions

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def parse_bool(value: str, name: str) -> bool:
    """Parse a boolean setting from its text form."""
    normalized = value.strip().lower()
    if normalized in _TRUE:
        return True
    if normalized in _FALSE:
        return False
    raise ConfigError(f"Invalid boolean for {name}: {value!r}")


def load_databrickscfg(profile: str = "DEFAULT") -> dict[str, str]:
    """Load host and token from ~/.databrickscfg.

    Returns an empty dict when the file doesn't exist.

    Raises:
        ConfigError: If the profile doesn't exist
    """
    cfg_path = Path.home() / ".databrickscfg"
    if not cfg_path.exists():
        return {}

    config = configparser.ConfigParser()
    config.read(cfg_path)

    if profile not in config:
        available = [s for s in config.sections() if s != "DEFAULT"] or ["DEFAULT"]
        raise ConfigError(
            f"Profile '{profile}' not found in ~/.databrickscfg. "
            f"Available profiles: {', '.join(available)}"
        )

    section = config[profile]
    result = {}
    if "host" in section:
        result["host"] = section["host"].strip().removeprefix("https://").rstrip("/")
    if "token" in section:
        result["token"] = section["token"].strip()
    return result


@dataclass
class Config:
    """Configuration for schemaport."""

    engine: Optional[str] = None
    same_db: bool = False
    indexes: bool = True
    ignore_index_errors: bool = False
    convert_tinyint_to_bool: bool = True
    catalog: Optional[str] = None
    schema: Optional[str] = None
    databricks_host: Optional[str] = None
    databricks_token: Optional[str] = None

    @classmethod
    def from_env(
        cls,
        *,
        engine: Optional[str] = None,
        same_db: Optional[bool] = None,
        indexes: Optional[bool] = None,
        ignore_index_errors: Optional[bool] = None,
        convert_tinyint_to_bool: Optional[bool] = None,
        catalog: Optional[str] = None,
        schema: Optional[str] = None,
        databricks_host: Optional[str] = None,
        databricks_token: Optional[str] = None,
        profile: Optional[str] = None,
    ) -> "Config":
        """Load configuration from env vars and ~/.databrickscfg, with explicit overrides.

        Priority (highest to lowest):
        1. Explicit parameters (CLI args)
        2. Environment variables
        3. ~/.databrickscfg profile (connection settings only)
        """
        profile_name = profile or os.environ.get("DATABRICKS_CONFIG_PROFILE", "DEFAULT")
        try:
            databricks_cfg = load_databrickscfg(profile_name)
        except ConfigError:
            if profile:
                raise
            databricks_cfg = {}

        def resolve(explicit, env_key, cfg_key=None):
            if explicit is not None:
                return explicit
            env_val = os.environ.get(env_key)
            if env_val is not None:
                return env_val
            if cfg_key:
                return databricks_cfg.get(cfg_key)
            return None

        def resolve_flag(explicit, env_key, default):
            if explicit is not None:
                return explicit
            env_val = os.environ.get(env_key)
            if env_val is None:
                return default
            return parse_bool(env_val, env_key)

        return cls(
            engine=resolve(engine, "SCHEMAPORT_ENGINE"),
            same_db=resolve_flag(same_db, "SCHEMAPORT_SAME_DB", False),
            indexes=resolve_flag(indexes, "SCHEMAPORT_INDEXES", True),
            ignore_index_errors=resolve_flag(
                ignore_index_errors, "SCHEMAPORT_IGNORE_INDEX_ERRORS", False
            ),
            convert_tinyint_to_bool=resolve_flag(
                convert_tinyint_to_bool, "SCHEMAPORT_TINYINT_AS_BOOL", True
            ),
            catalog=resolve(catalog, "SCHEMAPORT_CATALOG"),
            schema=resolve(schema, "SCHEMAPORT_SCHEMA"),
            databricks_host=resolve(databricks_host, "DATABRICKS_HOST", "host"),
            databricks_token=resolve(databricks_token, "DATABRICKS_TOKEN", "token"),
        )

    def dump_options(self) -> DumpOptions:
        return DumpOptions(
            same_db=self.same_db,
            indexes=self.indexes,
            ignore_index_errors=self.ignore_index_errors,
            convert_tinyint_to_bool=self.convert_tinyint_to_bool,
        )

    def validate_for_db_ops(self) -> None:
        """Validate that everything needed to introspect a live catalog is present.

        Raises:
            ConfigError: If catalog, schema, or connection info is missing.
        """
        missing = []
        if not self.catalog:
            missing.append("catalog (use --catalog or SCHEMAPORT_CATALOG)")
        if not self.schema:
            missing.append("schema (use --schema or SCHEMAPORT_SCHEMA)")
        if not self.databricks_host:
            missing.append("databricks_host (use --profile or DATABRICKS_HOST)")
        if not self.databricks_token:
            missing.append("databricks_token (use --profile or DATABRICKS_TOKEN)")

        if missing:
            raise ConfigError(
                "Missing required configuration:\n  - " + "\n  - ".join(missing)
            )
