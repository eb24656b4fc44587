"""Helpers for dumping a live Unity Catalog schema.

Keeps connection handling out of the CLI so it can be tested with mocks.
"""

from contextlib import contextmanager
from typing import Iterator, Optional

from schemaport.config import Config
from schemaport.schema.introspect import InformationSchemaSource


def build_config_and_validate(
    *,
    catalog: Optional[str] = None,
    schema: Optional[str] = None,
    profile: Optional[str] = None,
    **overrides,
) -> Config:
    """Load config from ~/.databrickscfg/env and validate for DB operations.

    Raises:
        ConfigError: If required configuration is missing.
    """
    config = Config.from_env(catalog=catalog, schema=schema, profile=profile, **overrides)
    config.validate_for_db_ops()
    return config


@contextmanager
def online_source(config: Config) -> Iterator[InformationSchemaSource]:
    """Yield a schema facts source backed by an open Databricks session.

    The source is only usable inside the with block; facts are queried lazily.
    """
    from schemaport.databricks.client import DatabricksClient

    config.validate_for_db_ops()

    with DatabricksClient(
        host=config.databricks_host,
        token=config.databricks_token,
    ) as client:
        yield InformationSchemaSource(client, config.catalog, config.schema)
