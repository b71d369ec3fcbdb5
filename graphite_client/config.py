"""
Graphite client configuration.

Settings come from an optional YAML file, then from the environment (a .env
file in the working directory is loaded first):

    GRAPHITE_URL         base URL of graphite-web
    GRAPHITE_TIMEOUT     request timeout in seconds
    GRAPHITE_VERIFY_TLS  "false" to accept any server certificate
    GRAPHITE_LOG_LEVEL   logging level used by the command line tool
"""

import logging
import os
from pathlib import Path
from typing import Optional, Union

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel

logger = logging.getLogger("graphite_client.config")

_ENV_FIELDS = {
    "GRAPHITE_URL": "base_url",
    "GRAPHITE_TIMEOUT": "timeout",
    "GRAPHITE_VERIFY_TLS": "verify_tls",
    "GRAPHITE_LOG_LEVEL": "log_level",
}


class ClientConfig(BaseModel):
    base_url: str
    timeout: float = 10.0
    verify_tls: bool = True
    log_level: str = "INFO"


def load_config_from(path: Union[str, Path]) -> ClientConfig:
    """Load client configuration from YAML file."""
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}
    return ClientConfig(**data)


def load_config(path: Optional[Union[str, Path]] = None, **overrides) -> ClientConfig:
    """
    Load configuration: YAML file first (if given and present), then environment,
    then explicit keyword overrides that are not None.

    Raises:
        ValueError: If no base URL is configured anywhere
    """
    load_dotenv()

    data = {}
    if path is not None:
        config_path = Path(path)
        if config_path.exists():
            with open(config_path, "r") as f:
                data = yaml.safe_load(f) or {}
            logger.debug("loaded config from %s", config_path)
        else:
            logger.debug("config file not found: %s, using environment", config_path)

    for env_name, field in _ENV_FIELDS.items():
        value = os.getenv(env_name)
        if value:
            data[field] = value

    data.update({k: v for k, v in overrides.items() if v is not None})

    if not data.get("base_url"):
        raise ValueError("GRAPHITE_URL not found in config file or environment variables")

    return ClientConfig(**data)
