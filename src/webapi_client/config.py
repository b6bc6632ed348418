"""
Configuration loading for webapi-client.

Client options can be kept in a JSON document:

    {
        "base_address": "https://api.example.com/api",
        "controller": "users",
        "content_type": "json",
        "timeout": 10000,
        "authentication": {"type": "bearer", "token": "..."}
    }
"""

import logging
import os
from typing import Any, Dict, Optional

import orjson
from pydantic import ValidationError

from .auth import AuthProvider, BearerTokenAuth, IntegratedAuth, NoAuth
from .exceptions import ConfigurationError, InvalidArgumentError
from .models import ClientOptions

logger = logging.getLogger("webapi_client")


def build_authentication(auth_config: Optional[Dict[str, Any]]) -> AuthProvider:
    """
    Create an authentication provider from a configuration dictionary.

    Authentication options:
        - None: {"type": "none"}
        - Bearer token: {"type": "bearer", "token": "..."}
        - Token endpoint: {"type": "token_endpoint", "username": "user",
          "password": "pass", "token_uri": "https://..."}
        - Integrated: {"type": "integrated", "username": "user", "password": "pass",
          "domain": "CORP", "scheme": "basic" | "digest"}

    Raises:
        ConfigurationError: If the type is unknown or required values are missing
    """
    if not auth_config:
        return NoAuth()

    auth_type = str(auth_config.get("type", "none")).lower()

    try:
        if auth_type == "none":
            return NoAuth()

        if auth_type == "bearer":
            return BearerTokenAuth(auth_config.get("token") or "")

        if auth_type == "token_endpoint":
            return BearerTokenAuth(
                username=auth_config.get("username"),
                password=auth_config.get("password"),
                token_uri=auth_config.get("token_uri"),
            )

        if auth_type == "integrated":
            scheme = str(auth_config.get("scheme", "basic")).lower()
            if scheme not in ("basic", "digest"):
                raise ConfigurationError(f"Unsupported integrated authentication scheme: {scheme}")

            return IntegratedAuth(
                auth_config.get("username"),
                auth_config.get("password"),
                auth_config.get("domain"),
                scheme=scheme,
            )
    except InvalidArgumentError as e:
        raise ConfigurationError(f"Invalid {auth_type} authentication: {e.message}") from e

    raise ConfigurationError(f"Unsupported authentication type: {auth_type}")


def options_from_dict(data: Dict[str, Any]) -> ClientOptions:
    """Create ClientOptions from a configuration dictionary."""
    data = dict(data)
    authentication = build_authentication(data.pop("authentication", None))

    try:
        return ClientOptions(**data, authentication=authentication)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid client options: {str(e)}") from e


def load_options(config_file: str) -> ClientOptions:
    """
    Load client options from a JSON file.

    Args:
        config_file: Path to the configuration file

    Returns:
        Loaded options, or the defaults if the file does not exist

    Raises:
        ConfigurationError: If the file cannot be parsed
    """
    if not os.path.exists(config_file):
        logger.info(f"Configuration file {config_file} not found, using default options")
        return ClientOptions()

    with open(config_file, "rb") as f:
        content = f.read()

    try:
        config_data = orjson.loads(content)
    except orjson.JSONDecodeError as e:
        raise ConfigurationError(f"Error loading config {config_file}: {str(e)}") from e

    if not isinstance(config_data, dict):
        raise ConfigurationError(f"Error loading config {config_file}: expected a JSON object")

    return options_from_dict(config_data)


def save_options(options: ClientOptions, config_file: str) -> bool:
    """
    Save client options to a JSON file.

    Credentials are never written; the saved document has no authentication
    section and loads back with NoAuth.

    Args:
        options: Options to save
        config_file: Path to the configuration file

    Returns:
        True if successful, False otherwise
    """
    config_dict = options.model_dump(mode="json", exclude={"authentication"})

    directory = os.path.dirname(config_file)
    try:
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(config_file, "wb") as f:
            f.write(orjson.dumps(config_dict, option=orjson.OPT_INDENT_2))
        return True
    except OSError as e:
        logger.error(f"Error saving config {config_file}: {str(e)}")
        return False
