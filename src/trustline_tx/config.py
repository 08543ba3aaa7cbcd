"""
Client Configuration

Connection settings of the relay server and preparation defaults, loadable
from the environment (and a ``.env`` file through python-dotenv).

Environment Variables:
    - TL_RELAY_API_URL: Full relay API URL; overrides the parts below
    - TL_RELAY_PROTOCOL / TL_RELAY_HOST / TL_RELAY_PORT / TL_RELAY_PATH
    - TL_WALLET_TYPE: ``ethers`` (self-paid) or ``identity`` (relayer-paid)
    - TL_DEFAULT_GAS_LIMIT: Gas limit when neither caller nor relay gives one
    - TL_REQUEST_TIMEOUT: Relay request timeout in seconds
    - TL_CHAIN_ID: Chain id used for local signing
    - TL_PRIVATE_KEY: Key of the local signer
"""

import os
from typing import Any, Dict, Optional

import dotenv
from pydantic import BaseModel, Field, ValidationError

from .engine.exceptions import ConfigurationError
from .schemas.bases import WalletType

DEFAULT_GAS_LIMIT = 600000

_ENV_FIELDS = {
    "TL_RELAY_API_URL": "relay_api_url",
    "TL_RELAY_PROTOCOL": "protocol",
    "TL_RELAY_HOST": "host",
    "TL_RELAY_PORT": "port",
    "TL_RELAY_PATH": "path",
    "TL_WALLET_TYPE": "wallet_type",
    "TL_DEFAULT_GAS_LIMIT": "default_gas_limit",
    "TL_REQUEST_TIMEOUT": "request_timeout",
    "TL_CHAIN_ID": "chain_id",
}


class NetworkConfig(BaseModel):
    """
    Relay connection and preparation defaults.

    Example:
        config = NetworkConfig(host="relay.example.org", protocol="https")
        config.relay_url  # "https://relay.example.org/api/v1"
    """

    protocol: str = Field(default="http", description="Relay protocol")
    host: str = Field(default="localhost", description="Relay host")
    port: Optional[int] = Field(default=None, gt=0, description="Relay port")
    path: str = Field(default="api/v1", description="Path of the relay API")
    relay_api_url: Optional[str] = Field(default=None, description="Full relay API URL")
    wallet_type: WalletType = Field(default=WalletType.ETHERS, description="Wallet flavour")
    default_gas_limit: int = Field(default=DEFAULT_GAS_LIMIT, gt=0)
    request_timeout: float = Field(default=30.0, gt=0, description="Seconds")
    chain_id: Optional[int] = Field(default=None, gt=0)

    @property
    def relay_url(self) -> str:
        """Relay API base URL, ``protocol://host[:port]/path`` unless set explicitly."""
        if self.relay_api_url:
            return self.relay_api_url.rstrip("/")
        port = f":{self.port}" if self.port else ""
        path = self.path.strip("/")
        base = f"{self.protocol}://{self.host}{port}"
        return f"{base}/{path}" if path else base

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None, **overrides: Any) -> "NetworkConfig":
        """
        Load configuration from the environment.

        Variables from ``dotenv_path`` (or a ``.env`` file found upwards from
        the working directory) are loaded first; variables already set in the
        environment take precedence. Keyword ``overrides`` win over both.

        Raises:
            ConfigurationError: If a variable holds an invalid value.
        """
        dotenv.load_dotenv(dotenv_path)

        values: Dict[str, Any] = {}
        for env_name, field_name in _ENV_FIELDS.items():
            raw = os.getenv(env_name)
            if raw is not None and raw.strip() != "":
                values[field_name] = raw.strip()
        values.update(overrides)

        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigurationError(f"invalid relay configuration: {e}", cause=e) from e


def get_private_key_from_env() -> Optional[str]:
    """
    Load the local signer's private key from ``TL_PRIVATE_KEY``.

    Returns:
        str: Private key from environment, or None if not configured

    Note:
        The private key should be stored securely in environment variables
        and never committed to version control.
    """
    return os.getenv("TL_PRIVATE_KEY")
