"""
trustline_tx

Client-side transaction preparation for trustlines currency networks: amount
conversion, path negotiation through the relay, fee delegation and assembly of
unsigned transactions, including shielded mint / transfer / burn calls.
"""

from .client import TLNetwork
from .config import NetworkConfig
from .utils import setup_logger

__all__ = [
    "TLNetwork",
    "NetworkConfig",
    "setup_logger",
]
