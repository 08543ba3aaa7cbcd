from .stages import Stage, PreparationPipeline
from .exceptions import (
    PreparationError,
    InvalidAmountError,
    InvalidAmountPrecision,
    DecimalsUnavailable,
    InvalidPathOptions,
    PathQueryFailed,
    NoPathFound,
    NoMintPath,
    NoBurnPath,
    FeeQuoteFailed,
    NonceResolutionFailed,
    GasResolutionError,
    ABIEncodingError,
    ShieldArgumentInvalid,
    ShieldLookupFailed,
    RelayRequestError,
    TransactionRelayFailed,
    SignerUnavailable,
    ConfigurationError,
)

__all__ = [
    "Stage",
    "PreparationPipeline",
    "PreparationError",
    "InvalidAmountError",
    "InvalidAmountPrecision",
    "DecimalsUnavailable",
    "InvalidPathOptions",
    "PathQueryFailed",
    "NoPathFound",
    "NoMintPath",
    "NoBurnPath",
    "FeeQuoteFailed",
    "NonceResolutionFailed",
    "GasResolutionError",
    "ABIEncodingError",
    "ShieldArgumentInvalid",
    "ShieldLookupFailed",
    "RelayRequestError",
    "TransactionRelayFailed",
    "SignerUnavailable",
    "ConfigurationError",
]
