"""
Exception and Error Definitions Module

Defines the exception hierarchy for transaction preparation. Every pipeline
stage raises one of these, carrying the name of the stage that failed and the
underlying cause, so callers can tell "no route exists" apart from "could not
reach the relay".

Exception Hierarchy:
    PreparationError (root)
    ├── InvalidAmountError
    │   └── InvalidAmountPrecision
    ├── DecimalsUnavailable
    ├── InvalidPathOptions
    ├── PathQueryFailed
    ├── NoPathFound
    │   ├── NoMintPath
    │   └── NoBurnPath
    ├── FeeQuoteFailed
    ├── NonceResolutionFailed
    ├── GasResolutionError
    ├── ABIEncodingError
    ├── ShieldArgumentInvalid
    ├── ShieldLookupFailed
    ├── RelayRequestError
    ├── TransactionRelayFailed
    ├── SignerUnavailable
    └── ConfigurationError
"""

from typing import Optional


class PreparationError(Exception):
    """
    Root exception class for all preparation failures.

    Attributes:
        stage: Name of the pipeline stage that failed (e.g. ``"path"``).
            ``None`` until a pipeline tags it.
        cause: The original exception this error wraps, if any.
    """

    def __init__(
        self,
        message: str = "",
        *,
        stage: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.stage = stage
        self.cause = cause

    def __str__(self) -> str:
        return self.message


class InvalidAmountError(PreparationError):
    """
    Raised when an amount cannot be converted at all.

    This includes scenarios such as:
    - Negative amounts
    - Non-numeric strings
    - Negative decimals precision
    """
    pass


class InvalidAmountPrecision(InvalidAmountError):
    """
    Raised when a decimal value carries more significant fractional digits
    than the network's decimals permit.

    Converting ``"1.234"`` with two decimals would silently drop the
    ``4``; this error is raised instead.
    """
    pass


class DecimalsUnavailable(PreparationError):
    """Raised when the decimals configuration of a network cannot be fetched."""
    pass


class InvalidPathOptions(PreparationError):
    """Raised when ``max_fees`` or ``max_hops`` is negative."""
    pass


class PathQueryFailed(PreparationError):
    """
    Raised when the path service could not be reached or answered with an error.

    This is a transport-level failure and says nothing about whether a route exists.
    """
    pass


class NoPathFound(PreparationError):
    """
    Raised when the path service answers with an empty path.

    Attributes:
        network: Address of the currency network that was queried.
    """

    def __init__(self, message: str = "", *, network: Optional[str] = None, **kwargs) -> None:
        super().__init__(message, **kwargs)
        self.network = network


class NoMintPath(NoPathFound):
    """Raised when there is no path from the acting account to the shield gateway."""
    pass


class NoBurnPath(NoPathFound):
    """Raised when there is no path from the shield gateway back to the acting account."""
    pass


class FeeQuoteFailed(PreparationError):
    """
    Raised when the relay's fee quote for a meta transaction could not be obtained.

    An empty offer list is not a failure; only transport and decoding errors are.
    """
    pass


class NonceResolutionFailed(PreparationError):
    """Raised when the account or identity nonce could not be fetched."""
    pass


class GasResolutionError(PreparationError):
    """
    Raised when gas price or gas limit cannot be resolved to positive values
    for a self-paid transaction.
    """
    pass


class ABIEncodingError(PreparationError):
    """
    Raised when a contract call cannot be encoded.

    This includes scenarios such as:
    - Unknown contract or function name
    - Wrong number of arguments
    - Argument not encodable as the declared ABI type
    """
    pass


class ShieldArgumentInvalid(PreparationError):
    """
    Raised when proof, inputs or commitment values are malformed.

    This includes scenarios such as:
    - Empty proof or inputs list
    - Field element that is not a number or exceeds 256 bits
    - Commitment, root or nullifier that is not a 32-byte hex value
    """
    pass


class ShieldLookupFailed(PreparationError):
    """Raised when the shield's backing network or gateway cannot be resolved."""
    pass


class RelayRequestError(PreparationError):
    """
    Raised when a request to the relay server fails.

    Attributes:
        status_code: HTTP status returned by the relay, ``None`` for
            transport errors (connection refused, timeout, ...).
        endpoint: Relay endpoint that was requested.
    """

    def __init__(
        self,
        message: str = "",
        *,
        status_code: Optional[int] = None,
        endpoint: Optional[str] = None,
        **kwargs,
    ) -> None:
        super().__init__(message, **kwargs)
        self.status_code = status_code
        self.endpoint = endpoint


class TransactionRelayFailed(PreparationError):
    """Raised when a signed transaction could not be handed to the relay."""
    pass


class SignerUnavailable(PreparationError):
    """Raised when confirming a transaction without a signer for its fee mode."""
    pass


class ConfigurationError(PreparationError):
    """
    Raised when configuration is missing or invalid.

    This includes scenarios such as:
    - Unknown wallet type
    - Non-numeric port, gas limit or timeout in the environment
    - Missing relay host
    """
    pass
