"""
Amount conversion between raw on-chain integers and user-facing decimals.

All arithmetic goes through ``Decimal`` parsed from strings, never through
binary floats, so ``to_amount(to_raw(v, d), d).value == v`` for every ``v``
exactly representable with ``d`` decimals.
"""

from decimal import ROUND_FLOOR, Decimal, InvalidOperation, localcontext
from typing import Any, Union

from ..engine.exceptions import InvalidAmountError, InvalidAmountPrecision, ShieldArgumentInvalid
from ..schemas.bases import Amount, DelegationFeesObject, render_raw

#: Decimals of the native coin (wei -> ether).
ETH_DECIMALS = 18

#: Decimals of caller-supplied gas prices (wei -> gwei).
GWEI_DECIMALS = 9

_UINT256_LIMIT = 2 ** 256

NumberLike = Union[int, float, str, Decimal]


def _numeric_text(value: Any) -> str:
    text = str(value).strip()
    # int() and Decimal() both accept "1_000"
    if "_" in text:
        raise ValueError(f"digit separators are not allowed: {text!r}")
    return text


def _to_decimal(value: NumberLike) -> Decimal:
    if isinstance(value, bool):
        raise InvalidAmountError(f"Invalid amount: {value!r}")
    try:
        # str() avoids binary-float surprises (0.1 -> 0.1000000000000000055...)
        dec = value if isinstance(value, Decimal) else Decimal(_numeric_text(value))
    except (InvalidOperation, ValueError, TypeError) as e:
        raise InvalidAmountError(f"Invalid amount: {value!r}", cause=e) from e
    if not dec.is_finite():
        raise InvalidAmountError(f"Invalid amount: {value!r}")
    return dec


def _check_decimals(decimals: int) -> None:
    if not isinstance(decimals, int) or isinstance(decimals, bool) or decimals < 0:
        raise InvalidAmountError(f"decimals must be a non-negative int, got {decimals!r}")


def to_raw(value: NumberLike, decimals: int) -> int:
    """
    Convert a decimal ``value`` into its raw integer representation.

    Args:
        value: Human-readable amount (``"1.23"``, ``1.23``, ``Decimal("1.23")``).
        decimals: Decimals of the denomination.

    Returns:
        int: ``value * 10**decimals``.

    Raises:
        InvalidAmountError: If ``value`` is negative or not a number.
        InvalidAmountPrecision: If ``value`` has significant fractional digits
            beyond ``decimals``. Trailing zeros are not significant.

    Example:
        to_raw("1.23", 2)   # 123
        to_raw("1.230", 2)  # 123
        to_raw("1.234", 2)  # raises InvalidAmountPrecision
    """
    _check_decimals(decimals)
    dec = _to_decimal(value)
    if dec < 0:
        raise InvalidAmountError(f"amount must be non-negative, got {value!r}")

    sign, digits, exponent = dec.as_tuple()
    with localcontext() as ctx:
        ctx.prec = len(digits) + max(decimals, 0) + abs(exponent) + 2
        scaled = dec.scaleb(decimals)
        integral = scaled.to_integral_value(rounding=ROUND_FLOOR)

    if scaled != integral:
        raise InvalidAmountPrecision(
            f"amount {value!r} has more than {decimals} significant fractional digits"
        )
    return int(integral)


def to_amount(raw: Union[int, str], decimals: int) -> Amount:
    """
    Convert a raw integer into an :class:`Amount`.

    Example:
        to_amount(123, 2)  # Amount(raw="123", value="1.23", decimals=2)
    """
    _check_decimals(decimals)
    raw_int = _parse_raw(raw)
    return Amount.from_raw(raw_int, decimals)


def to_delegation_fees(raw: Union[int, str], decimals: int, currency_network_of_fees: str = "") -> DelegationFeesObject:
    """Convert a raw relayer fee into a :class:`DelegationFeesObject`."""
    _check_decimals(decimals)
    return DelegationFeesObject.from_raw(_parse_raw(raw), decimals, currency_network_of_fees)


def format_raw(raw: Union[int, str], decimals: int) -> str:
    """Render a raw integer as a decimal string without building an Amount."""
    _check_decimals(decimals)
    return render_raw(_parse_raw(raw), decimals)


def gwei_to_wei(gas_price: NumberLike) -> int:
    """Convert a caller gas price in gwei to wei."""
    return to_raw(gas_price, GWEI_DECIMALS)


def to_hex_string(value: Union[int, str]) -> str:
    """
    Normalize a field element to canonical fixed-width hexadecimal.

    Accepts ints, decimal strings and ``0x``-prefixed hex strings.

    Returns:
        str: ``0x`` followed by 64 lowercase hex digits.

    Raises:
        ShieldArgumentInvalid: If the value is not a number, negative or
            does not fit in 256 bits.

    Example:
        to_hex_string(255)     # "0x00...ff"
        to_hex_string("0xFF")  # "0x00...ff"
    """
    try:
        if isinstance(value, bool):
            raise ValueError("booleans are not field elements")
        if isinstance(value, int):
            number = value
        else:
            text = _numeric_text(value)
            if text[:2].lower() == "0x":
                number = int(text[2:], 16)
            else:
                number = int(text, 10)
    except (ValueError, TypeError) as e:
        raise ShieldArgumentInvalid(f"not a field element: {value!r}", cause=e) from e

    if number < 0 or number >= _UINT256_LIMIT:
        raise ShieldArgumentInvalid(f"field element out of range: {value!r}")
    return "0x" + format(number, "064x")


def _parse_raw(raw: Union[int, str]) -> int:
    if isinstance(raw, bool):
        raise InvalidAmountError(f"Invalid raw amount: {raw!r}")
    try:
        raw_int = raw if isinstance(raw, int) else int(_numeric_text(raw), 10)
    except (ValueError, TypeError) as e:
        raise InvalidAmountError(f"Invalid raw amount: {raw!r}", cause=e) from e
    if raw_int < 0:
        raise InvalidAmountError(f"raw amount must be non-negative, got {raw!r}")
    return raw_int
