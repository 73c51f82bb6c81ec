"""Human readable invoice amounts.

All arithmetic is done on integers: an amount is converted straight into
millisatoshis and only turned into satoshis if that is exact.
"""
import re
from typing import Optional, Tuple

from .errors import InvalidAmountError

MSAT_PER_BTC = 100_000_000_000
MAX_MSAT = 2_100_000_000_000_000_000

# BOLT #11:
# The following `multiplier` letters are defined:
#
# * `m` (milli): multiply by 0.001
# * `u` (micro): multiply by 0.000001
# * `n` (nano): multiply by 0.000000001
# * `p` (pico): multiply by 0.000000000001
DIVISORS = {
    'm': 10**3,
    'u': 10**6,
    'n': 10**9,
    'p': 10**12,
}


def hrp_to_millisat(amount: str) -> int:
    """Convert a shortened amount such as `2500u` into millisatoshis.
    """
    unit = amount[-1:]
    if unit in DIVISORS:
        value = amount[:-1]
        divisor = DIVISORS[unit]
    elif unit and not unit.isdigit():
        raise InvalidAmountError(amount, "not a valid multiplier")
    else:
        value = amount
        divisor = 1

    # BOLT #11:
    # A reader SHOULD fail if `amount` contains a non-digit, or is followed by
    # anything except a `multiplier` in the table above.
    if not re.fullmatch(r'[0-9]+', value):
        raise InvalidAmountError(amount, "not a valid human readable amount")

    value = int(value)

    # BOLT #11:
    # If the `p` multiplier is used the last decimal of `amount` MUST be 0.
    if unit == 'p' and value % 10 != 0:
        raise InvalidAmountError(amount, "sub-millisatoshi precision")

    msat = value * MSAT_PER_BTC // divisor
    if msat > MAX_MSAT:
        raise InvalidAmountError(amount, "exceeds the maximum amount")

    return msat


def millisat_to_sat(msat: int) -> Optional[int]:
    """Whole satoshis for `msat`, or None if it isn't a whole number."""
    sat, remainder = divmod(msat, 1000)
    if remainder:
        return None
    return sat


def parse_amount(amount: str) -> Tuple[Optional[int], Optional[int]]:
    """Return `(satoshis, millisatoshis)` for the amount part of a prefix.

    An empty amount means the invoice doesn't specify one, and both values
    are None. Amounts below satoshi granularity only carry millisatoshis.
    """
    if not amount:
        return None, None

    msat = hrp_to_millisat(amount)
    return millisat_to_sat(msat), msat
