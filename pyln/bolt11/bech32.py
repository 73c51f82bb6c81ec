# Copyright (c) 2017 Pieter Wuille
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in
# all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN
# THE SOFTWARE.

"""Bech32 codec for payment requests.

Invoices are plain bech32 strings, but unlike segwit addresses they are
not limited to 90 characters, so only the structural checks of BIP-173
apply here.
"""
from typing import Tuple

from .errors import MalformedEncodingError


CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"
SEPARATOR = '1'
CHECKSUM_LENGTH = 6


def bech32_polymod(values: bytes) -> int:
    """Internal function that computes the Bech32 checksum."""
    generator = [0x3b6a57b2, 0x26508e6d, 0x1ea119fa, 0x3d4233dd, 0x2a1462b3]
    chk = 1
    for value in values:
        top = chk >> 25
        chk = (chk & 0x1ffffff) << 5 ^ value
        for i in range(5):
            chk ^= generator[i] if ((top >> i) & 1) else 0
    return chk


def bech32_hrp_expand(hrp: str) -> bytes:
    """Expand the HRP into values for checksum computation."""
    return bytes([ord(x) >> 5 for x in hrp] + [0] + [ord(x) & 31 for x in hrp])


def bech32_verify_checksum(hrp: str, data: bytes) -> bool:
    return bech32_polymod(bech32_hrp_expand(hrp) + data) == 1


def bech32_create_checksum(hrp: str, data: bytes) -> bytes:
    values = bech32_hrp_expand(hrp) + data
    polymod = bech32_polymod(values + bytes(CHECKSUM_LENGTH)) ^ 1
    return bytes([(polymod >> 5 * (5 - i)) & 31 for i in range(CHECKSUM_LENGTH)])


def bech32_encode(hrp: str, data: bytes) -> str:
    """Compute a Bech32 string given HRP and 5-bit words."""
    data = bytes(data)
    combined = data + bech32_create_checksum(hrp, data)
    return hrp + SEPARATOR + ''.join([CHARSET[d] for d in combined])


def bech32_decode(bech: str) -> Tuple[str, bytes]:
    """Validate a Bech32 string, and return its HRP and 5-bit words.

    The checksum words are stripped from the result. Any structural
    problem raises `MalformedEncodingError`.
    """
    if any(ord(x) < 33 or ord(x) > 126 for x in bech):
        raise MalformedEncodingError(
            "Not a bech32-encoded string: {}".format(bech))

    if bech.lower() != bech and bech.upper() != bech:
        raise MalformedEncodingError(
            "Mixed upper and lower case characters in {}".format(bech))

    bech = bech.lower()
    pos = bech.rfind(SEPARATOR)
    if pos < 1 or pos + CHECKSUM_LENGTH + 1 > len(bech):
        raise MalformedEncodingError(
            "Could not locate hrp separator '1' in {}".format(bech))

    if not all(x in CHARSET for x in bech[pos + 1:]):
        raise MalformedEncodingError(
            "Non-bech32 character found in {}".format(bech))

    hrp = bech[:pos]
    data = bytes([CHARSET.find(x) for x in bech[pos + 1:]])
    if not bech32_verify_checksum(hrp, data):
        raise MalformedEncodingError(
            "Invalid bech32 checksum for {}".format(bech))

    return (hrp, data[:-CHECKSUM_LENGTH])
