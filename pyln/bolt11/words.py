"""Repacking of bech32 5-bit words into bytes and integers.

Bits are always concatenated most-significant first. When a word sequence
does not fill a whole number of bytes the trailing bits are zero padded;
field decoding then drops that last partial byte, while the signed message
keeps it.
"""
import bitstring


# Bech32 spits out array of 5-bit values.  Shim here.
def u5_to_bitarray(arr: bytes) -> bitstring.BitArray:
    ret = bitstring.BitArray()
    for a in arr:
        ret += bitstring.pack("uint:5", a)
    return ret


# Discard trailing bits, convert to bytes.
def trim_to_bytes(barr: bitstring.Bits) -> bytes:
    # tobytes() zero-pads to a whole byte, drop that byte again.
    b = barr.tobytes()
    if len(barr) % 8 != 0:
        return b[:-1]
    return b


def words_to_bytes(words: bytes) -> bytes:
    """Bytes of a tagged field, without the padding byte."""
    return trim_to_bytes(u5_to_bitarray(words))


def words_to_padded_bytes(words: bytes) -> bytes:
    """Bytes of a word sequence, zero-padded up to the next byte boundary.
    """
    return u5_to_bitarray(words).tobytes()


def words_to_int(words: bytes) -> int:
    """Interpret words as a big-endian base-32 number."""
    total = 0
    for w in words:
        total = total * 32 + w
    return total
