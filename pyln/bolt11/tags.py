"""Tagged fields of a payment request.

After the timestamp, the data part of an invoice is a sequence of tagged
fields, each made of a 1-word type, a 2-word big-endian length (in words)
and that many words of payload.
"""
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from .bech32 import bech32_encode
from .errors import (
    MalformedEncodingError,
    TruncatedTagError,
    UnknownFallbackVersionError,
)
from .words import words_to_bytes, words_to_int

UNKNOWN_TAG = 'unknown_tag'
UNKNOWN_TAG_HRP = 'unknown'

DEFAULT_EXPIRE_TIME = 3600
DEFAULT_MIN_FINAL_CLTV_EXPIRY = 9


class TagCode(IntEnum):
    PAYMENT_HASH = 1
    ROUTING_INFO = 3
    EXPIRE_TIME = 6
    FALLBACK_ADDRESS = 9
    DESCRIPTION = 13
    SECRET = 16
    PAYEE_NODE_KEY = 19
    PURPOSE_COMMIT_HASH = 23
    MIN_FINAL_CLTV_EXPIRY = 24

    @property
    def tag_name(self) -> str:
        return self.name.lower()


# BOLT #11:
#
# A reader MUST skip over [...] a `p`, `h`, `s` or `n` field that does not
# have `data_length`s of 52, 52, 52 or 53, respectively.
FIXED_LENGTHS = {
    TagCode.PAYMENT_HASH: 52,
    TagCode.SECRET: 52,
    TagCode.PURPOSE_COMMIT_HASH: 52,
    TagCode.PAYEE_NODE_KEY: 53,
}


@dataclass(frozen=True)
class Tag:
    name: str
    data: Any

    def to_dict(self) -> dict:
        data = self.data
        if isinstance(data, tuple):
            data = [d.to_dict() for d in data]
        elif hasattr(data, 'to_dict'):
            data = data.to_dict()
        return {'tagName': self.name, 'data': data}


@dataclass(frozen=True)
class UnknownTag:
    """A field we have no decoder for, kept as a bech32 token of its words."""

    tag_code: int
    words: str

    def to_dict(self) -> dict:
        return {'tagCode': self.tag_code, 'words': self.words}


@dataclass(frozen=True)
class FallbackAddress:
    code: int
    address_hash: str
    # Formatting the on-chain address from its hash is not supported.
    address: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            'code': self.code,
            'address': self.address,
            'addressHash': self.address_hash,
        }


@dataclass(frozen=True)
class RoutingInfo:
    pubkey: str
    short_channel_id: str
    fee_base_msat: int
    fee_proportional_millionths: int
    cltv_expiry_delta: int

    length = 33 + 8 + 4 + 4 + 2

    @classmethod
    def from_bytes(cls, b: bytes) -> 'RoutingInfo':
        assert(len(b) == cls.length)
        return cls(
            pubkey=b[0:33].hex(),
            short_channel_id=b[33:41].hex(),
            fee_base_msat=int.from_bytes(b[41:45], 'big'),
            fee_proportional_millionths=int.from_bytes(b[45:49], 'big'),
            cltv_expiry_delta=int.from_bytes(b[49:51], 'big'),
        )

    def to_dict(self) -> dict:
        return {
            'pubkey': self.pubkey,
            'short_channel_id': self.short_channel_id,
            'fee_base_msat': self.fee_base_msat,
            'fee_proportional_millionths': self.fee_proportional_millionths,
            'cltv_expiry_delta': self.cltv_expiry_delta,
        }


def words_to_hex(words: bytes) -> str:
    return words_to_bytes(words).hex()


def words_to_utf8(words: bytes) -> str:
    try:
        return words_to_bytes(words).decode("utf-8")
    except UnicodeDecodeError as e:
        raise MalformedEncodingError("Description is not valid UTF-8") from e


def parse_fallback(words: bytes) -> FallbackAddress:
    if not words:
        raise TruncatedTagError(TagCode.FALLBACK_ADDRESS.tag_name, 1, 0)

    version = words[0]
    # 17 is P2PKH, 18 is P2SH and 0 a version 0 witness program.
    if version not in (0, 17, 18):
        raise UnknownFallbackVersionError(version)

    return FallbackAddress(
        code=version,
        address_hash=words_to_bytes(words[1:]).hex(),
    )


def parse_routing_info(words: bytes) -> Tuple[RoutingInfo, ...]:
    b = words_to_bytes(words)
    if len(b) % RoutingInfo.length != 0:
        raise TruncatedTagError(
            TagCode.ROUTING_INFO.tag_name,
            (len(b) // RoutingInfo.length + 1) * RoutingInfo.length,
            len(b),
        )

    return tuple(
        RoutingInfo.from_bytes(b[i:i + RoutingInfo.length])
        for i in range(0, len(b), RoutingInfo.length)
    )


TAG_PARSERS: Dict[TagCode, Callable[[bytes], Any]] = {
    TagCode.PAYMENT_HASH: words_to_hex,
    TagCode.SECRET: words_to_hex,
    TagCode.DESCRIPTION: words_to_utf8,
    TagCode.PAYEE_NODE_KEY: words_to_hex,
    TagCode.PURPOSE_COMMIT_HASH: words_to_hex,
    TagCode.EXPIRE_TIME: words_to_int,
    TagCode.MIN_FINAL_CLTV_EXPIRY: words_to_int,
    TagCode.FALLBACK_ADDRESS: parse_fallback,
    TagCode.ROUTING_INFO: parse_routing_info,
}


def unknown_tag(code: int, words: bytes) -> Tag:
    return Tag(UNKNOWN_TAG, UnknownTag(code, bech32_encode(UNKNOWN_TAG_HRP, words)))


def decode_tag(code: int, words: bytes) -> Tag:
    """Decode the payload of a single tagged field."""
    try:
        tag = TagCode(code)
    except ValueError:
        return unknown_tag(code, words)

    expected = FIXED_LENGTHS.get(tag)
    if expected is not None and len(words) != expected:
        return unknown_tag(code, words)

    return Tag(tag.tag_name, TAG_PARSERS[tag](words))


# Try to pull out tagged data: returns code, tagged words and remainder.
def pull_tagged(words: bytes) -> Tuple[int, bytes, bytes]:
    if len(words) < 3:
        raise TruncatedTagError('header', 3, len(words))

    code = words[0]
    length = words_to_int(words[1:3])
    payload = words[3:3 + length]
    if len(payload) != length:
        raise TruncatedTagError(str(code), length, len(payload))

    return code, payload, words[3 + length:]


def parse_tags(words: bytes) -> List[Tag]:
    """Split the tag section of an invoice into decoded tags, in order.
    """
    tags = []
    while words:
        code, payload, words = pull_tagged(words)
        tags.append(decode_tag(code, payload))
    return tags


def find_tag(tags: Sequence[Tag], name: str) -> Optional[Tag]:
    for t in tags:
        if t.name == name:
            return t
    return None
