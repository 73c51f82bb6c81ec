import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Optional, Tuple

from .amount import parse_amount
from .bech32 import bech32_decode
from .errors import DenormalizeError, ExpiryOutOfRangeError
from .network import NETWORKS, Network, resolve_network, split_prefix
from .signature import check_payee, recover_pubkey, split_signature
from .tags import (
    DEFAULT_EXPIRE_TIME,
    DEFAULT_MIN_FINAL_CLTV_EXPIRY,
    UNKNOWN_TAG,
    FallbackAddress,
    RoutingInfo,
    Tag,
    TagCode,
    UnknownTag,
    find_tag,
    parse_tags,
)
from .words import words_to_int

TIMESTAMP_WORDS = 7


def iso_timestamp(ts: int) -> str:
    return datetime.fromtimestamp(ts, timezone.utc).isoformat()


@dataclass(frozen=True)
class Invoice:
    """A decoded and signature-checked payment request.

    `satoshis` is None both when the invoice carries no amount and when the
    amount isn't a whole number of satoshis; `millisatoshis` tells the two
    apart.
    """

    payment_request: str
    prefix: str
    network: Network
    timestamp: int
    timestamp_string: str
    payee_node_key: str
    signature: str
    recovery_flag: int
    tags: Tuple[Tag, ...] = ()
    satoshis: Optional[int] = None
    millisatoshis: Optional[int] = None
    expiry_timestamp: Optional[int] = None
    expiry_string: Optional[str] = None
    payment_request_hash: Optional[str] = None
    message_to_sign: Optional[str] = None
    complete: bool = True

    def find_tag(self, name: str) -> Optional[Tag]:
        return find_tag(self.tags, name)

    def _tag_data(self, name: str, default=None):
        t = self.find_tag(name)
        return default if t is None else t.data

    @property
    def payment_hash(self) -> Optional[str]:
        return self._tag_data(TagCode.PAYMENT_HASH.tag_name)

    @property
    def description(self) -> Optional[str]:
        return self._tag_data(TagCode.DESCRIPTION.tag_name)

    @property
    def expiry(self) -> int:
        return self._tag_data(TagCode.EXPIRE_TIME.tag_name, DEFAULT_EXPIRE_TIME)

    @property
    def min_final_cltv_expiry(self) -> int:
        return self._tag_data(TagCode.MIN_FINAL_CLTV_EXPIRY.tag_name,
                              DEFAULT_MIN_FINAL_CLTV_EXPIRY)

    def is_expired(self, now: Optional[float] = None) -> bool:
        if now is None:
            now = time.time()
        return now > self.timestamp + self.expiry

    def __str__(self):
        return "Invoice[{}, msat={}, {}, tags=[{}]]".format(
            self.payee_node_key, self.millisatoshis, self.network.chain,
            ", ".join([t.name for t in self.tags])
        )

    def to_dict(self) -> dict:
        """The decode result as a plain map with sorted keys.

        Keys starting with `_` carry the signed message and its hash and are
        only meant for debugging.
        """
        d = {
            'paymentRequest': self.payment_request,
            'complete': self.complete,
            'prefix': self.prefix,
            'network': self.network.to_dict(),
            'millisatoshis': self.millisatoshis,
            'timestamp': self.timestamp,
            'timestampString': self.timestamp_string,
            'payeeNodeKey': self.payee_node_key,
            'signature': self.signature,
            'recoveryFlag': self.recovery_flag,
            'tags': [t.to_dict() for t in self.tags],
            '_payReqHash': self.payment_request_hash,
            '_toSign': self.message_to_sign,
        }
        # An amount that can't be expressed in satoshis drops the key.
        if self.satoshis is not None or self.millisatoshis is None:
            d['satoshis'] = self.satoshis
        if self.expiry_timestamp is not None:
            d['timeExpireDate'] = self.expiry_timestamp
            d['timeExpireDateString'] = self.expiry_string
        return dict(sorted(d.items()))

    @classmethod
    def from_dict(cls, d: dict) -> 'Invoice':
        """Build an `Invoice` from the map returned by `to_dict`."""
        if not isinstance(d, dict):
            raise DenormalizeError(cls.__name__, 'data')
        # Keys starting with `_` only carry debugging data.
        d = {k: v for k, v in d.items() if not k.startswith('_')}
        _check_keys(cls, d, _INVOICE_FIELDS.keys(), _INVOICE_REQUIRED)

        kwargs = {}
        for key, value in d.items():
            name, convert = _INVOICE_FIELDS[key]
            kwargs[name] = convert(value)
        return cls(**kwargs)


def _tag_from_dict(d: dict) -> Tag:
    _check_keys(Tag, d, ('tagName', 'data'), ('tagName', 'data'))

    name, data = d['tagName'], d['data']
    if name == UNKNOWN_TAG:
        _check_keys(UnknownTag, data, ('tagCode', 'words'), ('tagCode', 'words'))
        data = UnknownTag(tag_code=data['tagCode'], words=data['words'])
    elif name == TagCode.FALLBACK_ADDRESS.tag_name:
        _check_keys(FallbackAddress, data, ('code', 'address', 'addressHash'),
                    ('code', 'addressHash'))
        data = FallbackAddress(code=data['code'],
                               address_hash=data['addressHash'],
                               address=data.get('address'))
    elif name == TagCode.ROUTING_INFO.tag_name:
        if not isinstance(data, list):
            raise DenormalizeError(RoutingInfo.__name__, 'data')
        fields = RoutingInfo.__dataclass_fields__.keys()
        routes = []
        for r in data:
            _check_keys(RoutingInfo, r, fields, fields)
            routes.append(RoutingInfo(**r))
        data = tuple(routes)
    return Tag(name, data)


def _tags_from_dict(tags) -> Tuple[Tag, ...]:
    if not isinstance(tags, list):
        raise DenormalizeError(Tag.__name__, 'tags')
    return tuple(_tag_from_dict(t) for t in tags)


def _network_from_dict(d: dict) -> Network:
    _check_keys(Network, d,
                ('chain', 'bech32', 'pubKeyHash', 'scriptHash', 'validWitnessVersions'),
                ('chain', 'bech32', 'pubKeyHash', 'scriptHash'))
    return Network.from_dict(d)


def _check_keys(target, d: dict, allowed, required=()) -> None:
    if not isinstance(d, dict):
        raise DenormalizeError(target.__name__, 'data')
    for key in d:
        if key not in allowed:
            raise DenormalizeError(target.__name__, key)
    for key in required:
        if key not in d:
            raise DenormalizeError(target.__name__, key)


def _ident(v):
    return v


_INVOICE_FIELDS = {
    'paymentRequest': ('payment_request', _ident),
    'complete': ('complete', _ident),
    'prefix': ('prefix', _ident),
    'network': ('network', _network_from_dict),
    'satoshis': ('satoshis', _ident),
    'millisatoshis': ('millisatoshis', _ident),
    'timestamp': ('timestamp', _ident),
    'timestampString': ('timestamp_string', _ident),
    'payeeNodeKey': ('payee_node_key', _ident),
    'signature': ('signature', _ident),
    'recoveryFlag': ('recovery_flag', _ident),
    'tags': ('tags', _tags_from_dict),
    'timeExpireDate': ('expiry_timestamp', _ident),
    'timeExpireDateString': ('expiry_string', _ident),
}

_INVOICE_REQUIRED = (
    'paymentRequest', 'prefix', 'network', 'timestamp', 'timestampString',
    'payeeNodeKey', 'signature', 'recoveryFlag',
)


class Bolt11Decoder(object):
    """Decodes BOLT11 payment requests into `Invoice`s.

    The decoder holds no state besides its configuration, so a single
    instance can be shared between threads.
    """

    def __init__(self, networks: Optional[Dict[str, Network]] = None,
                 logger=logging):
        self.networks = NETWORKS if networks is None else networks
        self.logger = logger

    def decode(self, payment_request: str) -> Invoice:
        hrp, words = bech32_decode(payment_request)

        bech32_prefix, amountstr = split_prefix(hrp)

        # The signature is always the last 104 words, cutting it off first
        # leaves only the timestamp and the tags.
        data_words, signature, recovery_flag = split_signature(words)

        network = resolve_network(bech32_prefix, self.networks)

        # BOLT #11:
        #
        # A reader SHOULD indicate if amount is unspecified, otherwise it MUST
        # multiply `amount` by the `multiplier` value (if any) to derive the
        # amount required for payment.
        satoshis, millisatoshis = parse_amount(amountstr)
        self.logger.debug("Decoding invoice for %s, amount=%r msat",
                          network.chain, millisatoshis)

        timestamp = words_to_int(data_words[:TIMESTAMP_WORDS])
        tags = parse_tags(data_words[TIMESTAMP_WORDS:])
        for t in tags:
            self.logger.debug("Invoice tag %s: %r", t.name, t.data)

        recovered = recover_pubkey(hrp, data_words, signature, recovery_flag)
        payee = find_tag(tags, TagCode.PAYEE_NODE_KEY.tag_name)
        check_payee(recovered, payee.data if payee else None)
        self.logger.debug("Recovered payee node key %s", recovered.hexpubkey)

        expiry_timestamp = expiry_string = None
        expire_time = find_tag(tags, TagCode.EXPIRE_TIME.tag_name)
        if expire_time is not None:
            expiry_timestamp = timestamp + expire_time.data
            try:
                expiry_string = iso_timestamp(expiry_timestamp)
            except (OverflowError, OSError, ValueError) as e:
                raise ExpiryOutOfRangeError(expiry_timestamp) from e

        return Invoice(
            payment_request=payment_request,
            prefix=hrp,
            network=network,
            satoshis=satoshis,
            millisatoshis=millisatoshis,
            timestamp=timestamp,
            timestamp_string=iso_timestamp(timestamp),
            payee_node_key=recovered.hexpubkey,
            signature=recovered.signature.hex(),
            recovery_flag=recovered.recovery_flag,
            tags=tuple(tags),
            expiry_timestamp=expiry_timestamp,
            expiry_string=expiry_string,
            payment_request_hash=recovered.message_hash.hex(),
            message_to_sign=recovered.message.hex(),
        )


_default_decoder = Bolt11Decoder()


def decode(payment_request: str) -> Invoice:
    """Decode and verify a payment request with the default networks."""
    return _default_decoder.decode(payment_request)
