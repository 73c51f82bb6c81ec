import re
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .errors import MalformedEncodingError, UnknownNetworkError


@dataclass(frozen=True)
class Network:
    """Chain parameters an invoice can be issued for."""

    chain: str
    bech32: str
    pub_key_hash: int
    script_hash: int
    valid_witness_versions: Tuple[int, ...] = (0,)

    def to_dict(self) -> dict:
        return {
            'chain': self.chain,
            'bech32': self.bech32,
            'pubKeyHash': self.pub_key_hash,
            'scriptHash': self.script_hash,
            'validWitnessVersions': list(self.valid_witness_versions),
        }

    @classmethod
    def from_dict(cls, d: dict) -> 'Network':
        return cls(
            chain=d['chain'],
            bech32=d['bech32'],
            pub_key_hash=d['pubKeyHash'],
            script_hash=d['scriptHash'],
            valid_witness_versions=tuple(d.get('validWitnessVersions', (0,))),
        )


MAINNET = Network(chain='mainnet', bech32='bc', pub_key_hash=0x00, script_hash=0x05)
TESTNET = Network(chain='testnet', bech32='tb', pub_key_hash=0x6f, script_hash=0xc4)
SIMNET = Network(chain='simnet', bech32='sb', pub_key_hash=0x3f, script_hash=0x7b)

NETWORKS: Dict[str, Network] = {n.bech32: n for n in (MAINNET, TESTNET, SIMNET)}


# The multiplier letter can't be told apart from the tail of the chain
# designator, so first try to split off digits and a multiplier, and if no
# digits were found, treat the whole remainder as the designator.
_PREFIX_RE = re.compile(r'^ln(\S+?)(\d*)([a-zA-Z]?)$')
_PREFIX_NO_AMOUNT_RE = re.compile(r'^ln(\S+)$')


def split_prefix(hrp: str) -> Tuple[str, str]:
    """Split a human readable part into chain designator and amount.

    The amount keeps its multiplier, e.g. `lnbc2500u` -> `('bc', '2500u')`.
    """
    # BOLT #11:
    #
    # A reader MUST fail if it does not understand the `prefix`.
    if not hrp.startswith('ln'):
        raise MalformedEncodingError(
            "Prefix {} does not start with ln".format(hrp))

    m = _PREFIX_RE.match(hrp)
    if m and m.group(2):
        return m.group(1), m.group(2) + m.group(3)

    m = _PREFIX_NO_AMOUNT_RE.match(hrp)
    if not m:
        raise MalformedEncodingError(
            "Not a proper lightning payment request prefix: {}".format(hrp))
    return m.group(1), ''


def resolve_network(bech32_prefix: str,
                    networks: Optional[Dict[str, Network]] = None) -> Network:
    if networks is None:
        networks = NETWORKS
    try:
        return networks[bech32_prefix]
    except KeyError:
        raise UnknownNetworkError(bech32_prefix) from None
