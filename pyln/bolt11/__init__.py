from .bech32 import bech32_decode, bech32_encode
from .errors import (
    Bolt11Error,
    DenormalizeError,
    ExpiryOutOfRangeError,
    InvalidAmountError,
    MalformedEncodingError,
    SignatureError,
    SignatureMismatchError,
    TruncatedTagError,
    UnknownFallbackVersionError,
    UnknownNetworkError,
    UnrecoverableSignatureError,
)
from .invoice import Bolt11Decoder, Invoice, decode
from .network import MAINNET, NETWORKS, SIMNET, TESTNET, Network
from .tags import FallbackAddress, RoutingInfo, Tag, TagCode, UnknownTag

__version__ = "0.1.0"

__all__ = [
    "Bolt11Decoder",
    "Invoice",
    "decode",
    "bech32_decode",
    "bech32_encode",
    "Network",
    "NETWORKS",
    "MAINNET",
    "TESTNET",
    "SIMNET",
    "Tag",
    "TagCode",
    "UnknownTag",
    "FallbackAddress",
    "RoutingInfo",
    "Bolt11Error",
    "MalformedEncodingError",
    "TruncatedTagError",
    "InvalidAmountError",
    "UnknownNetworkError",
    "SignatureError",
    "UnrecoverableSignatureError",
    "SignatureMismatchError",
    "UnknownFallbackVersionError",
    "DenormalizeError",
    "ExpiryOutOfRangeError",
    "__version__",
]
