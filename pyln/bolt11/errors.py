class Bolt11Error(ValueError):
    """Base class for everything that can go wrong while decoding an invoice.
    """


class MalformedEncodingError(Bolt11Error):
    """Bad bech32 (checksum, separator, case) or a prefix that isn't `ln`."""


class TruncatedTagError(MalformedEncodingError):
    def __init__(self, tag: str, expected: int, got: int):
        super().__init__(
            "Tag {} is truncated: expected {} units, got {}".format(
                tag, expected, got
            )
        )

        self.tag = tag
        self.expected = expected
        self.got = got


class InvalidAmountError(Bolt11Error):
    def __init__(self, amount: str, reason: str):
        super().__init__("Invalid amount '{}': {}".format(amount, reason))

        self.amount = amount
        self.reason = reason


class UnknownNetworkError(Bolt11Error):
    def __init__(self, bech32_prefix: str):
        super().__init__(
            "Unknown network for invoice: '{}'".format(bech32_prefix)
        )

        self.bech32_prefix = bech32_prefix


class SignatureError(Bolt11Error):
    """The signature block is missing, has the wrong size or a bad flag."""


class UnrecoverableSignatureError(Bolt11Error):
    """No public key can be recovered from the signature."""


class SignatureMismatchError(Bolt11Error):
    def __init__(self, declared: str, recovered: str):
        super().__init__(
            "Signature pubkey {} does not match payee pubkey {}".format(
                recovered, declared
            )
        )

        self.declared = declared
        self.recovered = recovered


class UnknownFallbackVersionError(Bolt11Error):
    def __init__(self, version: int):
        super().__init__(
            "Unknown fallback address version {}".format(version)
        )

        self.version = version


class DenormalizeError(Bolt11Error):
    def __init__(self, target: str, key: str):
        super().__init__(
            "Cannot denormalize into {}: field {} unavailable".format(
                target, key
            )
        )

        self.target = target
        self.key = key


class ExpiryOutOfRangeError(Bolt11Error):
    def __init__(self, expiry_timestamp: int):
        super().__init__(
            "Expiry timestamp {} cannot be represented as a date".format(
                expiry_timestamp
            )
        )

        self.expiry_timestamp = expiry_timestamp
