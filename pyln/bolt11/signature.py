import hashlib
from dataclasses import dataclass
from typing import Optional

import coincurve

from .errors import (
    SignatureError,
    SignatureMismatchError,
    UnrecoverableSignatureError,
)
from .words import words_to_bytes, words_to_padded_bytes

# 64 bytes of compact signature plus the recovery flag: 520 bits, 104 words.
SIGNATURE_WORDS = 104


@dataclass(frozen=True)
class RecoveredSignature:
    signature: bytes
    recovery_flag: int
    message: bytes
    message_hash: bytes
    pubkey: bytes

    @property
    def hexpubkey(self) -> str:
        return self.pubkey.hex()


def split_signature(words: bytes):
    """Split the words of an invoice into data words and signature.

    Returns `(data_words, signature, recovery_flag)`.
    """
    if len(words) < SIGNATURE_WORDS:
        raise SignatureError("Too short to contain signature")

    sigdecoded = words_to_bytes(words[-SIGNATURE_WORDS:])
    signature, recovery_flag = sigdecoded[:-1], sigdecoded[-1]
    if len(signature) != 64 or recovery_flag not in (0, 1, 2, 3):
        raise SignatureError("Signature is missing or incorrect")

    return words[:-SIGNATURE_WORDS], signature, recovery_flag


def signing_message(hrp: str, data_words: bytes) -> bytes:
    # We actually sign the hrp, then data (padded to 8 bits with zeroes).
    return hrp.encode('ASCII') + words_to_padded_bytes(data_words)


def recover_pubkey(hrp: str, data_words: bytes, signature: bytes,
                   recovery_flag: int) -> RecoveredSignature:
    """Recover the compressed public key that signed the invoice."""
    message = signing_message(hrp, data_words)
    message_hash = hashlib.sha256(message).digest()

    try:
        pubkey = coincurve.PublicKey.from_signature_and_message(
            signature + bytes([recovery_flag]), message_hash, hasher=None
        )
    # coincurve raises a plain Exception when libsecp256k1 rejects the input.
    except Exception as e:
        raise UnrecoverableSignatureError(
            "Unable to recover signature from signed message") from e

    return RecoveredSignature(
        signature=signature,
        recovery_flag=recovery_flag,
        message=message,
        message_hash=message_hash,
        pubkey=pubkey.format(compressed=True),
    )


def check_payee(recovered: RecoveredSignature, payee_node_key: Optional[str]) -> None:
    # BOLT #11:
    #
    # A reader MUST check that the `signature` is valid (see the `n` tagged
    # field specified below).
    if payee_node_key is None:
        return

    if bytes.fromhex(payee_node_key) != recovered.pubkey:
        raise SignatureMismatchError(payee_node_key, recovered.hexpubkey)
