"""
Private-key signing of UserOperation digests
"""

import logging
from typing import Union

from eth_account import Account
from eth_keys import keys
from eth_keys.exceptions import BadSignature, ValidationError

from errors import InvalidKeyError, SigningError

logger = logging.getLogger(__name__)

DIGEST_LENGTH = 32
SIGNATURE_LENGTH = 65

# Ethereum legacy recovery id offset expected by the entry point validator
RECOVERY_ID_OFFSET = 27


class PrivateKeySigner:
    """Signs 32-byte digests as-is; the caller is responsible for hashing"""

    def __init__(self, private_key: Union[str, bytes]):
        try:
            self._account = Account.from_key(private_key)
        except (ValueError, TypeError, ValidationError) as e:
            raise InvalidKeyError("failed to parse private key") from e

    @property
    def address(self) -> str:
        return self._account.address

    def sign_digest(self, digest: bytes) -> bytes:
        if len(digest) != DIGEST_LENGTH:
            raise SigningError(f"Digest must be {DIGEST_LENGTH} bytes, got {len(digest)}")

        try:
            signed = Account.unsafe_sign_hash(bytes(digest), self._account.key)
        except (ValueError, TypeError, ValidationError) as e:
            raise SigningError(f"failed to sign digest: {e}") from e

        # eth_account already encodes v as 27/28
        return bytes(signed.signature)


def sign_digest(digest: bytes, private_key: Union[str, bytes]) -> bytes:
    return PrivateKeySigner(private_key).sign_digest(digest)


def recover_signer(digest: bytes, signature: bytes) -> str:
    """Recover the checksum address that produced a 65-byte signature over digest"""
    if len(signature) != SIGNATURE_LENGTH:
        raise SigningError(f"Signature must be {SIGNATURE_LENGTH} bytes, got {len(signature)}")
    if len(digest) != DIGEST_LENGTH:
        raise SigningError(f"Digest must be {DIGEST_LENGTH} bytes, got {len(digest)}")

    v = signature[64]
    if v >= RECOVERY_ID_OFFSET:
        v -= RECOVERY_ID_OFFSET
    try:
        sig = keys.Signature(signature_bytes=bytes(signature[:64]) + bytes([v]))
        public_key = sig.recover_public_key_from_msg_hash(bytes(digest))
    except (BadSignature, ValidationError, ValueError) as e:
        raise SigningError(f"failed to recover signer: {e}") from e
    return public_key.to_checksum_address()
