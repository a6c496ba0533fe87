"""
Init code for smart accounts that are not yet deployed
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from web3 import Web3
from eth_abi import encode
from eth_abi.exceptions import EncodingError as ABIEncodingError, ParseError
from eth_abi.grammar import parse

from config import DEFAULT_FACTORY_SIGNATURE
from errors import EncodingError
from hex_codec import from_hex_bytes, is_zero_address, to_checksum_address

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FactoryCall:
    """Factory function used to deploy an account; the owner is always its first argument"""
    signature: str = DEFAULT_FACTORY_SIGNATURE
    extra_args: Tuple = (0,)

    @property
    def selector(self) -> bytes:
        return bytes(Web3.keccak(text=self.signature)[:4])

    @property
    def arg_types(self) -> list:
        start, end = self.signature.find("("), self.signature.rfind(")")
        if start <= 0 or end != len(self.signature) - 1:
            raise EncodingError(f"Malformed factory signature: {self.signature}")
        inner = self.signature[start + 1:end]
        if not inner:
            return []
        try:
            tuple_type = parse("(" + inner + ")")
            tuple_type.validate()
        except (ParseError, ValueError) as e:
            raise EncodingError(f"Malformed factory signature: {self.signature}") from e
        return [component.to_type_str() for component in tuple_type.components]


DEFAULT_FACTORY_CALL = FactoryCall()


def build_init_code(owner: str, factory: str, factory_call: FactoryCall = DEFAULT_FACTORY_CALL) -> bytes:
    """Return factory address ++ ABI-encoded factory call for the given owner"""
    arg_types = factory_call.arg_types
    args = [to_checksum_address(owner), *factory_call.extra_args]
    if not arg_types or arg_types[0] != "address":
        raise EncodingError(f"Factory call must take the owner address first: {factory_call.signature}")
    if len(arg_types) != len(args):
        raise EncodingError(
            f"{factory_call.signature} takes {len(arg_types)} arguments, got {len(args)}"
        )

    try:
        encoded_args = encode(arg_types, args)
    except (ABIEncodingError, ParseError, TypeError, ValueError) as e:
        raise EncodingError(f"Failed to encode factory call {factory_call.signature}: {e}") from e

    factory_bytes = from_hex_bytes(to_checksum_address(factory))
    return factory_bytes + factory_call.selector + encoded_args


def resolve_init_code(
    owner: Optional[str],
    factory: Optional[str],
    factory_call: FactoryCall = DEFAULT_FACTORY_CALL,
) -> bytes:
    """Empty init code for deployed accounts (zero factory), factory init code otherwise"""
    if is_zero_address(factory):
        return b""

    logger.debug("factory address is not zero, initializing smart account")
    if owner is None:
        raise EncodingError("An owner address is required to build init code")
    return build_init_code(owner, factory, factory_call)
