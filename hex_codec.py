"""
Conversions between native values and 0x-prefixed wire hex strings
"""

from typing import Optional, Union

from web3 import Web3

from config import ZERO_ADDRESS
from errors import EncodingError

HEX_DIGITS = set("0123456789abcdefABCDEF")


def to_hex_int(value: int) -> str:
    """Minimal lower-case hex; zero is 0x0"""
    if not isinstance(value, int) or isinstance(value, bool):
        raise EncodingError(f"Expected an integer, got {value!r}")
    if value < 0:
        raise EncodingError(f"Cannot hex-encode negative value {value}")
    return hex(value)


def to_hex_bytes(data: bytes) -> str:
    if not isinstance(data, (bytes, bytearray)):
        raise EncodingError(f"Expected bytes, got {type(data).__name__}")
    return "0x" + bytes(data).hex()


def _digits(value: str) -> str:
    if not isinstance(value, str) or not value.startswith(("0x", "0X")):
        raise EncodingError(f"Hex value must start with 0x: {value!r}")
    digits = value[2:]
    if not set(digits) <= HEX_DIGITS:
        raise EncodingError(f"Invalid hex digits in {value!r}")
    return digits


def from_hex_int(value: str) -> int:
    digits = _digits(value)
    if not digits:
        raise EncodingError("Empty hex integer")
    return Web3.to_int(hexstr=value)


def from_hex_bytes(value: str) -> bytes:
    digits = _digits(value)
    if len(digits) % 2:
        raise EncodingError(f"Hex byte string has an odd number of digits: {value!r}")
    return bytes(Web3.to_bytes(hexstr=value))


def to_checksum_address(address: Union[str, bytes]) -> str:
    """Validate an address and return its EIP-55 form"""
    if isinstance(address, (bytes, bytearray)):
        if len(address) != 20:
            raise EncodingError(f"Address must be 20 bytes, got {len(address)}")
        address = to_hex_bytes(address)
    if not isinstance(address, str) or not Web3.is_address(address):
        raise EncodingError(f"Invalid address: {address!r}")
    return Web3.to_checksum_address(address)


def is_zero_address(address: Optional[Union[str, bytes]]) -> bool:
    if address is None:
        return True
    return to_checksum_address(address) == ZERO_ADDRESS
