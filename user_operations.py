"""
UserOperation models and creation utilities
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from web3 import Web3
from eth_abi import encode

from hex_codec import (
    from_hex_bytes,
    from_hex_int,
    to_checksum_address,
    to_hex_bytes,
    to_hex_int,
)

logger = logging.getLogger(__name__)

# Function selector for execute(address,uint256,bytes)
EXECUTE_SELECTOR = Web3.keccak(text="execute(address,uint256,bytes)")[:4]


@dataclass(frozen=True)
class UserOperation:
    """
    Unsigned ERC-4337 (v0.6) UserOperation.

    Numbers are plain ints and byte strings are bytes; they are hex-encoded
    only when the operation is put on the wire. A field left as None was not
    supplied and is omitted from the wire form.
    """
    sender: str
    nonce: int
    init_code: bytes = b""
    call_data: bytes = b""
    call_gas_limit: Optional[int] = None
    verification_gas_limit: Optional[int] = None
    pre_verification_gas: Optional[int] = None
    max_fee_per_gas: Optional[int] = None
    max_priority_fee_per_gas: Optional[int] = None
    paymaster_and_data: Optional[bytes] = None

    def sign_with(self, signature: bytes) -> "SignedUserOperation":
        return SignedUserOperation(user_operation=self, signature=bytes(signature))

    def to_rpc_dict(self) -> Dict[str, str]:
        return _rpc_dict(self, signature=None)


@dataclass(frozen=True)
class SignedUserOperation:
    """Wrapper holding a UserOperation and its signature"""
    user_operation: UserOperation
    signature: bytes

    def to_rpc_dict(self) -> Dict[str, str]:
        return _rpc_dict(self.user_operation, signature=self.signature)


def _rpc_dict(op: UserOperation, signature: Optional[bytes]) -> Dict[str, str]:
    fields = [
        ("sender", op.sender, str),
        ("nonce", op.nonce, to_hex_int),
        ("initCode", op.init_code, to_hex_bytes),
        ("callData", op.call_data, to_hex_bytes),
        ("signature", signature, to_hex_bytes),
        ("callGasLimit", op.call_gas_limit, to_hex_int),
        ("verificationGasLimit", op.verification_gas_limit, to_hex_int),
        ("preVerificationGas", op.pre_verification_gas, to_hex_int),
        ("maxFeePerGas", op.max_fee_per_gas, to_hex_int),
        ("maxPriorityFeePerGas", op.max_priority_fee_per_gas, to_hex_int),
        ("paymasterAndData", op.paymaster_and_data, to_hex_bytes),
    ]
    return {key: encoder(value) for key, value, encoder in fields if value is not None}


@dataclass(frozen=True)
class GasAndPaymasterQuote:
    """Result of alchemy_requestGasAndPaymasterAndData"""
    pre_verification_gas: Optional[int] = None
    call_gas_limit: Optional[int] = None
    verification_gas_limit: Optional[int] = None
    paymaster_and_data: Optional[bytes] = None
    max_fee_per_gas: Optional[int] = None
    max_priority_fee_per_gas: Optional[int] = None

    @classmethod
    def from_rpc(cls, data: Dict[str, Any]) -> "GasAndPaymasterQuote":
        def parse_int(key: str) -> Optional[int]:
            value = data.get(key)
            return from_hex_int(value) if value else None

        paymaster_and_data = data.get("paymasterAndData")
        return cls(
            pre_verification_gas=parse_int("preVerificationGas"),
            call_gas_limit=parse_int("callGasLimit"),
            verification_gas_limit=parse_int("verificationGasLimit"),
            paymaster_and_data=from_hex_bytes(paymaster_and_data) if paymaster_and_data else None,
            max_fee_per_gas=parse_int("maxFeePerGas"),
            max_priority_fee_per_gas=parse_int("maxPriorityFeePerGas"),
        )


@dataclass(frozen=True)
class UserOperationReceipt:
    user_op_hash: str
    success: bool


@dataclass(frozen=True)
class UserOperationByHash:
    """Result of eth_getUserOperationByHash"""
    user_operation: Dict[str, Any]
    entry_point: Optional[str] = None
    block_number: Optional[int] = None
    block_hash: Optional[str] = None
    transaction_hash: Optional[str] = None


def create_user_operation(
    call_data: bytes,
    quote: GasAndPaymasterQuote,
    sender: str,
    nonce: int,
    init_code: bytes = b"",
) -> UserOperation:
    """Populate an unsigned UserOperation from caller intent and a gas/paymaster quote"""
    return UserOperation(
        sender=to_checksum_address(sender),
        nonce=nonce,
        init_code=init_code,
        call_data=bytes(call_data),
        call_gas_limit=quote.call_gas_limit,
        verification_gas_limit=quote.verification_gas_limit,
        pre_verification_gas=quote.pre_verification_gas,
        max_fee_per_gas=quote.max_fee_per_gas,
        max_priority_fee_per_gas=quote.max_priority_fee_per_gas,
        paymaster_and_data=quote.paymaster_and_data,
    )


def create_quote_user_operation(
    call_data: bytes,
    sender: str,
    nonce: int,
    init_code: bytes,
    dummy_signature: bytes,
) -> SignedUserOperation:
    """Operation sent for gas estimation: zero gas fields and a placeholder signature"""
    op = UserOperation(
        sender=to_checksum_address(sender),
        nonce=nonce,
        init_code=init_code,
        call_data=bytes(call_data),
        call_gas_limit=0,
        verification_gas_limit=0,
        pre_verification_gas=0,
        max_fee_per_gas=0,
        max_priority_fee_per_gas=0,
        paymaster_and_data=b"",
    )
    return op.sign_with(dummy_signature)


def encode_execute_call_data(to_address: str, amount_wei: int, data: bytes = b"") -> bytes:
    """Encode execute(address,uint256,bytes) for a SimpleAccount-style wallet"""
    encoded_params = encode(
        ['address', 'uint256', 'bytes'],
        [to_checksum_address(to_address), amount_wei, data]
    )
    logger.debug(f"Encoded execute call: {amount_wei} wei to {to_address}")
    return bytes(EXECUTE_SELECTOR) + encoded_params
