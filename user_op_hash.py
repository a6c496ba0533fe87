"""
ERC-4337 (v0.6) UserOperation hash, the digest the account owner signs
"""

from typing import List, Union

from web3 import Web3
from eth_abi import encode
from eth_abi.exceptions import EncodingError as ABIEncodingError

from errors import EncodingError
from hex_codec import to_checksum_address
from user_operations import SignedUserOperation, UserOperation

PACKED_USER_OPERATION_TYPES = [
    'address',  # sender
    'uint256',  # nonce
    'bytes32',  # keccak(initCode)
    'bytes32',  # keccak(callData)
    'uint256',  # callGasLimit
    'uint256',  # verificationGasLimit
    'uint256',  # preVerificationGas
    'uint256',  # maxFeePerGas
    'uint256',  # maxPriorityFeePerGas
    'bytes32',  # keccak(paymasterAndData)
]


def _abi_encode(types: List[str], values: list) -> bytes:
    try:
        return encode(types, values)
    except (ABIEncodingError, TypeError, ValueError) as e:
        raise EncodingError(f"Failed to encode UserOperation: {e}") from e


def pack_user_operation(op: Union[UserOperation, SignedUserOperation]) -> bytes:
    """ABI-encode the operation with its byte fields replaced by their hashes"""
    if isinstance(op, SignedUserOperation):
        op = op.user_operation

    return _abi_encode(PACKED_USER_OPERATION_TYPES, [
        to_checksum_address(op.sender),
        op.nonce,
        Web3.keccak(op.init_code),
        Web3.keccak(op.call_data),
        op.call_gas_limit or 0,
        op.verification_gas_limit or 0,
        op.pre_verification_gas or 0,
        op.max_fee_per_gas or 0,
        op.max_priority_fee_per_gas or 0,
        Web3.keccak(op.paymaster_and_data or b""),
    ])


def get_user_operation_hash(
    op: Union[UserOperation, SignedUserOperation],
    chain_id: int,
    entry_point: str,
) -> bytes:
    """keccak(abi.encode(keccak(pack(op)), entryPoint, chainId))"""
    inner_hash = Web3.keccak(pack_user_operation(op))
    outer = _abi_encode(
        ['bytes32', 'address', 'uint256'],
        [inner_hash, to_checksum_address(entry_point), chain_id]
    )
    return bytes(Web3.keccak(outer))
