"""
JSON-RPC 2.0 envelopes for the Alchemy account-abstraction methods
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from errors import EncodingError, RPCError
from hex_codec import from_hex_int
from user_operations import (
    GasAndPaymasterQuote,
    SignedUserOperation,
    UserOperationByHash,
    UserOperationReceipt,
)

logger = logging.getLogger(__name__)

JSONRPC_VERSION = "2.0"

# Methods
REQUEST_GAS_AND_PAYMASTER = "alchemy_requestGasAndPaymasterAndData"
SEND_USER_OPERATION = "eth_sendUserOperation"
GET_USER_OPERATION_RECEIPT = "eth_getUserOperationReceipt"
GET_USER_OPERATION_BY_HASH = "eth_getUserOperationByHash"


@dataclass(frozen=True)
class SendUserOperationParams:
    """Params for eth_sendUserOperation: [op] or [op, entryPoint]"""
    user_operation: SignedUserOperation
    entry_point: Optional[str] = None

    def to_list(self) -> List[Any]:
        params: List[Any] = [self.user_operation.to_rpc_dict()]
        if self.entry_point is not None:
            params.append(self.entry_point)
        return params


@dataclass(frozen=True)
class GasAndPaymasterParams:
    """Params for alchemy_requestGasAndPaymasterAndData"""
    policy_id: str
    entry_point: str
    user_operation: SignedUserOperation
    dummy_signature: str

    def to_list(self) -> List[Any]:
        return [{
            "policyId": self.policy_id,
            "entryPoint": self.entry_point,
            "userOperation": self.user_operation.to_rpc_dict(),
            "dummySignature": self.dummy_signature,
        }]


Params = Union[SendUserOperationParams, GasAndPaymasterParams, List[Any]]


@dataclass(frozen=True)
class JSONRPCRequest:
    id: int
    method: str
    params: Params

    def to_dict(self) -> Dict[str, Any]:
        params = self.params if isinstance(self.params, list) else self.params.to_list()
        return {
            "id": self.id,
            "jsonrpc": JSONRPC_VERSION,
            "method": self.method,
            "params": params,
        }

    def encode(self) -> bytes:
        try:
            return json.dumps(self.to_dict(), separators=(",", ":")).encode("utf-8")
        except (TypeError, ValueError) as e:
            logger.error(f"can not marshal JSON: {e}")
            raise EncodingError(f"can not marshal {self.method} request: {e}") from e


def parse_response(payload: bytes) -> Dict[str, Any]:
    """Decode a JSON-RPC response, raising RPCError for a non-zero error code"""
    try:
        response = json.loads(payload)
    except (TypeError, ValueError) as e:
        logger.error(f"failed to unmarshal response: {e}")
        raise EncodingError(f"failed to unmarshal response: {e}") from e

    if not isinstance(response, dict):
        raise EncodingError(f"JSON-RPC response must be an object, got {type(response).__name__}")

    error = response.get("error") or {}
    if not isinstance(error, dict):
        raise EncodingError(f"Malformed JSON-RPC error member: {error!r}")
    code = error.get("code") or 0
    if code != 0:
        raise RPCError(code, error.get("message", ""))

    return response


def decode_send_result(payload: bytes) -> str:
    """Return the user operation hash from an eth_sendUserOperation response"""
    result = parse_response(payload).get("result")
    if result is None:
        return ""
    if not isinstance(result, str):
        raise EncodingError(f"Expected a user operation hash, got {result!r}")
    return result


def decode_receipt_result(payload: bytes) -> Optional[UserOperationReceipt]:
    """None until the operation has been included in a block"""
    result = parse_response(payload).get("result")
    if not result:
        return None
    if not isinstance(result, dict):
        raise EncodingError(f"Expected a receipt object, got {result!r}")
    return UserOperationReceipt(
        user_op_hash=result.get("userOpHash", ""),
        success=bool(result.get("success", False)),
    )


def decode_gas_and_paymaster_result(payload: bytes) -> GasAndPaymasterQuote:
    result = parse_response(payload).get("result") or {}
    if not isinstance(result, dict):
        raise EncodingError(f"Expected a gas and paymaster object, got {result!r}")
    return GasAndPaymasterQuote.from_rpc(result)


def decode_user_operation_by_hash_result(payload: bytes) -> Optional[UserOperationByHash]:
    result = parse_response(payload).get("result")
    if not result:
        return None
    if not isinstance(result, dict):
        raise EncodingError(f"Expected a user operation object, got {result!r}")

    block_number = result.get("blockNumber")
    return UserOperationByHash(
        user_operation=result.get("userOperation") or {},
        entry_point=result.get("entryPoint"),
        block_number=from_hex_int(block_number) if block_number else None,
        block_hash=result.get("blockHash"),
        transaction_hash=result.get("transactionHash"),
    )
