"""
Builds signed Alchemy JSON-RPC requests for UserOperations
"""

import logging
from dataclasses import dataclass
from typing import Optional, Union

from config import AlchemyConfig, DUMMY_SIGNATURE
from errors import EncodingError, SigningError
from hex_codec import from_hex_bytes, to_checksum_address, to_hex_bytes
from init_code import DEFAULT_FACTORY_CALL, FactoryCall, resolve_init_code
from jsonrpc import (
    GET_USER_OPERATION_BY_HASH,
    GET_USER_OPERATION_RECEIPT,
    REQUEST_GAS_AND_PAYMASTER,
    SEND_USER_OPERATION,
    GasAndPaymasterParams,
    JSONRPCRequest,
    SendUserOperationParams,
)
from signing import PrivateKeySigner, recover_signer
from user_op_hash import get_user_operation_hash
from user_operations import (
    GasAndPaymasterQuote,
    UserOperation,
    create_quote_user_operation,
    create_user_operation,
)


@dataclass(frozen=True)
class PreparedUserOperation:
    """Digest awaiting an external signature plus the operation it was computed from"""
    digest: bytes
    user_operation: UserOperation


class UserOperationRequestBuilder:
    """Turns caller intent and a gas/paymaster quote into wire-ready JSON-RPC requests"""

    def __init__(
        self,
        dummy_signature: str = DUMMY_SIGNATURE,
        factory_call: FactoryCall = DEFAULT_FACTORY_CALL,
        logger: Optional[logging.Logger] = None,
    ):
        self.dummy_signature = dummy_signature
        self._dummy_signature_bytes = from_hex_bytes(dummy_signature)
        self.factory_call = factory_call
        self.logger = logger or logging.getLogger(__name__)

    @classmethod
    def from_config(cls, config: AlchemyConfig, logger: Optional[logging.Logger] = None) -> "UserOperationRequestBuilder":
        return cls(
            dummy_signature=config.dummy_signature,
            factory_call=FactoryCall(signature=config.factory_signature, extra_args=config.factory_args),
            logger=logger,
        )

    def create_gas_and_paymaster_request(
        self,
        call_data: bytes,
        sender: str,
        sender_account: str,
        nonce: int,
        policy_id: str,
        entry_point: str,
        factory_address: Optional[str],
        request_id: int,
    ) -> bytes:
        """alchemy_requestGasAndPaymasterAndData request carrying the dummy signature"""
        init_code = self._init_code(sender, factory_address)
        user_operation = create_quote_user_operation(
            call_data, sender_account, nonce, init_code, self._dummy_signature_bytes
        )
        params = GasAndPaymasterParams(
            policy_id=policy_id,
            entry_point=to_checksum_address(entry_point),
            user_operation=user_operation,
            dummy_signature=self.dummy_signature,
        )
        return JSONRPCRequest(id=request_id, method=REQUEST_GAS_AND_PAYMASTER, params=params).encode()

    def create_signed_send_request(
        self,
        call_data: bytes,
        quote: GasAndPaymasterQuote,
        chain_id: int,
        entry_point: str,
        sender: str,
        sender_account: str,
        nonce: int,
        request_id: int,
        private_key: Union[str, bytes, PrivateKeySigner],
        factory_address: Optional[str] = None,
        append_entry_point: bool = True,
    ) -> bytes:
        """eth_sendUserOperation request signed with a local private key"""
        signer = private_key if isinstance(private_key, PrivateKeySigner) else PrivateKeySigner(private_key)

        init_code = self._init_code(sender, factory_address)
        user_operation = create_user_operation(call_data, quote, sender_account, nonce, init_code)

        digest = get_user_operation_hash(user_operation, chain_id, entry_point)
        self.logger.debug(f"dataToSign: {digest.hex()}")

        try:
            signature = signer.sign_digest(digest)
        except SigningError as e:
            self.logger.error(f"failed to sign: {e}")
            raise
        self.logger.debug(f"signed: {signature.hex()}")

        return self._send_request(
            request_id,
            user_operation.sign_with(signature),
            to_checksum_address(entry_point) if append_entry_point else None,
        )

    def prepare_for_signing(
        self,
        call_data: bytes,
        quote: GasAndPaymasterQuote,
        chain_id: int,
        entry_point: str,
        sender: str,
        nonce: int,
    ) -> PreparedUserOperation:
        """
        First step of external signing.

        Returns the digest the account owner must sign together with the
        unsigned operation. Pass both, unmodified, to finalize_signed.
        """
        user_operation = create_user_operation(call_data, quote, sender, nonce)
        digest = get_user_operation_hash(user_operation, chain_id, entry_point)
        self.logger.debug(f"dataToSign: {digest.hex()}")
        return PreparedUserOperation(digest=digest, user_operation=user_operation)

    def finalize_signed(
        self,
        request_id: int,
        signature: bytes,
        user_operation: UserOperation,
        entry_point: str,
        expected_signer: Optional[str] = None,
        digest: Optional[bytes] = None,
    ) -> bytes:
        """
        Second step of external signing.

        Attaches the externally produced signature and always passes the
        entry point. The signature is only checked against expected_signer
        when both expected_signer and digest are given; otherwise the caller
        is trusted to have signed the digest from prepare_for_signing.
        """
        if expected_signer is not None and digest is not None:
            recovered = recover_signer(digest, signature)
            if recovered != to_checksum_address(expected_signer):
                self.logger.error(f"signature recovered to {recovered}, expected {expected_signer}")
                raise SigningError(f"Signature was produced by {recovered}, not {expected_signer}")

        return self._send_request(
            request_id, user_operation.sign_with(signature), to_checksum_address(entry_point)
        )

    def create_receipt_request(self, operation_hash: str, request_id: int) -> bytes:
        return JSONRPCRequest(id=request_id, method=GET_USER_OPERATION_RECEIPT, params=[operation_hash]).encode()

    def create_user_operation_by_hash_request(self, operation_hash: str, request_id: int) -> bytes:
        return JSONRPCRequest(id=request_id, method=GET_USER_OPERATION_BY_HASH, params=[operation_hash]).encode()

    def _init_code(self, owner: str, factory_address: Optional[str]) -> bytes:
        try:
            init_code = resolve_init_code(owner, factory_address, self.factory_call)
        except EncodingError as e:
            self.logger.error(f"failed to get init code: {e}")
            raise
        if init_code:
            self.logger.debug(f"initCode: {to_hex_bytes(init_code)}")
        return init_code

    def _send_request(self, request_id: int, user_operation, entry_point: Optional[str]) -> bytes:
        params = SendUserOperationParams(user_operation=user_operation, entry_point=entry_point)
        return JSONRPCRequest(id=request_id, method=SEND_USER_OPERATION, params=params).encode()
