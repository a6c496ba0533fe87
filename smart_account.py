"""
Smart account service orchestrating quote, sign and send against Alchemy
"""

import itertools
import logging
from typing import Optional

from config import AlchemyConfig
from bundler import AlchemyClient
from errors import SigningError
from request_builder import PreparedUserOperation, UserOperationRequestBuilder
from signing import PrivateKeySigner
from user_operations import GasAndPaymasterQuote, UserOperationReceipt, encode_execute_call_data


class SmartAccountService:
    """Sends UserOperations for one smart account through the Alchemy gas manager"""

    def __init__(
        self,
        config: AlchemyConfig,
        signer: Optional[PrivateKeySigner] = None,
        client: Optional[AlchemyClient] = None,
        builder: Optional[UserOperationRequestBuilder] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.config = config
        self.signer = signer
        self.logger = logger or logging.getLogger(__name__)
        self.client = client or AlchemyClient(config, logger=self.logger)
        self.builder = builder or UserOperationRequestBuilder.from_config(config, logger=self.logger)
        self._request_ids = itertools.count(1)

        if not config.smart_account_address:
            raise ValueError("A smart account address is required")

        self.logger.info(f"Smart account service initialized for {config.smart_account_address}")

    @property
    def owner_address(self) -> Optional[str]:
        if self.config.owner_address:
            return self.config.owner_address
        return self.signer.address if self.signer else None

    def get_gas_and_paymaster_quote(self, call_data: bytes, nonce: int) -> GasAndPaymasterQuote:
        """Ask the gas manager to price and sponsor the operation"""
        payload = self.builder.create_gas_and_paymaster_request(
            call_data=call_data,
            sender=self.owner_address,
            sender_account=self.config.smart_account_address,
            nonce=nonce,
            policy_id=self.config.policy_id,
            entry_point=self.config.entry_point_address,
            factory_address=self.config.factory_address,
            request_id=self._next_request_id(),
        )
        return self.client.request_gas_and_paymaster_data(payload)

    def send_user_operation(self, call_data: bytes, nonce: int) -> str:
        """Quote, sign with the local key and send; returns the user operation hash"""
        if self.signer is None:
            raise SigningError("No local signer configured, use prepare_user_operation instead")

        quote = self.get_gas_and_paymaster_quote(call_data, nonce)
        payload = self.builder.create_signed_send_request(
            call_data=call_data,
            quote=quote,
            chain_id=self.config.chain_id,
            entry_point=self.config.entry_point_address,
            sender=self.owner_address,
            sender_account=self.config.smart_account_address,
            nonce=nonce,
            request_id=self._next_request_id(),
            private_key=self.signer,
            factory_address=self.config.factory_address,
            append_entry_point=True,
        )
        return self.client.send_user_operation(payload)

    def prepare_user_operation(self, call_data: bytes, nonce: int) -> PreparedUserOperation:
        """Quote the operation and return the digest for an external signer"""
        quote = self.get_gas_and_paymaster_quote(call_data, nonce)
        return self.builder.prepare_for_signing(
            call_data=call_data,
            quote=quote,
            chain_id=self.config.chain_id,
            entry_point=self.config.entry_point_address,
            sender=self.config.smart_account_address,
            nonce=nonce,
        )

    def submit_signed_user_operation(self, prepared: PreparedUserOperation, signature: bytes) -> str:
        """Send an operation signed out-of-band, checked against the owner when it is known"""
        payload = self.builder.finalize_signed(
            request_id=self._next_request_id(),
            signature=signature,
            user_operation=prepared.user_operation,
            entry_point=self.config.entry_point_address,
            expected_signer=self.owner_address,
            digest=prepared.digest,
        )
        return self.client.send_user_operation(payload)

    def send_eth(self, recipient: str, amount_wei: int, nonce: int) -> str:
        """Send ETH from the smart account to recipient"""
        self.logger.info(f"Sending {amount_wei} wei to {recipient}")
        call_data = encode_execute_call_data(recipient, amount_wei)
        return self.send_user_operation(call_data, nonce)

    def get_receipt(self, user_op_hash: str) -> Optional[UserOperationReceipt]:
        """Single receipt lookup; None means not mined yet"""
        payload = self.builder.create_receipt_request(user_op_hash, self._next_request_id())
        return self.client.get_user_operation_receipt(payload)

    def _next_request_id(self) -> int:
        return next(self._request_ids)


def create_smart_account_service(private_key: Optional[str] = None) -> SmartAccountService:
    """Create a smart account service with configuration from the environment"""
    signer = PrivateKeySigner(private_key) if private_key else None
    return SmartAccountService(AlchemyConfig(), signer=signer)
