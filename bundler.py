"""
Alchemy transport for account-abstraction JSON-RPC requests
"""

import logging
from typing import Optional

import requests

from config import AlchemyConfig
from errors import TransportError
from jsonrpc import (
    decode_gas_and_paymaster_result,
    decode_receipt_result,
    decode_send_result,
    decode_user_operation_by_hash_result,
)
from user_operations import GasAndPaymasterQuote, UserOperationByHash, UserOperationReceipt

JSON_HEADERS = {
    'accept': 'application/json',
    'content-type': 'application/json',
}


class AlchemyClient:
    """Sends pre-built JSON-RPC payloads to Alchemy, one POST per call"""

    def __init__(self, config: AlchemyConfig, logger: Optional[logging.Logger] = None):
        self.config = config
        self.logger = logger or logging.getLogger(__name__)

    def send_request(self, payload: bytes) -> bytes:
        """POST payload and return the raw response body"""
        try:
            response = requests.post(
                self.config.rpc_url,
                data=payload,
                headers=JSON_HEADERS,
                timeout=self.config.request_timeout
            )
        except requests.RequestException as e:
            self.logger.error(f"failed to send data: {e}")
            raise TransportError(f"Request to Alchemy failed: {e}") from e

        body = response.content
        self.logger.debug(f"sent Alchemy request, response: {body.decode('utf-8', errors='replace')}")
        return body

    def request_gas_and_paymaster_data(self, payload: bytes) -> GasAndPaymasterQuote:
        return decode_gas_and_paymaster_result(self.send_request(payload))

    def send_user_operation(self, payload: bytes) -> str:
        """Send a signed eth_sendUserOperation request and return the user operation hash"""
        self.logger.info("Sending UserOperation to Alchemy...")
        user_op_hash = decode_send_result(self.send_request(payload))
        self.logger.info(f"UserOperation sent successfully: {user_op_hash}")
        return user_op_hash

    def get_user_operation_receipt(self, payload: bytes) -> Optional[UserOperationReceipt]:
        return decode_receipt_result(self.send_request(payload))

    def get_user_operation_by_hash(self, payload: bytes) -> Optional[UserOperationByHash]:
        return decode_user_operation_by_hash_result(self.send_request(payload))
