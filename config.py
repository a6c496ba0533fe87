"""
Configuration for Alchemy UserOperation requests
"""

import json
import os
from dataclasses import dataclass

# Network constants
ENTRYPOINT_V06 = "0x5FF137D4b0FDCD49DcA30c7CF57E578a026d2789"
SEPOLIA_CHAIN_ID = 11155111
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
ALCHEMY_RPC_URL_TEMPLATE = "https://{network}.g.alchemy.com/v2/{api_key}"

# Placeholder signature accepted by alchemy_requestGasAndPaymasterAndData.
# Same length and shape as a real 65-byte ECDSA signature.
DUMMY_SIGNATURE = (
    "0xfffffffffffffffffffffffffffffff0000000000000000000000000000000007"
    "aaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaa1c"
)

# SimpleAccountFactory entry point; the owner is always the first argument
DEFAULT_FACTORY_SIGNATURE = "createAccount(address,uint256)"
# Arguments after the owner, as a JSON list (the salt for SimpleAccountFactory)
DEFAULT_FACTORY_ARGS = "[0]"

DEFAULT_REQUEST_TIMEOUT = 30


@dataclass
class AlchemyConfig:
    """Configuration for Alchemy account-abstraction requests"""

    def __init__(self):
        # Network configuration
        api_key = os.environ.get('ALCHEMY_API_KEY')
        if not api_key:
            raise ValueError("ALCHEMY_API_KEY environment variable is required")
        self.api_key = api_key
        self.network = os.environ.get('ALCHEMY_NETWORK', 'eth-sepolia')
        self.chain_id = int(os.environ.get('CHAIN_ID', SEPOLIA_CHAIN_ID))
        self.entry_point_address = os.environ.get('ENTRY_POINT_ADDRESS', ENTRYPOINT_V06)
        self.request_timeout = float(os.environ.get('REQUEST_TIMEOUT', DEFAULT_REQUEST_TIMEOUT))

        # Gas manager policy sponsoring the operations
        self.policy_id = os.environ.get('ALCHEMY_POLICY_ID', '')

        # Smart account configuration
        self.smart_account_address = os.environ.get('SMART_ACCOUNT_ADDRESS')
        self.owner_address = os.environ.get('OWNER_ADDRESS')
        self.factory_address = os.environ.get('ACCOUNT_FACTORY_ADDRESS', ZERO_ADDRESS)
        self.factory_signature = os.environ.get('ACCOUNT_FACTORY_SIGNATURE', DEFAULT_FACTORY_SIGNATURE)
        self.factory_args = _parse_factory_args(os.environ.get('ACCOUNT_FACTORY_ARGS', DEFAULT_FACTORY_ARGS))

        # Fee estimator contract
        self.dummy_signature = os.environ.get('DUMMY_SIGNATURE', DUMMY_SIGNATURE)

    @property
    def rpc_url(self) -> str:
        return ALCHEMY_RPC_URL_TEMPLATE.format(network=self.network, api_key=self.api_key)


def _parse_factory_args(value: str) -> tuple:
    try:
        args = json.loads(value)
    except ValueError as e:
        raise ValueError(f"ACCOUNT_FACTORY_ARGS must be a JSON list: {value}") from e
    if not isinstance(args, list):
        raise ValueError(f"ACCOUNT_FACTORY_ARGS must be a JSON list: {value}")
    return tuple(args)
