"""
Shared fixtures for UserOperation tests
"""

import pytest

from config import ENTRYPOINT_V06, SEPOLIA_CHAIN_ID
from request_builder import UserOperationRequestBuilder
from user_operations import GasAndPaymasterQuote

# Well-known development key (Hardhat/Anvil account #0)
PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
OWNER_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"

SMART_ACCOUNT_ADDRESS = "0x1212121212121212121212121212121212121212"
FACTORY_ADDRESS = "0x4545454545454545454545454545454545454545"
ENTRY_POINT = ENTRYPOINT_V06
CHAIN_ID = SEPOLIA_CHAIN_ID
CALL_DATA = bytes.fromhex("b61d27f6") + b"\x00" * 32


@pytest.fixture
def quote():
    return GasAndPaymasterQuote(
        pre_verification_gas=0xB8A4,
        call_gas_limit=0x5208,
        verification_gas_limit=0x186A0,
        paymaster_and_data=bytes.fromhex("ab" * 20 + "cd" * 8),
        max_fee_per_gas=0x59682F1E,
        max_priority_fee_per_gas=0x59682F00,
    )


@pytest.fixture
def builder():
    return UserOperationRequestBuilder()
