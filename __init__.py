"""
Alchemy UserOperation SDK

Builds, hashes, signs and sends ERC-4337 (v0.6) UserOperations through
Alchemy's gas manager and bundler JSON-RPC methods, with an optional
two-step flow for signers that live outside the process.
"""

# Main service
from smart_account import SmartAccountService, create_smart_account_service

# Configuration
from config import AlchemyConfig

# Individual components for advanced usage
from bundler import AlchemyClient
from request_builder import PreparedUserOperation, UserOperationRequestBuilder
from signing import PrivateKeySigner
from user_op_hash import get_user_operation_hash

__version__ = "1.0.0"

__all__ = [
    "SmartAccountService",
    "create_smart_account_service",
    "AlchemyConfig",
    "AlchemyClient",
    "UserOperationRequestBuilder",
    "PreparedUserOperation",
    "PrivateKeySigner",
    "get_user_operation_hash",
]
