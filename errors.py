"""
Error types raised while building, signing and sending UserOperations
"""


class AlchemySDKError(Exception):
    """Base class for every error raised by this package"""


class EncodingError(AlchemySDKError):
    """Hex, ABI or JSON encoding/decoding failure"""


class SigningError(AlchemySDKError):
    """Signature primitive failure"""


class InvalidKeyError(SigningError):
    """Private key material could not be parsed"""


class TransportError(AlchemySDKError):
    """Network or IO failure while talking to the node"""


class RPCError(AlchemySDKError):
    """Failure reported by the node in a JSON-RPC error object"""

    def __init__(self, code: int, message: str):
        self.code = code
        self.message = message
        super().__init__(f"Error: {code} - {message}")
