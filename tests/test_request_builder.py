"""
Tests for the UserOperation request builders.
"""

import json

import pytest
from web3 import Web3

from config import DUMMY_SIGNATURE, ZERO_ADDRESS, AlchemyConfig
from errors import EncodingError, InvalidKeyError, SigningError
from request_builder import UserOperationRequestBuilder
from signing import recover_signer, sign_digest
from user_op_hash import get_user_operation_hash
from user_operations import create_user_operation
from conftest import (
    CALL_DATA,
    CHAIN_ID,
    ENTRY_POINT,
    FACTORY_ADDRESS,
    OWNER_ADDRESS,
    PRIVATE_KEY,
    SMART_ACCOUNT_ADDRESS,
)


def _signed_request(builder, quote, **overrides) -> bytes:
    kwargs = dict(
        call_data=CALL_DATA,
        quote=quote,
        chain_id=CHAIN_ID,
        entry_point=ENTRY_POINT,
        sender=OWNER_ADDRESS,
        sender_account=SMART_ACCOUNT_ADDRESS,
        nonce=7,
        request_id=2,
        private_key=PRIVATE_KEY,
        factory_address=ZERO_ADDRESS,
        append_entry_point=True,
    )
    kwargs.update(overrides)
    return builder.create_signed_send_request(**kwargs)


def test_gas_and_paymaster_request(builder) -> None:
    payload = builder.create_gas_and_paymaster_request(
        call_data=CALL_DATA,
        sender=OWNER_ADDRESS,
        sender_account=SMART_ACCOUNT_ADDRESS,
        nonce=1,
        policy_id="policy-1",
        entry_point=ENTRY_POINT.lower(),
        factory_address=ZERO_ADDRESS,
        request_id=1,
    )
    request = json.loads(payload)

    assert request["method"] == "alchemy_requestGasAndPaymasterAndData"
    assert request["jsonrpc"] == "2.0"
    params = request["params"][0]
    assert params["policyId"] == "policy-1"
    assert params["entryPoint"] == ENTRY_POINT
    assert params["dummySignature"] == DUMMY_SIGNATURE
    user_op = params["userOperation"]
    assert user_op["sender"] == SMART_ACCOUNT_ADDRESS
    assert user_op["initCode"] == "0x"
    assert user_op["signature"] == DUMMY_SIGNATURE
    assert user_op["callGasLimit"] == "0x0"
    assert user_op["paymasterAndData"] == "0x"


def test_dummy_signature_has_real_signature_length() -> None:
    assert len(bytes.fromhex(DUMMY_SIGNATURE[2:])) == 65


def test_gas_and_paymaster_request_with_factory(builder) -> None:
    payload = builder.create_gas_and_paymaster_request(
        CALL_DATA, OWNER_ADDRESS, SMART_ACCOUNT_ADDRESS, 0, "policy-1",
        ENTRY_POINT, FACTORY_ADDRESS, 1,
    )
    init_code = json.loads(payload)["params"][0]["userOperation"]["initCode"]
    assert init_code.startswith(FACTORY_ADDRESS.lower())
    assert len(init_code) > len(FACTORY_ADDRESS)


def test_configured_dummy_signature() -> None:
    dummy = "0x" + "00" * 64 + "1b"
    builder = UserOperationRequestBuilder(dummy_signature=dummy)
    payload = builder.create_gas_and_paymaster_request(
        CALL_DATA, OWNER_ADDRESS, SMART_ACCOUNT_ADDRESS, 0, "policy-1", ENTRY_POINT, None, 1,
    )
    assert json.loads(payload)["params"][0]["dummySignature"] == dummy


def test_signed_send_request(builder, quote) -> None:
    request = json.loads(_signed_request(builder, quote))

    assert request["id"] == 2
    assert request["method"] == "eth_sendUserOperation"
    assert request["params"][1] == ENTRY_POINT

    user_op = request["params"][0]
    assert user_op["sender"] == SMART_ACCOUNT_ADDRESS
    assert user_op["nonce"] == "0x7"
    assert user_op["initCode"] == "0x"
    assert user_op["paymasterAndData"] == "0x" + quote.paymaster_and_data.hex()

    digest = get_user_operation_hash(
        create_user_operation(CALL_DATA, quote, SMART_ACCOUNT_ADDRESS, 7), CHAIN_ID, ENTRY_POINT
    )
    signature = bytes.fromhex(user_op["signature"][2:])
    assert recover_signer(digest, signature) == OWNER_ADDRESS


def test_signed_send_request_without_entry_point(builder, quote) -> None:
    request = json.loads(_signed_request(builder, quote, append_entry_point=False))
    assert len(request["params"]) == 1


def test_entry_point_is_second_param_with_factory(builder, quote) -> None:
    request = json.loads(_signed_request(builder, quote, factory_address=FACTORY_ADDRESS))

    assert request["params"][1] == ENTRY_POINT
    assert request["params"][0]["initCode"].startswith(FACTORY_ADDRESS.lower())


def test_signed_send_request_invalid_key(builder, quote) -> None:
    with pytest.raises(InvalidKeyError):
        _signed_request(builder, quote, private_key="0x1234")


def test_two_phase_matches_single_phase(builder, quote) -> None:
    prepared = builder.prepare_for_signing(
        call_data=CALL_DATA,
        quote=quote,
        chain_id=CHAIN_ID,
        entry_point=ENTRY_POINT,
        sender=SMART_ACCOUNT_ADDRESS,
        nonce=7,
    )
    signature = sign_digest(prepared.digest, PRIVATE_KEY)
    two_phase = builder.finalize_signed(2, signature, prepared.user_operation, ENTRY_POINT)

    single_phase = _signed_request(builder, quote, sender=SMART_ACCOUNT_ADDRESS)

    assert two_phase == single_phase


def test_prepare_for_signing_leaves_signature_empty(builder, quote) -> None:
    prepared = builder.prepare_for_signing(CALL_DATA, quote, CHAIN_ID, ENTRY_POINT, SMART_ACCOUNT_ADDRESS, 0)

    assert len(prepared.digest) == 32
    assert "signature" not in prepared.user_operation.to_rpc_dict()


def test_finalize_checks_expected_signer(builder, quote) -> None:
    prepared = builder.prepare_for_signing(CALL_DATA, quote, CHAIN_ID, ENTRY_POINT, SMART_ACCOUNT_ADDRESS, 0)
    signature = sign_digest(prepared.digest, PRIVATE_KEY)

    payload = builder.finalize_signed(
        3, signature, prepared.user_operation, ENTRY_POINT,
        expected_signer=OWNER_ADDRESS, digest=prepared.digest,
    )
    assert json.loads(payload)["params"][1] == ENTRY_POINT

    with pytest.raises(SigningError):
        builder.finalize_signed(
            3, signature, prepared.user_operation, ENTRY_POINT,
            expected_signer=SMART_ACCOUNT_ADDRESS, digest=prepared.digest,
        )


def test_receipt_request(builder) -> None:
    op_hash = "0x5fad93d239e4e7a7dd634822513b27f04e57ed8ea1be7b3e74df177eefd8beb8"
    assert builder.create_receipt_request(op_hash, 11) == (
        b'{"id":11,"jsonrpc":"2.0","method":"eth_getUserOperationReceipt","params":["'
        + op_hash.encode() + b'"]}'
    )


def test_user_operation_by_hash_request(builder) -> None:
    request = json.loads(builder.create_user_operation_by_hash_request("0xabc", 4))
    assert request["method"] == "eth_getUserOperationByHash"
    assert request["params"] == ["0xabc"]


def test_negative_nonce_is_an_encoding_error(builder, quote) -> None:
    with pytest.raises(EncodingError):
        _signed_request(builder, quote, nonce=-1)
    with pytest.raises(EncodingError):
        builder.prepare_for_signing(CALL_DATA, quote, CHAIN_ID, ENTRY_POINT, SMART_ACCOUNT_ADDRESS, -1)


def test_configured_factory_call_end_to_end(monkeypatch, quote) -> None:
    monkeypatch.setenv("ALCHEMY_API_KEY", "test-key")
    monkeypatch.setenv("ACCOUNT_FACTORY_SIGNATURE", "createAccount(address)")
    monkeypatch.setenv("ACCOUNT_FACTORY_ARGS", "[]")
    builder = UserOperationRequestBuilder.from_config(AlchemyConfig())

    payload = builder.create_gas_and_paymaster_request(
        CALL_DATA, OWNER_ADDRESS, SMART_ACCOUNT_ADDRESS, 0, "policy-1", ENTRY_POINT, FACTORY_ADDRESS, 1,
    )
    init_code = bytes.fromhex(json.loads(payload)["params"][0]["userOperation"]["initCode"][2:])
    assert init_code[20:24] == Web3.keccak(text="createAccount(address)")[:4]
    assert len(init_code) == 20 + 4 + 32

    signed = json.loads(_signed_request(builder, quote, factory_address=FACTORY_ADDRESS))
    assert signed["params"][0]["initCode"] == "0x" + init_code.hex()
