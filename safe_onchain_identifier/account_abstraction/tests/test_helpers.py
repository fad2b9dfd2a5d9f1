from django.test import TestCase

from eth_abi import encode as abi_encode
from eth_account import Account
from safe_eth.safe.enums import SafeOperationEnum

from ..helpers import (
    EXECUTE_USER_OP_SELECTOR,
    HANDLE_OPS_SELECTOR,
    decode_handle_ops,
    decode_nonce,
    encode_execute_user_op,
    encode_nonce,
)
from .factories import UserOperationFactory


class TestHelpers(TestCase):
    def test_encode_execute_user_op(self):
        to = Account.create().address
        call_data = encode_execute_user_op(to, 5, b"\xd0\x9d\xe0\x8a", 0)
        self.assertEqual(call_data[:4], EXECUTE_USER_OP_SELECTOR)
        self.assertEqual(
            call_data[4:],
            abi_encode(
                ["address", "uint256", "bytes", "uint8"],
                [to, 5, b"\xd0\x9d\xe0\x8a", SafeOperationEnum.CALL.value],
            ),
        )

    def test_decode_handle_ops(self):
        beneficiary = Account.create().address
        user_operations = [
            UserOperationFactory(call_data=b"\x01\x02").pack(),
            UserOperationFactory(
                factory=Account.create().address, factory_data=b"\x03"
            ).pack(),
        ]
        data = HANDLE_OPS_SELECTOR + abi_encode(
            [
                "(address,uint256,bytes,bytes,bytes32,uint256,bytes32,bytes,bytes)[]",
                "address",
            ],
            [
                [user_operation.as_tuple() for user_operation in user_operations],
                beneficiary,
            ],
        )
        decoded_handle_ops = decode_handle_ops(data)
        self.assertEqual(decoded_handle_ops.beneficiary, beneficiary)
        self.assertEqual(decoded_handle_ops.user_operations, user_operations)

        with self.assertRaisesMessage(ValueError, "is not a handleOps selector"):
            decode_handle_ops(b"\x00\x00\x00\x00" + data[4:])

    def test_encode_nonce(self):
        self.assertEqual(encode_nonce(0), 0)
        self.assertEqual(encode_nonce(0, 5), 5)
        self.assertEqual(encode_nonce(1), 2**64)
        self.assertEqual(encode_nonce(1, 2), 2**64 + 2)
        self.assertEqual(encode_nonce(2**192 - 1, 2**64 - 1), 2**256 - 1)

        with self.assertRaises(ValueError):
            encode_nonce(2**192)

        with self.assertRaises(ValueError):
            encode_nonce(1, 2**64)

        with self.assertRaises(ValueError):
            encode_nonce(-1)

    def test_decode_nonce(self):
        self.assertEqual(decode_nonce(0), (0, 0))
        self.assertEqual(decode_nonce(2**64 + 2), (1, 2))
        self.assertEqual(decode_nonce(2**256 - 1), (2**192 - 1, 2**64 - 1))
        identifier_int = int("0x" + "ab" * 20, 16)
        self.assertEqual(
            decode_nonce(encode_nonce(identifier_int, 7)), (identifier_int, 7)
        )
