from unittest.mock import MagicMock

from django.test import TestCase

from eth_abi import encode as abi_encode
from eth_account import Account
from hexbytes import HexBytes
from safe_eth.eth.utils import fast_keccak_text
from web3.exceptions import TransactionNotFound

from ...account_abstraction.helpers import (
    HANDLE_OPS_SELECTOR,
    HANDLE_OPS_TYPES,
    encode_execute_user_op,
    encode_nonce,
)
from ...account_abstraction.tests.factories import UserOperationFactory
from ...account_abstraction.tests.mocks import build_user_operation_event_log
from ...safe.helpers import (
    CREATE_PROXY_WITH_NONCE_SELECTOR,
    EXEC_TRANSACTION_SELECTOR,
    encode_create_proxy_with_nonce,
    encode_exec_transaction,
    encode_safe_setup,
)
from ...safe.tests.mocks import build_safe_multisig_transaction_log
from ..identifier import append_identifier, get_onchain_identifier, identifier_to_int
from ..services import (
    IdentifierLocation,
    IdentifierMatch,
    OnchainIdentifierService,
    TransactionNotFoundException,
)


def encode_handle_ops(user_operations, beneficiary) -> HexBytes:
    return HexBytes(
        HANDLE_OPS_SELECTOR
        + abi_encode(
            HANDLE_OPS_TYPES,
            [
                [
                    user_operation.pack().as_tuple()
                    for user_operation in user_operations
                ],
                beneficiary,
            ],
        )
    )


class TestOnchainIdentifierService(TestCase):
    def setUp(self):
        self.identifier = get_onchain_identifier()
        self.entry_point = Account.create().address
        self.ethereum_client = MagicMock()
        self.onchain_identifier_service = OnchainIdentifierService(
            self.ethereum_client, self.identifier, []
        )
        self.owner = Account.create().address
        self.singleton = Account.create().address

    def test_find_in_transaction_data_suffix(self):
        to = Account.create().address
        self.assertEqual(
            self.onchain_identifier_service.find_in_transaction_data(
                append_identifier(b"\xd0\x9d\xe0\x8a", self.identifier), to
            ),
            [IdentifierMatch(IdentifierLocation.TRANSACTION_DATA_SUFFIX, to)],
        )
        self.assertEqual(
            self.onchain_identifier_service.find_in_transaction_data(
                b"\xd0\x9d\xe0\x8a", to
            ),
            [],
        )
        self.assertEqual(
            self.onchain_identifier_service.find_in_transaction_data(b""), []
        )

    def test_find_in_exec_transaction(self):
        safe_address = Account.create().address
        counter_address = Account.create().address
        exec_transaction_data = encode_exec_transaction(
            counter_address, 0, b"\xd0\x9d\xe0\x8a", signatures=b"\x01" * 65
        )
        self.assertEqual(
            self.onchain_identifier_service.find_in_transaction_data(
                append_identifier(exec_transaction_data, self.identifier),
                safe_address,
            ),
            [IdentifierMatch(IdentifierLocation.TRANSACTION_DATA_SUFFIX, safe_address)],
        )

        exec_transaction_data = encode_exec_transaction(
            counter_address,
            0,
            b"\xd0\x9d\xe0\x8a",
            refund_receiver=self.identifier,
            signatures=b"\x01" * 65,
        )
        self.assertEqual(
            self.onchain_identifier_service.find_in_transaction_data(
                exec_transaction_data, safe_address
            ),
            [IdentifierMatch(IdentifierLocation.SAFE_REFUND_RECEIVER, safe_address)],
        )

    def test_find_in_create_proxy_with_nonce(self):
        proxy_factory_address = Account.create().address

        initializer = append_identifier(
            encode_safe_setup([self.owner], 1), self.identifier
        )
        self.assertEqual(
            self.onchain_identifier_service.find_in_transaction_data(
                encode_create_proxy_with_nonce(self.singleton, initializer, 0),
                proxy_factory_address,
            ),
            [
                IdentifierMatch(
                    IdentifierLocation.SAFE_INITIALIZER_SUFFIX, proxy_factory_address
                )
            ],
        )

        initializer = encode_safe_setup(
            [self.owner], 1, payment_receiver=self.identifier
        )
        self.assertEqual(
            self.onchain_identifier_service.find_in_transaction_data(
                encode_create_proxy_with_nonce(self.singleton, initializer, 0),
                proxy_factory_address,
            ),
            [
                IdentifierMatch(
                    IdentifierLocation.SAFE_PAYMENT_RECEIVER, proxy_factory_address
                )
            ],
        )

        initializer = encode_safe_setup([self.owner], 1)
        self.assertEqual(
            self.onchain_identifier_service.find_in_transaction_data(
                encode_create_proxy_with_nonce(
                    self.singleton, initializer, identifier_to_int(self.identifier)
                ),
                proxy_factory_address,
            ),
            [IdentifierMatch(IdentifierLocation.SAFE_SALT_NONCE, proxy_factory_address)],
        )

        # Not a Safe `setup` initializer
        self.assertEqual(
            self.onchain_identifier_service.find_in_transaction_data(
                encode_create_proxy_with_nonce(self.singleton, b"\x12\x34", 1),
                proxy_factory_address,
            ),
            [],
        )

    def test_find_in_handle_ops(self):
        relayer = Account.create().address
        call_data = encode_execute_user_op(
            Account.create().address, 0, b"\xd0\x9d\xe0\x8a", 0
        )
        proxy_factory_address = Account.create().address
        user_operation_with_suffix = UserOperationFactory(
            nonce=0, call_data=append_identifier(call_data, self.identifier)
        )
        user_operation_with_nonce_key = UserOperationFactory(
            nonce=encode_nonce(identifier_to_int(self.identifier)),
            call_data=call_data,
        )
        user_operation_with_salt_nonce = UserOperationFactory(
            nonce=0,
            call_data=call_data,
            factory=proxy_factory_address,
            factory_data=encode_create_proxy_with_nonce(
                self.singleton,
                encode_safe_setup([self.owner], 1),
                identifier_to_int(self.identifier),
            ),
        )
        user_operation_without_identifier = UserOperationFactory(
            nonce=1, call_data=call_data
        )
        data = encode_handle_ops(
            [
                user_operation_with_suffix,
                user_operation_with_nonce_key,
                user_operation_with_salt_nonce,
                user_operation_without_identifier,
            ],
            relayer,
        )
        self.assertEqual(
            self.onchain_identifier_service.find_in_transaction_data(
                data, self.entry_point
            ),
            [
                IdentifierMatch(
                    IdentifierLocation.USER_OPERATION_CALL_DATA_SUFFIX,
                    user_operation_with_suffix.sender,
                ),
                IdentifierMatch(
                    IdentifierLocation.USER_OPERATION_NONCE_KEY,
                    user_operation_with_nonce_key.sender,
                ),
                IdentifierMatch(
                    IdentifierLocation.SAFE_SALT_NONCE,
                    user_operation_with_salt_nonce.sender,
                ),
            ],
        )

    def test_find_in_handle_ops_init_code(self):
        relayer = Account.create().address
        proxy_factory_address = Account.create().address
        user_operation_with_malformed_init_code = UserOperationFactory(
            factory=proxy_factory_address,
            factory_data=CREATE_PROXY_WITH_NONCE_SELECTOR + b"\x00" * 10,
        )
        user_operation_with_other_factory = UserOperationFactory(
            factory=Account.create().address,
            factory_data=b"\x12\x34\x56\x78" + b"\x00" * 64,
        )
        user_operation_with_payment_receiver = UserOperationFactory(
            factory=proxy_factory_address,
            factory_data=encode_create_proxy_with_nonce(
                self.singleton,
                append_identifier(
                    encode_safe_setup(
                        [self.owner], 1, payment_receiver=self.identifier
                    ),
                    self.identifier,
                ),
                0,
            ),
        )
        data = encode_handle_ops(
            [
                user_operation_with_malformed_init_code,
                user_operation_with_other_factory,
                user_operation_with_payment_receiver,
            ],
            relayer,
        )
        with self.assertLogs(
            "safe_onchain_identifier.onchain_identifier.services.onchain_identifier_service",
            level="WARNING",
        ) as logs:
            self.assertEqual(
                self.onchain_identifier_service.find_in_transaction_data(
                    data, self.entry_point
                ),
                [
                    IdentifierMatch(
                        IdentifierLocation.SAFE_INITIALIZER_SUFFIX,
                        user_operation_with_payment_receiver.sender,
                    ),
                    IdentifierMatch(
                        IdentifierLocation.SAFE_PAYMENT_RECEIVER,
                        user_operation_with_payment_receiver.sender,
                    ),
                ],
            )
        self.assertEqual(len(logs.records), 1)
        self.assertIn(user_operation_with_malformed_init_code.sender, logs.output[0])

    def test_find_in_transaction_data_malformed(self):
        safe_address = Account.create().address
        data = append_identifier(
            EXEC_TRANSACTION_SELECTOR + b"\x00" * 10, self.identifier
        )
        with self.assertLogs(
            "safe_onchain_identifier.onchain_identifier.services.onchain_identifier_service",
            level="WARNING",
        ):
            self.assertEqual(
                self.onchain_identifier_service.find_in_transaction_data(
                    data, safe_address
                ),
                [
                    IdentifierMatch(
                        IdentifierLocation.TRANSACTION_DATA_SUFFIX, safe_address
                    )
                ],
            )

    def test_find_in_logs(self):
        safe_address = Account.create().address
        sender = Account.create().address
        logs = [
            build_user_operation_event_log(
                self.entry_point,
                sender,
                encode_nonce(identifier_to_int(self.identifier), 3),
            ),
            build_user_operation_event_log(self.entry_point, safe_address, 0),
            build_safe_multisig_transaction_log(
                safe_address,
                Account.create().address,
                refund_receiver=self.identifier,
            ),
            build_safe_multisig_transaction_log(
                safe_address, Account.create().address
            ),
        ]
        self.assertEqual(
            self.onchain_identifier_service.find_in_logs(logs),
            [
                IdentifierMatch(IdentifierLocation.USER_OPERATION_NONCE_KEY, sender),
                IdentifierMatch(
                    IdentifierLocation.SAFE_REFUND_RECEIVER, safe_address
                ),
            ],
        )
        self.assertEqual(self.onchain_identifier_service.find_in_logs([]), [])

        # Only supported entry points are checked
        onchain_identifier_service = OnchainIdentifierService(
            self.ethereum_client, self.identifier, [Account.create().address]
        )
        self.assertEqual(
            onchain_identifier_service.find_in_logs(logs),
            [IdentifierMatch(IdentifierLocation.SAFE_REFUND_RECEIVER, safe_address)],
        )
        onchain_identifier_service = OnchainIdentifierService(
            self.ethereum_client, self.identifier, [self.entry_point.lower()]
        )
        self.assertEqual(len(onchain_identifier_service.find_in_logs(logs)), 2)

    def test_find_in_transaction(self):
        tx_hash = fast_keccak_text("handle-ops-transaction")
        relayer = Account.create().address
        user_operation = UserOperationFactory(
            nonce=encode_nonce(identifier_to_int(self.identifier)),
        )
        self.ethereum_client.w3.eth.get_transaction.return_value = {
            "hash": tx_hash,
            "to": self.entry_point,
            "input": encode_handle_ops([user_operation], relayer),
        }
        self.ethereum_client.w3.eth.get_transaction_receipt.return_value = {
            "transactionHash": tx_hash,
            "logs": [
                build_user_operation_event_log(
                    self.entry_point, user_operation.sender, user_operation.nonce
                )
            ],
        }
        # Same placement is found on transaction data and on logs
        self.assertEqual(
            self.onchain_identifier_service.find_in_transaction(tx_hash),
            [
                IdentifierMatch(
                    IdentifierLocation.USER_OPERATION_NONCE_KEY, user_operation.sender
                )
            ],
        )
        self.ethereum_client.w3.eth.get_transaction.assert_called_once_with(
            HexBytes(tx_hash)
        )

        self.ethereum_client.w3.eth.get_transaction.side_effect = TransactionNotFound(
            "Not found"
        )
        with self.assertRaisesMessage(
            TransactionNotFoundException, HexBytes(tx_hash).hex()
        ):
            self.onchain_identifier_service.find_in_transaction(tx_hash.hex())

    def test_find_in_contract_creation(self):
        tx_hash = fast_keccak_text("contract-creation")
        self.ethereum_client.w3.eth.get_transaction.return_value = {
            "hash": tx_hash,
            "to": None,
            "input": append_identifier(b"\x60\x80", self.identifier),
        }
        self.ethereum_client.w3.eth.get_transaction_receipt.return_value = {
            "transactionHash": tx_hash,
            "logs": [],
        }
        self.assertEqual(
            self.onchain_identifier_service.find_in_transaction(tx_hash),
            [IdentifierMatch(IdentifierLocation.TRANSACTION_DATA_SUFFIX, None)],
        )
