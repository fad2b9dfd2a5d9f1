import logging

from eth_account.signers.local import LocalAccount
from eth_typing import ChecksumAddress
from hexbytes import HexBytes
from safe_eth.eth import EthereumClient

from ..utils.contracts import get_entry_point_v07_contract
from ..utils.ethereum import send_contract_transaction
from .user_operation import UserOperation

logger = logging.getLogger(__name__)


class LocalBundler:
    """
    Stand-in for an ERC4337 bundler: every ``UserOperation`` is sent straight to the ``EntryPoint``
    on its own ``handleOps`` transaction.

    There is no mempool, batching, simulation, fee estimation or retrying, a real bundler
    (e.g. through ``safe_eth.eth.account_abstraction.BundlerClient``) should be used outside tests.
    """

    def __init__(self, ethereum_client: EthereumClient, relayer_account: LocalAccount):
        """
        :param ethereum_client:
        :param relayer_account: Sends the ``handleOps`` transactions and receives the gas refunds
        """
        self.ethereum_client = ethereum_client
        self.relayer_account = relayer_account

    def send_user_operation(
        self, user_operation: UserOperation, entry_point_address: ChecksumAddress
    ) -> HexBytes:
        """
        :param user_operation: Signed ``UserOperation``
        :param entry_point_address:
        :return: ``UserOperation`` hash calculated by the ``EntryPoint``
        """
        entry_point = get_entry_point_v07_contract(
            self.ethereum_client.w3, entry_point_address
        )
        packed_user_operation = user_operation.pack()
        user_operation_hash = HexBytes(
            entry_point.functions.getUserOpHash(
                packed_user_operation.as_tuple()
            ).call()
        )
        logger.debug(
            "[%s] Sending user-operation-hash=%s to entry-point=%s",
            user_operation.sender,
            user_operation_hash.hex(),
            entry_point_address,
        )
        tx_receipt = send_contract_transaction(
            self.ethereum_client,
            self.relayer_account,
            entry_point.functions.handleOps(
                [packed_user_operation.as_tuple()], self.relayer_account.address
            ),
        )
        logger.info(
            "[%s] Executed user-operation-hash=%s on tx-hash=%s",
            user_operation.sender,
            user_operation_hash.hex(),
            HexBytes(tx_receipt["transactionHash"]).hex(),
        )
        return user_operation_hash
