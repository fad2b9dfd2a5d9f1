import dataclasses
import logging
from enum import Enum
from functools import cache
from typing import List, Optional, Sequence

from django.conf import settings

from eth_abi.exceptions import DecodingError
from eth_typing import ChecksumAddress, HexStr
from hexbytes import HexBytes
from safe_eth.eth import EthereumClient
from safe_eth.eth.utils import fast_to_checksum_address
from web3.exceptions import TransactionNotFound
from web3.types import LogReceipt

from ...account_abstraction.helpers import (
    HANDLE_OPS_SELECTOR,
    decode_handle_ops,
    decode_nonce,
)
from ...account_abstraction.utils import (
    decode_user_operation_event_log,
    is_user_operation_event_log,
)
from ...safe.helpers import (
    CREATE_PROXY_WITH_NONCE_SELECTOR,
    EXEC_TRANSACTION_SELECTOR,
    SETUP_SELECTOR,
    DecodedCreateProxyWithNonce,
    decode_create_proxy_with_nonce,
    decode_exec_transaction,
    decode_init_code,
    decode_safe_multisig_transaction_log,
    decode_safe_setup,
    is_safe_multisig_transaction_log,
)
from ...utils.ethereum import get_ethereum_client
from ..identifier import (
    get_onchain_identifier,
    has_identifier_suffix,
    identifier_to_int,
    strip_identifier,
)

logger = logging.getLogger(__name__)


class OnchainIdentifierServiceException(Exception):
    pass


class TransactionNotFoundException(OnchainIdentifierServiceException):
    pass


class IdentifierLocation(Enum):
    TRANSACTION_DATA_SUFFIX = "transaction_data_suffix"
    SAFE_INITIALIZER_SUFFIX = "safe_initializer_suffix"
    SAFE_PAYMENT_RECEIVER = "safe_payment_receiver"
    SAFE_SALT_NONCE = "safe_salt_nonce"
    SAFE_REFUND_RECEIVER = "safe_refund_receiver"
    USER_OPERATION_CALL_DATA_SUFFIX = "user_operation_call_data_suffix"
    USER_OPERATION_NONCE_KEY = "user_operation_nonce_key"


@dataclasses.dataclass(eq=True, frozen=True)
class IdentifierMatch:
    location: IdentifierLocation
    address: Optional[ChecksumAddress]  # Safe, UserOperation sender or contract called


@cache
def get_onchain_identifier_service() -> "OnchainIdentifierService":
    return OnchainIdentifierService(
        get_ethereum_client(),
        get_onchain_identifier(),
        settings.ETHEREUM_4337_SUPPORTED_ENTRY_POINTS,
    )


class OnchainIdentifierService:
    """
    Recovers an onchain identifier from a mined transaction, without tracing.

    Top level transaction input is decoded for Safe ``execTransaction``, ``SafeProxyFactory.createProxyWithNonce``
    and ``EntryPoint.handleOps`` calls, and ``SafeMultiSigTransaction`` and ``UserOperationEvent`` logs are
    checked. Trailing identifiers on calls nested deeper than that require tracing the transaction.
    """

    def __init__(
        self,
        ethereum_client: EthereumClient,
        identifier: ChecksumAddress,
        supported_entry_points: Sequence[ChecksumAddress] = (),
    ):
        """
        :param ethereum_client:
        :param identifier: Identifier to look for
        :param supported_entry_points: Only ``UserOperationEvents`` from these addresses are checked.
            If empty, every address is allowed
        """
        self.ethereum_client = ethereum_client
        self.identifier = fast_to_checksum_address(identifier)
        self.identifier_int = identifier_to_int(self.identifier)
        self.supported_entry_points = [
            fast_to_checksum_address(entry_point)
            for entry_point in supported_entry_points
        ]

    def _find_in_create_proxy_with_nonce(
        self,
        create_proxy_with_nonce: DecodedCreateProxyWithNonce,
        address: Optional[ChecksumAddress],
    ) -> List[IdentifierMatch]:
        matches = []
        if create_proxy_with_nonce.salt_nonce == self.identifier_int:
            matches.append(IdentifierMatch(IdentifierLocation.SAFE_SALT_NONCE, address))

        initializer = create_proxy_with_nonce.initializer
        if has_identifier_suffix(initializer, self.identifier):
            matches.append(
                IdentifierMatch(IdentifierLocation.SAFE_INITIALIZER_SUFFIX, address)
            )
            initializer = strip_identifier(initializer, self.identifier)

        if initializer[:4] == SETUP_SELECTOR:
            safe_setup = decode_safe_setup(initializer)
            if safe_setup.payment_receiver == self.identifier:
                matches.append(
                    IdentifierMatch(IdentifierLocation.SAFE_PAYMENT_RECEIVER, address)
                )
        return matches

    def _find_in_handle_ops(self, data: bytes) -> List[IdentifierMatch]:
        matches = []
        for user_operation in decode_handle_ops(data).user_operations:
            sender = user_operation.sender
            if decode_nonce(user_operation.nonce)[0] == self.identifier_int:
                matches.append(
                    IdentifierMatch(IdentifierLocation.USER_OPERATION_NONCE_KEY, sender)
                )
            if has_identifier_suffix(user_operation.call_data, self.identifier):
                matches.append(
                    IdentifierMatch(
                        IdentifierLocation.USER_OPERATION_CALL_DATA_SUFFIX, sender
                    )
                )
            if not user_operation.init_code:
                continue

            # A malformed UserOperation must not hide the others in the bundle
            try:
                decoded_init_code = decode_init_code(user_operation.init_code)
                matches.extend(
                    self._find_in_create_proxy_with_nonce(
                        decoded_init_code.create_proxy_with_nonce, sender
                    )
                )
            except ValueError:
                logger.debug(
                    "[%s] init-code is not a SafeProxyFactory deployment", sender
                )
            except DecodingError:
                logger.warning(
                    "[%s] Cannot decode init-code=%s",
                    sender,
                    HexBytes(user_operation.init_code).hex(),
                )
        return matches

    def find_in_transaction_data(
        self, data: bytes, to: Optional[ChecksumAddress] = None
    ) -> List[IdentifierMatch]:
        """
        :param data: Transaction input
        :param to: Transaction destination
        :return: Identifier placements found on the transaction input
        """
        matches = []
        if has_identifier_suffix(data, self.identifier):
            matches.append(
                IdentifierMatch(IdentifierLocation.TRANSACTION_DATA_SUFFIX, to)
            )
        data = strip_identifier(data, self.identifier)
        selector = data[:4]
        try:
            if selector == EXEC_TRANSACTION_SELECTOR:
                exec_transaction = decode_exec_transaction(data)
                if exec_transaction.refund_receiver == self.identifier:
                    matches.append(
                        IdentifierMatch(IdentifierLocation.SAFE_REFUND_RECEIVER, to)
                    )
            elif selector == CREATE_PROXY_WITH_NONCE_SELECTOR:
                matches.extend(
                    self._find_in_create_proxy_with_nonce(
                        decode_create_proxy_with_nonce(data), to
                    )
                )
            elif selector == HANDLE_OPS_SELECTOR:
                matches.extend(self._find_in_handle_ops(data))
        except DecodingError:
            logger.warning(
                "Cannot decode transaction data with selector=%s sent to=%s",
                selector.hex(),
                to,
            )
        return matches

    def find_in_logs(self, logs: Sequence[LogReceipt]) -> List[IdentifierMatch]:
        """
        :param logs: Transaction receipt logs
        :return: Identifier placements found on ``SafeMultiSigTransaction`` and ``UserOperationEvent`` events
        """
        matches = []
        for log in logs:
            try:
                if is_user_operation_event_log(log):
                    user_operation_event = decode_user_operation_event_log(log)
                    if (
                        self.supported_entry_points
                        and user_operation_event.entry_point
                        not in self.supported_entry_points
                    ):
                        continue
                    if user_operation_event.nonce_key == self.identifier_int:
                        matches.append(
                            IdentifierMatch(
                                IdentifierLocation.USER_OPERATION_NONCE_KEY,
                                user_operation_event.sender,
                            )
                        )
                elif is_safe_multisig_transaction_log(log):
                    safe_multisig_transaction = decode_safe_multisig_transaction_log(
                        log
                    )
                    if safe_multisig_transaction.refund_receiver == self.identifier:
                        matches.append(
                            IdentifierMatch(
                                IdentifierLocation.SAFE_REFUND_RECEIVER,
                                safe_multisig_transaction.safe_address,
                            )
                        )
            except DecodingError:
                logger.warning(
                    "Cannot decode log with topic=%s emitted by address=%s",
                    HexBytes(log["topics"][0]).hex(),
                    log["address"],
                )
        return matches

    def find_in_transaction(self, tx_hash: HexStr | bytes) -> List[IdentifierMatch]:
        """
        :param tx_hash:
        :return: Identifier placements found on the transaction input and logs, without duplicates
        :raises TransactionNotFoundException: If transaction or receipt are not found
        """
        tx_hash = HexBytes(tx_hash)
        w3 = self.ethereum_client.w3
        try:
            tx = w3.eth.get_transaction(tx_hash)
            tx_receipt = w3.eth.get_transaction_receipt(tx_hash)
        except TransactionNotFound as exc:
            raise TransactionNotFoundException(
                f"Cannot find tx-hash={tx_hash.hex()}"
            ) from exc

        to = fast_to_checksum_address(tx["to"]) if tx["to"] else None
        matches = self.find_in_transaction_data(
            tx["input"], to
        ) + self.find_in_logs(tx_receipt["logs"])
        logger.debug(
            "Found %d placements of identifier=%s on tx-hash=%s",
            len(matches),
            self.identifier,
            tx_hash.hex(),
        )
        return list(dict.fromkeys(matches))
