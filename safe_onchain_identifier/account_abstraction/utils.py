import dataclasses
from typing import List, Optional, Sequence

from eth_abi import decode as decode_abi
from eth_typing import ChecksumAddress
from hexbytes import HexBytes
from safe_eth.eth.utils import fast_to_checksum_address
from web3.types import LogReceipt

from .constants import USER_OPERATION_EVENT_TOPIC, USER_OPERATION_NUMBER_TOPICS
from .helpers import decode_nonce


@dataclasses.dataclass(eq=True, frozen=True)
class UserOperationEvent:
    entry_point: ChecksumAddress
    user_operation_hash: HexBytes
    sender: ChecksumAddress
    paymaster: ChecksumAddress
    nonce: int
    success: bool
    actual_gas_cost: int
    actual_gas_used: int

    @property
    def nonce_key(self) -> int:
        return decode_nonce(self.nonce)[0]


def is_user_operation_event_log(log: LogReceipt) -> bool:
    return (
        len(log["topics"]) == USER_OPERATION_NUMBER_TOPICS
        and HexBytes(log["topics"][0]) == USER_OPERATION_EVENT_TOPIC
    )


def get_user_operation_sender_from_user_operation_log(
    log: LogReceipt,
) -> ChecksumAddress:
    """
    UserOperationEvent (
                    indexed bytes32 userOpHash,
                    indexed address sender,
                    indexed address paymaster,
                    uint256 nonce,
                    bool success,
                    uint256 actualGasCost,
                    uint256 actualGasUsed
                    )
    :param log: `UserOperationEvent` log
    :return: Checksum address of user operation `sender`
    """

    return fast_to_checksum_address(HexBytes(log["topics"][2])[-20:])


def decode_user_operation_event_log(log: LogReceipt) -> UserOperationEvent:
    """
    :param log: `UserOperationEvent` log
    :return: Decoded event
    :raises DecodingError: Problem decoding
    """
    nonce, success, actual_gas_cost, actual_gas_used = decode_abi(
        ["uint256", "bool", "uint256", "uint256"], HexBytes(log["data"])
    )
    return UserOperationEvent(
        fast_to_checksum_address(log["address"]),
        HexBytes(log["topics"][1]),
        get_user_operation_sender_from_user_operation_log(log),
        fast_to_checksum_address(HexBytes(log["topics"][3])[-20:]),
        nonce,
        success,
        actual_gas_cost,
        actual_gas_used,
    )


def get_user_operation_events(
    logs: Sequence[LogReceipt],
    entry_point: Optional[ChecksumAddress] = None,
    user_operation_hash: Optional[bytes] = None,
) -> List[UserOperationEvent]:
    """
    :param logs: Transaction receipt logs
    :param entry_point: If provided, only events emitted by this address are returned
    :param user_operation_hash: If provided, only events for this `UserOperation` are returned
    :return: ``UserOperationEvents`` decoded
    """
    return [
        user_operation_event
        for user_operation_event in (
            decode_user_operation_event_log(log)
            for log in logs
            if is_user_operation_event_log(log)
        )
        if (
            (entry_point is None or user_operation_event.entry_point == entry_point)
            and (
                user_operation_hash is None
                or user_operation_event.user_operation_hash
                == HexBytes(user_operation_hash)
            )
        )
    ]
