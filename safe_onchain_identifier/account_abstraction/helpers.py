import dataclasses
from typing import List, Tuple

from eth_abi import decode as decode_abi
from eth_abi import encode as abi_encode
from eth_typing import ChecksumAddress
from eth_utils import function_signature_to_4byte_selector
from hexbytes import HexBytes
from safe_eth.eth.utils import fast_to_checksum_address

from .constants import NONCE_KEY_BITS, NONCE_SEQUENCE_BITS
from .user_operation import PackedUserOperation

EXECUTE_USER_OP_TYPES = ["address", "uint256", "bytes", "uint8"]
EXECUTE_USER_OP_SELECTOR = function_signature_to_4byte_selector(
    "executeUserOp(address,uint256,bytes,uint8)"
)

PACKED_USER_OPERATION_TYPE = (
    "(address,uint256,bytes,bytes,bytes32,uint256,bytes32,bytes,bytes)"
)
HANDLE_OPS_TYPES = [f"{PACKED_USER_OPERATION_TYPE}[]", "address"]
HANDLE_OPS_SELECTOR = function_signature_to_4byte_selector(
    f"handleOps({PACKED_USER_OPERATION_TYPE}[],address)"
)


@dataclasses.dataclass(eq=True, frozen=True)
class DecodedHandleOps:
    user_operations: List[PackedUserOperation]
    beneficiary: ChecksumAddress


def encode_execute_user_op(
    to: ChecksumAddress, value: int, data: bytes, operation: int
) -> HexBytes:
    """
    :return: ``Safe4337Module.executeUserOp`` call data, to be used as ``UserOperation`` ``call_data``
    """
    return HexBytes(
        EXECUTE_USER_OP_SELECTOR
        + abi_encode(
            EXECUTE_USER_OP_TYPES,
            [fast_to_checksum_address(to), value, HexBytes(data), operation],
        )
    )


def decode_handle_ops(data: bytes) -> DecodedHandleOps:
    """
    :param data: ``EntryPoint.handleOps`` call data
    :return: Decoded ``PackedUserOperations`` and ``beneficiary``
    :raises ValueError: If data is not a ``handleOps`` call
    :raises DecodingError: Problem decoding
    """
    data = HexBytes(data)
    if data[:4] != HANDLE_OPS_SELECTOR:
        raise ValueError(f"{data[:4].hex()} is not a handleOps selector")

    user_operations, beneficiary = decode_abi(HANDLE_OPS_TYPES, data[4:])
    return DecodedHandleOps(
        [
            PackedUserOperation(
                fast_to_checksum_address(sender),
                nonce,
                HexBytes(init_code),
                HexBytes(call_data),
                HexBytes(account_gas_limits),
                pre_verification_gas,
                HexBytes(gas_fees),
                HexBytes(paymaster_and_data),
                HexBytes(signature),
            )
            for (
                sender,
                nonce,
                init_code,
                call_data,
                account_gas_limits,
                pre_verification_gas,
                gas_fees,
                paymaster_and_data,
                signature,
            ) in user_operations
        ],
        fast_to_checksum_address(beneficiary),
    )


def encode_nonce(key: int, sequence: int = 0) -> int:
    """
    :param key: `uint192` nonce key, every key has its own independent sequence on the EntryPoint
    :param sequence: `uint64` sequence for the ``key``
    :return: EntryPoint 2D `uint256` nonce
    :raises ValueError: If ``key`` or ``sequence`` do not fit in their bits
    """
    if not 0 <= key < 2**NONCE_KEY_BITS:
        raise ValueError(f"Nonce key {key} does not fit in {NONCE_KEY_BITS} bits")
    if not 0 <= sequence < 2**NONCE_SEQUENCE_BITS:
        raise ValueError(
            f"Nonce sequence {sequence} does not fit in {NONCE_SEQUENCE_BITS} bits"
        )
    return (key << NONCE_SEQUENCE_BITS) | sequence


def decode_nonce(nonce: int) -> Tuple[int, int]:
    """
    :param nonce: EntryPoint 2D `uint256` nonce
    :return: Tuple with `key` and `sequence`
    """
    return nonce >> NONCE_SEQUENCE_BITS, nonce & (2**NONCE_SEQUENCE_BITS - 1)
