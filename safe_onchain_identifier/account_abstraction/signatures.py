import logging

from eth_abi.packed import encode_packed
from eth_account.messages import encode_defunct
from eth_account.signers.local import LocalAccount
from hexbytes import HexBytes
from web3.contract import Contract

from .user_operation import UserOperation

logger = logging.getLogger(__name__)

# Safe4337Module tells `eth_sign` signatures (over the raw operation hash) apart from EIP712 ones by `v > 30`
ETH_SIGN_V_OFFSET = 4


def encode_validity_window(valid_after: int, valid_until: int) -> bytes:
    """
    :param valid_after: Unix timestamp, `0` means no lower bound
    :param valid_until: Unix timestamp, `0` means no upper bound
    :return: `uint48 valid_after` + `uint48 valid_until` (12 bytes)
    """
    return encode_packed(["uint48", "uint48"], [valid_after, valid_until])


def sign_user_operation(
    owner: LocalAccount,
    user_operation: UserOperation,
    safe_4337_module: Contract,
    valid_after: int = 0,
    valid_until: int = 0,
) -> HexBytes:
    """
    Sign a ``UserOperation`` for a Safe owned by ``owner`` using the ``Safe4337Module``

    ``SafeOp`` hash is requested to the module with the validity window set as the ``signature``,
    then signed using ``eth_sign`` instead of EIP712. That's a shortcut and should not be used in
    production, EIP712 signing is the way to go.

    :param owner: Safe owner
    :param user_operation: ``signature`` field is ignored
    :param safe_4337_module: ``Safe4337Module`` contract enabled on the Safe
    :param valid_after:
    :param valid_until:
    :return: `uint48 valid_after` + `uint48 valid_until` + `bytes32 r` + `bytes32 s` + `uint8 v` (77 bytes)
    """
    validity_window = encode_validity_window(valid_after, valid_until)
    packed_user_operation = user_operation.with_signature(validity_window).pack()
    operation_hash = HexBytes(
        safe_4337_module.functions.getOperationHash(
            packed_user_operation.as_tuple()
        ).call()
    )
    logger.debug(
        "[%s] Signing safe-operation-hash=%s with owner=%s",
        user_operation.sender,
        operation_hash.hex(),
        owner.address,
    )
    signed_message = owner.sign_message(encode_defunct(primitive=operation_hash))
    return HexBytes(
        encode_packed(
            ["uint48", "uint48", "bytes32", "bytes32", "uint8"],
            [
                valid_after,
                valid_until,
                signed_message.r.to_bytes(32, "big"),
                signed_message.s.to_bytes(32, "big"),
                signed_message.v + ETH_SIGN_V_OFFSET,
            ],
        )
    )
