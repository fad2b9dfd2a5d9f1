from eth_abi.packed import encode_packed
from eth_typing import ChecksumAddress
from hexbytes import HexBytes
from safe_eth.safe.safe_signature import SafeSignatureType


def build_approved_hash_signature(owner: ChecksumAddress) -> HexBytes:
    """
    Safe signature for an ``owner`` that approved the Safe transaction hash (using ``approveHash``)
    or that is the ``msg.sender`` of ``execTransaction``

    :param owner:
    :return: `uint256 r` (owner) + `uint256 s` (unused) + `uint8 v` (`1` for approved hash). 65 bytes
    """
    return HexBytes(
        encode_packed(
            ["uint256", "uint256", "uint8"],
            [int(owner, 16), 0, SafeSignatureType.APPROVED_HASH.value],
        )
    )
