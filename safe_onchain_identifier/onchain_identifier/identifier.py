from typing import Optional

from django.conf import settings

from eth_typing import ChecksumAddress
from hexbytes import HexBytes
from safe_eth.eth.utils import fast_keccak_text, fast_to_checksum_address

IDENTIFIER_LENGTH = 20


def get_onchain_identifier(label: Optional[str] = None) -> ChecksumAddress:
    """
    :param label: Public label. If not provided ``ONCHAIN_IDENTIFIER_LABEL`` is used
    :return: Last 20 bytes of ``keccak256(label)`` as a checksummed address
    """
    label = settings.ONCHAIN_IDENTIFIER_LABEL if label is None else label
    return fast_to_checksum_address(fast_keccak_text(label)[-IDENTIFIER_LENGTH:])


def identifier_to_int(identifier: ChecksumAddress) -> int:
    """
    :return: Identifier as an `uint160`, for `uint256` parameters like Safe ``saltNonce`` or
        the EntryPoint nonce key
    """
    return int.from_bytes(HexBytes(identifier), byteorder="big")


def append_identifier(data: bytes, identifier: ChecksumAddress) -> HexBytes:
    """
    Contracts only decode the arguments they expect, so trailing bytes are ignored when
    executing, but they are kept in the transaction input

    :return: ``data`` + ``identifier`` (20 bytes)
    """
    return HexBytes(data) + HexBytes(identifier)


def has_identifier_suffix(data: bytes, identifier: ChecksumAddress) -> bool:
    return HexBytes(data).endswith(HexBytes(identifier))


def strip_identifier(data: bytes, identifier: ChecksumAddress) -> HexBytes:
    """
    :return: ``data`` without the trailing ``identifier``. ``data`` if it's not present
    """
    data = HexBytes(data)
    if has_identifier_suffix(data, identifier):
        return data[:-IDENTIFIER_LENGTH]
    return data
