import dataclasses
from functools import cache
from typing import List, Sequence

from eth_abi import decode as decode_abi
from eth_typing import ChecksumAddress
from eth_utils import function_signature_to_4byte_selector
from hexbytes import HexBytes
from safe_eth.eth.constants import NULL_ADDRESS
from safe_eth.eth.contracts import (
    get_proxy_factory_V1_4_1_contract,
    get_safe_V1_4_1_contract,
)
from safe_eth.eth.utils import fast_to_checksum_address
from safe_eth.safe.enums import SafeOperationEnum
from web3 import Web3
from web3.contract import Contract
from web3.types import LogReceipt

from ..utils.contracts import get_safe_module_setup_contract
from .constants import SAFE_MULTISIG_TRANSACTION_TOPIC

SETUP_SELECTOR = function_signature_to_4byte_selector(
    "setup(address[],uint256,address,bytes,address,address,uint256,address)"
)
EXEC_TRANSACTION_SELECTOR = function_signature_to_4byte_selector(
    "execTransaction(address,uint256,bytes,uint8,uint256,uint256,uint256,address,address,bytes)"
)
CREATE_PROXY_WITH_NONCE_SELECTOR = function_signature_to_4byte_selector(
    "createProxyWithNonce(address,bytes,uint256)"
)
ENABLE_MODULES_SELECTOR = function_signature_to_4byte_selector(
    "enableModules(address[])"
)


@cache
def get_safe_contract() -> Contract:
    dummy_w3 = Web3()  # Not needed, just used to encode and decode contracts
    return get_safe_V1_4_1_contract(dummy_w3)


@cache
def get_proxy_factory_contract() -> Contract:
    dummy_w3 = Web3()
    return get_proxy_factory_V1_4_1_contract(dummy_w3)


@dataclasses.dataclass(eq=True, frozen=True)
class DecodedSafeSetup:
    owners: List[ChecksumAddress]
    threshold: int
    to: ChecksumAddress
    data: bytes
    fallback_handler: ChecksumAddress
    payment_token: ChecksumAddress
    payment: int
    payment_receiver: ChecksumAddress


@dataclasses.dataclass(eq=True, frozen=True)
class DecodedCreateProxyWithNonce:
    singleton: ChecksumAddress
    initializer: bytes  # Safe `setup` call, with any trailing data
    salt_nonce: int


@dataclasses.dataclass(eq=True, frozen=True)
class DecodedExecTransaction:
    to: ChecksumAddress
    value: int
    data: bytes
    operation: int
    safe_tx_gas: int
    base_gas: int
    gas_price: int
    gas_token: ChecksumAddress
    refund_receiver: ChecksumAddress
    signatures: bytes


@dataclasses.dataclass(eq=True, frozen=True)
class DecodedInitCode:
    factory_address: ChecksumAddress
    factory_data: bytes  # Factory call with function identifier
    create_proxy_with_nonce: DecodedCreateProxyWithNonce


@dataclasses.dataclass(eq=True, frozen=True)
class SafeMultiSigTransactionEvent:
    safe_address: ChecksumAddress
    to: ChecksumAddress
    value: int
    data: bytes
    operation: int
    safe_tx_gas: int
    base_gas: int
    gas_price: int
    gas_token: ChecksumAddress
    refund_receiver: ChecksumAddress
    signatures: bytes
    nonce: int
    sender: ChecksumAddress
    threshold: int


def _check_selector(data: bytes, selector: bytes, function_name: str) -> None:
    if data[:4] != selector:
        raise ValueError(f"{HexBytes(data[:4]).hex()} is not a {function_name} selector")


def encode_safe_setup(
    owners: Sequence[ChecksumAddress],
    threshold: int,
    to: ChecksumAddress = NULL_ADDRESS,
    data: bytes = b"",
    fallback_handler: ChecksumAddress = NULL_ADDRESS,
    payment_token: ChecksumAddress = NULL_ADDRESS,
    payment: int = 0,
    payment_receiver: ChecksumAddress = NULL_ADDRESS,
) -> HexBytes:
    """
    :return: Safe ``setup`` call data, to be used as the ``initializer`` for the ``SafeProxyFactory``
    """
    return HexBytes(
        get_safe_contract()
        .functions.setup(
            [fast_to_checksum_address(owner) for owner in owners],
            threshold,
            fast_to_checksum_address(to),
            HexBytes(data),
            fast_to_checksum_address(fallback_handler),
            fast_to_checksum_address(payment_token),
            payment,
            fast_to_checksum_address(payment_receiver),
        )
        ._encode_transaction_data()
    )


def decode_safe_setup(data: bytes) -> DecodedSafeSetup:
    """
    :param data: Safe ``setup`` call data. Trailing data is not supported
    :return:
    :raises ValueError: If data is not a ``setup`` call
    :raises DecodingError: Problem decoding
    """
    data = HexBytes(data)
    _check_selector(data, SETUP_SELECTOR, "setup")
    _, safe_deployment_data = get_safe_contract().decode_function_input(data)
    return DecodedSafeSetup(
        [fast_to_checksum_address(owner) for owner in safe_deployment_data["_owners"]],
        safe_deployment_data["_threshold"],
        fast_to_checksum_address(safe_deployment_data["to"]),
        HexBytes(safe_deployment_data["data"]),
        fast_to_checksum_address(safe_deployment_data["fallbackHandler"]),
        fast_to_checksum_address(safe_deployment_data["paymentToken"]),
        safe_deployment_data["payment"],
        fast_to_checksum_address(safe_deployment_data["paymentReceiver"]),
    )


def encode_exec_transaction(
    to: ChecksumAddress,
    value: int,
    data: bytes,
    operation: int = SafeOperationEnum.CALL.value,
    safe_tx_gas: int = 0,
    base_gas: int = 0,
    gas_price: int = 0,
    gas_token: ChecksumAddress = NULL_ADDRESS,
    refund_receiver: ChecksumAddress = NULL_ADDRESS,
    signatures: bytes = b"",
) -> HexBytes:
    """
    :return: Safe ``execTransaction`` call data
    """
    return HexBytes(
        get_safe_contract()
        .functions.execTransaction(
            fast_to_checksum_address(to),
            value,
            HexBytes(data),
            operation,
            safe_tx_gas,
            base_gas,
            gas_price,
            fast_to_checksum_address(gas_token),
            fast_to_checksum_address(refund_receiver),
            HexBytes(signatures),
        )
        ._encode_transaction_data()
    )


def decode_exec_transaction(data: bytes) -> DecodedExecTransaction:
    """
    :param data: Safe ``execTransaction`` call data. Trailing data is not supported
    :return:
    :raises ValueError: If data is not an ``execTransaction`` call
    :raises DecodingError: Problem decoding
    """
    data = HexBytes(data)
    _check_selector(data, EXEC_TRANSACTION_SELECTOR, "execTransaction")
    _, arguments = get_safe_contract().decode_function_input(data)
    return DecodedExecTransaction(
        fast_to_checksum_address(arguments["to"]),
        arguments["value"],
        HexBytes(arguments["data"]),
        arguments["operation"],
        arguments["safeTxGas"],
        arguments["baseGas"],
        arguments["gasPrice"],
        fast_to_checksum_address(arguments["gasToken"]),
        fast_to_checksum_address(arguments["refundReceiver"]),
        HexBytes(arguments["signatures"]),
    )


def encode_create_proxy_with_nonce(
    singleton: ChecksumAddress, initializer: bytes, salt_nonce: int
) -> HexBytes:
    """
    :return: ``SafeProxyFactory.createProxyWithNonce`` call data, also used as ``UserOperation`` ``factory_data``
    """
    return HexBytes(
        get_proxy_factory_contract()
        .functions.createProxyWithNonce(
            fast_to_checksum_address(singleton), HexBytes(initializer), salt_nonce
        )
        ._encode_transaction_data()
    )


def decode_create_proxy_with_nonce(data: bytes) -> DecodedCreateProxyWithNonce:
    """
    :param data: ``SafeProxyFactory.createProxyWithNonce`` call data
    :return:
    :raises ValueError: If data is not a ``createProxyWithNonce`` call
    :raises DecodingError: Problem decoding
    """
    data = HexBytes(data)
    _check_selector(data, CREATE_PROXY_WITH_NONCE_SELECTOR, "createProxyWithNonce")
    _, arguments = get_proxy_factory_contract().decode_function_input(data)
    return DecodedCreateProxyWithNonce(
        fast_to_checksum_address(arguments["_singleton"]),
        HexBytes(arguments["initializer"]),
        arguments["saltNonce"],
    )


def decode_init_code(init_code: bytes) -> DecodedInitCode:
    """
    Decode ``UserOperation`` ``init_code`` for a ``SafeProxyFactory`` Safe deployment

    :param init_code: should be composed of:
      - 20 first bytes with the address of the factory.
      - Call data for the ``Factory``. In the case of the Safe:
        - Call to the ``ProxyFactory``, with the ``initializer``, ``singleton`` and ``saltNonce``
        - The ``ProxyFactory`` then deploys a ``Safe Proxy`` and calls ``setup`` with all the configuration parameters.
    :return: Decoded Init Code dataclass
    :raises ValueError: If ``init_code`` is not a ``createProxyWithNonce`` deployment
    :raises DecodingError: Problem decoding
    """
    init_code = HexBytes(init_code)
    if len(init_code) < 24:
        raise ValueError(f"init-code={init_code.hex()} is too short")
    factory_address = fast_to_checksum_address(init_code[:20])
    factory_data = init_code[20:]
    return DecodedInitCode(
        factory_address,
        factory_data,
        decode_create_proxy_with_nonce(factory_data),
    )


def encode_enable_modules(modules: Sequence[ChecksumAddress]) -> HexBytes:
    """
    :return: ``SafeModuleSetup.enableModules`` call data, to be delegate called from Safe ``setup``
    """
    return HexBytes(
        get_safe_module_setup_contract(Web3())
        .functions.enableModules(
            [fast_to_checksum_address(module) for module in modules]
        )
        ._encode_transaction_data()
    )


def is_safe_multisig_transaction_log(log: LogReceipt) -> bool:
    return (
        len(log["topics"]) == 1
        and HexBytes(log["topics"][0]) == SAFE_MULTISIG_TRANSACTION_TOPIC
    )


def decode_safe_multisig_transaction_log(
    log: LogReceipt,
) -> SafeMultiSigTransactionEvent:
    """
    :param log: Safe L2 ``SafeMultiSigTransaction`` log
    :return: Decoded event, ``additionalInfo`` is decoded too
    :raises MismatchedABI: If log is not a ``SafeMultiSigTransaction``
    :raises DecodingError: Problem decoding
    """
    args = get_safe_contract().events.SafeMultiSigTransaction().process_log(log)[
        "args"
    ]
    # additionalInfo = abi.encode(nonce, msg.sender, threshold)
    nonce, sender, threshold = decode_abi(
        ["uint256", "address", "uint256"], HexBytes(args["additionalInfo"])
    )
    return SafeMultiSigTransactionEvent(
        fast_to_checksum_address(log["address"]),
        fast_to_checksum_address(args["to"]),
        args["value"],
        HexBytes(args["data"]),
        args["operation"],
        args["safeTxGas"],
        args["baseGas"],
        args["gasPrice"],
        fast_to_checksum_address(args["gasToken"]),
        fast_to_checksum_address(args["refundReceiver"]),
        HexBytes(args["signatures"]),
        nonce,
        fast_to_checksum_address(sender),
        threshold,
    )


def get_safe_multisig_transaction_events(
    logs: Sequence[LogReceipt],
) -> List[SafeMultiSigTransactionEvent]:
    """
    :param logs: Transaction receipt logs
    :return: ``SafeMultiSigTransaction`` events decoded
    """
    return [
        decode_safe_multisig_transaction_log(log)
        for log in logs
        if is_safe_multisig_transaction_log(log)
    ]
