"""
Contract getters for the ERC4337 contracts not shipped by ``safe-eth-py``.
Safe and ProxyFactory contracts are retrieved from ``safe_eth.eth.contracts``
"""

from typing import Optional

from eth_typing import ChecksumAddress
from web3 import Web3
from web3.contract import Contract

from .abis.account_abstraction import (
    entry_point_v07_abi,
    safe_4337_module_abi,
    safe_module_setup_abi,
)
from .abis.counter import counter_abi


def get_entry_point_v07_contract(
    w3: Web3, address: Optional[ChecksumAddress] = None
) -> Contract:
    return w3.eth.contract(address, abi=entry_point_v07_abi)


def get_safe_4337_module_contract(
    w3: Web3, address: Optional[ChecksumAddress] = None
) -> Contract:
    return w3.eth.contract(address, abi=safe_4337_module_abi)


def get_safe_module_setup_contract(
    w3: Web3, address: Optional[ChecksumAddress] = None
) -> Contract:
    return w3.eth.contract(address, abi=safe_module_setup_abi)


def get_counter_contract(
    w3: Web3, address: Optional[ChecksumAddress] = None
) -> Contract:
    return w3.eth.contract(address, abi=counter_abi)
