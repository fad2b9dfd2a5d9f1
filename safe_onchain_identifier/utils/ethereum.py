import logging
from functools import cache

from django.conf import settings

from eth_account.signers.local import LocalAccount
from hexbytes import HexBytes
from safe_eth.eth import EthereumClient
from safe_eth.util.util import to_0x_hex_str
from web3.contract.contract import ContractConstructor, ContractFunction
from web3.types import TxParams, TxReceipt

logger = logging.getLogger(__name__)


class TransactionRevertedException(Exception):
    pass


class TransactionNotMinedException(Exception):
    pass


@cache
def get_ethereum_client() -> EthereumClient:
    """
    :return: ``EthereumClient`` connected to ``ETHEREUM_NODE_URL``
    """
    return EthereumClient(settings.ETHEREUM_NODE_URL)


def send_transaction(
    ethereum_client: EthereumClient,
    account: LocalAccount,
    tx: TxParams,
    timeout: int = 60,
) -> TxReceipt:
    """
    Send ``tx`` signed by ``account`` using ``EthereumClient.send_unsigned_transaction`` and wait for it to be mined

    :param ethereum_client:
    :param account: Sender of the transaction
    :param tx: Transaction parameters. ``gas``, ``gasPrice`` and ``chainId`` are filled if missing,
        ``nonce`` is filled by ``EthereumClient``. Missing ``to`` means contract creation
    :param timeout: Seconds to wait for the receipt
    :return: Transaction receipt
    :raises TransactionNotMinedException: If receipt is not available after ``timeout``
    :raises TransactionRevertedException: If transaction was mined but reverted
    """
    tx = dict(tx)
    tx["from"] = account.address
    tx.setdefault("to", "")
    tx.setdefault("value", 0)
    if "chainId" not in tx:
        tx["chainId"] = ethereum_client.get_chain_id()
    if "gasPrice" not in tx and "maxFeePerGas" not in tx:
        tx["gasPrice"] = ethereum_client.w3.eth.gas_price
    if "gas" not in tx:
        tx["gas"] = ethereum_client.w3.eth.estimate_gas(tx)

    tx_hash = HexBytes(
        ethereum_client.send_unsigned_transaction(
            tx, private_key=to_0x_hex_str(account.key)
        )
    )
    logger.debug(
        "[%s] Sent transaction with tx-hash=%s", account.address, tx_hash.hex()
    )
    tx_receipt = ethereum_client.get_transaction_receipt(tx_hash, timeout=timeout)
    if not tx_receipt:
        raise TransactionNotMinedException(
            f"Transaction with tx-hash={tx_hash.hex()} was not mined after {timeout} seconds"
        )
    if tx_receipt["status"] != 1:
        raise TransactionRevertedException(
            f"Transaction with tx-hash={tx_hash.hex()} was reverted"
        )
    return tx_receipt


def send_contract_transaction(
    ethereum_client: EthereumClient,
    account: LocalAccount,
    contract_function: ContractFunction | ContractConstructor,
    value: int = 0,
) -> TxReceipt:
    """
    Same as ``send_transaction``, but building the transaction from a contract function or constructor

    :param ethereum_client:
    :param account:
    :param contract_function: Bound contract function, e.g. ``contract.functions.increment()``
    :param value: Wei to send with the call
    :return: Transaction receipt
    """
    tx = contract_function.build_transaction(
        {"from": account.address, "value": value}
    )
    return send_transaction(ethereum_client, account, tx)
