from eth_utils import event_abi_to_log_topic
from safe_eth.eth.contracts import get_safe_V1_4_1_contract
from web3 import Web3

# Only emitted by Safe L2 singletons
SAFE_MULTISIG_TRANSACTION_TOPIC = event_abi_to_log_topic(
    get_safe_V1_4_1_contract(Web3()).events.SafeMultiSigTransaction().abi
)
