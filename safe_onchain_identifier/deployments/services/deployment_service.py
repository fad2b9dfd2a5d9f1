import dataclasses
import logging
from typing import Any, Optional, Sequence, Type

from django.conf import settings

from eth_account.signers.local import LocalAccount
from eth_typing import ChecksumAddress
from hexbytes import HexBytes
from safe_eth.eth import EthereumClient
from safe_eth.eth.constants import NULL_ADDRESS
from safe_eth.eth.contracts import (
    get_proxy_factory_V1_4_1_contract,
    get_safe_V1_4_1_contract,
)
from safe_eth.eth.utils import fast_to_checksum_address
from web3.contract import Contract

from ...safe.helpers import encode_enable_modules, encode_safe_setup
from ...utils.contracts import (
    get_counter_contract,
    get_entry_point_v07_contract,
    get_safe_4337_module_contract,
    get_safe_module_setup_contract,
)
from ...utils.ethereum import get_ethereum_client, send_contract_transaction
from ..artifacts import ContractArtifacts
from ..exceptions import ContractDeploymentException

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class OnchainIdentifierContracts:
    counter: Contract
    safe_l2: Contract  # Singleton used for every Safe proxy
    safe_proxy_factory: Contract
    entry_point: Contract
    safe_4337_module: Contract
    safe_module_setup: Contract


def get_deployment_service(deployer_account: LocalAccount) -> "DeploymentService":
    return DeploymentService(
        get_ethereum_client(),
        deployer_account,
        ContractArtifacts(settings.CONTRACT_ARTIFACTS_DIR),
    )


class DeploymentService:
    """
    Deploys the contracts needed to place an onchain identifier: ``SafeL2`` singleton, ``SafeProxyFactory``,
    ERC4337 ``EntryPoint`` v0.7, ``Safe4337Module``, ``SafeModuleSetup`` and a ``Counter`` as a call target.

    Creation bytecode is taken from Hardhat artifacts
    """

    CONTRACT_NAMES = (
        "Counter",
        "SafeL2",
        "SafeProxyFactory",
        "EntryPoint",
        "Safe4337Module",
        "SafeModuleSetup",
    )

    def __init__(
        self,
        ethereum_client: EthereumClient,
        deployer_account: LocalAccount,
        artifacts: ContractArtifacts,
    ):
        """
        :param ethereum_client:
        :param deployer_account: Sends and pays for every deployment transaction
        :param artifacts:
        """
        self.ethereum_client = ethereum_client
        self.w3 = ethereum_client.w3
        self.deployer_account = deployer_account
        self.artifacts = artifacts

    def has_artifacts(self) -> bool:
        return all(
            self.artifacts.has_artifact(contract_name)
            for contract_name in self.CONTRACT_NAMES
        )

    def deploy_web3_contract(
        self, contract_factory: Type[Contract], *constructor_args: Any
    ) -> ChecksumAddress:
        """
        :param contract_factory: web3 contract with ``abi`` and ``bytecode``
        :param constructor_args:
        :return: Address of the deployed contract
        :raises ContractDeploymentException: If no contract address is returned
        :raises TransactionRevertedException:
        """
        tx_receipt = send_contract_transaction(
            self.ethereum_client,
            self.deployer_account,
            contract_factory.constructor(*constructor_args),
        )
        if not (contract_address := tx_receipt.get("contractAddress")):
            raise ContractDeploymentException(
                f"Deployment on tx-hash={HexBytes(tx_receipt['transactionHash']).hex()} "
                f"did not return a contract address"
            )
        return fast_to_checksum_address(contract_address)

    def deploy_contract(self, contract_name: str, *constructor_args: Any) -> Contract:
        """
        :param contract_name: Name of the Hardhat artifact
        :param constructor_args:
        :return: Deployed contract, using the artifact ABI
        :raises ArtifactNotFoundException:
        """
        artifact = self.artifacts.get_artifact(contract_name)
        contract_address = self.deploy_web3_contract(
            self.w3.eth.contract(abi=artifact.abi, bytecode=artifact.bytecode),
            *constructor_args,
        )
        logger.info(
            "[%s] Deployed %s on address=%s",
            self.deployer_account.address,
            contract_name,
            contract_address,
        )
        return self.w3.eth.contract(contract_address, abi=artifact.abi)

    def deploy_onchain_identifier_contracts(self) -> OnchainIdentifierContracts:
        """
        :return: Every contract deployed, bound to the ABIs used by this project
        """
        counter = self.deploy_contract("Counter")
        safe_l2 = self.deploy_contract("SafeL2")
        safe_proxy_factory = self.deploy_contract("SafeProxyFactory")
        entry_point = self.deploy_contract("EntryPoint")
        safe_4337_module = self.deploy_contract("Safe4337Module", entry_point.address)
        safe_module_setup = self.deploy_contract("SafeModuleSetup")
        return OnchainIdentifierContracts(
            get_counter_contract(self.w3, counter.address),
            get_safe_V1_4_1_contract(self.w3, safe_l2.address),
            get_proxy_factory_V1_4_1_contract(self.w3, safe_proxy_factory.address),
            get_entry_point_v07_contract(self.w3, entry_point.address),
            get_safe_4337_module_contract(self.w3, safe_4337_module.address),
            get_safe_module_setup_contract(self.w3, safe_module_setup.address),
        )

    def build_4337_safe_initializer(
        self,
        contracts: OnchainIdentifierContracts,
        owners: Sequence[ChecksumAddress],
        threshold: int = 1,
        payment_receiver: ChecksumAddress = NULL_ADDRESS,
    ) -> HexBytes:
        """
        :return: Safe ``setup`` call data enabling the ``Safe4337Module`` (through ``SafeModuleSetup``)
            and setting it as the fallback handler
        """
        return encode_safe_setup(
            owners,
            threshold,
            to=contracts.safe_module_setup.address,
            data=encode_enable_modules([contracts.safe_4337_module.address]),
            fallback_handler=contracts.safe_4337_module.address,
            payment_receiver=payment_receiver,
        )

    def predict_safe_address(
        self,
        contracts: OnchainIdentifierContracts,
        initializer: bytes,
        salt_nonce: int,
    ) -> ChecksumAddress:
        """
        :return: Address of the Safe proxy, calling ``createProxyWithNonce`` without sending a transaction
        """
        return fast_to_checksum_address(
            contracts.safe_proxy_factory.functions.createProxyWithNonce(
                contracts.safe_l2.address, initializer, salt_nonce
            ).call({"from": self.deployer_account.address})
        )

    def deploy_safe(
        self,
        contracts: OnchainIdentifierContracts,
        initializer: bytes,
        salt_nonce: Optional[int] = None,
    ) -> Contract:
        """
        :param contracts:
        :param initializer: Safe ``setup`` call data, trailing data is sent too
        :param salt_nonce: ``SAFE_4337_SALT_NONCE`` setting if not provided
        :return: Deployed Safe proxy
        """
        salt_nonce = settings.SAFE_4337_SALT_NONCE if salt_nonce is None else salt_nonce
        safe_address = self.predict_safe_address(contracts, initializer, salt_nonce)
        send_contract_transaction(
            self.ethereum_client,
            self.deployer_account,
            contracts.safe_proxy_factory.functions.createProxyWithNonce(
                contracts.safe_l2.address, initializer, salt_nonce
            ),
        )
        logger.info(
            "[%s] Deployed Safe with salt-nonce=%d", safe_address, salt_nonce
        )
        return get_safe_V1_4_1_contract(self.w3, safe_address)
