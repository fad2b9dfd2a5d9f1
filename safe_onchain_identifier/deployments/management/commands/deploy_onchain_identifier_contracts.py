from django.core.management.base import BaseCommand, CommandError

from eth_account import Account
from safe_eth.eth.utils import fast_to_checksum_address

from ...exceptions import DeploymentServiceException
from ...services import get_deployment_service


class Command(BaseCommand):
    help = "Deploy the contracts needed for the onchain identifier and a Safe with the Safe4337Module enabled"

    def add_arguments(self, parser):
        parser.add_argument(
            "--private-key", help="Deployer private key", required=True
        )
        parser.add_argument(
            "--owners",
            nargs="+",
            help="Safe owners. If not provided, deployer will be the only owner",
        )
        parser.add_argument("--threshold", type=int, default=1)
        parser.add_argument(
            "--salt-nonce",
            type=lambda value: int(value, 0),
            help="Safe salt nonce, `SAFE_4337_SALT_NONCE` setting is used if not provided",
        )

    def handle(self, *args, **options):
        try:
            deployer_account = Account.from_key(options["private_key"])
        except ValueError as exc:
            raise CommandError("Provided private key is not valid") from exc

        owners = [
            fast_to_checksum_address(owner)
            for owner in (options["owners"] or [deployer_account.address])
        ]
        deployment_service = get_deployment_service(deployer_account)
        try:
            contracts = deployment_service.deploy_onchain_identifier_contracts()
            initializer = deployment_service.build_4337_safe_initializer(
                contracts, owners, options["threshold"]
            )
            safe = deployment_service.deploy_safe(
                contracts, initializer, options["salt_nonce"]
            )
        except DeploymentServiceException as exc:
            raise CommandError(str(exc)) from exc

        for field_name, contract in vars(contracts).items():
            self.stdout.write(f"{field_name}={contract.address}")
        self.stdout.write(self.style.SUCCESS(f"Safe deployed on {safe.address}"))
