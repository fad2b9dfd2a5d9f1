from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from ....utils.ethereum import get_ethereum_client
from ...identifier import get_onchain_identifier
from ...services import (
    OnchainIdentifierService,
    TransactionNotFoundException,
    get_onchain_identifier_service,
)


class Command(BaseCommand):
    help = "Find where the onchain identifier was placed on a mined transaction"

    def add_arguments(self, parser):
        parser.add_argument("tx_hash", help="Transaction hash")
        parser.add_argument(
            "--label",
            help="Public label, `ONCHAIN_IDENTIFIER_LABEL` setting is used if not provided",
        )

    def handle(self, *args, **options):
        tx_hash = options["tx_hash"]
        if label := options["label"]:
            onchain_identifier_service = OnchainIdentifierService(
                get_ethereum_client(),
                get_onchain_identifier(label),
                settings.ETHEREUM_4337_SUPPORTED_ENTRY_POINTS,
            )
        else:
            onchain_identifier_service = get_onchain_identifier_service()

        try:
            matches = onchain_identifier_service.find_in_transaction(tx_hash)
        except TransactionNotFoundException as exc:
            raise CommandError(str(exc)) from exc

        identifier = onchain_identifier_service.identifier
        if not matches:
            self.stdout.write(
                self.style.WARNING(
                    f"Identifier {identifier} not found on tx-hash={tx_hash}"
                )
            )
            return

        for match in matches:
            self.stdout.write(
                self.style.SUCCESS(
                    f"Identifier {identifier} found on {match.location.name} "
                    f"for address={match.address}"
                )
            )
