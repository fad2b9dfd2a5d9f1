from django.core.management.base import BaseCommand

from ...identifier import get_onchain_identifier, identifier_to_int


class Command(BaseCommand):
    help = "Show the onchain identifier for a label"

    def add_arguments(self, parser):
        parser.add_argument(
            "--label",
            help="Public label, `ONCHAIN_IDENTIFIER_LABEL` setting is used if not provided",
        )

    def handle(self, *args, **options):
        identifier = get_onchain_identifier(options["label"])
        self.stdout.write(self.style.SUCCESS(f"Onchain identifier {identifier}"))
        self.stdout.write(f"As integer {identifier_to_int(identifier)}")
