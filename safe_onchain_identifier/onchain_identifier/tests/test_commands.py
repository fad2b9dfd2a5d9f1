from io import StringIO
from unittest import mock

from django.core.management import CommandError, call_command
from django.test import TestCase

from eth_account import Account
from safe_eth.eth.utils import fast_keccak_text

from ..identifier import get_onchain_identifier, identifier_to_int
from ..services import (
    IdentifierLocation,
    IdentifierMatch,
    OnchainIdentifierService,
    TransactionNotFoundException,
)


class TestCommands(TestCase):
    def test_onchain_identifier(self):
        command = "onchain_identifier"

        buf = StringIO()
        call_command(command, stdout=buf)
        identifier = get_onchain_identifier()
        self.assertIn(f"Onchain identifier {identifier}", buf.getvalue())
        self.assertIn(f"As integer {identifier_to_int(identifier)}", buf.getvalue())

        buf = StringIO()
        call_command(command, "--label=MyWallet", stdout=buf)
        self.assertIn(
            f"Onchain identifier {get_onchain_identifier('MyWallet')}",
            buf.getvalue(),
        )

    def test_find_onchain_identifier(self):
        command = "find_onchain_identifier"
        tx_hash = fast_keccak_text("find-onchain-identifier").hex()
        safe_address = Account.create().address

        with mock.patch.object(
            OnchainIdentifierService, "find_in_transaction", return_value=[]
        ) as find_in_transaction_mock:
            buf = StringIO()
            call_command(command, tx_hash, stdout=buf)
            find_in_transaction_mock.assert_called_once_with(tx_hash)
            self.assertIn(
                f"Identifier {get_onchain_identifier()} not found on tx-hash={tx_hash}",
                buf.getvalue(),
            )

        with mock.patch.object(
            OnchainIdentifierService,
            "find_in_transaction",
            return_value=[
                IdentifierMatch(IdentifierLocation.SAFE_REFUND_RECEIVER, safe_address)
            ],
        ):
            buf = StringIO()
            call_command(command, tx_hash, "--label=MyWallet", stdout=buf)
            self.assertIn(
                f"Identifier {get_onchain_identifier('MyWallet')} found on SAFE_REFUND_RECEIVER "
                f"for address={safe_address}",
                buf.getvalue(),
            )

        with mock.patch.object(
            OnchainIdentifierService,
            "find_in_transaction",
            side_effect=TransactionNotFoundException("Cannot find tx-hash"),
        ):
            with self.assertRaisesMessage(CommandError, "Cannot find tx-hash"):
                call_command(command, tx_hash, stdout=StringIO())
