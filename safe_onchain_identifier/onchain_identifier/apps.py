from django.apps import AppConfig


class OnchainIdentifierConfig(AppConfig):
    name = "safe_onchain_identifier.onchain_identifier"
    verbose_name = "Onchain identifier placement and recovery"
