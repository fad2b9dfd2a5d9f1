from django.apps import AppConfig


class AccountAbstractionConfig(AppConfig):
    name = "safe_onchain_identifier.account_abstraction"
    verbose_name = "Account Abstraction (ERC4337) UserOperations support"
