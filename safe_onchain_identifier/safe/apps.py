from django.apps import AppConfig


class SafeConfig(AppConfig):
    name = "safe_onchain_identifier.safe"
    verbose_name = "Safe calls and signatures"
