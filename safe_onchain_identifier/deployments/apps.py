from django.apps import AppConfig


class DeploymentsConfig(AppConfig):
    name = "safe_onchain_identifier.deployments"
    verbose_name = "Onchain identifier contracts deployment"
