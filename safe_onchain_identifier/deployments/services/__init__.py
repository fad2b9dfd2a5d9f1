# flake8: noqa F401
from .deployment_service import (
    DeploymentService,
    OnchainIdentifierContracts,
    get_deployment_service,
)
