# flake8: noqa F401
from .onchain_identifier_service import (
    IdentifierLocation,
    IdentifierMatch,
    OnchainIdentifierService,
    OnchainIdentifierServiceException,
    TransactionNotFoundException,
    get_onchain_identifier_service,
)
