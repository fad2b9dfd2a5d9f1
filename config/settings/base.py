"""
Base settings to build other settings files upon.
"""

from pathlib import Path

import environ

ROOT_DIR = Path(__file__).resolve(strict=True).parent.parent.parent
APPS_DIR = ROOT_DIR / "safe_onchain_identifier"

env = environ.Env()

READ_DOT_ENV_FILE = env.bool("DJANGO_READ_DOT_ENV_FILE", default=False)
DOT_ENV_FILE = env("DJANGO_DOT_ENV_FILE", default=None)
if READ_DOT_ENV_FILE or DOT_ENV_FILE:
    DOT_ENV_FILE = DOT_ENV_FILE or ".env"
    # OS environment variables take precedence over variables from .env
    env.read_env(str(ROOT_DIR / DOT_ENV_FILE))

# GENERAL
# ------------------------------------------------------------------------------
# https://docs.djangoproject.com/en/dev/ref/settings/#debug
DEBUG = env.bool("DEBUG", False)
# https://docs.djangoproject.com/en/dev/ref/settings/#secret-key
SECRET_KEY = env("DJANGO_SECRET_KEY", default=None)
TIME_ZONE = "UTC"
# https://docs.djangoproject.com/en/dev/ref/settings/#use-tz
USE_TZ = True

# DATABASES
# ------------------------------------------------------------------------------
# Nothing is persisted, a database is only configured for the test runner
# https://docs.djangoproject.com/en/dev/ref/settings/#databases
DATABASES = {
    "default": env.db("DATABASE_URL", default="sqlite://:memory:"),
}
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# APPS
# ------------------------------------------------------------------------------
LOCAL_APPS = [
    "safe_onchain_identifier.account_abstraction.apps.AccountAbstractionConfig",
    "safe_onchain_identifier.deployments.apps.DeploymentsConfig",
    "safe_onchain_identifier.onchain_identifier.apps.OnchainIdentifierConfig",
    "safe_onchain_identifier.safe.apps.SafeConfig",
]
# https://docs.djangoproject.com/en/dev/ref/settings/#installed-apps
INSTALLED_APPS = LOCAL_APPS

# LOGGING
# ------------------------------------------------------------------------------
# See: https://docs.djangoproject.com/en/dev/ref/settings/#logging
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "%(asctime)s [%(levelname)s] [%(processName)s] %(message)s"
        },
    },
    "handlers": {
        "console": {
            "level": "DEBUG",
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "loggers": {
        "": {
            "handlers": ["console"],
            "level": "INFO",
        },
        "web3.providers": {
            "level": "DEBUG" if DEBUG else "WARNING",
        },
        "web3.manager": {
            "level": "DEBUG" if DEBUG else "WARNING",
        },
        "safe_onchain_identifier": {
            "level": "DEBUG" if DEBUG else "INFO",
            "handlers": ["console"],
            "propagate": False,
        },
        "safe_onchain_identifier.deployments.services.deployment_service": {
            "level": "DEBUG" if DEBUG else "INFO",
        },
    },
}

# Ethereum RPC
# ------------------------------------------------------------------------------
ETHEREUM_NODE_URL = env("ETHEREUM_NODE_URL", default=None)

# Onchain identifier
# ------------------------------------------------------------------------------
ONCHAIN_IDENTIFIER_LABEL = env.str(
    "ONCHAIN_IDENTIFIER_LABEL", default="OnchainIdentifier"
)  # Public label the 20 bytes identifier is derived from

# Contracts deployment
# ------------------------------------------------------------------------------
CONTRACT_ARTIFACTS_DIR = env.str(
    "CONTRACT_ARTIFACTS_DIR", default=str(ROOT_DIR / "artifacts")
)  # Hardhat `artifacts` folder with EntryPoint, SafeL2, SafeProxyFactory, Safe4337Module, SafeModuleSetup and Counter
SAFE_4337_SALT_NONCE = env.int(
    "SAFE_4337_SALT_NONCE", default=0x5AFE
)  # Salt nonce used for deploying the 4337 enabled Safe

# ERC4337
# ------------------------------------------------------------------------------
ETHEREUM_4337_SUPPORTED_ENTRY_POINTS = env.list(
    "ETHEREUM_4337_SUPPORTED_ENTRY_POINTS",
    default=["0x0000000071727De22E5E9d8BAf0edAc6f37da032"],
)  # Only `UserOperationEvents` from these addresses are considered. Empty list allows any address
