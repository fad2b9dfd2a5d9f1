"""
With these settings, tests run faster.
"""

from .base import *  # noqa
from .base import env

# GENERAL
# ------------------------------------------------------------------------------
# https://docs.djangoproject.com/en/dev/ref/settings/#debug
DEBUG = False
# https://docs.djangoproject.com/en/dev/ref/settings/#secret-key
SECRET_KEY = env(
    "DJANGO_SECRET_KEY",
    default="q8lVkJGsIiHcTSQKaWIBsMVPOGnCnF6f7NDGup8KdDNmviSaZVhP0Nq3q3MolmFU",
)
# https://docs.djangoproject.com/en/dev/ref/settings/#test-runner
TEST_RUNNER = "django.test.runner.DiscoverRunner"

ETHEREUM_NODE_URL = env("ETHEREUM_NODE_URL", default="http://localhost:8545")

# Ganache #2 private key
ETHEREUM_TEST_PRIVATE_KEY = env(
    "ETHEREUM_TEST_PRIVATE_KEY",
    default="6370fd033278c143179d81c5526140625662b8daa446c22ee2d73db3707e620c",
)

# Local EntryPoint is deployed on a random address
ETHEREUM_4337_SUPPORTED_ENTRY_POINTS = []

LOGGING["loggers"] = {  # noqa F405
    "safe_onchain_identifier": {
        "level": "DEBUG",
    }
}
