from .base import *  # noqa
from .base import env

# GENERAL
# ------------------------------------------------------------------------------
# https://docs.djangoproject.com/en/dev/ref/settings/#debug
DEBUG = True
# https://docs.djangoproject.com/en/dev/ref/settings/#secret-key
SECRET_KEY = env(
    "DJANGO_SECRET_KEY",
    default="DVdvM7ZqwNO6X2ymEuZGIVHQOjSB6MD8l2zkBYTlY6xRCYchcFG3qUkSXiPrGLKa",
)

ETHEREUM_NODE_URL = env("ETHEREUM_NODE_URL", default="http://localhost:8545")

LOGGING["loggers"]["safe_onchain_identifier"]["level"] = "DEBUG"  # noqa F405
