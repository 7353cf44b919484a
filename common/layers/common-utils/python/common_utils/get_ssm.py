"""Shared helpers for reading configuration from SSM Parameter Store."""

import logging
import os
from typing import Optional

import boto3

__author__ = "Koushik Sinha"
__version__ = "1.1.0"
__modified_by__ = "Koushik Sinha"

logger = logging.getLogger(__name__)

DEFAULT_PARAMETER_PREFIX = "/parameters/forms"

_ssm_client = None

# Simple in-memory cache so lookups within a single Lambda container
# don't repeatedly hit SSM
_SSM_CACHE: dict[str, str] = {}


def _client():
    global _ssm_client
    if _ssm_client is None:
        _ssm_client = boto3.client("ssm")
    return _ssm_client


def get_values_from_ssm(name: str, decrypt: bool = False) -> Optional[str]:
    """Retrieve a parameter value from SSM with optional decryption."""
    if name in _SSM_CACHE:
        return _SSM_CACHE[name]
    try:
        resp = _client().get_parameter(Name=name, WithDecryption=decrypt)
        value = resp["Parameter"]["Value"]
        _SSM_CACHE[name] = value
        logger.info("Loaded parameter %s", name)
        return value
    except Exception as exc:
        logger.error("Error retrieving parameter %s: %s", name, exc)
        raise


def get_environment_prefix() -> Optional[str]:
    """Return the SSM prefix for the current environment.

    ``SERVER_ENV`` selects the environment. Without it there is no prefix and
    configuration comes from the process environment only.
    """
    env = os.environ.get("SERVER_ENV")
    if not env:
        return None
    base = os.environ.get("PARAMETER_PREFIX", DEFAULT_PARAMETER_PREFIX).rstrip("/")
    return f"{base}/{env}"


def get_config(name: str, decrypt: bool = False) -> Optional[str]:
    """Return configuration ``name`` from Parameter Store.

    Missing parameters are logged and reported as ``None`` so callers can fall
    back to ``os.environ``.
    """

    prefix = get_environment_prefix()
    if prefix is None:
        return None
    try:
        return get_values_from_ssm(f"{prefix}/{name}", decrypt)
    except Exception:
        return None


def clear_cache() -> None:
    """Forget cached parameter values."""
    _SSM_CACHE.clear()
