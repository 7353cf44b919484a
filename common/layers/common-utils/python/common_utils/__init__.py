# Module Metadata
__author__ = "Koushik Sinha"
__version__ = "1.1.0"
__modified_by__ = "Koushik Sinha"

from .logging_utils import configure_logger
from .get_ssm import (
    get_values_from_ssm,
    get_environment_prefix,
    get_config,
)
from .lambda_response import lambda_response, to_jsonable
from .error_utils import log_exception, error_response

__all__ = [
    "get_values_from_ssm",
    "get_environment_prefix",
    "get_config",
    "configure_logger",
    "lambda_response",
    "to_jsonable",
    "log_exception",
    "error_response",
]
