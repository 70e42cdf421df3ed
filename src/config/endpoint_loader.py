import logging
from typing import List

import yaml
from pydantic import ValidationError

from config.errors import ConfigurationError
from contracts.endpoint import EndpointDescriptor

logger = logging.getLogger(__name__)


def load_endpoints(path: str) -> List[EndpointDescriptor]:
    """
    Load the ordered list of endpoints from a YAML file.

    The document must be a list of mappings with ``name`` and ``url`` and
    optional ``method`` and ``headers``.

    Args:
        path (str): Path to the YAML configuration file.

    Returns:
        List[EndpointDescriptor]: Endpoints in file order.

    Raises:
        ConfigurationError: If the file is missing, unreadable or malformed.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise ConfigurationError(f"Configuration file not found: {path}")
    except OSError as e:
        raise ConfigurationError(f"Failed to read file '{path}': {e}")
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Error parsing YAML in '{path}': {e}")

    if not isinstance(data, list):
        raise ConfigurationError(f"Configuration in '{path}' must be a YAML list")
    if not data:
        raise ConfigurationError(f"Configuration in '{path}' lists no endpoints")

    endpoints = []
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            raise ConfigurationError(
                f"Endpoint at index {index} in '{path}' must be a mapping"
            )
        try:
            endpoints.append(EndpointDescriptor.model_validate(item))
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid endpoint at index {index} in '{path}': {e}"
            )

    logger.info(f"Loaded {len(endpoints)} endpoints from {path}")
    return endpoints
