"""Configuration for a dataflow engine.

The configuration is a plain dataclass so it can be constructed in code, and
it can also be serialized to or loaded from YAML:

```yaml
default_error_message: Something went wrong
log_exceptions: false
```
"""

from dataclasses import dataclass
import logging
from pathlib import Path
from typing import Any, cast

import aiofiles
from mashumaro import DataClassDictMixin
from mashumaro.codecs.yaml import yaml_decode, yaml_encode
from mashumaro.config import BaseConfig

from .exceptions import DataFlowException

__all__ = [
    "DataFlowConfig",
    "DEFAULT_ERROR_MESSAGE",
    "parse_config",
    "read_config",
]

_LOGGER = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "An error occurred"


@dataclass
class DataFlowConfig(DataClassDictMixin):
    """Settings shared by every action run through a flow."""

    default_error_message: str = DEFAULT_ERROR_MESSAGE
    """Error description an action starts with, before any failure."""

    log_exceptions: bool = True
    """Whether the default exception hook logs failures with a traceback."""

    @classmethod
    def parse_yaml(cls, content: str) -> "DataFlowConfig":
        """Parse a serialized configuration."""
        if not content.strip():
            return cls()
        return cast(DataFlowConfig, yaml_decode(content, cls))

    def yaml(self) -> str:
        """Serialize the configuration as YAML."""
        return yaml_encode(self, self.__class__)  # type: ignore[return-value]

    def __post_init__(self) -> None:
        if not self.default_error_message:
            raise DataFlowException("default_error_message must not be empty")

    class Config(BaseConfig):
        omit_none = True


async def read_config(config_path: Path) -> DataFlowConfig:
    """Return the configuration stored in a YAML file."""
    _LOGGER.debug("Reading dataflow config from %s", config_path)
    async with aiofiles.open(str(config_path)) as config_file:
        content = await config_file.read()
    return DataFlowConfig.parse_yaml(content)


def parse_config(doc: dict[str, Any]) -> DataFlowConfig:
    """Build a configuration from an already decoded document."""
    return DataFlowConfig.from_dict(doc)
