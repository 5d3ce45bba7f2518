"""Bind typed configuration values to objects and drive them from the command line and the environment.

Parameters are fetched from pydantic models or dataclasses, merged across
several objects into one key space, and set from ``-key=value`` arguments or
environment variables derived from the keys.
"""

from ._version import __version__
from ._casters import Choices, Converter, Csv, converter_for
from ._configurator import ConfigVisitor, Configurator, InstanceConfigurator
from ._help import HelpPrinter
from ._keys import (
    ArgumentReader,
    EnvironmentReader,
    KeyFormat,
    ParseResult,
    arg_name,
    collisions,
    env_name,
    external_name,
    get_args,
    get_env,
)
from ._manager import configure, help_text, manage, print_help, set_from_args, set_from_env
from ._multi import MultiConfigurator
from ._parameter import Parameter, parameter, parameters
from ._repository import ConfigRepository, EnvironRepository, FakeConfigRepository
from ._testing import override_env
from ._types import (
    ConfigError,
    ConfigurationError,
    ConversionError,
    DuplicateKeyError,
    ErrorMap,
    IllegalValueError,
    KeyCollisionError,
)

__all__ = [
    "__version__",
    # Core
    "configure",
    "manage",
    "set_from_args",
    "set_from_env",
    "print_help",
    "help_text",
    "Configurator",
    "ConfigVisitor",
    "InstanceConfigurator",
    "MultiConfigurator",
    "Parameter",
    "parameter",
    "parameters",
    # Key names
    "KeyFormat",
    "external_name",
    "arg_name",
    "env_name",
    "collisions",
    "ArgumentReader",
    "EnvironmentReader",
    "ParseResult",
    "get_args",
    "get_env",
    # Converters
    "Converter",
    "converter_for",
    "Csv",
    "Choices",
    # Errors
    "ConfigError",
    "ConfigurationError",
    "ConversionError",
    "DuplicateKeyError",
    "ErrorMap",
    "IllegalValueError",
    "KeyCollisionError",
    # Help
    "HelpPrinter",
    # Testing
    "override_env",
    "ConfigRepository",
    "EnvironRepository",
    "FakeConfigRepository",
]
