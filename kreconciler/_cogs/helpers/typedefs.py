"""
Rudimentary type [re-]definitions for cross-versioned Python & mypy.

Some stdlib classes are generics only in the type-sheds, not at runtime
(e.g. `logging.LoggerAdapter`). They are defined here in a reusable way,
together with a few plain type aliases used across the codebase.
"""
import logging
from typing import TYPE_CHECKING, Any, Union

if TYPE_CHECKING:
    LoggerAdapter = logging.LoggerAdapter[Any]
else:
    LoggerAdapter = logging.LoggerAdapter

# As publicly exposed: we only promise that it is based on one of the built-in loggable classes.
Logger = Union[logging.Logger, LoggerAdapter]
