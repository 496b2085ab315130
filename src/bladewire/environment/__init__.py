"""bladewire environment: configuration, loaders, globals and errors.

Public API:
    Environment: Template cache, rendering and component resolution
    FileSystemLoader, DictLoader: Template sources
    exceptions: TemplateError hierarchy with searchable ErrorCodes

"""

from bladewire.environment.core import Environment
from bladewire.environment.exceptions import (
    ActionNotFoundError,
    ComponentError,
    ComponentNotFoundError,
    ErrorCode,
    ReservedKeyError,
    TemplateError,
    TemplateNotFoundError,
    TemplateRuntimeError,
    TemplateSyntaxError,
)
from bladewire.environment.globals import DEFAULT_GLOBALS
from bladewire.environment.loaders import DictLoader, FileSystemLoader, normalize_name

__all__ = [
    "DEFAULT_GLOBALS",
    "ActionNotFoundError",
    "ComponentError",
    "ComponentNotFoundError",
    "DictLoader",
    "Environment",
    "ErrorCode",
    "FileSystemLoader",
    "ReservedKeyError",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplateRuntimeError",
    "TemplateSyntaxError",
    "normalize_name",
]
