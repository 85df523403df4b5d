"""Pydantic configuration schemas for vizloop.

All configuration validation, coercion, and normalization happens at
schema validation time via Pydantic; runtime code only reads the frozen
``InternalConfig``.

Exports
-------
resolve_config : function
    Single entrypoint for configuration resolution
InternalConfig : class
    Fully validated, authoritative runtime configuration
ParamConfig : class
    Expert defaults (complete)
UserConfig : class
    User-facing configuration (forgiving, minimal)
CLIConfig : class
    Command-line operational overrides
"""

from vizloop.schemas.resolve import resolve_config
from vizloop.schemas.internal import InternalConfig
from vizloop.schemas.param import ParamConfig
from vizloop.schemas.user import UserConfig
from vizloop.schemas.cli import CLIConfig

__all__ = [
    'resolve_config',
    'InternalConfig',
    'ParamConfig',
    'UserConfig',
    'CLIConfig',
]
