#
# config/__init__.py
#
"""
Configuration handling sub-package for clirig.

Exports the loading function and the configuration model.
"""

from .loader import load_config
from .models import DEFAULT_ALIASES, HarnessConfig

__all__ = [
    "DEFAULT_ALIASES",
    "HarnessConfig",
    "load_config",
]

# 🔼⚙️
