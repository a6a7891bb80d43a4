#
# src/clirig/telemetry/__init__.py
#
"""
Logging setup and logger type hints for clirig.
"""
from clirig.telemetry.logger import StructLogger, setup_logging

__all__ = ["StructLogger", "setup_logging"]
