from clirig.telemetry.logger.base import StructLogger, setup_logging

__all__ = ["StructLogger", "setup_logging"]
