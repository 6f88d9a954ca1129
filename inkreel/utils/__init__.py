from .logging_utils import configure_logging, resolve_logs_dir

__all__ = ["configure_logging", "resolve_logs_dir"]
