"""
Logging setup for CLI batch jobs.
"""
import logging

from reconcile.core.logging_config import LogCategory, setup_logging


def setup_cli_logging(command: str, verbose: bool = False) -> logging.Logger:
    """
    Log a batch job to its own rotating file.

    Rich output owns the terminal, so console logging is only enabled with
    --verbose.
    """
    setup_logging(
        log_file_name=f"cli_{command}.log",
        level=logging.DEBUG if verbose else None,
        console=verbose,
    )
    return logging.getLogger(f"{LogCategory.APP.value}.cli.{command}")
