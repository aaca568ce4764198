"""Platform adapters (subprocess execution)."""

from .process import ProcessError, ProcessOutput, run

__all__ = ["ProcessError", "ProcessOutput", "run"]
