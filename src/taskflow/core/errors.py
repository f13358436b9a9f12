# src/taskflow/core/errors.py

"""
Error taxonomy.

All of these are recovered at the command boundary and shown to the user as a
single message; none of them leave the task store in an invalid state.

Stale ids (an operation naming a task that no longer exists) are not errors:
the store treats them as no-ops and logs at DEBUG.
"""

from __future__ import annotations


class TaskflowError(Exception):
    """Base class for user-facing, recoverable errors."""


class ImportValidationError(TaskflowError):
    """An import payload is malformed; nothing was imported."""


class BackupParseError(ImportValidationError):
    """A backup file could not be read or parsed."""


class GenerationError(TaskflowError):
    """The subtask / insight generator failed. Safe to retry."""
