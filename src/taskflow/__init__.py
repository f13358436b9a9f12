"""taskflow: a local-first personal task tracker with AI subtask breakdown."""

__version__ = "0.1.0"
