"""Manage multi-repository git worktrees grouped into tasks."""

__version__ = "0.1.0"