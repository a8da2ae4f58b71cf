"""
Utility functions and helpers for Travis.

This package provides reusable utilities:

- **logger.py**: Centralized logging configuration with colored console output,
  rotating file handlers, and per-session log aggregation. Suppresses noise from
  Discord internals and the HTTP stack.
- **discord_utils.py**: Discord-backed moderation actor and log channel sink,
  plus helpers normalizing Discord messages for the evaluator.
"""
