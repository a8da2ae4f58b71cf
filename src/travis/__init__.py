"""
Travis - Toxicity-Triggered Discord Moderation Bot

Travis scores every eligible Discord message with Google's Perspective API and
applies a graduated punishment once a score crosses a configured threshold.

Core Components:

- **Threshold Table**: Immutable per-attribute minimum scores for the ban,
  kick and delete punishments, checked most severe first
- **Message Evaluator**: Filters eligible messages, requests scores, selects
  at most one punishment per message and applies it through an injected
  moderation actor
- **Perspective Client**: Async client for the Perspective comment analyzer
- **Moderation Log**: Best-effort text notice in the guild's log channel after
  every successful punishment

Usage:
    from travis.main import main
    main()
"""

__version__ = "1.0.0"
