"""Plain data structures shared across the Travis moderation pipeline."""
