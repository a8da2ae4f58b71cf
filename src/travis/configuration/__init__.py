"""Application configuration loaded once at startup."""
