"""Core application plumbing - settings, logging and error types."""
