"""Core configuration, security and request-throttling helpers."""
