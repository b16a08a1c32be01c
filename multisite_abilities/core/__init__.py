"""Ambient configuration and logging for multisite-abilities."""
