"""Replay discovery, parsing and caching."""
