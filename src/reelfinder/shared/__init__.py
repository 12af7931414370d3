"""Shared building blocks: constants, errors and logging helpers."""
