"""Shared models, storage and utilities for carelink services."""
