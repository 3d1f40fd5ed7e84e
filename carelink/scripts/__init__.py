"""Operational scripts for carelink deployments."""
