"""Synchronise Pi-hole configuration from a primary instance to its replicas."""

__version__ = "0.1.0"