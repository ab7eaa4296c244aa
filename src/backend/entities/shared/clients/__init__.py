"""Shared database clients."""

from .mysql_client import MySqlClient

__all__ = ["MySqlClient"]
