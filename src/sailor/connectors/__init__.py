"""
Connector implementations for fetching Sailor resources.
"""

from .http import HttpConnector
from .test_connector import TestConnector

__all__ = ["HttpConnector", "TestConnector"]
