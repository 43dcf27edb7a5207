"""
YAML and environment configuration for the Sailor client.
"""

from .config_loader import SailorConfig, parse_resource

__all__ = ["SailorConfig", "parse_resource"]
