"""
Adapters layer - External integrations (booking site availability API).
"""

from .availability_client import AvailabilityClient
from .mock_availability_client import MockAvailabilityClient

__all__ = ["AvailabilityClient", "MockAvailabilityClient"]
