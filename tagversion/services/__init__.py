"""
Service layer for tagversion.

Contains the logic that orchestrates domain objects and infrastructure:
- VersionService: Version resolution and HEAD queries

Services are the primary API for commands to use.
"""

from .version_service import VersionService

__all__ = [
    'VersionService',
]
