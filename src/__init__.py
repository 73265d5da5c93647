"""
Video backend - upload, list, and comment on videos.

This package contains the complete application:
- core: Framework-agnostic business logic
- infrastructure: External service integrations
- api: FastAPI routes and dependencies
- config: Application configuration
"""

__version__ = "0.1.0"
