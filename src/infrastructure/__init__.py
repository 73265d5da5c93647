"""
Infrastructure layer - external service integrations.

Each subdirectory wraps an external dependency:
- storage: Object storage (S3-compatible)
- mongo: Document database persistence
- identity: Platform identity endpoint

These wrappers translate between external formats and our domain models.
"""
