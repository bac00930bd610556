"""
Infrastructure Package
======================

Provides abstraction layers for external dependencies following the Dependency Inversion Principle.

Modules:
    - persistence: Table gateway (Django ORM, in-memory)
    - storage: Blob storage abstraction (S3, in-memory)
    - payments: Payment provider abstraction (simulated gateway)
    - observability: OpenTelemetry tracing helpers

This package enables:
    - Easy testing with in-memory implementations
    - Switching between providers without code changes
    - Loose coupling between business logic and infrastructure
"""
