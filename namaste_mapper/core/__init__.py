"""
Core Infrastructure Package

Contains shared infrastructure components:
- config: Application configuration and settings
- logging: Structured JSON logging utilities
- storage: Durable blob storage (file and MongoDB backends)
"""

__all__ = ["config", "logging", "storage"]
