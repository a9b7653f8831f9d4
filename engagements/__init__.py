"""Contract, service scope and proposal workflow core for managed-services engagements."""

__version__ = "1.0.0"
