"""
In-memory user directory with cached reads, soft delete and
role-based authorization.
"""

__version__ = "1.0.0"
