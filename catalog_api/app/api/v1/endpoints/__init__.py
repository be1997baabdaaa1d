"""
Endpoint modules for API v1.

Each module defines a ``router`` for one resource; ``router.py`` at the
version level mounts them under their prefixes.
"""
