"""
Application version information.

Version format: MAJOR.MINOR
- MAJOR: Breaking changes to the HTTP API or stored data
- MINOR: Incremented with each merged PR

Version is displayed on server startup and in GET / endpoint.
"""

__version__ = "1.0"
