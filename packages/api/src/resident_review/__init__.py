# This project was developed with assistance from AI tools.
"""Resident review backend-for-frontend service."""

__version__ = "0.1.0"
