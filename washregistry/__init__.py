"""
washregistry - Car wash registration toolkit.

Builds a weekly availability schedule and resolves the business location
through a Nominatim-compatible geocoding service.
"""

__version__ = "0.1.0"
