"""starrelay: a caching relay in front of the JPL Horizons ephemeris API."""

__version__ = "0.1.0"
