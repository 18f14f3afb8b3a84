"""
Sentinel: Riverside County Sheriff incident ingestion and geocoding service.
"""

__version__ = "1.0.0"
