"""
Observability for Sentinel: logging, metrics and the HTTP surface.
"""
