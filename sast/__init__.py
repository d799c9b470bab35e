"""
SAST - Signal Anomaly & Security Tracking

Resilient analytics dashboard core: section data access with synthetic
fallback, theme-aware chart lifecycle, and session authentication.
"""

__version__ = "1.0.0"
