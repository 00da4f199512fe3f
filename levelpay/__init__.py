"""
levelpay - multi-level commission distribution engine.

Pays percentage-based level income up a sponsor chain on package purchases
and ROI-on-ROI on return credits, at most once per event.
"""

__version__ = "1.0.0"
