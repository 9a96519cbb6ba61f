"""coverview - live hierarchical coverage view for monitored roots."""

__version__ = "0.1.0"
