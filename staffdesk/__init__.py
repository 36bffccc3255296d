"""staffdesk - prompt compilation for supervised AI staff agents."""

__version__ = "0.1.0"
