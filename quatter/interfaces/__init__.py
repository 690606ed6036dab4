"""
quatter.interfaces - Boundaries between the Quatter core and its host

This package contains the host interface the core calls into, the input
aggregator the host feeds device events to, and a command-line interface.
"""

# Don't import anything here to avoid circular imports
__all__ = []
