"""
CapyDAM migration reconciliation engine.
"""
__version__ = "0.3.0"
