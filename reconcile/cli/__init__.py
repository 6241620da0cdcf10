"""
Command-line batch jobs for the reconciliation engine.
"""
