"""
Rules Gateway: per-user namespaced access to Kuiper streams and rules.
"""

__version__ = "1.0.0"
