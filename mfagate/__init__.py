"""
mfagate - pluggable multi-factor validation for an authenticating gateway.
"""
__version__ = "0.1.0"
