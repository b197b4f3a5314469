"""
utils/ - Shared Helpers
=======================
Logging setup and display formatting.
"""
