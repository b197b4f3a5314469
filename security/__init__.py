"""
security/ - Access Control
==========================
Operator whitelist, cron shared-secret check and command rate limiting.
"""
