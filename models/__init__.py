"""
models/ - Domain Models
=======================
Plain dataclasses for invoices, email logs and processing results.
"""
