"""
repositories/ - Data Access Layer
==================================
Each repository encapsulates all SQL queries for one table
(scheduled_invoices, email_logs) and returns domain model objects.
"""
