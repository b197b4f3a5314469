"""
services/ - Business Logic Layer
================================
Date engine, status rules, the due-invoice sweep, delivery gateways,
rendering and the in-process scheduler. Services talk to repositories,
never to SQL directly.
"""
