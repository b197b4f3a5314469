"""
handlers/ - Telegram Operator Console
=====================================
Bot command handlers. Each handler parses the command, delegates to the
appropriate Service, and sends the response back to the operator.
No business logic lives here.
"""
