"""
api/ - HTTP Layer
=================
FastAPI routers. Each endpoint validates input, delegates to a Service and
maps domain errors to HTTP responses. No business logic lives here.
"""
