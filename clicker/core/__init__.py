"""Core gameplay primitives (events, timers, and identity readiness).

Kept free of FastAPI concerns so it can be reused by API routes, scripts, and tests.
"""
