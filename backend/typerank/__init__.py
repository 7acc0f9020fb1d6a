"""Application package for the typerank typing-practice backend.

This package exposes the service, repository and model modules used by
the FastAPI application, plus the client-side typing engine and a small
HTTP client. Individual modules contain the concrete implementations
and documentation.
"""
