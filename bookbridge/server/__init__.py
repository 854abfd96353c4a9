"""
BookBridge HTTP server.

FastAPI application exposing listings, orders, chat, storage and the study
assistant under ``/api/v1``.
"""
