"""Pydantic models shared by the server and the client."""
