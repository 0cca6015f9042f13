"""Infrastructure layer for the chat room bounded context.

Adapters for the PostgreSQL room registry and the Matrix homeserver.
"""
