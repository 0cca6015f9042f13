"""Application layer for the chat room bounded context."""
