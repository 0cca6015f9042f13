"""Chat room bounded context.

Provisions and reconciles chat-backend rooms for events and groups, keeping
the backend's membership and power levels aligned with the application's own
attendance and membership records.
"""
