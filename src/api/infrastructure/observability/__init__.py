"""Probes for cross-cutting infrastructure: the registry database and process lifecycle.

Each probe is a Protocol plus a structlog-backed default; the chat context
keeps its own probes next to the code they instrument.
"""

from shared_kernel.observability_context import ObservationContext
from infrastructure.observability.probes import (
    DatabaseProbe,
    DefaultDatabaseProbe,
)
from infrastructure.observability.startup_probe import (
    DefaultStartupProbe,
    StartupProbe,
)

__all__ = [
    "DatabaseProbe",
    "DefaultDatabaseProbe",
    "DefaultStartupProbe",
    "ObservationContext",
    "StartupProbe",
]
