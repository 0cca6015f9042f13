"""Shared Kernel.

Components every layer may depend on. Today that is only the
ObservationContext bound into domain probes; keep it small.
"""
