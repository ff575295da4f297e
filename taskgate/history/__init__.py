# taskgate/history/__init__.py
"""Route trace persistence."""

from taskgate.history.route_trace import RouteTraceStorage

__all__ = ["RouteTraceStorage"]
