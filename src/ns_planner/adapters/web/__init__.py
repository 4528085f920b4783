"""Web adapter serving the planner over HTTP."""

from ns_planner.adapters.web.app import create_app

__all__ = ["create_app"]
