"""HTTP surface for the registry.

Public API: app, get_registrar, run_server, set_registrar
Internal: models, principal, routes
"""

from registrar.server.app import app, get_registrar, set_registrar
from registrar.server.serve import run_server

__all__ = ["app", "get_registrar", "run_server", "set_registrar"]
