"""Route blueprints exposed via Flask."""

from .health import health_bp
from .lookup import lookup_bp
from .root import root_bp
from .submit import submit_bp

__all__ = [
    "health_bp",
    "lookup_bp",
    "root_bp",
    "submit_bp",
]
