"""Route blueprints exposed via Flask."""

from .catalog import catalog_bp
from .health import health_bp
from .skill import skill_bp

__all__ = [
    "catalog_bp",
    "health_bp",
    "skill_bp",
]
