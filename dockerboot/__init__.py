"""Docker container lifecycle management bound to an application lifespan."""

__version__ = "0.2.0"
