"""Request-lifecycle core of a full-stack web application template."""

__version__ = "1.0.0"
