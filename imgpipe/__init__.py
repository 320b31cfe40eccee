"""Image treatments, treatment pipelines, video processing and a command line front end."""

__version__ = "1.0.0"

__all__ = ["__version__"]