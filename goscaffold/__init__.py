"""goscaffold -- interactive generator for Go backend service skeletons."""

__version__ = "0.1.0"
