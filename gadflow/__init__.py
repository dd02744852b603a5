"""Text-processing steps run as a dependency graph and served over HTTP."""

__version__ = "0.1.0"
__all__ = ["api", "config", "orchestrator", "server", "workflow"]