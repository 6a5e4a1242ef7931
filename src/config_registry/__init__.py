"""
Config Registry - permission-gated registries for correlations and targets.

Keeps a durable copy and an in-memory index of each configuration object
in step, and serves them to the HTTP API and to in-process consumers such
as the alert dispatcher.
"""

from config_registry.version import __version__

# API module is available but not exported by default
# Import explicitly: from config_registry.api import create_app

__all__ = ["__version__"]
