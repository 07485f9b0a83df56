"""dockhand - Declarative container host provisioning.

Converges a single Linux host to a desired state: container runtime
installed, users and groups present, daemon configuration merged.
"""

__version__ = "0.1.0"
