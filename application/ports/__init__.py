"""
Interfaces (Ports) for the training-session core.

This package defines abstract interfaces that decouple the local store from
infrastructure (network, credentials, document rendering). Implementations
are provided in the infrastructure layer.

Architecture follows the Ports & Adapters (Hexagonal) pattern:
- Ports: Abstract interfaces defined here (what the core needs)
- Adapters: Concrete implementations in infrastructure/ (how it's provided)

Usage:
    from application.ports import RemoteGateway

    class LocalStore:
        def __init__(self, gateway: RemoteGateway):
            self._gateway = gateway
"""

# Network boundary
from application.ports.remote_gateway import RemoteGateway

# Bearer token source
from application.ports.credential_store import CredentialStore

# Report documents
from application.ports.report_renderer import ReportRenderer

__all__ = [
    "RemoteGateway",
    "CredentialStore",
    "ReportRenderer",
]
