"""
Infrastructure Layer.

Concrete implementations of the application ports:
- http_gateway: REST backend over httpx (RemoteGateway)
- credential_store: in-process bearer token holder (CredentialStore)
- text_report_renderer: plain-text session report (ReportRenderer)
"""

from infrastructure.credential_store import InMemoryCredentialStore
from infrastructure.http_gateway import HttpRemoteGateway
from infrastructure.text_report_renderer import TextReportRenderer

__all__ = [
    "HttpRemoteGateway",
    "InMemoryCredentialStore",
    "TextReportRenderer",
]
