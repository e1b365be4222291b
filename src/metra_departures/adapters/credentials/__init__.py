"""Credential storage adapters."""

from metra_departures.adapters.credentials.file_credential_store import FileCredentialStore

__all__ = ["FileCredentialStore"]
