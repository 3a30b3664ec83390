"""
connectors — credential storage and OAuth clients for third-party services.

Provides:
  • Signed OAuth state tokens (no server-side session table)
  • Fernet encryption of connection records at rest
  • The per-user Connection record and its lifecycle (merge / redact / delete)
  • OAuth2 clients for monday.com and GitHub

Each provider is a subclass of BaseConnector.
"""
