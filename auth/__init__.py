"""
auth — monday.com session authentication.

Provides:
  • monday session-token (JWT) verification
  • ``get_session`` / ``get_current_user_id`` FastAPI dependencies
"""
