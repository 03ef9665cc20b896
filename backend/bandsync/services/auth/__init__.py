from bandsync.services.auth.service import SessionManager

__all__ = ["SessionManager"]
