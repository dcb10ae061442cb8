from session_handoff.utils.time import utc_now

__all__ = ["utc_now"]
