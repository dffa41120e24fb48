from app.client.session import ApiError, ClientSession, is_overdue, is_today

__all__ = ["ApiError", "ClientSession", "is_overdue", "is_today"]
