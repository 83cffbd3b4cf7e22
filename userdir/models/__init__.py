from .user import Gender, Page, UserCreate, UserRecord, UserUpdate

__all__ = ["Gender", "Page", "UserCreate", "UserRecord", "UserUpdate"]
