"""SQLAlchemy models package."""

from worksheet_studio.models.sql.user import User

__all__ = ["User"]
