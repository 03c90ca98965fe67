"""SQLAlchemy database models."""
from exam_api.models.db.test_record import TestRecord

__all__ = ["TestRecord"]
