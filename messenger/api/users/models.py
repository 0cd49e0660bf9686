from sqlalchemy import Column, Integer, String, DateTime, Text

from messenger.core.utils import utcnow
from messenger.database.database import Base


class User(Base):
    """
    Users table. Accounts are issued by the identity service; this table
    only mirrors what the messaging core needs to reference and display.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, index=True, nullable=False)
    display_name = Column(String(100), nullable=True)
    bio = Column(Text, nullable=True)

    created_at = Column(DateTime, default=utcnow)
