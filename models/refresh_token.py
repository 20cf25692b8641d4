"""
RefreshToken model: the refresh token currently on file for a user.
Fields:
- user_id (String(36)) - FK to users.id, unique: one stored token per user
- token - the signed refresh JWT, replaced on every rotation
- created_at, updated_at
"""
from sqlalchemy import Column, String, Text, ForeignKey
from sqlalchemy.orm import relationship
from models.base_model import BaseModel, Base


class RefreshToken(BaseModel, Base):
    __tablename__ = "refresh_tokens"

    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    token = Column(Text, nullable=False, unique=True)

    user = relationship("User", back_populates="refresh_token")

    def __repr__(self):
        return f"<RefreshToken user_id={self.user_id}>"
