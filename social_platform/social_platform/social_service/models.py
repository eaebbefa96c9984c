from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Text, Index
from datetime import datetime, timezone
from .db import Base
from sqlalchemy.orm import relationship


def _utcnow():
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, index=True, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    # passlib digest, never the plaintext
    password = Column(String, nullable=False)

    posts = relationship("Post", back_populates="author")


class Post(Base):
    __tablename__ = "posts"
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    content = Column(Text, nullable=False)
    image_url = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    author = relationship("User", back_populates="posts")

    __table_args__ = (
        Index("ix_posts_created_at", "created_at"),
    )
