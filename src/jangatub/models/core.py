from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from src.jangatub.schemas.enums import DocumentType, Role
from .base import Base, enum_type


class User(Base):
    """Registered account. ``is_premium`` mirrors the subscription state."""
    __tablename__ = "users"

    name = Column(String(50), nullable=False)
    email = Column(String, nullable=False, unique=True)
    password_hash = Column(String, nullable=True)
    role = Column(enum_type(Role), default=Role.USER, nullable=False)
    is_premium = Column(Boolean, default=False, nullable=False)

    # Relationships
    subscriptions = relationship("Subscription", back_populates="user", passive_deletes=True)
    favorites = relationship("Favorite", back_populates="user", passive_deletes=True)
    quiz_attempts = relationship("QuizAttempt", back_populates="user", passive_deletes=True)
    badges = relationship("UserBadge", back_populates="user", passive_deletes=True)


class Level(Base):
    """Exam level (BFEM, BAC)."""
    __tablename__ = "levels"

    slug = Column(String(50), nullable=False, unique=True)
    name = Column(String(100), nullable=False)

    documents = relationship("Document", back_populates="level")
    quizzes = relationship("Quiz", back_populates="level")


class Subject(Base):
    __tablename__ = "subjects"

    slug = Column(String(50), nullable=False, unique=True)
    name = Column(String(100), nullable=False)

    documents = relationship("Document", back_populates="subject")
    quizzes = relationship("Quiz", back_populates="subject")


class Document(Base):
    """Exam paper or correction stored as a PDF."""
    __tablename__ = "documents"

    title = Column(String(300), nullable=False)
    type = Column(enum_type(DocumentType), nullable=False)
    year = Column(Integer, nullable=False)
    is_premium = Column(Boolean, default=False, nullable=False)
    pdf_url = Column(String, nullable=False)
    image_url = Column(String, nullable=True)
    level_id = Column(String(36), ForeignKey("levels.id", ondelete="RESTRICT"), nullable=False, index=True)
    subject_id = Column(String(36), ForeignKey("subjects.id", ondelete="RESTRICT"), nullable=False, index=True)

    # Relationships
    level = relationship("Level", back_populates="documents")
    subject = relationship("Subject", back_populates="documents")
    favorites = relationship("Favorite", back_populates="document", passive_deletes=True)


class Favorite(Base):
    __tablename__ = "favorites"
    __table_args__ = (UniqueConstraint("user_id", "document_id", name="uq_favorites_user_document"),)

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    document_id = Column(String(36), ForeignKey("documents.id", ondelete="CASCADE"), nullable=False)

    user = relationship("User", back_populates="favorites")
    document = relationship("Document", back_populates="favorites")
