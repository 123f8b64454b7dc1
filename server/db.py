"""
Database models and setup.
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import create_engine, Column, String, Integer, Float, DateTime, JSON, Enum as SQLEnum
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


class DocumentStatus(str, Enum):
    """Document status enum."""
    UPLOADED = "uploaded"
    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class Document(Base):
    """An uploaded PDF and the state of its conversion."""
    __tablename__ = "documents"

    id = Column(String, primary_key=True)
    filename = Column(String, nullable=False)
    status = Column(SQLEnum(DocumentStatus), default=DocumentStatus.UPLOADED, nullable=False)
    total_pages = Column(Integer, default=0)
    progress = Column(Float, default=0.0)
    current_phase = Column(String, nullable=True)
    error_message = Column(String, nullable=True)

    # File paths
    pdf_path = Column(String, nullable=True)
    deck_path = Column(String, nullable=True)

    # Results
    failed_pages = Column(JSON, nullable=True)
    results = Column(JSON, nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


# Bound to an engine by init_db()
SessionLocal = sessionmaker(autocommit=False, autoflush=False)


def init_db(database_url: str = "sqlite:///server/pdfdeck.db"):
    """Create the engine, bind sessions to it and create tables."""
    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    engine = create_engine(database_url, connect_args=connect_args)
    SessionLocal.configure(bind=engine)
    Base.metadata.create_all(bind=engine)
    return engine


def get_db():
    """Get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
