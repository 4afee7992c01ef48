# models.py
from datetime import datetime
from uuid import uuid4

from sqlalchemy import Column, String, DateTime, Text, Uuid

from db import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    email = Column(String, unique=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    last_login_at = Column(DateTime, nullable=True)


# =========================
# Prompt templates (edited by admins, read by the wizard)
# =========================

class PromptTemplate(Base):
    __tablename__ = "ai_prompts"

    # e.g. "choice_generator", "generate_headline"
    function_id = Column(String, primary_key=True)

    # Contains placeholder tokens such as {history} or {preference}
    template_text = Column(Text, nullable=False)

    # Operator-facing note, not sent to the model
    description = Column(Text, nullable=False, default="")

    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
