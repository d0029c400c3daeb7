"""User model (identity is resolved upstream; only what engagement needs lives here)."""
import uuid

from sqlalchemy import Boolean, Column, DateTime, String, Text, Uuid

from app.db.session import Base, utcnow


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    username = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    display_name = Column(String(100), nullable=True)
    avatar_url = Column(Text, nullable=True)
    is_superadmin = Column(Boolean, default=False, nullable=False)  # moderation administrator
    is_restricted = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow)

    @property
    def name(self) -> str:
        return self.display_name or self.username
