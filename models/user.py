from models.base_model import Base, BaseModel
from sqlalchemy import Column, String
from sqlalchemy.orm import relationship


class User(BaseModel, Base):
    __tablename__ = "users"
    email = Column(String(255), nullable=False, unique=True, index=True)
    username = Column(String(20), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    avatar_url = Column(String(512), nullable=True)
    # Argon2 hash of the single live refresh token; NULL when logged out
    refresh_token_hash = Column(String(255), nullable=True)

    posts = relationship("Post", back_populates="author", passive_deletes=True)

    @property
    def password(self):
        raise AttributeError("Password: Write-only field")
