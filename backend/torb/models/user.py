"""
Account models. Users reserve sheets; administrators manage events.

Both tables share one shape: a display nickname, a unique login name and the
hex SHA-256 digest of the password.
"""

from sqlalchemy import Column, Integer, String

from torb.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    nickname = Column(String(128), nullable=False)
    login_name = Column(String(128), unique=True, nullable=False)
    pass_hash = Column(String(128), nullable=False)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, login_name={self.login_name})>"


class Administrator(Base):
    __tablename__ = "administrators"

    id = Column(Integer, primary_key=True, autoincrement=True)
    nickname = Column(String(128), nullable=False)
    login_name = Column(String(128), unique=True, nullable=False)
    pass_hash = Column(String(128), nullable=False)

    def __repr__(self) -> str:
        return f"<Administrator(id={self.id}, login_name={self.login_name})>"
