from sqlalchemy import Column, Integer, String

from tasknotes.core.config import settings
from tasknotes.core.database import Base


class Category(Base):
    """User-defined tag. Notes refer to it by name, not by id."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False, unique=True)
    color = Column(
        String,
        default=settings.DEFAULT_CATEGORY_COLOR,
        server_default=settings.DEFAULT_CATEGORY_COLOR,
    )

    def __repr__(self):
        return f"<Category(id={self.id}, name='{self.name}', color='{self.color}')>"
