# models.py
from sqlalchemy import Column, DateTime, Float, Integer, String, Text

from database import Base, utcnow


class Book(Base):
    __tablename__ = "books"
    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False, index=True)
    author = Column(String(255), nullable=False, index=True)
    price = Column(Float, nullable=False)
    isbn = Column(String, unique=True, index=True)  # NULLs never collide
    genre = Column(String, nullable=True, index=True)
    description = Column(Text, nullable=True)
    quantity = Column(Integer, default=1, nullable=False)
    date_added = Column(DateTime, default=utcnow, nullable=False)
    date_updated = Column(DateTime, default=utcnow, nullable=False)

    def __repr__(self):
        return f"<Book id={self.id} title={self.title!r}>"
