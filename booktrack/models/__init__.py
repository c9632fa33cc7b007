from .user import Base, User
from .book import Book, ReadingStatus

__all__ = ["Base", "User", "Book", "ReadingStatus"]
