"""Data models for book-retriever."""

from .record import BookRecord

__all__ = ["BookRecord"]
