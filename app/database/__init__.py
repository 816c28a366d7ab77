# app/database/__init__.py
from .connection import DatabaseConnection, get_database
from .subscriber_repository import SubscriberRepository
from .newsletter_repository import NewsletterRepository

__all__ = ["DatabaseConnection", "get_database", "SubscriberRepository", "NewsletterRepository"]
