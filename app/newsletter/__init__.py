# app/newsletter/__init__.py
from .security import generate_unsubscribe_token
from .content import compose_content, split_content
from .exceptions import AlreadySubscribedError, SubscriberNotFoundError, NewsletterNotFoundError

__all__ = [
    'generate_unsubscribe_token',
    'compose_content',
    'split_content',
    'AlreadySubscribedError',
    'SubscriberNotFoundError',
    'NewsletterNotFoundError'
]
