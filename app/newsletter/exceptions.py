# app/newsletter/exceptions.py

class AlreadySubscribedError(ValueError):
    """An active subscription already exists for this email"""

    def __init__(self, email: str):
        super().__init__(f"{email} is already subscribed")
        self.email = email

class SubscriberNotFoundError(LookupError):
    """No subscriber holds the given unsubscribe token"""

class NewsletterNotFoundError(LookupError):
    """No newsletter exists with the given id"""

class ImageUploadError(RuntimeError):
    """Image could not be stored anywhere"""
