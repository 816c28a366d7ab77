# app/models/subscriber.py
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel
from typing import Optional, List
from datetime import datetime
from enum import Enum

class SubscriberStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    UNSUBSCRIBED = "unsubscribed"

class Frequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

class SubscribeOutcome(str, Enum):
    CREATED = "created"
    REACTIVATED = "reactivated"

class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class Preferences(CamelModel):
    categories: List[str] = Field(default_factory=list)
    frequency: Frequency = Frequency.WEEKLY

class SubscribeRequest(CamelModel):
    email: EmailStr
    name: Optional[str] = ""
    preferences: Optional[Preferences] = None

class SubscriberResponse(CamelModel):
    """Public view of a subscriber; the unsubscribe token is never included"""
    id: str
    email: str
    name: str = ""
    status: SubscriberStatus
    preferences: Preferences = Field(default_factory=Preferences)
    signup_date: datetime
    last_engagement: Optional[datetime] = None
    engagement_score: int = 0
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None

class SubscribeResponse(CamelModel):
    message: str
    subscriber: Optional[SubscriberResponse] = None

class SubscriberStats(CamelModel):
    total: int
    active: int
    unsubscribed: int
    pending: int

class MessageResponse(CamelModel):
    message: str
