# app/models/newsletter.py
from pydantic import Field
from typing import Optional
from datetime import datetime
from app.models.subscriber import CamelModel

class NewsletterCreate(CamelModel):
    title: str = Field(min_length=1)
    description: str = ""
    content: Optional[str] = None
    # Editor output may be sent split; it is joined into `content`
    html: Optional[str] = None
    css: Optional[str] = None
    author: str = ""
    image_url: str = ""
    date: Optional[datetime] = None

class NewsletterUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    content: Optional[str] = None
    html: Optional[str] = None
    css: Optional[str] = None
    author: Optional[str] = None
    image_url: Optional[str] = None
    # base64 payload (or data URL) to host, or an http(s) URL to keep as-is
    image: Optional[str] = None
    date: Optional[datetime] = None

class NewsletterResponse(CamelModel):
    id: str
    title: str
    description: str = ""
    content: str = ""
    author: str = ""
    date: datetime
    image_url: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
