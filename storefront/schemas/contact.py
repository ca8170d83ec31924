from typing import Optional

from pydantic import BaseModel


class ContactFormRequest(BaseModel):
    """
    Raw contact-form payload. Missing and blank fields are reported by the
    contact handler with its own message, so nothing is required here.
    """
    name: Optional[str] = None
    email: Optional[str] = None
    subject: Optional[str] = None
    message: Optional[str] = None


class ContactMessage(BaseModel):
    """A validated contact-form submission"""
    name: str
    email: str
    subject: str
    message: str
