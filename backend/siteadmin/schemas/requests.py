"""
SiteAdmin Backend - Request Shapes
==================================

What:  Pydantic models for the routes whose bodies have declared fields.
How:   siteadmin.validation.validate_fields() runs model_validate() on the raw
       JSON body and turns every failing field into one diagnostic entry.

Field rules:
    ContactMessage  name, subject, message: strings, non-empty after trimming
                    email: syntactically valid address (email-validator,
                    internationalized domains accepted)
    AdminLogin      password: string, at least 3 characters
"""

from pydantic import BaseModel, EmailStr, Field


class ContactMessage(BaseModel):
    """Body of POST /api/send-email."""

    name: str = Field(min_length=1)
    email: EmailStr
    subject: str = Field(min_length=1)
    message: str = Field(min_length=1)

    model_config = {"str_strip_whitespace": True, "strict": True}


class AdminLogin(BaseModel):
    """Body of POST /api/admin-login."""

    password: str = Field(min_length=3)

    model_config = {"strict": True}
