"""Profile domain model."""

import re

from pydantic import BaseModel, Field, field_validator

from taskminder.domain.task import NotifyChannel


class Profile(BaseModel):
    """Profile data transfer object (one per user, owns tasks)."""

    id: str = Field(..., description="Unique profile ID")
    email: str | None = Field(default=None, description="Email address for reminders")
    phone: str | None = Field(default=None, description="Phone number in E.164 format (e.g., +14155552671)")
    full_name: str | None = Field(default=None, description="Display name")
    notify_via: NotifyChannel | None = Field(default=None, description="Default reminder channel")

    @field_validator("phone")
    @classmethod
    def validate_phone_e164(cls, v: str | None) -> str | None:
        """Validate phone number is in E.164 format when present."""
        if v is None or v == "":
            return None
        if not re.match(r"^\+[1-9]\d{1,14}$", v):
            msg = "Phone number must be in E.164 format (e.g., +14155552671)"
            raise ValueError(msg)
        return v

    def address_for(self, channel: NotifyChannel) -> str | None:
        """Return the delivery address for a single channel (email or sms)."""
        if channel == NotifyChannel.EMAIL:
            return self.email or None
        if channel == NotifyChannel.SMS:
            return self.phone or None
        return None
