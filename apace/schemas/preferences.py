from typing import Optional
from uuid import UUID
from datetime import datetime

from pydantic import Field

from apace.models.preferences_model import Language
from apace.schemas.common import CamelModel


class PreferencesUpdate(CamelModel):
    email_notifications: Optional[bool] = None
    sms_notifications: Optional[bool] = None
    push_notifications: Optional[bool] = None
    marketing_emails: Optional[bool] = None
    dark_theme: Optional[bool] = None
    language: Optional[Language] = None
    default_vehicle_type: Optional[str] = Field(None, max_length=50)
    default_payment_method: Optional[str] = Field(None, max_length=50)


class PreferencesRead(CamelModel):
    id: UUID
    user_id: UUID
    email_notifications: bool
    sms_notifications: bool
    push_notifications: bool
    marketing_emails: bool
    dark_theme: bool
    language: Language
    default_vehicle_type: Optional[str] = None
    default_payment_method: Optional[str] = None
    updated_at: Optional[datetime] = None
