"""User profile model."""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class ProfileType(str, Enum):
    """Declared intent chosen at sign-up."""
    SELLER = "seller"
    BUYER = "buyer"
    INVESTOR = "investor"
    BROKER = "broker"


class UserProfile(BaseModel):
    """Profile captured by the sign-up flow."""
    user_id: Optional[str] = None
    profile_type: Optional[ProfileType] = None
    name: str = Field(..., min_length=1)
    document: Optional[str] = Field(None, description="CPF or CNPJ")
    phone: Optional[str] = None
    cep: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    updated_at: Optional[str] = None
