"""Listing models."""

from enum import Enum
from typing import Optional, Union
from pydantic import BaseModel, Field


class ListingType(str, Enum):
    """What the listing offers."""
    BUSINESS_SALE = "business_sale"
    INVESTMENT_SEEK = "investment_seek"


class MonthlyCosts(BaseModel):
    """Monthly cost breakdown in BRL."""
    rent: float = Field(0, ge=0)
    utilities: float = Field(0, ge=0)
    payroll: float = Field(0, ge=0)
    others: float = Field(0, ge=0)


class ListingLocation(BaseModel):
    """Structured address captured by the publish form."""
    cep: str = Field("", description="Brazilian postal code")
    address: str = ""
    number: str = ""
    complement: str = ""
    city: str = ""
    state: str = ""

    def to_text(self) -> str:
        """Render as "Rua X, 10, Sala 2 - Barueri, SP"."""
        complement = f", {self.complement}" if self.complement else ""
        text = f"{self.address}, {self.number}{complement} - {self.city}, {self.state}"
        return text.strip()


class Listing(BaseModel):
    """A business-sale or investment-seek listing."""
    id: Optional[str] = Field(None, description="Listing ID")
    listing_type: ListingType = Field(ListingType.BUSINESS_SALE, description="business_sale or investment_seek")
    title: str = Field(..., description="Listing title")
    sector: str = Field(..., description="Business sector, e.g. Tecnologia")
    location: Union[str, ListingLocation] = Field("", description="Free text or structured address")
    price: float = Field(0, ge=0, description="Asking price or investment sought (BRL)")
    description: Optional[str] = None
    image_url: Optional[str] = Field(None, description="Cover image URL")
    gallery: list[str] = Field(default_factory=list, description="Ordered gallery image URLs")
    annual_revenue: float = Field(0, ge=0)
    profit_margin: float = Field(0, ge=0, le=1, description="Fraction between 0 and 1")
    employees: int = Field(0, ge=0)
    monthly_costs: MonthlyCosts = Field(default_factory=MonthlyCosts)
    owner_id: Optional[str] = Field(None, description="Owning user ID")
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def location_text(self) -> str:
        """Location as plain text, whatever shape it was stored in."""
        if isinstance(self.location, ListingLocation):
            return self.location.to_text()
        return self.location or ""


class MonthlyCostsForm(BaseModel):
    """Monthly costs as typed into the form (pt-BR formatted)."""
    rent: Union[str, float] = ""
    utilities: Union[str, float] = ""
    payroll: Union[str, float] = ""
    others: Union[str, float] = ""


class ListingDraft(BaseModel):
    """Raw publish form. Money fields arrive as pt-BR strings like "1.500.000,50"."""
    listing_type: ListingType = ListingType.BUSINESS_SALE
    title: str = Field(..., min_length=1)
    sector: str = Field(..., min_length=1)
    location: ListingLocation = Field(default_factory=ListingLocation)
    price: Union[str, float] = ""
    description: str = ""
    image_url: Optional[str] = None
    gallery: list[str] = Field(default_factory=list)
    annual_revenue: Union[str, float] = ""
    profit_margin: Union[str, float] = Field("", description="Percent, e.g. \"25\" for 25%")
    employees: Union[str, int] = ""
    monthly_costs: MonthlyCostsForm = Field(default_factory=MonthlyCostsForm)
