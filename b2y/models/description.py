"""Models for the listing description enhancer."""

from typing import Union
from pydantic import BaseModel, Field


class DescriptionRequest(BaseModel):
    """Draft listing text plus the numbers used for insights (pt-BR strings allowed)."""
    title: str = ""
    description: str = ""
    price: Union[str, float, None] = None
    annual_revenue: Union[str, float, None] = Field(None, alias="annualRevenue")
    profit_margin: Union[str, float, None] = Field(None, alias="profitMargin", description="Percent")

    model_config = {"populate_by_name": True}


class EnhancedDescription(BaseModel):
    """Augmented title and description."""
    title: str = Field(..., description="Improved listing title")
    description: str = Field(..., description="Improved listing description")
