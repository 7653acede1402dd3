"""Delivery domain schemas - Pydantic models for CEP ranges"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class CepRangeCreate(BaseModel):
    """Schema for adding a delivery range; both ends accept masked input (01310-000)"""

    cepStart: str
    cepEnd: str


class CepRangeResponse(BaseModel):
    id: str
    cepStart: str
    cepEnd: str
    createdAt: Optional[datetime] = None


class CepValidationResponse(BaseModel):
    """Result of a public delivery eligibility check"""

    valid: bool
    unrestricted: bool
