# app/schemas/service.py
from __future__ import annotations
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, Tuple, Union
from decimal import Decimal, InvalidOperation

MIN_MAIN_SERVICE_DURATION = 15


def parse_price(value: Union[int, float, str, None]) -> Tuple[Optional[Decimal], Optional[Decimal]]:
    """Accept a number or a "min-max" range and return (min, max)"""
    if value is None:
        return None, None
    if isinstance(value, (int, float)):
        price = Decimal(str(value))
        if price < 0:
            raise ValueError("Price must be non-negative")
        return price, None

    parts = [p.strip() for p in str(value).split("-")]
    try:
        bounds = [Decimal(p) for p in parts]
    except InvalidOperation:
        raise ValueError("Price must be a number or a 'min-max' range")
    if len(bounds) == 1:
        low, high = bounds[0], None
    elif len(bounds) == 2:
        low, high = bounds
        if high < low:
            raise ValueError("Price range maximum must not be below minimum")
    else:
        raise ValueError("Price must be a number or a 'min-max' range")
    if low < 0:
        raise ValueError("Price must be non-negative")
    return low, high


class ServiceCreate(BaseModel):
    """Request model for creating a service"""
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    price: Union[float, str] = Field(..., description="Number or 'min-max' range")
    duration: int = Field(..., ge=0, description="Duration in minutes")
    is_addon: bool = Field(default=False)
    display_order: int = Field(default=0)

    @field_validator("price")
    @classmethod
    def validate_price(cls, v):
        parse_price(v)
        return v

    @model_validator(mode="after")
    def validate_duration(self) -> "ServiceCreate":
        if not self.is_addon and self.duration < MIN_MAIN_SERVICE_DURATION:
            raise ValueError(f"Main services must last at least {MIN_MAIN_SERVICE_DURATION} minutes")
        return self


class ServiceUpdate(BaseModel):
    """Request model for updating a service"""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    price: Optional[Union[float, str]] = None
    duration: Optional[int] = Field(None, ge=0)
    is_addon: Optional[bool] = None
    display_order: Optional[int] = None

    @field_validator("price")
    @classmethod
    def validate_price(cls, v):
        parse_price(v)
        return v
