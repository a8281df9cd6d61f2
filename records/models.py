"""Record Data Models.

This module defines the Pydantic models for the record store and its search:
- Customer: A customer with its directly responsible employee (DRI)
- Employee: An internal employee
- ExternalCompany: An external company with address and contact
- SearchCriteria: Human-entered search parameters for resolution
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class Customer(BaseModel):
    """A customer record.

    Attributes:
        customer_id: Primary key
        customer_name: Display name used for matching
        employee_id: Employee responsible for this customer (the DRI)
        created_at: When the record was created
        updated_at: When the record was last modified
    """
    customer_id: Optional[int] = None
    customer_name: str = Field(..., description="Customer name")
    employee_id: Optional[int] = Field(default=None, description="Directly responsible employee")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class Employee(BaseModel):
    """An employee record."""
    employee_id: Optional[int] = None
    full_name: str = Field(..., description="First and last name")
    job_title: Optional[str] = None
    department: Optional[str] = None
    phone_number: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ExternalCompany(BaseModel):
    """An external company record.

    The address is free text; city searches match against it.
    """
    company_id: Optional[int] = None
    company_name: str = Field(..., description="Registered company name")
    address: Optional[str] = Field(default=None, description="Street address including city")
    contact_person: Optional[str] = None
    phone_number: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SearchCriteria(BaseModel):
    """Search parameters for record resolution.

    Blank strings are normalized to None. ``industry`` and ``revenue`` are
    accepted for company searches but no stored field is compared with them.

    Attributes:
        identifier: Primary key of the record to find
        name: Free-text name (customer, employee or company name)
        department: Employee department
        title: Employee job title
        city: Company city, compared against the address
        industry: Company industry (accepted, not comparable)
        revenue: Company revenue (accepted, not comparable)
        allow_multiple: Caller accepts several results
        fuzzy_matching: Use fuzzy matching instead of substring search
    """
    identifier: Optional[int] = None
    name: Optional[str] = None
    department: Optional[str] = None
    title: Optional[str] = None
    city: Optional[str] = None
    industry: Optional[str] = None
    revenue: Optional[int] = None
    allow_multiple: bool = Field(default=False)
    fuzzy_matching: bool = Field(default=False)

    @field_validator("name", "department", "title", "city", "industry", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if value is None:
            return None
        value = str(value).strip()
        return value or None

    def has_any_field(self) -> bool:
        """Check whether at least one search field is populated."""
        return any(
            value is not None
            for value in (
                self.identifier,
                self.name,
                self.department,
                self.title,
                self.city,
                self.industry,
                self.revenue,
            )
        )

    def describe(self) -> str:
        """Render the populated fields for log messages."""
        parts = [
            f"{key}={value!r}"
            for key, value in self.model_dump(exclude={"allow_multiple", "fuzzy_matching"}).items()
            if value is not None
        ]
        return ", ".join(parts) if parts else "<empty>"
