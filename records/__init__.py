"""Records - Customer, employee and external company store and resolution.

This package provides:
- Pydantic models for the stored records and for search criteria
- SQLite storage with exact, partial and full-scan lookups
- Resolvers that run the exact -> partial / fuzzy cascade per domain
- Not-found errors for lookups that must return exactly one record

Usage:
    from records import CustomerResolver, SearchCriteria, init_records_db

    init_records_db()
    resolver = CustomerResolver()
    matches = resolver.resolve(SearchCriteria(name="Jon Doe", fuzzy_matching=True))
"""

from records.models import Customer, Employee, ExternalCompany, SearchCriteria
from records.exceptions import (
    BusinessError,
    CustomerNotFoundError,
    EmployeeNotFoundError,
    CompanyNotFoundError,
)
from records.db import (
    DEFAULT_DB_PATH,
    init_records_db,
    seed_sample_records,
    seed_generated_records,
)
from records.resolver import (
    RecordResolver,
    CustomerResolver,
    EmployeeResolver,
    CompanyResolver,
)

__all__ = [
    # Models
    "Customer",
    "Employee",
    "ExternalCompany",
    "SearchCriteria",
    # Errors
    "BusinessError",
    "CustomerNotFoundError",
    "EmployeeNotFoundError",
    "CompanyNotFoundError",
    # Database
    "DEFAULT_DB_PATH",
    "init_records_db",
    "seed_sample_records",
    "seed_generated_records",
    # Resolvers
    "RecordResolver",
    "CustomerResolver",
    "EmployeeResolver",
    "CompanyResolver",
]
