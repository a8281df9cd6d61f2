"""Record Resolution Algorithm.

This module implements the cascade that turns human-entered search
criteria into zero, one or many stored records:
1. No usable field -> empty result without touching storage
2. Identifier plus name -> one "id OR exact name" round trip
3. Identifier only -> primary-key lookup
4. Free text -> exact lookup, then fuzzy scan (fuzzy flag) or a
   case-insensitive substring search

The cascade is shared; the customer, employee and company resolvers only
supply the storage hooks and the fields the fuzzy matcher compares.
A miss is always an empty list. Only the require_* accessors raise.
"""

import logging
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Generic, List, Optional, TypeVar

from matching import FieldMatch, matches_any_field
from records import db
from records.db import DEFAULT_DB_PATH
from records.exceptions import (
    BusinessError,
    CompanyNotFoundError,
    CustomerNotFoundError,
    EmployeeNotFoundError,
)
from records.models import Customer, Employee, ExternalCompany, SearchCriteria


logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT")

# Number of candidate names quoted in not-found messages
NOT_FOUND_SAMPLE_SIZE = 3


class RecordResolver(ABC, Generic[RecordT]):
    """Shared resolution cascade.

    Subclasses implement the storage hooks below. Hooks are only called
    when the cascade needs them, so a resolver backed by a slow store pays
    for exactly the lookups the criteria require.
    """

    domain = "record"
    not_found_error = BusinessError

    def __init__(self, db_path: Path = DEFAULT_DB_PATH):
        """Initialize the resolver.

        Args:
            db_path: Path to the record store database
        """
        self.db_path = db_path

    # -------------------------------------------------------------------------
    # Storage hooks
    # -------------------------------------------------------------------------

    @abstractmethod
    def _find_by_id(self, identifier: int) -> Optional[RecordT]:
        pass

    @abstractmethod
    def _find_by_id_or_text(self, identifier: int, text: str) -> Optional[RecordT]:
        pass

    @abstractmethod
    def _find_exact(self, criteria: SearchCriteria) -> List[RecordT]:
        """Records whose text fields equal the criteria exactly."""
        pass

    @abstractmethod
    def _find_partial(self, criteria: SearchCriteria) -> List[RecordT]:
        pass

    @abstractmethod
    def _fuzzy_fields(self, record: RecordT, criteria: SearchCriteria) -> List[FieldMatch]:
        """(search term, record value) pairs compared by the fuzzy scan."""
        pass

    @abstractmethod
    def _list_all(self) -> List[RecordT]:
        pass

    @abstractmethod
    def _display_name(self, record: RecordT) -> str:
        pass

    # -------------------------------------------------------------------------
    # Cascade
    # -------------------------------------------------------------------------

    def resolve(self, criteria: SearchCriteria) -> List[RecordT]:
        """Resolve criteria into matching records.

        Args:
            criteria: Search parameters

        Returns:
            Matching records; empty when nothing matches
        """
        if not criteria.has_any_field():
            logger.warning(f"No valid search parameters provided for {self.domain} search")
            return []

        start_time = time.time()
        results = self._cascade(criteria)
        elapsed_ms = int((time.time() - start_time) * 1000)

        logger.info(
            f"{self.domain} search [{criteria.describe()}] "
            f"fuzzy={criteria.fuzzy_matching} returned {len(results)} result(s) in {elapsed_ms}ms"
        )
        return results

    def _cascade(self, criteria: SearchCriteria) -> List[RecordT]:
        identifier = criteria.identifier
        name = criteria.name

        if identifier is not None and name is not None:
            hit = self._find_by_id_or_text(identifier, name)
            if hit is not None:
                return [hit]
            if criteria.fuzzy_matching:
                return self._fuzzy_scan(criteria)
            return []

        if identifier is not None:
            hit = self._find_by_id(identifier)
            return [hit] if hit is not None else []

        exact = self._find_exact(criteria)
        if exact:
            return exact

        if criteria.fuzzy_matching:
            return self._fuzzy_scan(criteria)

        return self._find_partial(criteria)

    def _fuzzy_scan(self, criteria: SearchCriteria) -> List[RecordT]:
        """Keep every record where any designated field matches."""
        return [
            record
            for record in self._list_all()
            if matches_any_field(self._fuzzy_fields(record, criteria))
        ]

    # -------------------------------------------------------------------------
    # Selection adapters
    # -------------------------------------------------------------------------

    def resolve_one(self, criteria: SearchCriteria) -> Optional[RecordT]:
        """Return the first match, or None."""
        results = self.resolve(criteria)
        return results[0] if results else None

    def require_one(self, criteria: SearchCriteria) -> RecordT:
        """Return the first match or raise the domain's not-found error.

        The error message quotes up to three known record names to help
        the caller correct the search.
        """
        result = self.resolve_one(criteria)
        if result is None:
            raise self.not_found_error(self._not_found_message(criteria))
        return result

    def _not_found_message(self, criteria: SearchCriteria) -> str:
        samples = [self._display_name(r) for r in self._list_all()[:NOT_FOUND_SAMPLE_SIZE + 1]]
        message = f"No {self.domain} found for {criteria.describe()}"
        if samples:
            shown = ", ".join(samples[:NOT_FOUND_SAMPLE_SIZE])
            if len(samples) > NOT_FOUND_SAMPLE_SIZE:
                shown += ", ..."
            message += f". Available {self.domain}s include: {shown}"
        return message


# =============================================================================
# Customer
# =============================================================================

class CustomerResolver(RecordResolver[Customer]):
    """Resolves customers by id and customer name.

    Example:
        resolver = CustomerResolver()
        customer = resolver.require_one(SearchCriteria(name="Johnathan Doe"))
        dri = resolver.get_employee_for_customer(customer)
    """

    domain = "customer"
    not_found_error = CustomerNotFoundError

    def _find_by_id(self, identifier: int) -> Optional[Customer]:
        return db.get_customer(identifier, self.db_path)

    def _find_by_id_or_text(self, identifier: int, text: str) -> Optional[Customer]:
        return db.find_customer_by_id_or_name(identifier, text, self.db_path)

    def _find_exact(self, criteria: SearchCriteria) -> List[Customer]:
        if criteria.name is None:
            return []
        return db.find_customers_by_name(criteria.name, self.db_path)

    def _find_partial(self, criteria: SearchCriteria) -> List[Customer]:
        if criteria.name is None:
            return []
        return db.search_customers_by_name(criteria.name, self.db_path)

    def _fuzzy_fields(self, record: Customer, criteria: SearchCriteria) -> List[FieldMatch]:
        return [FieldMatch(criteria.name, record.customer_name)]

    def _list_all(self) -> List[Customer]:
        return db.list_customers(self.db_path)

    def _display_name(self, record: Customer) -> str:
        return record.customer_name

    def get_customer_by_id(self, customer_id: int) -> Customer:
        customer = self._find_by_id(customer_id)
        if customer is None:
            raise CustomerNotFoundError(f"Customer not found with ID: {customer_id}")
        return customer

    def get_employee_for_customer(self, customer: Customer) -> Employee:
        """Look up the customer's directly responsible employee.

        Raises:
            EmployeeNotFoundError: If the customer has no DRI or it is missing
        """
        if customer.employee_id is None:
            raise EmployeeNotFoundError(
                f"Customer '{customer.customer_name}' has no responsible employee assigned"
            )
        employee = db.get_employee(customer.employee_id, self.db_path)
        if employee is None:
            raise EmployeeNotFoundError(f"Employee not found with ID: {customer.employee_id}")
        return employee


# =============================================================================
# Employee
# =============================================================================

class EmployeeResolver(RecordResolver[Employee]):
    """Resolves employees by id, full name, department and job title.

    Fuzzy matching compares name, department and title independently; an
    employee matches when any one of them does.
    """

    domain = "employee"
    not_found_error = EmployeeNotFoundError

    def _find_by_id(self, identifier: int) -> Optional[Employee]:
        return db.get_employee(identifier, self.db_path)

    def _find_by_id_or_text(self, identifier: int, text: str) -> Optional[Employee]:
        return db.find_employee_by_id_or_name(identifier, text, self.db_path)

    def _find_exact(self, criteria: SearchCriteria) -> List[Employee]:
        if criteria.name is None:
            return []
        return db.find_employees_by_name(criteria.name, self.db_path)

    def _find_partial(self, criteria: SearchCriteria) -> List[Employee]:
        return db.search_employees(
            name=criteria.name,
            department=criteria.department,
            title=criteria.title,
            db_path=self.db_path,
        )

    def _fuzzy_fields(self, record: Employee, criteria: SearchCriteria) -> List[FieldMatch]:
        return [
            FieldMatch(criteria.name, record.full_name),
            FieldMatch(criteria.department, record.department),
            FieldMatch(criteria.title, record.job_title),
        ]

    def _list_all(self) -> List[Employee]:
        return db.list_employees(self.db_path)

    def _display_name(self, record: Employee) -> str:
        return record.full_name

    def find_by_exact_name(self, name: Optional[str]) -> Optional[Employee]:
        """Exact full-name lookup, None for a blank name."""
        if name is None or not name.strip():
            return None
        matches = db.find_employees_by_name(name.strip(), self.db_path)
        return matches[0] if matches else None

    def get_employee_by_id(self, employee_id: int) -> Employee:
        employee = self._find_by_id(employee_id)
        if employee is None:
            raise EmployeeNotFoundError(f"Employee not found with ID: {employee_id}")
        return employee


# =============================================================================
# External Company
# =============================================================================

class CompanyResolver(RecordResolver[ExternalCompany]):
    """Resolves external companies by id, name and city.

    Companies have no separate city column; the city is matched against
    the address. Industry and revenue are accepted but not compared, so a
    non-fuzzy search carrying only those fields returns every company.
    """

    domain = "company"
    not_found_error = CompanyNotFoundError

    def _find_by_id(self, identifier: int) -> Optional[ExternalCompany]:
        return db.get_company(identifier, self.db_path)

    def _find_by_id_or_text(self, identifier: int, text: str) -> Optional[ExternalCompany]:
        return db.find_company_by_id_or_name(identifier, text, self.db_path)

    def _find_exact(self, criteria: SearchCriteria) -> List[ExternalCompany]:
        if criteria.name is None:
            return []
        return db.find_companies_by_name(criteria.name, self.db_path)

    def _find_partial(self, criteria: SearchCriteria) -> List[ExternalCompany]:
        return db.search_companies(name=criteria.name, city=criteria.city, db_path=self.db_path)

    def _fuzzy_fields(self, record: ExternalCompany, criteria: SearchCriteria) -> List[FieldMatch]:
        return [
            FieldMatch(criteria.name, record.company_name),
            FieldMatch(criteria.city, record.address),
        ]

    def _list_all(self) -> List[ExternalCompany]:
        return db.list_companies(self.db_path)

    def _display_name(self, record: ExternalCompany) -> str:
        return record.company_name

    def get_company_by_id(self, company_id: int) -> ExternalCompany:
        company = self._find_by_id(company_id)
        if company is None:
            raise CompanyNotFoundError(f"Company not found with ID: {company_id}")
        return company
