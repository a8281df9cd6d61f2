"""Record Store Database Operations.

This module handles all database operations for the record store:
- Schema initialization
- CRUD operations for customers, employees and external companies
- Exact and partial lookups used by the resolvers
- Sample data seeding

Every function opens its own connection, so callers may use the store
from worker threads.
"""

import logging
import os
import random
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from records.models import Customer, Employee, ExternalCompany


logger = logging.getLogger(__name__)


# Default database path, overridable with RECORDS_DB_PATH
DEFAULT_DB_PATH = Path(
    os.getenv("RECORDS_DB_PATH", str(Path(__file__).resolve().parents[1] / "records.db"))
)


def init_records_db(db_path: Path = DEFAULT_DB_PATH) -> None:
    """Initialize record store tables.

    Creates:
    - customers: Customers with their responsible employee
    - employees: Internal employees
    - external_companies: External companies with address and contact

    Args:
        db_path: Path to SQLite database file
    """
    conn = sqlite3.connect(db_path)
    try:
        cursor = conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS employees (
                employee_id INTEGER PRIMARY KEY AUTOINCREMENT,
                full_name TEXT NOT NULL,
                job_title TEXT,
                department TEXT,
                phone_number TEXT,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS customers (
                customer_id INTEGER PRIMARY KEY AUTOINCREMENT,
                customer_name TEXT NOT NULL,
                employee_id INTEGER,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS external_companies (
                company_id INTEGER PRIMARY KEY AUTOINCREMENT,
                company_name TEXT NOT NULL,
                address TEXT,
                contact_person TEXT,
                phone_number TEXT,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)

        # Indexes for exact secondary-key lookups
        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_customers_name
            ON customers(customer_name)
        """)
        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_employees_name
            ON employees(full_name)
        """)
        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_companies_name
            ON external_companies(company_name)
        """)

        conn.commit()
        logger.info(f"Record store initialized at {db_path}")

    finally:
        conn.close()


# =============================================================================
# Row Converters
# =============================================================================

def _parse_ts(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def _row_to_customer(row: sqlite3.Row) -> Customer:
    return Customer(
        customer_id=row["customer_id"],
        customer_name=row["customer_name"],
        employee_id=row["employee_id"],
        created_at=_parse_ts(row["created_at"]),
        updated_at=_parse_ts(row["updated_at"]),
    )


def _row_to_employee(row: sqlite3.Row) -> Employee:
    return Employee(
        employee_id=row["employee_id"],
        full_name=row["full_name"],
        job_title=row["job_title"],
        department=row["department"],
        phone_number=row["phone_number"],
        created_at=_parse_ts(row["created_at"]),
        updated_at=_parse_ts(row["updated_at"]),
    )


def _row_to_company(row: sqlite3.Row) -> ExternalCompany:
    return ExternalCompany(
        company_id=row["company_id"],
        company_name=row["company_name"],
        address=row["address"],
        contact_person=row["contact_person"],
        phone_number=row["phone_number"],
        created_at=_parse_ts(row["created_at"]),
        updated_at=_parse_ts(row["updated_at"]),
    )


def _query(db_path: Path, sql: str, params: Sequence[Any] = ()) -> List[sqlite3.Row]:
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    try:
        cursor = conn.cursor()
        cursor.execute(sql, params)
        return cursor.fetchall()
    finally:
        conn.close()


def _insert(db_path: Path, sql: str, params: Sequence[Any]) -> int:
    conn = sqlite3.connect(db_path)
    try:
        cursor = conn.cursor()
        cursor.execute(sql, params)
        conn.commit()
        return cursor.lastrowid
    finally:
        conn.close()


# =============================================================================
# CRUD Operations
# =============================================================================

def add_customer(customer: Customer, db_path: Path = DEFAULT_DB_PATH) -> Customer:
    """Insert a customer, keeping an explicit customer_id if one is set.

    Args:
        customer: Customer to add
        db_path: Path to database

    Returns:
        Customer with id and timestamps populated
    """
    now = datetime.utcnow().isoformat()
    customer_id = _insert(db_path, """
        INSERT INTO customers (customer_id, customer_name, employee_id, created_at, updated_at)
        VALUES (?, ?, ?, ?, ?)
    """, (customer.customer_id, customer.customer_name, customer.employee_id, now, now))

    return customer.model_copy(update={
        "customer_id": customer_id,
        "created_at": datetime.fromisoformat(now),
        "updated_at": datetime.fromisoformat(now),
    })


def add_employee(employee: Employee, db_path: Path = DEFAULT_DB_PATH) -> Employee:
    """Insert an employee, keeping an explicit employee_id if one is set."""
    now = datetime.utcnow().isoformat()
    employee_id = _insert(db_path, """
        INSERT INTO employees
        (employee_id, full_name, job_title, department, phone_number, created_at, updated_at)
        VALUES (?, ?, ?, ?, ?, ?, ?)
    """, (
        employee.employee_id,
        employee.full_name,
        employee.job_title,
        employee.department,
        employee.phone_number,
        now,
        now,
    ))

    return employee.model_copy(update={
        "employee_id": employee_id,
        "created_at": datetime.fromisoformat(now),
        "updated_at": datetime.fromisoformat(now),
    })


def add_company(company: ExternalCompany, db_path: Path = DEFAULT_DB_PATH) -> ExternalCompany:
    """Insert an external company, keeping an explicit company_id if one is set."""
    now = datetime.utcnow().isoformat()
    company_id = _insert(db_path, """
        INSERT INTO external_companies
        (company_id, company_name, address, contact_person, phone_number, created_at, updated_at)
        VALUES (?, ?, ?, ?, ?, ?, ?)
    """, (
        company.company_id,
        company.company_name,
        company.address,
        company.contact_person,
        company.phone_number,
        now,
        now,
    ))

    return company.model_copy(update={
        "company_id": company_id,
        "created_at": datetime.fromisoformat(now),
        "updated_at": datetime.fromisoformat(now),
    })


def get_customer(customer_id: int, db_path: Path = DEFAULT_DB_PATH) -> Optional[Customer]:
    """Get a customer by primary key."""
    rows = _query(db_path, "SELECT * FROM customers WHERE customer_id = ?", (customer_id,))
    return _row_to_customer(rows[0]) if rows else None


def get_employee(employee_id: int, db_path: Path = DEFAULT_DB_PATH) -> Optional[Employee]:
    """Get an employee by primary key."""
    rows = _query(db_path, "SELECT * FROM employees WHERE employee_id = ?", (employee_id,))
    return _row_to_employee(rows[0]) if rows else None


def get_company(company_id: int, db_path: Path = DEFAULT_DB_PATH) -> Optional[ExternalCompany]:
    """Get an external company by primary key."""
    rows = _query(db_path, "SELECT * FROM external_companies WHERE company_id = ?", (company_id,))
    return _row_to_company(rows[0]) if rows else None


def list_customers(db_path: Path = DEFAULT_DB_PATH) -> List[Customer]:
    """List all customers ordered by id."""
    rows = _query(db_path, "SELECT * FROM customers ORDER BY customer_id")
    return [_row_to_customer(row) for row in rows]


def list_employees(db_path: Path = DEFAULT_DB_PATH) -> List[Employee]:
    """List all employees ordered by id."""
    rows = _query(db_path, "SELECT * FROM employees ORDER BY employee_id")
    return [_row_to_employee(row) for row in rows]


def list_companies(db_path: Path = DEFAULT_DB_PATH) -> List[ExternalCompany]:
    """List all external companies ordered by id."""
    rows = _query(db_path, "SELECT * FROM external_companies ORDER BY company_id")
    return [_row_to_company(row) for row in rows]


def count_records(db_path: Path = DEFAULT_DB_PATH) -> Dict[str, int]:
    """Count rows per record table."""
    counts = {}
    for table in ("customers", "employees", "external_companies"):
        rows = _query(db_path, f"SELECT COUNT(*) AS n FROM {table}")
        counts[table] = rows[0]["n"]
    return counts


# =============================================================================
# Lookup Operations
# =============================================================================

def find_customers_by_name(name: str, db_path: Path = DEFAULT_DB_PATH) -> List[Customer]:
    """Exact customer name lookup."""
    rows = _query(
        db_path,
        "SELECT * FROM customers WHERE customer_name = ? ORDER BY customer_id",
        (name,),
    )
    return [_row_to_customer(row) for row in rows]


def find_customer_by_id_or_name(
    customer_id: int,
    name: str,
    db_path: Path = DEFAULT_DB_PATH
) -> Optional[Customer]:
    """Single round trip matching either the id or the exact name.

    An id hit is preferred over a name hit when both exist.
    """
    rows = _query(db_path, """
        SELECT * FROM customers
        WHERE customer_id = ? OR customer_name = ?
        ORDER BY CASE WHEN customer_id = ? THEN 0 ELSE 1 END, customer_id
        LIMIT 1
    """, (customer_id, name, customer_id))
    return _row_to_customer(rows[0]) if rows else None


def search_customers_by_name(name: str, db_path: Path = DEFAULT_DB_PATH) -> List[Customer]:
    """Case-insensitive substring search on the customer name."""
    rows = _query(db_path, """
        SELECT * FROM customers
        WHERE instr(lower(customer_name), lower(?)) > 0
        ORDER BY customer_id
    """, (name,))
    return [_row_to_customer(row) for row in rows]


def find_employees_by_name(name: str, db_path: Path = DEFAULT_DB_PATH) -> List[Employee]:
    """Exact employee full-name lookup."""
    rows = _query(
        db_path,
        "SELECT * FROM employees WHERE full_name = ? ORDER BY employee_id",
        (name,),
    )
    return [_row_to_employee(row) for row in rows]


def find_employee_by_id_or_name(
    employee_id: int,
    name: str,
    db_path: Path = DEFAULT_DB_PATH
) -> Optional[Employee]:
    """Single round trip matching either the id or the exact full name."""
    rows = _query(db_path, """
        SELECT * FROM employees
        WHERE employee_id = ? OR full_name = ?
        ORDER BY CASE WHEN employee_id = ? THEN 0 ELSE 1 END, employee_id
        LIMIT 1
    """, (employee_id, name, employee_id))
    return _row_to_employee(rows[0]) if rows else None


def search_employees(
    name: Optional[str] = None,
    department: Optional[str] = None,
    title: Optional[str] = None,
    db_path: Path = DEFAULT_DB_PATH
) -> List[Employee]:
    """Flexible employee search.

    Each filter applies only when given:
    - name: case-insensitive substring of full_name
    - department: case-insensitive equality
    - title: case-insensitive substring of job_title

    Args:
        name: Part of the employee's full name
        department: Department name
        title: Part of the job title
        db_path: Path to database

    Returns:
        Matching employees ordered by id
    """
    clauses = []
    params: List[Any] = []

    if name:
        clauses.append("instr(lower(full_name), lower(?)) > 0")
        params.append(name)
    if department:
        clauses.append("lower(department) = lower(?)")
        params.append(department)
    if title:
        clauses.append("instr(lower(job_title), lower(?)) > 0")
        params.append(title)

    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
    rows = _query(db_path, f"SELECT * FROM employees {where} ORDER BY employee_id", params)
    return [_row_to_employee(row) for row in rows]


def find_companies_by_name(name: str, db_path: Path = DEFAULT_DB_PATH) -> List[ExternalCompany]:
    """Exact company name lookup."""
    rows = _query(
        db_path,
        "SELECT * FROM external_companies WHERE company_name = ? ORDER BY company_id",
        (name,),
    )
    return [_row_to_company(row) for row in rows]


def find_company_by_id_or_name(
    company_id: int,
    name: str,
    db_path: Path = DEFAULT_DB_PATH
) -> Optional[ExternalCompany]:
    """Single round trip matching either the id or the exact company name."""
    rows = _query(db_path, """
        SELECT * FROM external_companies
        WHERE company_id = ? OR company_name = ?
        ORDER BY CASE WHEN company_id = ? THEN 0 ELSE 1 END, company_id
        LIMIT 1
    """, (company_id, name, company_id))
    return _row_to_company(rows[0]) if rows else None


def search_companies(
    name: Optional[str] = None,
    city: Optional[str] = None,
    db_path: Path = DEFAULT_DB_PATH
) -> List[ExternalCompany]:
    """Partial company search.

    name matches as a case-insensitive substring of company_name, city as a
    case-insensitive substring of the address. With neither given every
    company is returned.
    """
    clauses = []
    params: List[Any] = []

    if name:
        clauses.append("instr(lower(company_name), lower(?)) > 0")
        params.append(name)
    if city:
        clauses.append("instr(lower(coalesce(address, '')), lower(?)) > 0")
        params.append(city)

    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
    rows = _query(db_path, f"SELECT * FROM external_companies {where} ORDER BY company_id", params)
    return [_row_to_company(row) for row in rows]


# =============================================================================
# Sample Data Seeding
# =============================================================================

SAMPLE_EMPLOYEES = [
    Employee(employee_id=1, full_name="Alice Smith", job_title="Account Manager",
             department="Sales", phone_number="123-456-7890"),
    Employee(employee_id=2, full_name="Bob Johnson", job_title="Support Lead",
             department="Support", phone_number="987-654-3210"),
]

SAMPLE_CUSTOMERS = [
    Customer(customer_id=1, customer_name="Johnathan Doe", employee_id=1),
    Customer(customer_id=100, customer_name="Acme Corp", employee_id=1),
    Customer(customer_id=200, customer_name="Beta LLC", employee_id=2),
]

SAMPLE_COMPANIES = [
    ExternalCompany(company_id=1000, company_name="Globex Inc", address="1 Main St, Metropolis",
                    contact_person="Jane Doe", phone_number="555-111-2222"),
    ExternalCompany(company_id=2000, company_name="Initech", address="42 Silicon Ave, Tech City",
                    contact_person="John Roe", phone_number="555-333-4444"),
]

_FIRST_NAMES = [
    "James", "Mary", "Robert", "Patricia", "John", "Jennifer", "Michael", "Linda",
    "David", "Elizabeth", "William", "Barbara", "Richard", "Susan", "Joseph", "Jessica",
]
_LAST_NAMES = [
    "Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia", "Miller", "Davis",
    "Rodriguez", "Martinez", "Hernandez", "Lopez", "Gonzalez", "Wilson", "Anderson", "Thomas",
]
_DEPARTMENTS = [
    "Engineering", "Sales", "Marketing", "Human Resources", "Finance", "Operations",
    "Customer Service", "Product Management", "Quality Assurance", "IT Support",
]
_JOB_TITLES = [
    "Software Engineer", "Senior Developer", "Product Manager", "Sales Representative",
    "Marketing Specialist", "HR Manager", "Financial Analyst", "Operations Manager",
    "Customer Success Manager", "QA Engineer", "Account Manager", "Data Scientist",
]
_COMPANY_NAMES = [
    "TechCorp Solutions", "Global Dynamics Inc", "Innovation Labs LLC", "Digital Frontiers Corp",
    "NextGen Technologies", "Alpha Systems", "Beta Innovations", "Gamma Solutions",
]
_CITIES = [
    "New York", "Los Angeles", "Chicago", "Houston", "Phoenix", "Philadelphia",
    "San Antonio", "San Diego", "Dallas", "Austin",
]


def seed_sample_records(db_path: Path = DEFAULT_DB_PATH) -> Dict[str, int]:
    """Seed the fixed sample records.

    Skips samples that already exist, so the routine can run on every
    start. Sample customers are matched by name and are always present
    afterwards.

    Returns:
        Number of rows inserted per table
    """
    inserted = {"customers": 0, "employees": 0, "external_companies": 0}

    for employee in SAMPLE_EMPLOYEES:
        if get_employee(employee.employee_id, db_path) is None:
            add_employee(employee, db_path)
            inserted["employees"] += 1

    for customer in SAMPLE_CUSTOMERS:
        if find_customers_by_name(customer.customer_name, db_path):
            continue
        if get_customer(customer.customer_id, db_path) is not None:
            # id taken by another record; let the store assign one
            customer = customer.model_copy(update={"customer_id": None})
        add_customer(customer, db_path)
        inserted["customers"] += 1

    for company in SAMPLE_COMPANIES:
        if get_company(company.company_id, db_path) is None:
            add_company(company, db_path)
            inserted["external_companies"] += 1

    logger.info(
        f"Seeded sample records: {inserted['customers']} customers, "
        f"{inserted['employees']} employees, {inserted['external_companies']} companies"
    )
    return inserted


def _phone_number(rng: random.Random) -> str:
    return f"{rng.randint(200, 999)}-{rng.randint(200, 999)}-{rng.randint(1000, 9999)}"


def seed_generated_records(
    employees: int = 50,
    customers: int = 100,
    companies: int = 100,
    db_path: Path = DEFAULT_DB_PATH,
    rng: Optional[random.Random] = None
) -> Dict[str, int]:
    """Top up each table with randomly generated records.

    Tables already holding at least the requested number of rows are left
    alone. New customers are assigned to a random existing employee.

    Args:
        employees: Target employee count
        customers: Target customer count
        companies: Target company count
        db_path: Path to database
        rng: Random source (seed it for reproducible data)

    Returns:
        Number of rows inserted per table
    """
    rng = rng or random.Random()
    counts = count_records(db_path)
    inserted = {"customers": 0, "employees": 0, "external_companies": 0}

    for _ in range(max(employees - counts["employees"], 0)):
        add_employee(Employee(
            full_name=f"{rng.choice(_FIRST_NAMES)} {rng.choice(_LAST_NAMES)}",
            job_title=rng.choice(_JOB_TITLES),
            department=rng.choice(_DEPARTMENTS),
            phone_number=_phone_number(rng),
        ), db_path)
        inserted["employees"] += 1

    employee_ids = [e.employee_id for e in list_employees(db_path)]

    for _ in range(max(customers - counts["customers"], 0)):
        add_customer(Customer(
            customer_name=f"{rng.choice(_FIRST_NAMES)} {rng.choice(_LAST_NAMES)}",
            employee_id=rng.choice(employee_ids) if employee_ids else None,
        ), db_path)
        inserted["customers"] += 1

    for _ in range(max(companies - counts["external_companies"], 0)):
        add_company(ExternalCompany(
            company_name=rng.choice(_COMPANY_NAMES),
            address=f"{rng.randint(1, 999)} Commerce St, {rng.choice(_CITIES)}",
            contact_person=f"{rng.choice(_FIRST_NAMES)} {rng.choice(_LAST_NAMES)}",
            phone_number=_phone_number(rng),
        ), db_path)
        inserted["external_companies"] += 1

    logger.info(
        f"Generated records: {inserted['customers']} customers, "
        f"{inserted['employees']} employees, {inserted['external_companies']} companies"
    )
    return inserted
