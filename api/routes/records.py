"""Read-only record listings."""

from typing import List

from fastapi import APIRouter, Request

from records import db
from records.models import Customer, Employee, ExternalCompany
from records.resolver import CompanyResolver, CustomerResolver, EmployeeResolver


router = APIRouter()


@router.get("/customers", response_model=List[Customer])
async def list_customers(request: Request) -> List[Customer]:
    return db.list_customers(request.app.state.db_path)


@router.get("/customers/{customer_id}", response_model=Customer)
async def get_customer(customer_id: int, request: Request) -> Customer:
    """Get one customer; 404 if it does not exist."""
    return CustomerResolver(request.app.state.db_path).get_customer_by_id(customer_id)


@router.get("/employees", response_model=List[Employee])
async def list_employees(request: Request) -> List[Employee]:
    return db.list_employees(request.app.state.db_path)


@router.get("/employees/{employee_id}", response_model=Employee)
async def get_employee(employee_id: int, request: Request) -> Employee:
    return EmployeeResolver(request.app.state.db_path).get_employee_by_id(employee_id)


@router.get("/companies", response_model=List[ExternalCompany])
async def list_companies(request: Request) -> List[ExternalCompany]:
    return db.list_companies(request.app.state.db_path)


@router.get("/companies/{company_id}", response_model=ExternalCompany)
async def get_company(company_id: int, request: Request) -> ExternalCompany:
    return CompanyResolver(request.app.state.db_path).get_company_by_id(company_id)
