from fastapi import APIRouter, HTTPException

from ..db.session import SessionDep
from ..db.users import CustomerResponse, CustomerSummary, CustomerUpdate, RegisterRequest
from ..errors import ConflictError
from ..services.account import (
    create_customer,
    customer_summary,
    deactivate_customer,
    get_customer_profile,
    list_customers,
    update_customer,
)

router = APIRouter(prefix="/api/customers", tags=["customers"])


@router.get("", status_code=200)
def get_customers_endpoint(session: SessionDep) -> list[CustomerResponse]:
    return list_customers(session)


@router.post("", status_code=201)
def create_customer_endpoint(request: RegisterRequest, session: SessionDep) -> CustomerResponse:
    try:
        return create_customer(request, session)
    except ConflictError as e:
        raise HTTPException(status_code=400, detail=e.message) from e


@router.get("/{customer_id}", status_code=200)
def get_customer_endpoint(customer_id: int, session: SessionDep) -> CustomerResponse:
    return get_customer_profile(customer_id, session)


@router.get("/{customer_id}/summary", status_code=200)
def get_customer_summary_endpoint(customer_id: int, session: SessionDep) -> CustomerSummary:
    return customer_summary(customer_id, session)


@router.put("/{customer_id}", status_code=200)
def update_customer_endpoint(
    customer_id: int, customer_update: CustomerUpdate, session: SessionDep
) -> CustomerResponse:
    return update_customer(customer_id, customer_update, session)


@router.delete("/{customer_id}", status_code=204)
def delete_customer_endpoint(customer_id: int, session: SessionDep):
    """Deactivate the customer's account; refused while reservations are active"""
    deactivate_customer(customer_id, session)
