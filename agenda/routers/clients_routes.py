# agenda/routers/clients_routes.py

from typing import List, Optional

from fastapi import APIRouter, Depends

from agenda.booking import BookingService
from agenda.deps import get_booking_service
from agenda.schemas import Client, ClientDetail

router = APIRouter(
    prefix="/businesses/{business_id}/clients",
    tags=["clients"],
)


@router.get("", response_model=List[Client])
def list_clients(
    business_id: str,
    q: Optional[str] = None,
    service: BookingService = Depends(get_booking_service),
):
    return service.clients(business_id, q)


@router.get("/{identity}", response_model=ClientDetail)
def client_detail(
    business_id: str,
    identity: str,
    service: BookingService = Depends(get_booking_service),
):
    return service.client_detail(business_id, identity)
