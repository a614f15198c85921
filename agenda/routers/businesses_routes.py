# agenda/routers/businesses_routes.py

from datetime import date

from fastapi import APIRouter, Depends

from agenda.booking import BookingService
from agenda.data import DEFAULT_HOURS, DEFAULT_SERVICES, shop_settings
from agenda.deps import get_booking_service, get_config
from agenda.schemas import AvailabilityResponse, Business, BusinessConfig, DashboardStats
from agenda.store import SqlBusinessConfig

router = APIRouter(
    prefix="/businesses",
    tags=["businesses"],
)


@router.put("/{business_id}", response_model=Business)
def save_business(
    business_id: str,
    config: BusinessConfig,
    provider: SqlBusinessConfig = Depends(get_config),
):
    # Missing hours/services fall back to the defaults for the business type
    values = config.model_dump(exclude={"hours", "services", "timezone"})
    business = Business(
        id=business_id,
        timezone=config.timezone or shop_settings["timezone"],
        hours=config.hours if config.hours is not None else DEFAULT_HOURS,
        services=(
            config.services
            if config.services is not None
            else DEFAULT_SERVICES[config.business_type.value]
        ),
        **values,
    )
    return provider.save_business(business)


@router.get("/{business_id}", response_model=Business)
def get_business(
    business_id: str,
    provider: SqlBusinessConfig = Depends(get_config),
):
    return provider.get_business(business_id)


@router.get("/{business_id}/availability", response_model=AvailabilityResponse)
def business_availability(
    business_id: str,
    date: date,
    service_id: str,
    service: BookingService = Depends(get_booking_service),
):
    available = service.availability(business_id, date, service_id)
    return {
        "business_id": business_id,
        "date": date,
        "service_id": service_id,
        "available_starts": available,
    }


@router.get("/{business_id}/stats", response_model=DashboardStats)
def business_stats(
    business_id: str,
    service: BookingService = Depends(get_booking_service),
):
    return service.stats(business_id)
