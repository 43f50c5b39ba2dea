"""
Service detail mapping.

Each service type owns one detail table. A submission's loosely-typed
``serviceDetails`` payload is validated against that type's schema and
mapped to a row for its table; the inverse turns a stored row back into
the camelCase payload the frontend submitted.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from ...models import (
    AirbnbCleaningDetails,
    CommercialCleaningDetails,
    EndOfLeaseCleaningDetails,
    NdisCleaningDetails,
    OnceOffCleaningDetails,
    RegularCleaningDetails,
)
from .exceptions import DetailValidationError, UnknownServiceType
from .schemas import (
    AirbnbCleaningSchema,
    AirbnbExtras,
    CommercialCleaningSchema,
    EndOfLeaseCleaningSchema,
    EndOfLeaseExtras,
    NdisCleaningSchema,
    OnceOffCleaningSchema,
    RegularCleaningSchema,
    ServiceType,
    SteamCounts,
)

logger = logging.getLogger(__name__)


def parse_service_type(tag: Any) -> ServiceType:
    """Resolve a submitted service name to the closed ServiceType enumeration"""
    try:
        return ServiceType(tag)
    except ValueError:
        raise UnknownServiceType(tag) from None


# ============================================================================
# SUBMISSION -> ROW
# ============================================================================


def _regular_record(details: RegularCleaningSchema) -> RegularCleaningDetails:
    return RegularCleaningDetails(
        frequency=details.frequency,
        duration=details.duration,
        special_requests=details.specialRequests or None,
    )


def _once_off_record(details: OnceOffCleaningSchema) -> OnceOffCleaningDetails:
    return OnceOffCleaningDetails(
        duration=details.duration,
        two_cleaners=details.twoCleaners or False,
        special_requests=details.specialRequests or None,
    )


def _ndis_record(details: NdisCleaningSchema) -> NdisCleaningDetails:
    return NdisCleaningDetails(
        frequency=details.frequency,
        duration=details.duration,
        special_requests=details.specialRequests or None,
    )


def _end_of_lease_record(details: EndOfLeaseCleaningSchema) -> EndOfLeaseCleaningDetails:
    steam = details.steamCounts or SteamCounts()
    extras = details.extras or EndOfLeaseExtras()
    return EndOfLeaseCleaningDetails(
        home_size=details.homeSize,
        base_bathrooms=details.baseBathrooms or 0,
        base_toilets=details.baseToilets or 0,
        extra_bathrooms=details.extraBathrooms or 0,
        extra_toilets=details.extraToilets or 0,
        furnished=details.furnished or False,
        study_room=details.studyRoom or False,
        pets=details.pets or False,
        steam_carpet=details.steamCarpet or False,
        steam_bedrooms=steam.bedrooms or 0,
        steam_living_rooms=steam.livingRooms or 0,
        steam_hallway=steam.hallway or False,
        steam_stairs=steam.stairs or False,
        balcony=extras.balcony or False,
        garage=extras.garage or False,
        special_requests=details.specialRequests or None,
    )


def _airbnb_record(details: AirbnbCleaningSchema) -> AirbnbCleaningDetails:
    extras = details.extras or AirbnbExtras()
    return AirbnbCleaningDetails(
        service_type=details.serviceType,
        frequency=details.frequency,
        duration=details.duration,
        linen_change=extras.linenChange or False,
        restock_amenities=extras.restockAmenities or False,
        special_requests=details.specialRequests or None,
    )


def _commercial_record(details: CommercialCleaningSchema) -> CommercialCleaningDetails:
    return CommercialCleaningDetails(
        service_type=details.serviceType,
        frequency=details.frequency,
        hours_per_visit=details.hoursPerVisit,
        staff_count=details.staffCount,
        preferred_time=details.preferredTime,
        special_requests=details.specialRequests or None,
    )


# ============================================================================
# ROW -> PAYLOAD
# ============================================================================


def _regular_payload(record: RegularCleaningDetails) -> dict:
    return {
        "frequency": record.frequency,
        "duration": record.duration,
        "specialRequests": record.special_requests,
    }


def _once_off_payload(record: OnceOffCleaningDetails) -> dict:
    return {
        "duration": record.duration,
        "twoCleaners": record.two_cleaners,
        "specialRequests": record.special_requests,
    }


def _ndis_payload(record: NdisCleaningDetails) -> dict:
    return {
        "frequency": record.frequency,
        "duration": record.duration,
        "specialRequests": record.special_requests,
    }


def _end_of_lease_payload(record: EndOfLeaseCleaningDetails) -> dict:
    return {
        "homeSize": record.home_size,
        "baseBathrooms": record.base_bathrooms,
        "baseToilets": record.base_toilets,
        "extraBathrooms": record.extra_bathrooms,
        "extraToilets": record.extra_toilets,
        "furnished": record.furnished,
        "studyRoom": record.study_room,
        "pets": record.pets,
        "steamCarpet": record.steam_carpet,
        "steamCounts": {
            "bedrooms": record.steam_bedrooms,
            "livingRooms": record.steam_living_rooms,
            "hallway": record.steam_hallway,
            "stairs": record.steam_stairs,
        },
        "extras": {
            "balcony": record.balcony,
            "garage": record.garage,
        },
        "specialRequests": record.special_requests,
    }


def _airbnb_payload(record: AirbnbCleaningDetails) -> dict:
    return {
        "serviceType": record.service_type,
        "frequency": record.frequency,
        "duration": record.duration,
        "extras": {
            "linenChange": record.linen_change,
            "restockAmenities": record.restock_amenities,
        },
        "specialRequests": record.special_requests,
    }


def _commercial_payload(record: CommercialCleaningDetails) -> dict:
    return {
        "serviceType": record.service_type,
        "frequency": record.frequency,
        "hoursPerVisit": record.hours_per_visit,
        "staffCount": record.staff_count,
        "preferredTime": record.preferred_time,
        "specialRequests": record.special_requests,
    }


@dataclass(frozen=True)
class DetailVariant:
    schema: type[BaseModel]
    model: type
    to_record: Callable[[Any], Any]
    to_payload: Callable[[Any], dict]


DETAIL_VARIANTS: dict[ServiceType, DetailVariant] = {
    ServiceType.REGULAR_CLEANING: DetailVariant(
        RegularCleaningSchema, RegularCleaningDetails, _regular_record, _regular_payload
    ),
    ServiceType.ONCE_OFF_CLEANING: DetailVariant(
        OnceOffCleaningSchema, OnceOffCleaningDetails, _once_off_record, _once_off_payload
    ),
    ServiceType.NDIS_CLEANING: DetailVariant(
        NdisCleaningSchema, NdisCleaningDetails, _ndis_record, _ndis_payload
    ),
    ServiceType.END_OF_LEASE_CLEANING: DetailVariant(
        EndOfLeaseCleaningSchema,
        EndOfLeaseCleaningDetails,
        _end_of_lease_record,
        _end_of_lease_payload,
    ),
    ServiceType.AIRBNB_CLEANING: DetailVariant(
        AirbnbCleaningSchema, AirbnbCleaningDetails, _airbnb_record, _airbnb_payload
    ),
    ServiceType.COMMERCIAL_CLEANING: DetailVariant(
        CommercialCleaningSchema,
        CommercialCleaningDetails,
        _commercial_record,
        _commercial_payload,
    ),
}

# Every service type needs a detail table; fail at import rather than on the first booking
_unmapped = set(ServiceType) - set(DETAIL_VARIANTS)
if _unmapped:
    raise RuntimeError(f"No detail mapping for service types: {sorted(s.value for s in _unmapped)}")


def get_variant(service_type: ServiceType) -> DetailVariant:
    return DETAIL_VARIANTS[parse_service_type(service_type)]


def validate_details(service_type: ServiceType, raw_details: Any) -> BaseModel:
    """Validate a raw serviceDetails payload against the service type's schema"""
    variant = get_variant(service_type)
    if raw_details is None:
        raw_details = {}
    if not isinstance(raw_details, dict):
        raise DetailValidationError("Service details must be an object")

    try:
        return variant.schema.model_validate(raw_details)
    except PydanticValidationError as e:
        first_error = e.errors()[0]
        location = ".".join(str(part) for part in first_error.get("loc", ()))
        logger.warning(f"⚠️ Invalid {service_type.value} details at {location}: {first_error.get('msg')}")
        raise DetailValidationError(f"Invalid service details: {location} {first_error.get('msg')}") from e


def map_details(service_type: ServiceType, raw_details: Any):
    """Map a raw serviceDetails payload to an unsaved row for the service type's detail table"""
    details = validate_details(service_type, raw_details)
    return get_variant(service_type).to_record(details)


def load_details(db: Session, service_type: ServiceType, detail_id: int) -> Optional[Any]:
    """Select a stored detail row by service type and id"""
    model = get_variant(service_type).model
    return db.query(model).filter(model.id == detail_id).first()


def details_to_payload(service_type: ServiceType, record) -> dict:
    return get_variant(service_type).to_payload(record)
