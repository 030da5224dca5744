"""Pydantic schemas for the payloads exchanged with the reservations service.

Schemas only check shape; turning a payload into a domain entity (and the
invariant checks that go with it) happens in :mod:`infrastructure.transformers`.
"""

from __future__ import annotations

from typing import Any, Generic, List, Optional, TypeVar, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter

DataT = TypeVar("DataT")


class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra='ignore')


class ReservationStateWire(WireModel):
    id: Optional[int] = None
    name: Optional[str] = Field(default=None, validation_alias=AliasChoices('name', 'state'))


class TimeSlotWire(WireModel):
    id: int
    start_time: str = Field(alias='startTime')
    end_time: str = Field(alias='endTime')


class NeighborhoodWire(WireModel):
    id: int
    name: str = ""


class ScenarioWire(WireModel):
    id: int
    name: str = ""
    address: Optional[str] = None
    neighborhood: Optional[NeighborhoodWire] = None


class SubScenarioWire(WireModel):
    id: Optional[int] = None
    name: str = ""
    has_cost: Optional[bool] = Field(default=False, alias='hasCost')
    scenario_id: Optional[int] = Field(default=None, alias='scenarioId')
    scenario_name: Optional[str] = Field(default=None, alias='scenarioName')
    scenario: Optional[ScenarioWire] = None


class UserWire(WireModel):
    id: Optional[int] = None
    first_name: str = Field(default="", validation_alias=AliasChoices('firstName', 'first_name'))
    last_name: str = Field(default="", validation_alias=AliasChoices('lastName', 'last_name'))
    email: str = ""
    phone: Optional[str] = None


class ReservationWire(WireModel):
    """One reservation record as ``GET /reservations`` returns it."""

    id: Optional[int] = None
    type: Optional[str] = None
    sub_scenario_id: Optional[int] = Field(default=None, alias='subScenarioId')
    sub_scenario: Optional[SubScenarioWire] = Field(default=None, alias='subScenario')
    user_id: Optional[int] = Field(default=None, alias='userId')
    user: Optional[UserWire] = None
    initial_date: Optional[str] = Field(
        default=None, validation_alias=AliasChoices('initialDate', 'reservationDate')
    )
    final_date: Optional[str] = Field(default=None, alias='finalDate')
    week_days: Optional[List[int]] = Field(
        default=None, validation_alias=AliasChoices('weekDays', 'weekdays')
    )
    comments: Optional[str] = None
    reservation_state_id: Optional[int] = Field(default=None, alias='reservationStateId')
    reservation_state: Optional[ReservationStateWire] = Field(default=None, alias='reservationState')
    total_instances: Optional[int] = Field(default=None, alias='totalInstances')
    timeslots: Optional[List[TimeSlotWire]] = Field(
        default=None, validation_alias=AliasChoices('timeslots', 'timeSlots')
    )
    time_slot: Optional[TimeSlotWire] = Field(default=None, alias='timeSlot')
    created_at: Optional[str] = Field(default=None, alias='createdAt')
    updated_at: Optional[str] = Field(default=None, alias='updatedAt')


class PageMetaWire(WireModel):
    page: int = 1
    limit: int = 0
    total_items: int = Field(default=0, validation_alias=AliasChoices('totalItems', 'total'))
    total_pages: int = Field(default=0, alias='totalPages')


class Envelope(WireModel, Generic[DataT]):
    """``{statusCode, message, data, meta?}`` wrapper around every response."""

    status_code: Optional[int] = Field(default=None, alias='statusCode')
    message: Optional[str] = None
    data: DataT
    meta: Optional[PageMetaWire] = None


class ReservationStateOptionWire(WireModel):
    id: int
    name: str = Field(validation_alias=AliasChoices('name', 'state'))


class AvailabilitySlotWire(WireModel):
    id: int
    start_time: str = Field(alias='startTime')
    end_time: str = Field(alias='endTime')
    is_available: bool = Field(
        validation_alias=AliasChoices('isAvailableInAllDates', 'isAvailableAcrossAllDates')
    )


class AvailabilityStatsWire(WireModel):
    total_dates: int = Field(alias='totalDates')
    total_timeslots: int = Field(alias='totalTimeslots')
    total_slots: int = Field(alias='totalSlots')
    available_slots: int = Field(alias='availableSlots')
    occupied_slots: int = Field(alias='occupiedSlots')
    global_availability_percentage: float = Field(alias='globalAvailabilityPercentage')
    dates_with_full_availability: int = Field(alias='datesWithFullAvailability')
    dates_with_no_availability: int = Field(alias='datesWithNoAvailability')


class AvailabilityWire(WireModel):
    sub_scenario_id: int = Field(alias='subScenarioId')
    calculated_dates: List[str] = Field(default_factory=list, alias='calculatedDates')
    time_slots: List[AvailabilitySlotWire] = Field(default_factory=list, alias='timeSlots')
    stats: AvailabilityStatsWire
    queried_at: Optional[str] = Field(default=None, alias='queriedAt')


class CreatedReservationWire(WireModel):
    """``POST /reservations`` answer; only the id and state are relied on."""

    id: int
    total_instances: Optional[int] = Field(default=None, alias='totalInstances')
    reservation_state_id: Optional[int] = Field(default=None, alias='reservationStateId')


class PaymentProofWire(WireModel):
    id: int
    reservation_id: int = Field(alias='reservationId')
    file_url: str = Field(default="", validation_alias=AliasChoices('fileUrl', 'url', 'filePath'))
    original_file_name: str = Field(default="", alias='originalFileName')
    mime_type: str = Field(default="", alias='mimeType')
    file_size: int = Field(default=0, alias='fileSize')
    uploaded_by: Optional[int] = Field(
        default=None, validation_alias=AliasChoices('uploadedByUserId', 'uploadedBy')
    )
    created_at: Optional[str] = Field(default=None, alias='createdAt')


class CatalogItemWire(WireModel):
    """Minimal ``{id, name}`` entry used by the dashboard catalogs."""

    id: int
    name: str = ""
    scenario_id: Optional[int] = Field(default=None, alias='scenarioId')


class FacilityImageWire(WireModel):
    id: int
    path: str = Field(default="", validation_alias=AliasChoices('path', 'url'))
    is_feature: bool = Field(default=False, alias='isFeature')
    display_order: int = Field(default=0, alias='displayOrder')


ReservationPayload = Union[List[ReservationWire], ReservationWire]

RESERVATION_PAYLOAD = TypeAdapter(ReservationPayload)
RESERVATION_PAGE = TypeAdapter(Envelope[List[ReservationWire]])
RESERVATION_SINGLE = TypeAdapter(Envelope[ReservationWire])
RESERVATION_STATES = TypeAdapter(Envelope[List[ReservationStateOptionWire]])
AVAILABILITY = TypeAdapter(Envelope[AvailabilityWire])
CREATED_RESERVATION = TypeAdapter(Envelope[CreatedReservationWire])
PAYMENT_PROOFS = TypeAdapter(Envelope[List[PaymentProofWire]])
PAYMENT_PROOF = TypeAdapter(Envelope[PaymentProofWire])
CATALOG = TypeAdapter(Envelope[List[CatalogItemWire]])
FACILITY_IMAGES = TypeAdapter(Envelope[List[FacilityImageWire]])


def unwrap_data(payload: Any) -> Any:
    """Return ``payload['data']`` for enveloped bodies, else the body itself."""

    if isinstance(payload, dict) and 'data' in payload:
        return payload['data']
    return payload
