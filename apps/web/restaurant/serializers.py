"""
Pydantic schemas for restaurant registration, restaurants and locations.

Location payloads from the registration wizard use camelCase keys
(urlName, operatingHours, selectedFeatures, address.zipCode); both camelCase
and snake_case are accepted.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from apps.web.accounts.serializers import EMAIL_PATTERN, PHONE_PATTERN, USERNAME_PATTERN

URL_NAME_PATTERN = r"^[a-z0-9-]+$"
TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"

BusinessType = Literal["single", "multi"]
SubscriptionPlan = Literal["starter", "professional", "premium", "enterprise"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Nested structures
# =============================================================================


class AddressSchema(_CamelModel):
    zip_code: str = Field(default="", max_length=10)
    street: str = Field(default="", max_length=255)
    street_number: str = Field(default="", max_length=20)
    complement: str = Field(default="", max_length=255)
    city: str = Field(default="", max_length=100)
    state: str = Field(default="", max_length=50)


class DayHoursSchema(BaseModel):
    """Opening hours for one day."""

    open: str | None = Field(default=None, pattern=TIME_PATTERN)
    close: str | None = Field(default=None, pattern=TIME_PATTERN)
    closed: bool = False

    @model_validator(mode="after")
    def _times_required_when_open(self) -> "DayHoursSchema":
        if not self.closed and not (self.open and self.close):
            raise ValueError("open and close times are required unless closed")
        return self


class OperatingHoursSchema(BaseModel):
    model_config = ConfigDict(extra="forbid")

    monday: DayHoursSchema | None = None
    tuesday: DayHoursSchema | None = None
    wednesday: DayHoursSchema | None = None
    thursday: DayHoursSchema | None = None
    friday: DayHoursSchema | None = None
    saturday: DayHoursSchema | None = None
    sunday: DayHoursSchema | None = None
    holidays: DayHoursSchema | None = None


class LocationSchema(_CamelModel):
    """A location as submitted by the registration wizard or the locations API."""

    name: str = Field(..., min_length=1, max_length=255)
    url_name: str = Field(
        ..., min_length=2, max_length=100, pattern=URL_NAME_PATTERN
    )
    phone: str = Field(default="", pattern=PHONE_PATTERN)
    whatsapp: str = Field(default="", pattern=PHONE_PATTERN)
    address: AddressSchema = Field(default_factory=AddressSchema)
    operating_hours: OperatingHoursSchema = Field(default_factory=OperatingHoursSchema)
    selected_features: list[str] = Field(default_factory=list)
    is_primary: bool = False


class LocationUpdateRequest(_CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    url_name: str | None = Field(
        default=None, min_length=2, max_length=100, pattern=URL_NAME_PATTERN
    )
    phone: str | None = Field(default=None, pattern=PHONE_PATTERN)
    whatsapp: str | None = Field(default=None, pattern=PHONE_PATTERN)
    address: AddressSchema | None = None
    operating_hours: OperatingHoursSchema | None = None
    selected_features: list[str] | None = None


# =============================================================================
# Registration
# =============================================================================


class OwnerSchema(_CamelModel):
    full_name: str = Field(..., min_length=2, max_length=255)
    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=255)
    password: str = Field(..., min_length=8, max_length=128)
    phone: str = Field(default="", pattern=PHONE_PATTERN)
    whatsapp: str = Field(default="", pattern=PHONE_PATTERN)
    username: str | None = Field(default=None, pattern=USERNAME_PATTERN)


class RestaurantDetailsSchema(_CamelModel):
    restaurant_name: str = Field(..., min_length=2, max_length=255)
    restaurant_url_name: str = Field(
        ..., min_length=2, max_length=100, pattern=URL_NAME_PATTERN
    )
    business_type: BusinessType = "single"
    cuisine_type: str = Field(default="", max_length=100)
    website: str = Field(default="", max_length=255)
    description: str = Field(default="", max_length=1000)
    subscription_plan: SubscriptionPlan = "starter"
    marketing_consent: bool = False
    terms_accepted: bool

    @field_validator("terms_accepted")
    @classmethod
    def _terms_must_be_accepted(cls, value: bool) -> bool:
        if not value:
            raise ValueError("Terms and conditions must be accepted")
        return value


class BillingAddressSchema(AddressSchema):
    same_as_restaurant: bool = False


class PaymentSchema(_CamelModel):
    """Card already tokenized by Stripe.js in the browser."""

    payment_method_token: str = Field(..., pattern=r"^pm_[A-Za-z0-9_]+$")
    cardholder_name: str = Field(default="", max_length=255)


class RegistrationRequest(_CamelModel):
    """Request body for POST /auth/register and POST /restaurants."""

    owner: OwnerSchema
    restaurant: RestaurantDetailsSchema
    locations: list[LocationSchema] = Field(..., min_length=1)
    billing_address: BillingAddressSchema | None = None
    payment: PaymentSchema | None = None


class RestaurantUpdateRequest(_CamelModel):
    """Request body for PUT /restaurants/{id}. Omitted fields are unchanged."""

    restaurant_name: str | None = Field(default=None, min_length=2, max_length=255)
    restaurant_url_name: str | None = Field(
        default=None, min_length=2, max_length=100, pattern=URL_NAME_PATTERN
    )
    owner_name: str | None = Field(default=None, min_length=2, max_length=255)
    email: str | None = Field(default=None, pattern=EMAIL_PATTERN, max_length=255)
    phone: str | None = Field(default=None, pattern=PHONE_PATTERN)
    whatsapp: str | None = Field(default=None, pattern=PHONE_PATTERN)
    business_type: BusinessType | None = None
    cuisine_type: str | None = Field(default=None, max_length=100)
    website: str | None = Field(default=None, max_length=255)
    description: str | None = Field(default=None, max_length=1000)
    subscription_plan: SubscriptionPlan | None = None
    marketing_consent: bool | None = None
    status: Literal["pending", "active", "inactive"] | None = None
