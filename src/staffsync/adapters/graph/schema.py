"""Pydantic models describing the Microsoft Graph payloads we consume."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class GraphBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class CollectionPage(GraphBaseModel):
    value: list[dict[str, object]] = Field(default_factory=list)
    next_link: str | None = Field(default=None, alias="@odata.nextLink")


class ManagerPayload(GraphBaseModel):
    id: str | None = None
    display_name: str | None = Field(default=None, alias="displayName")
    user_principal_name: str | None = Field(default=None, alias="userPrincipalName")

    _normalize_text = field_validator("display_name", "user_principal_name", mode="before")(
        _blank_to_none
    )


class OnPremisesExtensionAttributes(GraphBaseModel):
    """Extension attributes synced from on-premises AD.

    ``extensionAttribute2`` holds the birth date as ``DDMMYYYY`` and
    ``extensionAttribute15`` the hire date as an LDAP generalized time.
    """

    extension_attribute2: str | None = Field(default=None, alias="extensionAttribute2")
    extension_attribute15: str | None = Field(default=None, alias="extensionAttribute15")

    _normalize_text = field_validator(
        "extension_attribute2", "extension_attribute15", mode="before"
    )(_blank_to_none)


class UserPayload(GraphBaseModel):
    id: str
    display_name: str | None = Field(default=None, alias="displayName")
    user_principal_name: str = Field(alias="userPrincipalName")
    account_enabled: bool = Field(default=False, alias="accountEnabled")
    office_location: str | None = Field(default=None, alias="officeLocation")
    department: str | None = None
    job_title: str | None = Field(default=None, alias="jobTitle")
    employee_hire_date: str | None = Field(default=None, alias="employeeHireDate")
    on_premises_extension_attributes: OnPremisesExtensionAttributes | None = Field(
        default=None, alias="onPremisesExtensionAttributes"
    )
    manager: ManagerPayload | None = None

    _normalize_text = field_validator(
        "display_name",
        "office_location",
        "department",
        "job_title",
        "employee_hire_date",
        mode="before",
    )(_blank_to_none)

    @field_validator("account_enabled", mode="before")
    @classmethod
    def _null_is_disabled(cls, value: object) -> object:
        return False if value is None else value


class ListItemPayload(GraphBaseModel):
    id: str
    fields: dict[str, object] = Field(default_factory=dict)


class CreatedItem(GraphBaseModel):
    id: str


class SitePayload(GraphBaseModel):
    id: str
    display_name: str | None = Field(default=None, alias="displayName")


class ListPayload(GraphBaseModel):
    id: str
    display_name: str | None = Field(default=None, alias="displayName")


class TokenResponse(GraphBaseModel):
    access_token: str
    token_type: str = "Bearer"
    expires_in: int = 3599


class ErrorDetail(GraphBaseModel):
    code: str = "unknown"
    message: str = ""


class ErrorResponse(GraphBaseModel):
    error: ErrorDetail


class TokenErrorResponse(GraphBaseModel):
    error: str
    error_description: str | None = None
