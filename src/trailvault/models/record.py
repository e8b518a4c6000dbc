# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Raw CloudTrail record model as delivered by the audit source."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from trailvault.core.exceptions import MalformedRecord


class UserIdentity(BaseModel):
    """The ``userIdentity`` block of a CloudTrail record."""

    model_config = ConfigDict(populate_by_name=True, extra="allow", frozen=True)

    type: str | None = None
    user_name: str | None = Field(default=None, alias="userName")
    principal_id: str | None = Field(default=None, alias="principalId")
    arn: str | None = None


class ResourceRef(BaseModel):
    """One entry of the ``resources`` array.

    CloudTrail writes ``ARN`` while some producers emit ``arn``; both are accepted.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow", frozen=True)

    arn: str = Field(default="", validation_alias=AliasChoices("ARN", "arn"))
    type: str | None = None


class RawAuditRecord(BaseModel):
    """An immutable audit record, field names follow the CloudTrail schema."""

    model_config = ConfigDict(populate_by_name=True, extra="allow", frozen=True)

    request_id: str = Field(alias="requestID", min_length=1)
    event_name: str = Field(default="", alias="eventName")
    event_time: str | None = Field(default=None, alias="eventTime")
    event_source: str = Field(default="", alias="eventSource")
    user_identity: UserIdentity | None = Field(default=None, alias="userIdentity")
    source_ip: str | None = Field(default=None, alias="sourceIPAddress")
    user_agent: str | None = Field(default=None, alias="userAgent")
    request_parameters: dict[str, Any] | None = Field(default=None, alias="requestParameters")
    response_elements: dict[str, Any] | None = Field(default=None, alias="responseElements")
    resources: list[ResourceRef] = Field(default_factory=list)
    region: str | None = Field(default=None, alias="awsRegion")
    error_code: str | None = Field(default=None, alias="errorCode")
    error_message: str | None = Field(default=None, alias="errorMessage")

    @classmethod
    def from_raw(cls, obj: object) -> RawAuditRecord:
        """Validate one decoded JSON record.

        Raises:
            MalformedRecord: If *obj* is not a mapping, fails validation, or
                carries no ``requestID`` to deduplicate on.
        """
        if isinstance(obj, RawAuditRecord):
            return obj
        if not isinstance(obj, Mapping):
            raise MalformedRecord(f"Expected a JSON object, got {type(obj).__name__}")
        try:
            return cls.model_validate(dict(obj))
        except ValidationError as exc:
            fields = ", ".join(
                ".".join(str(p) for p in err["loc"]) for err in exc.errors()
            )
            raise MalformedRecord(f"Invalid audit record ({fields})") from exc

    @property
    def resource_arns(self) -> list[str]:
        return [r.arn for r in self.resources if r.arn]
