"""Data contracts for call lifecycle endpoints.

Request fields are optional at the schema level so missing values reach the
service layer and are reported together as a 400.
"""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class CreateCallRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    booking_id: str | None = Field(default=None, alias="bookingId")
    professional_id: str | None = Field(default=None, alias="professionalId")
    patient_id: str | None = Field(default=None, alias="patientId")
    professional_name: str | None = Field(default=None, alias="professionalName")
    patient_name: str | None = Field(default=None, alias="patientName")


class CreateCallResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    call_id: str = Field(..., alias="callId")
    success: bool = True
    created: bool = Field(default=False, description="Whether this request created the call")
    timestamp: datetime


class EndCallRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    call_id: str | None = Field(default=None, alias="callId")


class EndCallResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    call_id: str = Field(..., alias="callId")
    forwarded: bool = Field(default=False, description="Whether the call was also ended at Stream")
