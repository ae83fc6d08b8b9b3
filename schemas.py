"""
Database Schemas

Pydantic models for the MongoDB collections and for the request/response
bodies of each route. Request models forbid unknown fields.

Collections:
- User -> "users"
- Supply -> "supplies"
- Volunteer -> "volunteer"
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class StrictModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


# Collections

class User(BaseModel):
    """Users collection schema (collection name: users)"""
    email: EmailStr = Field(..., description="User email (unique)")
    password: str = Field(..., description="BCrypt hashed password")
    name: str = Field(..., description="Display name")
    role: str = Field("donor", description="Role discriminator, e.g. donor")
    image: Optional[str] = Field(None, description="Avatar URL")
    designation: Optional[str] = Field(None, description="Public title shown on the leaderboard")


class SupplyPost(StrictModel):
    """One update appended to a supply's ``post`` list."""
    content: str = Field(..., min_length=1, description="Update text")
    author: Optional[str] = Field(None, description="Name of the poster")
    email: Optional[EmailStr] = Field(None, description="Email of the poster")
    image: Optional[str] = Field(None, description="Image URL")


class Supply(StrictModel):
    """Supplies collection schema (collection name: supplies)"""
    title: Optional[str] = Field(None, description="What is being supplied")
    category: Optional[str] = Field(None, description="Supply category")
    amount: float = Field(0, ge=0, description="Donated amount, summed on the leaderboard")
    quantity: Optional[str] = Field(None, description="Free-form quantity, e.g. '20 boxes'")
    description: Optional[str] = Field(None, description="Details")
    image: Optional[str] = Field(None, description="Image URL")
    donatedBy: Optional[EmailStr] = Field(None, description="Email of the donating user")
    post: List[SupplyPost] = Field(default_factory=list, description="Appended updates")


class Volunteer(StrictModel):
    """Volunteer collection schema (collection name: volunteer)"""
    name: str = Field(..., min_length=1, description="Full name")
    email: EmailStr = Field(..., description="Volunteer email (unique)")
    phone: Optional[str] = Field(None, description="Phone number")
    location: Optional[str] = Field(None, description="Where the volunteer can help")
    skills: List[str] = Field(default_factory=list, description="Skills offered")
    image: Optional[str] = Field(None, description="Avatar URL")


# Requests

class RegisterPayload(StrictModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=1)
    role: str = "donor"
    image: Optional[str] = None


class LoginPayload(StrictModel):
    email: EmailStr
    password: str


# Responses

class StatusResponse(BaseModel):
    message: str
    timestamp: datetime


class MessageResponse(BaseModel):
    success: bool
    message: str


class TokenResponse(MessageResponse):
    token: str


class MeResponse(BaseModel):
    id: str
    email: EmailStr
    name: Optional[str] = None
    role: Optional[str] = None
    image: Optional[str] = None


class InsertResponse(BaseModel):
    acknowledged: bool
    insertedId: str


class UpdateResponse(BaseModel):
    acknowledged: bool
    matchedCount: int
    modifiedCount: int
    upsertedId: Optional[str] = None


class DeleteResponse(BaseModel):
    acknowledged: bool
    deletedCount: int


class LeaderboardEntry(BaseModel):
    id: str = Field(..., alias="_id")
    name: Optional[str] = None
    designation: Optional[str] = None
    image: Optional[str] = None
    totalDonation: float

    model_config = ConfigDict(populate_by_name=True)
