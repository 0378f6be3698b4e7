# db/schemas/organization.py
import uuid
from datetime import datetime
from typing import Optional
from pydantic import EmailStr, Field
from formco.db.schemas._base import OrmModel
from formco.db.enums import EducationLevel

class OrganizationBase(OrmModel):
    name: str
    email: EmailStr
    website: Optional[str] = None
    logo: Optional[str] = None

class OrganizationCreate(OrganizationBase): ...
class OrganizationPublic(OrganizationBase):
    id: uuid.UUID
    created_at: datetime

class OrganizationRead(OrganizationPublic):
    secret_code: str

class OrganizerBase(OrmModel):
    name: str
    email: EmailStr
    phone: Optional[str] = None
    department: Optional[str] = None
    position: Optional[str] = None

class OrganizerCreate(OrganizerBase): ...
class OrganizerRead(OrganizerBase):
    id: uuid.UUID
    organization_ids: list[uuid.UUID] = Field(default_factory=list)
    created_at: datetime

class StudentBase(OrmModel):
    name: str
    email: EmailStr
    phone: Optional[str] = None
    education_level: EducationLevel
    year_or_semester: str
    country: str = "Pakistan"
    organization_id: Optional[uuid.UUID] = None

class StudentCreate(StudentBase): ...
class StudentRead(StudentBase):
    id: uuid.UUID
    created_at: datetime
