# db/enums.py
import enum

class ActorRole(enum.StrEnum):
    STUDENT = "student"
    ORGANIZER = "organizer"
    ORGANIZATION = "organization"

class CompetitionMode(enum.StrEnum):
    ONLINE = "online"
    ONSITE = "onsite"
    HYBRID = "hybrid"

class CompetitionStatus(enum.StrEnum):
    OPEN = "Open"
    CLOSED = "Closed"
    HAPPENING = "Happening"
    HAPPENED = "Happened"

class AcceptanceStatus(enum.StrEnum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"

class ApplicationField(enum.StrEnum):
    NAME = "name"
    EMAIL = "email"
    INSTITUTE = "institute"
    CONTACT = "contact"
    QUALIFICATION = "qualification"
    RESUME = "resume"

class EducationLevel(enum.StrEnum):
    HIGH_SCHOOL = "high-school"
    COLLEGE = "college"
    HIGHER_ED = "higher-ed"
