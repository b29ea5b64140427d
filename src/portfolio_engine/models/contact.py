"""
Contact Data Models

Pydantic model for HPD registration contacts.
"""
from pydantic import BaseModel, Field


HEAD_OFFICER_TYPES = ("HeadOfficer", "IndividualOwner")


class ContactRecord(BaseModel):
    """
    Registration contact tied to one building.

    Attributes:
        bbl: Parcel identifier of the registered building
        contact_type: Contact role (HeadOfficer, IndividualOwner, Agent, ...)
        name: Individual name, uppercase
        corporate_name: Corporation name, uppercase
        business_address: Business mailing address, uppercase
    """

    bbl: str = Field(..., description="Parcel identifier")
    contact_type: str = Field("", description="Contact role")
    name: str = Field("", description="Normalized individual name")
    corporate_name: str = Field("", description="Normalized corporate name")
    business_address: str = Field("", description="Normalized business address")

    def is_head_officer(self) -> bool:
        """Check if contact is a head officer or individual owner."""
        return self.contact_type in HEAD_OFFICER_TYPES

    def to_dict(self) -> dict:
        """Convert to dictionary for backward compatibility."""
        return {
            "bbl": self.bbl,
            "contact_type": self.contact_type,
            "name": self.name,
            "corporate_name": self.corporate_name,
            "business_address": self.business_address,
        }

    class Config:
        """Pydantic model configuration."""
        frozen = True
