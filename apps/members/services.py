"""
-------------------------------------------------------------------------
System: KMJ Billing System
Client: Kalloor Muslim Jamaath
Description: Household lookup used by the billing ledger.
-------------------------------------------------------------------------
"""
from dataclasses import dataclass

from apps.core.exceptions import HouseholdNotFoundException
from apps.members.models import Member, Relation


@dataclass(frozen=True)
class Household:
    """Billing view of a household: who pays and where they live."""
    mahal_id: str
    name: str
    address: str
    contact_phone: str

    @property
    def composite_address(self) -> str:
        """Address block printed on receipts."""
        return (
            f"{self.name}\n{self.address}\n"
            f"Mahal ID: {self.mahal_id}\nPhone: {self.contact_phone}"
        )


class MemberRegistry:
    """Read-only access to the member registry."""

    @staticmethod
    def lookup_household(mahal_id: str) -> Household:
        """
        Resolve a household to its display name, address and phone.

        The household head is preferred; otherwise the first active
        member registered under the Mahal ID is used.

        Args:
            mahal_id: Household identifier (ward/house).

        Returns:
            Household record.

        Raises:
            HouseholdNotFoundException: If no active member has this Mahal ID.
        """
        members = Member.objects.filter(mahal_id=mahal_id, is_active=True)
        member = (
            members.filter(relation=Relation.HEAD).order_by('id').first()
            or members.order_by('id').first()
        )
        if member is None:
            raise HouseholdNotFoundException(details={'mahal_id': mahal_id})

        return Household(
            mahal_id=member.mahal_id,
            name=member.name,
            address=member.address,
            contact_phone=member.mobile,
        )
