"""
-------------------------------------------------------------------------
System: KMJ Billing System
Client: Kalloor Muslim Jamaath
Description: Unit tests for household lookup.
-------------------------------------------------------------------------
"""
from django.test import TestCase

from apps.core.exceptions import HouseholdNotFoundException
from apps.members.models import Member, Relation
from apps.members.services import MemberRegistry


class MemberRegistryTests(TestCase):
    """Tests for MemberRegistry.lookup_household."""
    
    def setUp(self):
        Member.objects.create(
            mahal_id='1/2', name='Ayisha', relation=Relation.SPOUSE,
            address='Sheeja Manzil, Kalloor', mobile='7000000001'
        )
        Member.objects.create(
            mahal_id='1/2', name='Abdul Basheer', relation=Relation.HEAD,
            address='Sheeja Manzil, Kalloor', mobile='7909187497'
        )
    
    def test_head_is_preferred(self):
        household = MemberRegistry.lookup_household('1/2')
        
        self.assertEqual(household.name, 'Abdul Basheer')
        self.assertEqual(household.contact_phone, '7909187497')
        self.assertEqual(
            household.composite_address,
            'Abdul Basheer\nSheeja Manzil, Kalloor\nMahal ID: 1/2\nPhone: 7909187497'
        )
    
    def test_falls_back_to_first_active_member(self):
        Member.objects.filter(relation=Relation.HEAD).update(is_active=False)
        
        household = MemberRegistry.lookup_household('1/2')
        
        self.assertEqual(household.name, 'Ayisha')
    
    def test_unknown_household(self):
        with self.assertRaises(HouseholdNotFoundException) as ctx:
            MemberRegistry.lookup_household('9/99')
        self.assertEqual(ctx.exception.http_status, 404)
        self.assertEqual(ctx.exception.details, {'mahal_id': '9/99'})
    
    def test_inactive_household_not_found(self):
        Member.objects.filter(mahal_id='1/2').update(is_active=False)
        with self.assertRaises(HouseholdNotFoundException):
            MemberRegistry.lookup_household('1/2')
