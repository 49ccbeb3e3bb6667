"""
-------------------------------------------------------------------------
System: KMJ Billing System
Client: Kalloor Muslim Jamaath
Description: Unit tests for users - roles and household ownership.
-------------------------------------------------------------------------
"""
from django.contrib.auth import get_user_model
from django.test import TestCase

from apps.core.exceptions import HouseholdAccessDeniedException, UnauthorizedRoleException
from apps.users.models import UserRole
from apps.users.permissions import require_admin, require_household_access


User = get_user_model()


class CustomUserTests(TestCase):
    """Tests for CustomUser role helpers."""
    
    def setUp(self):
        self.admin = User.objects.create_user(
            email='admin@kmj.test', password='pass', role=UserRole.ADMIN
        )
        self.member = User.objects.create_user(
            email='Member@KMJ.test', password='pass', mahal_id='5/10'
        )
        self.superuser = User.objects.create_superuser(
            email='root@kmj.test', password='pass'
        )
    
    def test_email_is_login_identifier(self):
        self.assertEqual(User.USERNAME_FIELD, 'email')
        self.assertEqual(self.member.email, 'Member@kmj.test')
        self.assertTrue(self.member.check_password('pass'))
    
    def test_create_user_requires_email(self):
        with self.assertRaises(ValueError):
            User.objects.create_user(email='', password='pass')
    
    def test_roles(self):
        self.assertTrue(self.admin.is_admin())
        self.assertTrue(self.superuser.is_admin())
        self.assertEqual(self.superuser.role, UserRole.ADMIN)
        self.assertFalse(self.member.is_admin())
    
    def test_household_access(self):
        self.assertTrue(self.member.can_access_household('5/10'))
        self.assertFalse(self.member.can_access_household('5/11'))
        self.assertTrue(self.admin.can_access_household('5/11'))
    
    def test_member_without_household_has_no_access(self):
        orphan = User.objects.create_user(email='orphan@kmj.test', password='pass')
        self.assertFalse(orphan.can_access_household(''))
    
    def test_require_admin(self):
        require_admin(self.admin)
        with self.assertRaises(UnauthorizedRoleException):
            require_admin(self.member)
    
    def test_require_household_access(self):
        require_household_access(self.member, '5/10')
        with self.assertRaises(HouseholdAccessDeniedException):
            require_household_access(self.member, '1/1')
