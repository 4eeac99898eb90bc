import unittest
from unittest.mock import patch

import jwt

from inventory_ledger.config import Settings
from inventory_ledger.core.errors import AuthorizationError
from inventory_ledger.core.security import Actor, authenticate_request, authorize

SECRET = "test-secret-that-is-long-enough-for-hs256"


def settings(**overrides):
    values = {
        "API_KEYS": "staff-key-1, staff-key-2",
        "ADMIN_API_KEY": "admin-key",
        "JWT_SECRET": SECRET,
    }
    values.update(overrides)
    return Settings(**values)


class AuthenticateRequestTest(unittest.TestCase):
    def authenticate(self, api_key=None, authorization=None, **overrides):
        with patch("inventory_ledger.core.security.get_settings", return_value=settings(**overrides)):
            return authenticate_request(api_key, authorization)

    def test_api_keys_map_to_roles(self):
        staff = self.authenticate(api_key="staff-key-2")
        admin = self.authenticate(api_key="admin-key")
        self.assertEqual(staff.role, "staff")
        self.assertTrue(staff.id.startswith("api-key:"))
        self.assertNotIn("staff-key-2", staff.id)
        self.assertEqual(admin.role, "admin")

    def test_unknown_key_is_anonymous(self):
        self.assertIsNone(self.authenticate(api_key="nope"))
        self.assertIsNone(self.authenticate())

    def test_bearer_token(self):
        token = jwt.encode({"sub": "user-7", "role": "viewer"}, SECRET, algorithm="HS256")
        actor = self.authenticate(authorization="Bearer {}".format(token))
        self.assertEqual(actor, Actor(id="user-7", role="viewer"))

    def test_token_without_role_defaults_to_staff(self):
        token = jwt.encode({"sub": "user-8"}, SECRET, algorithm="HS256")
        actor = self.authenticate(authorization="Bearer {}".format(token))
        self.assertEqual(actor.role, "staff")

    def test_bad_token(self):
        token = jwt.encode({"sub": "user-7"}, "another-secret-that-is-long-enough", algorithm="HS256")
        self.assertIsNone(self.authenticate(authorization="Bearer {}".format(token)))
        with self.assertRaises(AuthorizationError):
            self.authenticate(authorization="Bearer {}".format(token), JWT_REQUIRED=True)

    def test_api_key_ignored_when_jwt_required(self):
        self.assertIsNone(self.authenticate(api_key="admin-key", JWT_REQUIRED=True))


class AuthorizeTest(unittest.TestCase):
    def test_anonymous_is_refused(self):
        with self.assertRaises(AuthorizationError):
            authorize(None, "VIEW_INVENTORY")

    def test_staff(self):
        staff = Actor(id="u1", role="staff")
        authorize(staff, "ADD_STOCK_MOVEMENT")
        authorize(staff, "UPDATE_PRODUCT")
        for action in ("DEACTIVATE_PRODUCT", "DELETE_PRODUCT", "RECORD_SNAPSHOT"):
            with self.subTest(action=action):
                with self.assertRaises(AuthorizationError):
                    authorize(staff, action)

    def test_viewer_can_only_read(self):
        viewer = Actor(id="u2", role="viewer")
        authorize(viewer, "VIEW_INVENTORY")
        with self.assertRaises(AuthorizationError) as ctx:
            authorize(viewer, "ADD_STOCK_MOVEMENT")
        self.assertEqual(ctx.exception.code, "FORBIDDEN")

    def test_admin_can_do_everything(self):
        admin = Actor(id="root", role="admin")
        for action in ("ADD_STOCK_MOVEMENT", "DEACTIVATE_PRODUCT", "RECORD_SNAPSHOT"):
            authorize(admin, action)


if __name__ == "__main__":
    unittest.main()
