"""
Unit tests for the access control catalog.
"""

import dataclasses

import pytest

from warden.core.catalog import load_catalog


@pytest.fixture
def catalog():
    return load_catalog()


class TestCatalogLookups:
    def test_permission_lookup(self, catalog):
        assert catalog.permission("user", "read") == "User Read"
        assert catalog.permission("own_profile", "password_change") == "Own Password Change"
        assert catalog.permission("role", "assign_to_user") == "Role Assign to User"

    def test_unknown_permission_raises(self, catalog):
        with pytest.raises(KeyError):
            catalog.permission("user", "fly")

    def test_role_names(self, catalog):
        assert catalog.role("super_admin") == "Super Admin"
        assert catalog.role("admin") == "Admin"
        assert catalog.role("user") == "User"

    def test_group_display_name(self, catalog):
        assert catalog.groups["own_profile"].display_name == "Own Profile"

    def test_message(self, catalog):
        assert catalog.message("token_required") == "Token is required."
        assert catalog.message("not_deleted") == "User is not deleted."


class TestRoleGrants:
    def test_super_admin_gets_everything(self, catalog):
        assert set(catalog.permissions_for_role("super_admin")) == set(
            catalog.all_permissions()
        )

    def test_admin_gets_user_group(self, catalog):
        granted = catalog.permissions_for_role("admin")
        assert set(granted) == set(catalog.group_permissions("user"))
        assert "Role Create" not in granted

    def test_user_gets_own_profile_group(self, catalog):
        granted = catalog.permissions_for_role("user")
        assert "Own Profile Read" in granted
        assert "User Read" not in granted

    def test_unknown_role_gets_nothing(self, catalog):
        assert catalog.permissions_for_role("ghost") == ()

    def test_permission_names_are_unique(self, catalog):
        names = catalog.all_permissions()
        assert len(names) == len(set(names))


class TestImmutability:
    def test_catalog_is_cached(self):
        assert load_catalog() is load_catalog()

    def test_mappings_are_read_only(self, catalog):
        with pytest.raises(TypeError):
            catalog.roles["intruder"] = "Intruder"
        with pytest.raises(TypeError):
            catalog.groups["user"].permissions["read"] = "Anything"

    def test_fields_are_frozen(self, catalog):
        with pytest.raises(dataclasses.FrozenInstanceError):
            catalog.roles = {}
