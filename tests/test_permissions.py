"""Unit tests for app.services.permissions: registry resolution and AND/OR decisions."""

import itertools
import unittest
from unittest.mock import MagicMock

from app.services.permissions import (
    ADMIN_ROLE,
    ALL_PERMISSIONS,
    DEFAULT_ROLE_PERMISSIONS,
    MANAGE_BRANCHES,
    MANAGE_LIBRARY_STUDENTS,
    VIEW_REPORTS,
    PermissionRegistry,
    build_registry,
    is_allowed,
    normalize_required,
)

UNIVERSE = ("a", "b", "c")


def _subsets(items: tuple[str, ...]) -> list[frozenset[str]]:
    return [
        frozenset(combo)
        for size in range(len(items) + 1)
        for combo in itertools.combinations(items, size)
    ]


class TestPermissionRegistry(unittest.TestCase):
    """Effective permissions = role defaults ∪ explicit overrides; unknown role -> empty."""

    def setUp(self) -> None:
        self.registry = PermissionRegistry(roles={"staff": {VIEW_REPORTS}}, version=7)

    def test_known_role(self) -> None:
        self.assertEqual(self.registry.effective_permissions("staff"), frozenset({VIEW_REPORTS}))

    def test_unknown_role_is_empty_set(self) -> None:
        granted = self.registry.effective_permissions("janitor")
        self.assertIsInstance(granted, frozenset)
        self.assertEqual(granted, frozenset())

    def test_missing_role_is_empty_set(self) -> None:
        self.assertEqual(self.registry.effective_permissions(None), frozenset())
        self.assertEqual(self.registry.effective_permissions(""), frozenset())

    def test_overrides_union_with_role(self) -> None:
        granted = self.registry.effective_permissions("staff", [MANAGE_BRANCHES])
        self.assertEqual(granted, frozenset({VIEW_REPORTS, MANAGE_BRANCHES}))

    def test_overrides_for_unknown_role(self) -> None:
        granted = self.registry.effective_permissions("janitor", [MANAGE_BRANCHES])
        self.assertEqual(granted, frozenset({MANAGE_BRANCHES}))

    def test_string_override_rejected(self) -> None:
        with self.assertRaises(TypeError):
            self.registry.effective_permissions("staff", "manage_branches")

    def test_non_string_entries_rejected(self) -> None:
        with self.assertRaises(TypeError):
            self.registry.effective_permissions("staff", [MANAGE_BRANCHES, 3])

    def test_registry_is_immutable(self) -> None:
        with self.assertRaises(TypeError):
            self.registry.roles["staff"] = frozenset({MANAGE_BRANCHES})  # type: ignore[index]
        self.assertEqual(self.registry.version, 7)

    def test_source_mapping_changes_do_not_leak(self) -> None:
        source = {"staff": {VIEW_REPORTS}}
        registry = PermissionRegistry(roles=source)
        source["staff"].add(MANAGE_BRANCHES)
        source["other"] = {MANAGE_BRANCHES}
        self.assertEqual(registry.role_permissions("staff"), frozenset({VIEW_REPORTS}))
        self.assertEqual(registry.role_permissions("other"), frozenset())


class TestBuildRegistry(unittest.TestCase):
    """build_registry merges ROLE_PERMISSIONS from settings over the defaults."""

    def test_defaults_only(self) -> None:
        settings = MagicMock()
        settings.ROLE_PERMISSIONS = {}
        settings.ROLE_PERMISSIONS_VERSION = 1
        registry = build_registry(settings)
        self.assertEqual(registry.role_permissions(ADMIN_ROLE), ALL_PERMISSIONS)
        self.assertEqual(registry.role_permissions("staff"), DEFAULT_ROLE_PERMISSIONS["staff"])

    def test_configured_roles_added_and_replaced(self) -> None:
        settings = MagicMock()
        settings.ROLE_PERMISSIONS = {
            "accountant": ["view_reports", "manage_expenses"],
            "staff": ["view_reports"],
        }
        settings.ROLE_PERMISSIONS_VERSION = 3
        registry = build_registry(settings)
        self.assertEqual(registry.version, 3)
        self.assertEqual(
            registry.role_permissions("accountant"),
            frozenset({"view_reports", "manage_expenses"}),
        )
        self.assertEqual(registry.role_permissions("staff"), frozenset({"view_reports"}))
        self.assertEqual(registry.role_permissions(ADMIN_ROLE), ALL_PERMISSIONS)

    def test_known_permissions_include_role_defined_names(self) -> None:
        settings = MagicMock()
        settings.ROLE_PERMISSIONS = {"librarian": ["manage_catalogue"]}
        settings.ROLE_PERMISSIONS_VERSION = 2
        registry = build_registry(settings)
        self.assertIn("manage_catalogue", registry.known_permissions)
        self.assertTrue(ALL_PERMISSIONS <= registry.known_permissions)
        self.assertNotIn("manage_catalogue", ALL_PERMISSIONS)


class TestIsAllowed(unittest.TestCase):
    """AND: required ⊆ granted. OR: required ∩ granted ≠ ∅."""

    def test_and_matches_subset_for_all_small_sets(self) -> None:
        for granted in _subsets(UNIVERSE):
            for required in _subsets(UNIVERSE):
                if not required:
                    continue
                with self.subTest(granted=sorted(granted), required=sorted(required)):
                    self.assertEqual(
                        is_allowed(granted, sorted(required), "AND"),
                        required <= granted,
                    )

    def test_or_matches_intersection_for_all_small_sets(self) -> None:
        for granted in _subsets(UNIVERSE):
            for required in _subsets(UNIVERSE):
                if not required:
                    continue
                with self.subTest(granted=sorted(granted), required=sorted(required)):
                    self.assertEqual(
                        is_allowed(granted, sorted(required), "OR"),
                        bool(required & granted),
                    )

    def test_default_mode_is_and(self) -> None:
        self.assertFalse(is_allowed(frozenset({"a"}), ["a", "b"]))
        self.assertTrue(is_allowed(frozenset({"a", "b"}), ["a", "b"]))

    def test_empty_requirement_never_allows(self) -> None:
        self.assertFalse(is_allowed(ALL_PERMISSIONS, [], "AND"))
        self.assertFalse(is_allowed(ALL_PERMISSIONS, [], "OR"))

    def test_unknown_role_denied_any_requirement(self) -> None:
        registry = PermissionRegistry(roles=DEFAULT_ROLE_PERMISSIONS)
        granted = registry.effective_permissions("ghost")
        for name in sorted(ALL_PERMISSIONS):
            self.assertFalse(is_allowed(granted, [name], "AND"))
            self.assertFalse(is_allowed(granted, [name], "OR"))

    def test_staff_scenario(self) -> None:
        registry = PermissionRegistry(roles={"staff": {VIEW_REPORTS}})
        required = [MANAGE_BRANCHES, MANAGE_LIBRARY_STUDENTS]
        self.assertFalse(is_allowed(registry.effective_permissions("staff"), required, "OR"))
        granted = registry.effective_permissions("staff", [MANAGE_LIBRARY_STUDENTS])
        self.assertTrue(is_allowed(granted, required, "OR"))


class TestNormalizeRequired(unittest.TestCase):
    """Route misconfiguration fails when the dependency is built, not per request."""

    def test_returns_tuple_in_order(self) -> None:
        self.assertEqual(normalize_required(["b", "a"], "AND"), ("b", "a"))

    def test_empty_list(self) -> None:
        with self.assertRaises(ValueError):
            normalize_required([], "AND")

    def test_bare_string(self) -> None:
        with self.assertRaises(ValueError):
            normalize_required("manage_branches", "AND")

    def test_unknown_mode(self) -> None:
        with self.assertRaises(ValueError):
            normalize_required(["a"], "XOR")

    def test_empty_name(self) -> None:
        with self.assertRaises(ValueError):
            normalize_required(["a", ""], "OR")


if __name__ == "__main__":
    unittest.main()
