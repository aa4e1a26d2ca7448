"""Tests for group-based permission checks."""

import pytest

from gadget.permissions import PermissionEvaluator, is_allowed

from slack_fixtures import add_to_group


@pytest.mark.parametrize("groups", [[], ["viewers"], ["deployers", "ops"]])
def test_empty_permissions_allow_everyone(groups):
    assert is_allowed(groups, [])
    assert is_allowed(groups, None)


@pytest.mark.parametrize("groups", [[], ["viewers"]])
def test_wildcard_allows_everyone(groups):
    assert is_allowed(groups, ["*"])
    assert is_allowed(groups, ["deployers", "*"])


@pytest.mark.parametrize("permissions", [[], ["deployers"], ["a", "b"], ["*"]])
def test_global_admins_bypass_checks(permissions):
    assert is_allowed(["globalAdmins"], permissions)


def test_membership_in_listed_group_allows():
    assert is_allowed(["deployers"], ["deployers"])
    assert is_allowed(["viewers", "deployers"], ["admins", "deployers"])


def test_disjoint_groups_deny():
    assert not is_allowed(["viewers"], ["deployers"])
    assert not is_allowed([], ["deployers"])


def test_can_reads_groups_from_store(store):
    evaluator = PermissionEvaluator(store)
    deployer = add_to_group(store, "U_DEPLOYER", "deployers")
    viewer = add_to_group(store, "U_VIEWER", "viewers")
    lonely = store.find_or_create_user("U_LONELY")

    assert evaluator.can(deployer, ["deployers"])
    assert not evaluator.can(viewer, ["deployers"])
    assert not evaluator.can(lonely, ["deployers"])
    assert evaluator.can(lonely, [])
    assert evaluator.can(lonely, ["*"])


def test_can_global_admin(store):
    evaluator = PermissionEvaluator(store)
    admin = add_to_group(store, "U_ADMIN", "globalAdmins")

    assert evaluator.can(admin, ["some_permission"])


def test_can_user_in_multiple_groups(store):
    evaluator = PermissionEvaluator(store)
    add_to_group(store, "U_MULTI", "viewers")
    user = add_to_group(store, "U_MULTI", "deployers")

    assert evaluator.can(user, ("deployers",))
