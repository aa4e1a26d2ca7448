"""Tests for the SQLite user/group store."""

import threading

from gadget.storage import UserStore


def test_find_or_create_user_is_stable(store):
    first = store.find_or_create_user("U123")
    second = store.find_or_create_user("U123")

    assert first == second
    assert first.uuid == "U123"
    assert store.find_user("U123") == first
    assert store.find_user("U_MISSING") is None


def test_find_or_create_group(store):
    group = store.find_or_create_group("deployers")

    assert store.find_or_create_group("deployers") == group
    assert store.find_group("deployers") == group
    assert store.find_group("nope") is None


def test_membership_add_and_remove(store):
    user = store.find_or_create_user("U1")
    group = store.find_or_create_group("ops")

    store.add_member(group, user)
    store.add_member(group, user)
    assert [g.name for g in store.groups_of(user)] == ["ops"]
    assert store.members_of(group) == [user]

    assert store.remove_member(group, user) is True
    assert store.remove_member(group, user) is False
    assert store.groups_of(user) == []


def test_groups_of_sorted_by_name(store):
    user = store.find_or_create_user("U1")
    for name in ["zeta", "alpha", "mid"]:
        store.add_member(store.find_or_create_group(name), user)

    assert [g.name for g in store.groups_of(user)] == ["alpha", "mid", "zeta"]
    assert [g.name for g in store.all_groups()] == ["alpha", "mid", "zeta"]


def test_replace_members(store):
    group = store.find_or_create_group("admins")
    old = store.find_or_create_user("U_OLD")
    new = store.find_or_create_user("U_NEW")
    store.add_member(group, old)

    store.replace_members(group, [new])

    assert store.members_of(group) == [new]
    assert store.groups_of(old) == []


def test_sync_group_sets_exact_membership(store):
    store.sync_group("globalAdmins", ["U1", "U2"])
    group = store.sync_group("globalAdmins", ["U2", "U3"])

    assert [u.uuid for u in store.members_of(group)] == ["U2", "U3"]


def test_data_survives_new_store_instance(tmp_path):
    path = tmp_path / "nested" / "gadget.db"
    UserStore(path).sync_group("ops", ["U1"])

    reopened = UserStore(path)
    user = reopened.find_user("U1")
    assert [g.name for g in reopened.groups_of(user)] == ["ops"]


def test_concurrent_find_or_create_yields_one_user(store):
    results = []
    barrier = threading.Barrier(6)

    def create():
        barrier.wait()
        results.append(store.find_or_create_user("U_RACE"))

    threads = [threading.Thread(target=create) for _ in range(6)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len({user.id for user in results}) == 1
