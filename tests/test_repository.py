"""
Tests for the in-memory user / preference repository.

Correctness is asserted for sequential call order.  ``TestConcurrentCalls``
only covers interleaving on a single event loop under ``asyncio.gather``.
"""

import asyncio
from dataclasses import asdict
from unittest.mock import patch

import pytest

from auth.password import hash_password, verify_password
from utils.errors import ValidationError


class TestUsers:
    @pytest.mark.asyncio
    async def test_register_returns_public_view(self, repo):
        user = await repo.register("A", "a@x.com", "p1")
        assert asdict(user) == {"id": 1, "name": "A", "email": "a@x.com", "preferences": []}
        assert "password" not in asdict(user)
        assert "password_hash" not in asdict(user)

    @pytest.mark.asyncio
    async def test_ids_are_sequential(self, repo):
        first = await repo.register("A", "a@x.com", "p1")
        second = await repo.register("B", "b@x.com", "p2")
        assert (first.id, second.id) == (1, 2)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name,email,password", [
        ("", "a@x.com", "p1"),
        ("A", "", "p1"),
        ("A", "a@x.com", ""),
    ])
    async def test_register_requires_all_fields(self, repo, name, email, password):
        with pytest.raises(ValidationError):
            await repo.register(name, email, password)
        assert repo.list_all() == []

    @pytest.mark.asyncio
    async def test_password_is_hashed(self, repo):
        await repo.register("A", "a@x.com", "p1")
        record = repo.find_by_email("a@x.com")
        assert record.password_hash != "p1"
        assert verify_password("p1", record.password_hash)

    @pytest.mark.asyncio
    async def test_duplicate_email_resolves_to_first(self, repo):
        await repo.register("A", "dup@x.com", "p1")
        await repo.register("B", "dup@x.com", "p2")
        assert repo.find_by_email("dup@x.com").id == 1
        assert await repo.authenticate("dup@x.com", "p1") is not None
        assert await repo.authenticate("dup@x.com", "p2") is None

    @pytest.mark.asyncio
    async def test_authenticate(self, repo):
        await repo.register("A", "a@x.com", "p1")
        assert (await repo.authenticate("a@x.com", "p1")).id == 1
        assert await repo.authenticate("a@x.com", "wrong") is None
        assert await repo.authenticate("nobody@x.com", "p1") is None

    @pytest.mark.asyncio
    async def test_list_all_in_insertion_order(self, repo):
        for i in range(3):
            await repo.register(f"U{i}", f"u{i}@x.com", "pw")
        assert [u.name for u in repo.list_all()] == ["U0", "U1", "U2"]

    def test_get_by_id_absent(self, repo):
        assert repo.get_by_id(42) is None

    @pytest.mark.asyncio
    async def test_update_partial(self, repo):
        await repo.register("A", "a@x.com", "p1")
        updated = await repo.update(1, email="new@x.com")
        assert updated.name == "A"
        assert updated.email == "new@x.com"

    @pytest.mark.asyncio
    async def test_update_ignores_empty_values(self, repo):
        await repo.register("A", "a@x.com", "p1")
        updated = await repo.update(1, name="", email=None)
        assert (updated.name, updated.email) == ("A", "a@x.com")

    @pytest.mark.asyncio
    async def test_update_password_rehashes(self, repo):
        await repo.register("A", "a@x.com", "p1")
        await repo.update(1, password="p2")
        assert await repo.authenticate("a@x.com", "p1") is None
        assert await repo.authenticate("a@x.com", "p2") is not None

    @pytest.mark.asyncio
    async def test_update_absent(self, repo):
        assert await repo.update(9, name="X") is None

    @pytest.mark.asyncio
    async def test_delete_cascades(self, repo):
        await repo.register("A", "a@x.com", "p1")
        pref = repo.add_preference(1, "vegan")
        assert repo.delete(1) is True
        assert repo.get_by_id(1) is None
        assert repo.delete_preference(1, pref.pref_id) is False
        assert repo.delete(1) is False

    @pytest.mark.asyncio
    async def test_views_are_snapshots(self, repo):
        user = await repo.register("A", "a@x.com", "p1")
        user.name = "mutated"
        user.preferences.append(None)
        assert repo.get_by_id(1).name == "A"
        assert repo.get_by_id(1).preferences == []


class TestPreferences:
    @pytest.mark.asyncio
    async def test_add_and_fetch(self, repo):
        await repo.register("A", "a@x.com", "p1")
        pref = repo.add_preference(1, "vegetarian")
        assert (pref.pref_id, pref.value) == (1, "vegetarian")
        assert repo.get_by_id(1).preferences == [pref]

    def test_add_to_absent_user(self, repo):
        assert repo.add_preference(5, "x") is None

    @pytest.mark.asyncio
    async def test_ids_unique_across_users(self, repo):
        await repo.register("A", "a@x.com", "p1")
        await repo.register("B", "b@x.com", "p2")
        ids = [
            repo.add_preference(1, "x").pref_id,
            repo.add_preference(2, "y").pref_id,
            repo.add_preference(1, "z").pref_id,
            repo.add_preference(2, "w").pref_id,
        ]
        assert ids == [1, 2, 3, 4]

    @pytest.mark.asyncio
    async def test_ids_not_reused_after_delete(self, repo):
        await repo.register("A", "a@x.com", "p1")
        first = repo.add_preference(1, "x")
        repo.delete_preference(1, first.pref_id)
        assert repo.add_preference(1, "y").pref_id == first.pref_id + 1

    @pytest.mark.asyncio
    async def test_update_roundtrip(self, repo):
        await repo.register("A", "a@x.com", "p1")
        pref = repo.add_preference(1, "vegetarian")
        updated = repo.update_preference(1, pref.pref_id, "vegan")
        assert updated.pref_id == pref.pref_id
        stored = repo.get_by_id(1).preferences
        assert [(p.pref_id, p.value) for p in stored] == [(pref.pref_id, "vegan")]

    @pytest.mark.asyncio
    async def test_update_without_value_is_noop(self, repo):
        await repo.register("A", "a@x.com", "p1")
        pref = repo.add_preference(1, "vegetarian")
        assert repo.update_preference(1, pref.pref_id).value == "vegetarian"

    @pytest.mark.asyncio
    async def test_preference_scoped_to_owner(self, repo):
        await repo.register("A", "a@x.com", "p1")
        await repo.register("B", "b@x.com", "p2")
        pref = repo.add_preference(1, "x")
        assert repo.update_preference(2, pref.pref_id, "y") is None
        assert repo.delete_preference(2, pref.pref_id) is False
        assert repo.get_by_id(1).preferences[0].value == "x"

    def test_update_and_delete_absent(self, repo):
        assert repo.update_preference(1, 1, "x") is None
        assert repo.delete_preference(1, 1) is False

    @pytest.mark.asyncio
    async def test_delete_keeps_order(self, repo):
        await repo.register("A", "a@x.com", "p1")
        for value in ("a", "b", "c"):
            repo.add_preference(1, value)
        assert repo.delete_preference(1, 2) is True
        assert [p.value for p in repo.get_by_id(1).preferences] == ["a", "c"]


class TestConcurrentCalls:
    @pytest.mark.asyncio
    async def test_concurrent_registrations_get_distinct_ids(self, repo):
        users = await asyncio.gather(
            *(repo.register(f"U{i}", f"u{i}@x.com", "pw") for i in range(5))
        )
        assert sorted(u.id for u in users) == [1, 2, 3, 4, 5]

    @pytest.mark.asyncio
    async def test_concurrent_preference_additions_get_distinct_ids(self, repo):
        """
        Many additions for one user in flight at once.

        Correctness is asserted for a single event loop only: there is no
        ``await`` between reading the counter and appending.  Threads
        sharing one repository are an open property and not covered.
        """
        await repo.register("A", "a@x.com", "p1")

        async def add_after_yield(value):
            await asyncio.sleep(0)
            return repo.add_preference(1, value)

        prefs = await asyncio.gather(*(add_after_yield(f"p{i}") for i in range(10)))

        ids = [p.pref_id for p in prefs]
        assert len(set(ids)) == 10
        stored = repo.get_by_id(1).preferences
        assert len(stored) == 10
        assert sorted(p.pref_id for p in stored) == sorted(ids)

    @pytest.mark.asyncio
    async def test_delete_during_password_update(self, repo):
        await repo.register("A", "a@x.com", "p1")
        hashing = asyncio.Event()
        release = asyncio.Event()

        async def held_hash(password, rounds):
            hashing.set()
            await release.wait()
            return hash_password(password, rounds)

        async def delete_while_hashing():
            await hashing.wait()
            deleted = repo.delete(1)
            release.set()
            return deleted

        with patch("database.repository.hash_password_async", new=held_hash):
            updated, deleted = await asyncio.gather(
                repo.update(1, password="p2"), delete_while_hashing(),
            )

        assert deleted is True
        assert updated is None
        assert repo.get_by_id(1) is None
