"""
Group Service Tests
===================

Group creation (with its transactional membership insert), listing,
rosters and idempotent joins.
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from types import SimpleNamespace

import pytest
from sqlalchemy import insert, select

from groupchat.core.exceptions import NotFoundError, StorageError, ValidationError
from groupchat.database.engine import build_engine
from groupchat.database.schema import group_members, groups, init_schema
from groupchat.modules.groups.repository import GroupRepository
from groupchat.modules.groups.service import GroupService
from groupchat.modules.users.repository import UserRepository
from groupchat.modules.users.service import UserService


@pytest.fixture
def alice(user_service):
    return user_service.register("alice")


@pytest.fixture
def bob(user_service):
    return user_service.register("bob")


class TestCreateGroup:
    """Test group creation."""

    def test_creator_becomes_first_member(self, group_service, alice):
        group = group_service.create_group("Book Club", "Fiction", alice.id)

        assert group.name == "Book Club"
        assert group.description == "Fiction"
        assert group.created_by == alice.id
        assert group_service.is_member(group.id, alice.id)

        detail = group_service.get_group_by_id(group.id)
        assert [m.username for m in detail.members] == ["alice"]

    def test_missing_description_defaults_to_empty(self, group_service, alice):
        group = group_service.create_group("Book Club", None, alice.id)

        assert group.description == ""

    @pytest.mark.parametrize("name", ["", "ab", "x" * 51])
    def test_invalid_name_rejected(self, group_service, alice, count_rows, name):
        with pytest.raises(ValidationError):
            group_service.create_group(name, "", alice.id)

        assert count_rows(groups) == 0

    @pytest.mark.parametrize("name", ["abc", "x" * 50])
    def test_boundary_names_accepted(self, group_service, alice, name):
        assert group_service.create_group(name, "", alice.id).name == name

    def test_group_names_need_not_be_unique(self, group_service, alice, count_rows):
        group_service.create_group("Book Club", "", alice.id)
        group_service.create_group("Book Club", "", alice.id)

        assert count_rows(groups) == 2

    def test_unknown_creator_leaves_no_rows(self, group_service, count_rows):
        with pytest.raises(ValidationError):
            group_service.create_group("Book Club", "", 999)

        assert count_rows(groups) == 0
        assert count_rows(group_members) == 0

    def test_store_rejection_rolls_back_whole_write(self, group_repository, count_rows):
        """Bypassing the service check, the store's foreign key stops the insert."""
        with pytest.raises(ValidationError):
            group_repository.create_group("Book Club", "", 999)

        assert count_rows(groups) == 0
        assert count_rows(group_members) == 0

    def test_failed_membership_insert_rolls_back_group(self, engine, group_repository, alice, count_rows):
        """If the membership insert fails, the group row is not kept either."""
        with engine.begin() as conn:
            conn.exec_driver_sql(
                "CREATE TRIGGER reject_members BEFORE INSERT ON group_members "
                "BEGIN SELECT RAISE(ABORT, 'membership rejected'); END"
            )

        with pytest.raises((ValidationError, StorageError)):
            group_repository.create_group("Book Club", "", alice.id)

        assert count_rows(groups) == 0
        assert count_rows(group_members) == 0


class TestListAndGet:
    """Test group listing and detail lookups."""

    def test_list_is_newest_first(self, engine, group_service, alice):
        with engine.begin() as conn:
            conn.execute(insert(groups), [
                {"name": "Older", "description": "", "created_by": alice.id,
                 "created_at": datetime(2024, 1, 1, 10, 0, 0)},
                {"name": "Newer", "description": "", "created_by": alice.id,
                 "created_at": datetime(2024, 1, 2, 10, 0, 0)},
            ])

        assert [g.name for g in group_service.list_groups()] == ["Newer", "Older"]

    def test_list_empty(self, group_service):
        assert group_service.list_groups() == []

    def test_get_missing_group_is_none(self, group_service):
        assert group_service.get_group_by_id(42) is None

    def test_members_ordered_by_join_time(self, group_service, alice, bob, user_service):
        carol = user_service.register("carol")
        group = group_service.create_group("Book Club", "", alice.id)
        group_service.join_group(group.id, bob.id)
        group_service.join_group(group.id, carol.id)

        members = group_service.get_group_by_id(group.id).members

        assert [m.username for m in members] == ["alice", "bob", "carol"]
        assert [m.id for m in members] == [alice.id, bob.id, carol.id]
        assert all(m.joined_at is not None for m in members)


class TestJoinGroup:
    """Test joining groups."""

    def test_join_is_idempotent(self, group_service, alice, bob, engine):
        group = group_service.create_group("Book Club", "", alice.id)

        assert group_service.join_group(group.id, bob.id) is True
        assert group_service.join_group(group.id, bob.id) is False

        with engine.connect() as conn:
            rows = conn.execute(
                select(group_members.c.id)
                .where(group_members.c.group_id == group.id)
                .where(group_members.c.user_id == bob.id)
            ).all()
        assert len(rows) == 1

    def test_creator_joining_again_is_a_no_op(self, group_service, alice, count_rows):
        group = group_service.create_group("Book Club", "", alice.id)

        assert group_service.join_group(group.id, alice.id) is False
        assert count_rows(group_members) == 1

    def test_join_missing_group(self, group_service, alice):
        with pytest.raises(NotFoundError) as exc_info:
            group_service.join_group(42, alice.id)

        assert exc_info.value.message == "Group not found"

    def test_join_missing_user(self, group_service, alice):
        group = group_service.create_group("Book Club", "", alice.id)

        with pytest.raises(NotFoundError) as exc_info:
            group_service.join_group(group.id, 999)

        assert exc_info.value.message == "User not found"

    def test_repository_join_reports_missing_references(self, group_repository, alice):
        with pytest.raises(NotFoundError):
            group_repository.join_group(42, alice.id)

    def test_is_member(self, group_service, alice, bob):
        group = group_service.create_group("Book Club", "", alice.id)

        assert group_service.is_member(group.id, alice.id)
        assert not group_service.is_member(group.id, bob.id)

    def test_join_rejects_unsupported_dialect(self):
        repository = GroupRepository(SimpleNamespace(dialect=SimpleNamespace(name="postgresql")))

        with pytest.raises(StorageError) as exc_info:
            repository.join_group(1, 1)

        assert "unsupported database dialect postgresql" in exc_info.value.message


class TestConcurrentJoin:
    """Simultaneous joins by the same user against a file-backed store."""

    @pytest.fixture
    def file_engine(self, tmp_path):
        engine = build_engine(f"sqlite:///{tmp_path / 'chat.sqlite'}")
        init_schema(engine)
        yield engine
        engine.dispose()

    def test_simultaneous_joins_insert_one_row(self, file_engine):
        user_repository = UserRepository(file_engine)
        users = UserService(user_repository)
        service = GroupService(GroupRepository(file_engine), user_repository)
        alice = users.register("alice")
        bob = users.register("bob")
        group = service.create_group("Book Club", "", alice.id)

        barrier = threading.Barrier(2)

        def join():
            barrier.wait()
            return service.join_group(group.id, bob.id)

        with ThreadPoolExecutor(max_workers=2) as pool:
            results = [future.result() for future in [pool.submit(join) for _ in range(2)]]

        assert sorted(results) == [False, True]
        with file_engine.connect() as conn:
            rows = conn.execute(
                select(group_members.c.id)
                .where(group_members.c.group_id == group.id)
                .where(group_members.c.user_id == bob.id)
            ).all()
        assert len(rows) == 1
