"""Tests for UserRepository."""

import pytest

from edushare.db.repositories.user import UserRepository
from edushare.db.database_models.user import UserDO


@pytest.fixture
def repo(db_conn):
    """Provide a UserRepository."""
    return UserRepository(db_conn.conn)


class TestUserRepository:
    """Tests for UserRepository."""

    class TestUpsert:
        """SUT: UserRepository.upsert"""

        def test_creates(self, repo):
            assert repo.upsert(UserDO(email="bob@y.com", full_name="Bob Builder")) is True
            assert repo.get("bob@y.com").full_name == "Bob Builder"

        def test_updates_existing(self, repo):
            repo.upsert(UserDO(email="bob@y.com", full_name="Bob"))
            repo.upsert(UserDO(email="bob@y.com", full_name="Robert", verified=True))
            user = repo.get("bob@y.com")
            assert user.full_name == "Robert"
            assert user.verified is True
            assert len(repo.list_all()) == 1

    class TestGet:
        """SUT: UserRepository.get"""

        def test_not_found(self, repo):
            assert repo.get("nobody@x.com") is None

    class TestDisplayNames:
        """SUT: UserRepository.display_names"""

        def test_skips_users_without_name(self, repo):
            repo.upsert(UserDO(email="bob@y.com", full_name="Bob Builder"))
            repo.upsert(UserDO(email="anon@y.com"))
            assert repo.display_names() == {"bob@y.com": "Bob Builder"}
