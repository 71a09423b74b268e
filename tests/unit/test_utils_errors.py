import pytest
from sqlalchemy.exc import SQLAlchemyError

from db.utils import transactional


class MockSession:
    def __init__(self):
        self.committed = False
        self.rolled_back = False

    async def commit(self):
        self.committed = True

    async def rollback(self):
        self.rolled_back = True


class Owner:
    def __init__(self):
        self.session = MockSession()

    @transactional
    async def write(self, value: int) -> int:
        return value * 2

    @transactional
    async def fail(self) -> None:
        raise SQLAlchemyError("Database error")


@pytest.mark.unit
@pytest.mark.anyio
async def test_transactional_commits_owner_session():
    owner = Owner()

    assert await owner.write(5) == 10
    assert owner.session.committed
    assert not owner.session.rolled_back


@pytest.mark.unit
@pytest.mark.anyio
async def test_transactional_sqlalchemy_error_rolls_back():
    owner = Owner()

    with pytest.raises(SQLAlchemyError):
        await owner.fail()

    assert owner.session.rolled_back
    assert not owner.session.committed


@pytest.mark.unit
@pytest.mark.anyio
async def test_transactional_ignores_bare_session_argument():
    @transactional
    async def mock_function(db: MockSession) -> None:
        raise ValueError("boom")

    session = MockSession()

    with pytest.raises(ValueError):
        await mock_function(session)

    assert not session.rolled_back


@pytest.mark.unit
@pytest.mark.anyio
async def test_transactional_without_session():
    @transactional
    async def mock_function(value: int) -> int:
        return value + 1

    assert await mock_function(1) == 2
