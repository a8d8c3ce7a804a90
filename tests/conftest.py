import pytest

from sc_events.session import new_session

CONNECT_LINE = (
    "<2025-11-02T07:47:09.855Z> <AccountLoginCharacterStatus_Character> "
    "Character: ... geid 123 - ... - name TestPlayer - ..."
)


@pytest.fixture
def session():
    return new_session()


@pytest.fixture
def player_session(session):
    """Session whose log owner is TestPlayer (entity 123)."""
    session.parse_line(CONNECT_LINE)
    return session
