"""
Pytest configuration and fixtures.

This file is automatically loaded by pytest and provides
shared fixtures for all tests.
"""

from datetime import datetime, timedelta, timezone

import pytest

from tagmatch.config import Settings
from tagmatch.identity import IdentityStore, Player, Team
from tagmatch.sources import Source

BASE_TIME = datetime(2021, 1, 1, tzinfo=timezone.utc)


def at(day: int, name: str = None) -> Source:
    """A source that started ``day`` days after BASE_TIME."""
    return Source(name or f"Event {day}", BASE_TIME + timedelta(days=day))


@pytest.fixture
def source_at():
    """Factory fixture: ``source_at(5)`` is a source starting on day 5."""
    return at


@pytest.fixture
def settings():
    """Default settings, independent of the environment."""
    return Settings(_env_file=None)


@pytest.fixture
def kraken():
    """A team with a name, tag, division and tournament-platform id."""
    team = Team.create("Kraken Paradise", at(1), tag="κρ", division="2")
    team.add_battlefy_persistent_id("5f1a2b3c4d", at(1))
    return team


@pytest.fixture
def mustard():
    team = Team.create("Mustard Squad", at(2), tag="MS", division="X")
    return team


@pytest.fixture
def slushie(kraken):
    """A player on ``kraken`` with a few platform accounts."""
    player = Player.create("Slushie", at(1), team_id=kraken.id)
    player.add_discord_id("123456789012345678", at(1))
    player.add_discord_username("slushie#0001", at(1))
    player.add_twitter("https://twitter.com/slushie_spl", at(3))
    return player


@pytest.fixture
def store(kraken, mustard, slushie):
    """Store holding both teams and one player."""
    return IdentityStore(players=[slushie], teams=[kraken, mustard])
