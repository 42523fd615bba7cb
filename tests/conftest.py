"""Shared fixtures: a migrated sqlite database per test."""

from __future__ import annotations

from typing import Iterable, Tuple

import pytest
import pytest_asyncio

from scoreline.config import ScoringRules, Settings
from scoreline.database import DBM, initialize
from scoreline.database import repository


@pytest.fixture
def rules() -> ScoringRules:
    """The 5/3/1/2 rule set most tests score with."""
    return ScoringRules(perfect_score=5, aggregate_score=3, outcome_score=1, penalty_bonus=2)


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Test-mode settings with the database file under tmp_path."""
    return Settings(test_mode=True, data_dir=str(tmp_path))


@pytest_asyncio.fixture
async def dbm(settings):
    """A migrated database, disposed after the test."""
    initialize(settings)
    manager = DBM(settings)
    yield manager
    await manager.dispose()


async def seed(
    dbm: DBM,
    *,
    matches: Iterable[str] = (),
    users: Iterable[str] = (),
    predictions: Iterable[Tuple[str, str, object, object, object]] = (),
) -> None:
    """Create matches, users and (match_id, user_id, home, away, penalty_winner) predictions."""
    for match_id in matches:
        await repository.add_match(dbm, match_id=match_id, team_a=f"{match_id}-A", team_b=f"{match_id}-B")
    for user_id in users:
        await repository.register_user(dbm, user_id=user_id, display_name=user_id.title())
    for match_id, user_id, home, away, winner in predictions:
        await repository.submit_prediction(
            dbm,
            match_id=match_id,
            user_id=user_id,
            prediction={"home": home, "away": away, "penaltyWinner": winner},
        )


@pytest.fixture
def seed_db():
    """The seed helper, as a fixture."""
    return seed
