"""Tests for backend/autotrader/services/position_service.py"""

import pytest

from autotrader.exceptions import ValidationError
from autotrader.services import position_service


class TestOpenClose:
    async def test_open_creates_open_position(self, db_session):
        position = await position_service.open_position(db_session, "aB3dE9", "BTCEUR")

        assert position.id is not None
        assert position.status == "OPEN"

    async def test_open_is_idempotent(self, db_session):
        first = await position_service.open_position(db_session, "aB3dE9", "BTCEUR")
        second = await position_service.open_position(db_session, "aB3dE9", "BTCEUR")

        assert first.id == second.id
        assert len(await position_service.get_positions_by_bot_id(db_session, "aB3dE9")) == 1

    async def test_open_positions_are_per_ticker(self, db_session):
        btc = await position_service.open_position(db_session, "aB3dE9", "BTCEUR")
        eth = await position_service.open_position(db_session, "aB3dE9", "ETHEUR")
        assert btc.id != eth.id

    async def test_close_open_position(self, db_session):
        opened = await position_service.open_position(db_session, "aB3dE9", "BTCEUR")

        closed = await position_service.close_open_position(db_session, "aB3dE9", "BTCEUR")

        assert closed.id == opened.id
        assert closed.status == "CLOSED"
        assert await position_service.get_open_position(db_session, "aB3dE9", "BTCEUR") is None

    async def test_close_without_open_position_is_noop(self, db_session):
        """Edge case: nothing to close, nothing written."""
        assert await position_service.close_open_position(db_session, "aB3dE9", "BTCEUR") is None
        assert await position_service.get_positions_by_bot_id(db_session, "aB3dE9") == []

    async def test_close_already_closed(self, db_session):
        position = await position_service.open_position(db_session, "aB3dE9", "BTCEUR")
        await position_service.close_position(db_session, position)
        again = await position_service.close_position(db_session, position)
        assert again.status == "CLOSED"

    async def test_buy_after_close_opens_new_position(self, db_session):
        first = await position_service.open_position(db_session, "aB3dE9", "BTCEUR")
        await position_service.close_open_position(db_session, "aB3dE9", "BTCEUR")
        second = await position_service.open_position(db_session, "aB3dE9", "BTCEUR")

        assert second.id != first.id
        statuses = [p.status for p in await position_service.get_positions_by_bot_id(db_session, "aB3dE9")]
        assert sorted(statuses) == ["CLOSED", "OPEN"]


class TestQueries:
    async def test_filter_by_status(self, db_session):
        await position_service.open_position(db_session, "aB3dE9", "BTCEUR")
        await position_service.close_open_position(db_session, "aB3dE9", "BTCEUR")
        await position_service.open_position(db_session, "aB3dE9", "ETHEUR")

        open_positions = await position_service.get_positions_by_bot_id(db_session, "aB3dE9", status="OPEN")
        assert [p.ticker for p in open_positions] == ["ETHEUR"]

    async def test_other_bots_excluded(self, db_session):
        await position_service.open_position(db_session, "other1", "BTCEUR")
        assert await position_service.get_positions_by_bot_id(db_session, "aB3dE9") == []


class TestManualStatusUpdate:
    async def test_close_via_update(self, db_session):
        position = await position_service.open_position(db_session, "aB3dE9", "BTCEUR")
        updated = await position_service.update_position_status(db_session, position.id, "CLOSED")
        assert updated.status == "CLOSED"

    async def test_reopen_when_no_other_open(self, db_session):
        position = await position_service.open_position(db_session, "aB3dE9", "BTCEUR")
        await position_service.close_position(db_session, position)

        updated = await position_service.update_position_status(db_session, position.id, "OPEN")
        assert updated.status == "OPEN"

    async def test_reopen_refused_when_another_is_open(self, db_session):
        """Failure: would create a second OPEN position for the pair."""
        old = await position_service.open_position(db_session, "aB3dE9", "BTCEUR")
        await position_service.close_position(db_session, old)
        await position_service.open_position(db_session, "aB3dE9", "BTCEUR")

        with pytest.raises(ValidationError, match="already has an open position"):
            await position_service.update_position_status(db_session, old.id, "OPEN")

    async def test_invalid_status(self, db_session):
        with pytest.raises(ValidationError, match="Invalid position status"):
            await position_service.update_position_status(db_session, 1, "PENDING")

    async def test_unknown_position(self, db_session):
        assert await position_service.update_position_status(db_session, 999, "CLOSED") is None
