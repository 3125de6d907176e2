"""
Tests for the get_db() database session dependency and engine options.
"""
import pytest
from unittest.mock import MagicMock, patch

from sqlalchemy.pool import QueuePool

from app.models.base import _engine_options


class TestGetDbRollbackBehavior:
    """Tests for get_db() exception handling and rollback behavior."""

    def test_rollback_then_close_on_exception(self):
        """Verify rollback happens before close and the error is re-raised."""
        mock_session = MagicMock()
        call_order = []
        mock_session.rollback.side_effect = lambda: call_order.append("rollback")
        mock_session.close.side_effect = lambda: call_order.append("close")

        with patch("app.models.base.SessionLocal", return_value=mock_session):
            from app.models.base import get_db

            gen = get_db()
            assert next(gen) is mock_session

            with pytest.raises(RuntimeError) as exc_info:
                gen.throw(RuntimeError("Original error message"))

        assert str(exc_info.value) == "Original error message"
        assert call_order == ["rollback", "close"]

    def test_close_without_rollback_on_success(self):
        """Verify a normally completed request only closes its session."""
        mock_session = MagicMock()

        with patch("app.models.base.SessionLocal", return_value=mock_session):
            from app.models.base import get_db

            gen = get_db()
            next(gen)
            gen.close()

        mock_session.close.assert_called_once()
        mock_session.rollback.assert_not_called()

    def test_close_called_even_if_rollback_fails(self):
        """Verify close is still called even if rollback raises."""
        mock_session = MagicMock()
        mock_session.rollback.side_effect = Exception("Rollback failed")

        with patch("app.models.base.SessionLocal", return_value=mock_session):
            from app.models.base import get_db

            gen = get_db()
            next(gen)

            with pytest.raises(Exception, match="Rollback failed"):
                gen.throw(ValueError("Original error"))

        mock_session.close.assert_called_once()


class TestEngineOptions:
    """Tests for backend-specific engine options."""

    def test_sqlite_allows_cross_thread_connections(self):
        """SQLite sessions are used from the threadpool."""
        options = _engine_options("sqlite:///./exams.db")

        assert options == {"connect_args": {"check_same_thread": False}}

    def test_postgres_uses_queue_pool(self):
        """PostgreSQL gets a sized, pre-pinged connection pool."""
        options = _engine_options("postgresql://localhost:5432/exams")

        assert options["poolclass"] is QueuePool
        assert options["pool_pre_ping"] is True
        assert options["pool_size"] > 0
