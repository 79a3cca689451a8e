"""Tests for the committed results resource."""

import pytest

from stock_audit.engine.audit import run_scoring
from stock_audit.resources.results_resource import ResourceNotFoundError, read_results_resource


class TestReadResultsResource:
    """Tests for read_results_resource function."""

    def test_nothing_committed(self, fresh_session) -> None:
        """Reading before any run raises."""
        with pytest.raises(ResourceNotFoundError, match="No audit committed"):
            read_results_resource(fresh_session)

    def test_serves_csv(self, fresh_session, sample_batch) -> None:
        """The last committed run is served as CSV in rank order."""
        token = fresh_session.begin()
        fresh_session.commit(token, run_scoring(sample_batch), "titan")

        csv_text, mime_type = read_results_resource(fresh_session)

        assert mime_type == "text/csv"
        lines = csv_text.strip().splitlines()
        assert lines[0].startswith("rank,ticker,name")
        assert lines[1].startswith("1,TOP,")
        assert len(lines) == 4
