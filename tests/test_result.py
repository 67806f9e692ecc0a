"""Tests for sweep results and the summary line."""

from seatsweep.sweeper import NO_ANOMALIES, SweepResult, SweepStatus, format_summary_line


class TestSummaryLine:
    """Tests for the per-account summary contract."""

    def test_clean(self):
        """Test zero removals report clean with the placeholder."""
        line = format_summary_line("owner@hinedigitals.store", SweepResult())

        assert line == "owner@hinedigitals.store | clean | no anomalies data | success"

    def test_dirty(self):
        """Test removals are listed comma-joined."""
        result = SweepResult(deleted_emails=["a@x.com", "b@y.com"])

        line = format_summary_line("owner@hinedigitals.store", result)

        assert line == "owner@hinedigitals.store | dirty | a@x.com, b@y.com | success"

    def test_iteration_limit_is_success(self):
        """Test hitting the ceiling still reports success."""
        result = SweepResult(deleted_emails=["a@x.com"], status=SweepStatus.ITERATION_LIMIT)

        assert format_summary_line("me", result).endswith("| success")

    def test_failure(self):
        """Test a failed session reports failure but keeps removals made."""
        partial = SweepResult(deleted_emails=["a@x.com"])

        result = SweepResult.failure("Members heading not visible", partial=partial)

        assert format_summary_line("me", result) == "me | dirty | a@x.com | failure"
        assert result.errors[-1]["error"] == "Members heading not visible"


class TestSweepResult:
    """Tests for result bookkeeping."""

    def test_record_deletion(self):
        """Test unconfirmed removals count as deleted and are flagged."""
        result = SweepResult()

        result.record_deletion("a@x.com")
        result.record_deletion("b@x.com", confirmed=False)

        assert result.deleted_count == 2
        assert result.unconfirmed_emails == ["b@x.com"]
        assert not result.is_clean

    def test_confirm_deletion(self):
        """Test a verified removal is no longer flagged unconfirmed."""
        result = SweepResult()
        result.record_deletion("a@x.com", confirmed=False)

        result.confirm_deletion("a@x.com")

        assert result.deleted_emails == ["a@x.com"]
        assert result.unconfirmed_emails == []

    def test_to_dict(self):
        """Test the serialized form."""
        result = SweepResult(iterations=3)
        result.record_deletion("a@x.com")
        result.record_error("b@x.com", RuntimeError("menu never opened"))

        data = result.to_dict()

        assert data["status"] == "completed"
        assert data["deleted"] == 1
        assert data["deleted_emails"] == ["a@x.com"]
        assert data["iterations"] == 3
        assert data["errors"] == [{"email": "b@x.com", "error": "menu never opened"}]
        assert data["total_errors"] == 1

    def test_placeholder_constant(self):
        """Test the placeholder text."""
        assert NO_ANOMALIES == "no anomalies data"
