"""Unit tests for the CLI commands."""

import datetime as dt
from decimal import Decimal

import pytest
from click.testing import CliRunner

from fluxledger.cli import cli
from fluxledger.cli.error_handlers import (
    ConfigurationError,
    DataValidationError,
    handle_cli_error,
)
from fluxledger.exceptions import (
    CapabilityError,
    EmptySelectionError,
    RecordNotFoundError,
    StorageError,
)
from fluxledger.models.entry import BillingType
from fluxledger.models.profile import SubscriptionStatus, UserProfile
from fluxledger.services.ledger_store import LedgerStore

USER = "test-user"


@pytest.fixture
def runner():
    """Create a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def ledger(mock_env, sample_projects, sample_entries) -> LedgerStore:
    """Store at the configured data file, holding the sample data."""
    store = LedgerStore(mock_env["FLUXLEDGER_DATA_FILE"])
    for project in sample_projects:
        store.save_project(project, USER)
    for entry in sample_entries:
        store.save_entry(entry, USER)
    return store


def entries_by_id(store):
    return {e.id: e for e in store.list_entries(USER)}


class TestCLIMain:
    """Test suite for CLI main entry point."""

    def test_cli_help_text(self, runner):
        """Test that CLI help text lists every command."""
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "FluxLedger CLI" in result.output
        for command in [
            "list-entries",
            "add-entry",
            "billing-summary",
            "mark-billed",
            "mark-unbilled",
            "mark-paid",
            "set-rate",
            "fiscal-projection",
            "validate-data",
        ]:
            assert command in result.output

    def test_cli_version_flag(self, runner):
        """Test that --version flag works."""
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "1.0.0" in result.output

    def test_unknown_command_shows_error(self, runner):
        """Test that unknown commands show helpful error."""
        result = runner.invoke(cli, ["unknown-command"])
        assert result.exit_code != 0


class TestListEntries:
    """Tests for list-entries."""

    def test_lists_pending(self, runner, ledger):
        """Test pending entries are listed with their amounts."""
        result = runner.invoke(cli, ["list-entries", "--status", "pending"])

        assert result.exit_code == 0, result.output
        assert "Rilievo" in result.output
        assert "Direzione lavori" in result.output
        assert "Pratica catastale" not in result.output
        assert "Found 2 entries" in result.output

    def test_no_matches(self, runner, ledger):
        """Test an empty listing is not an error."""
        result = runner.invoke(cli, ["list-entries", "--month", "2030-01"])
        assert result.exit_code == 0
        assert "No entries found" in result.output


class TestBillingSummary:
    """Tests for billing-summary."""

    def test_document_with_stamp_and_surcharge(self, runner, ledger):
        """Test the document for both clients in March."""
        result = runner.invoke(
            cli,
            ["billing-summary", "--month", "2024-03", "--stamp-duty", "--surcharge"],
        )

        assert result.exit_code == 0, result.output
        assert "PORTFOLIO PROFESSIONALE COMBINATO" in result.output
        assert "€ 337,48" in result.output

    def test_stamp_suggested_by_default(self, runner, ledger):
        """Test the stamp is applied when the base is above the suggestion threshold."""
        result = runner.invoke(cli, ["billing-summary", "--month", "2024-03"])

        assert result.exit_code == 0, result.output
        assert "Stamp duty applied" in result.output
        assert "Imposta di Bollo" in result.output

    def test_surcharge_below_threshold_warns(self, runner, ledger):
        """Test a small document gets a warning instead of the surcharge."""
        result = runner.invoke(
            cli,
            [
                "billing-summary",
                "--project",
                "p-rossi",
                "--month",
                "2024-03",
                "--no-stamp-duty",
                "--surcharge",
            ],
        )

        assert result.exit_code == 0, result.output
        assert "Surcharge not applied" in result.output
        assert "STUDIO ROSSI" in result.output

    def test_reference_printed_not_stored(self, runner, ledger):
        """Test the invoice reference shows in the header and leaves the data alone."""
        before = ledger.read_document()
        result = runner.invoke(
            cli, ["billing-summary", "--month", "2024-03", "--reference", "FT-7"]
        )

        assert result.exit_code == 0, result.output
        assert "Rif. FT-7" in result.output
        assert ledger.read_document() == before

    def test_invalid_month(self, runner, ledger):
        """Test a malformed month is a data validation error."""
        result = runner.invoke(cli, ["billing-summary", "--month", "03/2024"])
        assert result.exit_code == 3


class TestMutations:
    """Tests for the bulk mutation commands."""

    def test_mark_billed_by_id(self, runner, ledger):
        """Test explicit ids are billed and unknown ids reported."""
        result = runner.invoke(
            cli, ["mark-billed", "--entry-id", "e-1", "--entry-id", "ghost"]
        )

        assert result.exit_code == 0, result.output
        assert "1 entries updated" in result.output
        assert "ghost: entry not found" in result.output
        assert entries_by_id(ledger)["e-1"].is_billed is True

    def test_mark_billed_selection(self, runner, ledger):
        """Test the whole filtered selection is billed without ids."""
        result = runner.invoke(cli, ["mark-billed", "--month", "2024-03"])

        assert result.exit_code == 0, result.output
        entries = entries_by_id(ledger)
        assert entries["e-1"].is_billed and entries["e-2"].is_billed

    def test_mark_paid_then_unbilled(self, runner, ledger):
        """Test paying a billed entry and moving it back to pending."""
        assert runner.invoke(cli, ["mark-paid", "--entry-id", "e-3"]).exit_code == 0
        assert entries_by_id(ledger)["e-3"].is_paid is True

        assert runner.invoke(cli, ["mark-unbilled", "--entry-id", "e-3"]).exit_code == 0
        entry = entries_by_id(ledger)["e-3"]
        assert (entry.is_billed, entry.is_paid) == (False, False)

    def test_mark_paid_unbilled_entry_reported(self, runner, ledger):
        """Test paying an unbilled entry is reported and skipped."""
        result = runner.invoke(cli, ["mark-paid", "--entry-id", "e-1"])

        assert result.exit_code == 0
        assert "e-1:" in result.output
        assert entries_by_id(ledger)["e-1"].is_paid is False

    def test_empty_selection_exit_code(self, runner, ledger):
        """Test mutations without ids fail with the empty-selection code."""
        result = runner.invoke(cli, ["mark-unbilled"])
        assert result.exit_code == 5
        assert "Empty Selection" in result.output

    def test_set_rate(self, runner, ledger):
        """Test the rate is written to the selected entries."""
        result = runner.invoke(cli, ["set-rate", "--entry-id", "e-2", "--rate", "300"])

        assert result.exit_code == 0, result.output
        assert entries_by_id(ledger)["e-2"].hourly_rate == Decimal("300")

    @pytest.mark.parametrize("rate", ["-1", "abc", "NaN"])
    def test_set_rate_invalid(self, runner, ledger, rate):
        """Test invalid rates are rejected before touching the store."""
        result = runner.invoke(cli, ["set-rate", "--entry-id", "e-2", "--rate", rate])
        assert result.exit_code == 3
        assert entries_by_id(ledger)["e-2"].hourly_rate == Decimal("250")


class TestAddEntry:
    """Tests for add-entry."""

    def test_daily_entry_uses_project_defaults(self, runner, ledger):
        """Test a whole-day entry gets the project's flat daily fee."""
        result = runner.invoke(
            cli,
            [
                "add-entry",
                "--project",
                "p-cantiere",
                "--start",
                "2024-03-06",
                "--description",
                "Sopralluogo",
            ],
        )

        assert result.exit_code == 0, result.output
        assert "€ 250,00" in result.output
        added = [e for e in ledger.list_entries(USER) if e.description == "Sopralluogo"]
        assert len(added) == 1
        assert added[0].billing_type == BillingType.DAILY
        assert added[0].end_time is None

    def test_hourly_entry_duration(self, runner, ledger):
        """Test an hourly entry takes its duration from start and end."""
        result = runner.invoke(
            cli,
            [
                "add-entry",
                "--project",
                "p-rossi",
                "--start",
                "2024-03-06 09:00",
                "--end",
                "2024-03-06 10:30",
            ],
        )

        assert result.exit_code == 0, result.output
        assert "€ 60,00" in result.output

    def test_unknown_project(self, runner, ledger):
        """Test an unknown project exits with the not-found code."""
        result = runner.invoke(cli, ["add-entry", "--project", "ghost", "--start", "2024-03-06"])
        assert result.exit_code == 7

    def test_trial_limit_refused(self, runner, ledger, monkeypatch):
        """Test a trial account at its entry limit cannot add entries."""
        monkeypatch.setenv("TRIAL_ENTRY_LIMIT", "3")
        ledger.save_profile(
            UserProfile(
                id=USER,
                email="ing@studio.it",
                trial_ends_at=dt.datetime.now(dt.timezone.utc) + dt.timedelta(days=10),
            )
        )

        result = runner.invoke(cli, ["add-entry", "--project", "p-rossi", "--start", "2024-03-06"])

        assert result.exit_code == 6
        assert "Not Allowed" in result.output
        assert len(ledger.list_entries(USER)) == 3


class TestReportAccess:
    """Tests for the plan gate on billing documents and projections."""

    @pytest.mark.parametrize(
        "status", [SubscriptionStatus.TRIAL, SubscriptionStatus.EXPIRED]
    )
    @pytest.mark.parametrize(
        "command", [["fiscal-projection", "--year", "2024"], ["billing-summary"]]
    )
    def test_plan_without_reports_refused(self, runner, ledger, status, command):
        """Test trial and expired plans cannot open the reports."""
        ledger.save_profile(
            UserProfile(id=USER, email="ing@studio.it", subscription_status=status)
        )

        result = runner.invoke(cli, command)

        assert result.exit_code == 6
        assert "does not include" in result.output

    def test_paid_plan_allowed(self, runner, ledger):
        """Test a paid plan gets the projection."""
        ledger.save_profile(
            UserProfile(
                id=USER, email="ing@studio.it", subscription_status=SubscriptionStatus.PRO
            )
        )

        result = runner.invoke(cli, ["fiscal-projection", "--year", "2024"])
        assert result.exit_code == 0, result.output

    def test_no_profile_allowed(self, runner, ledger):
        """Test a ledger without profiles is not gated."""
        result = runner.invoke(cli, ["fiscal-projection", "--year", "2024"])
        assert result.exit_code == 0, result.output


class TestFiscalProjection:
    """Tests for fiscal-projection."""

    def test_projection_table(self, runner, ledger):
        """Test the cascade is printed for the paid entries of the year."""
        runner.invoke(cli, ["mark-paid", "--entry-id", "e-3"])
        result = runner.invoke(cli, ["fiscal-projection", "--year", "2024", "--stamps", "1"])

        assert result.exit_code == 0, result.output
        assert "1 paid entries" in result.output
        assert "Lordo incassato" in result.output
        assert "€ 80,00" in result.output

    def test_negative_stamps_rejected(self, runner, ledger):
        """Test the stamp count cannot be negative."""
        result = runner.invoke(cli, ["fiscal-projection", "--stamps", "-1"])
        assert result.exit_code == 2


class TestValidateData:
    """Tests for validate-data."""

    def test_clean_data(self, runner, ledger):
        """Test the sample data passes validation."""
        result = runner.invoke(cli, ["validate-data"])
        assert result.exit_code == 0, result.output
        assert "Validation passed" in result.output

    def test_orphan_reference_fails(self, runner, ledger):
        """Test a deleted project makes validation fail."""
        ledger.delete_project("p-rossi", USER)
        result = runner.invoke(cli, ["validate-data"])

        assert result.exit_code == 1
        assert "does not exist" in result.output


class TestHandleCliError:
    """Tests for the error-to-exit-code mapping."""

    @pytest.mark.parametrize(
        "error,code",
        [
            (ConfigurationError("bad env"), 1),
            (StorageError("disk full"), 2),
            (DataValidationError("bad month"), 3),
            (EmptySelectionError("mark_billed"), 5),
            (CapabilityError("trial over"), 6),
            (RecordNotFoundError("entry", "e-1"), 7),
            (RuntimeError("boom"), 255),
        ],
    )
    def test_exit_codes(self, error, code):
        """Test each error family maps to its exit code."""
        assert handle_cli_error(error) == code

    def test_non_object_store_exit_code(self, runner, mock_env):
        """Test a data file holding a JSON list exits with the storage code."""
        with open(mock_env["FLUXLEDGER_DATA_FILE"], "w", encoding="utf-8") as f:
            f.write("[]")
        result = runner.invoke(cli, ["list-entries"])
        assert result.exit_code == 2
        assert "not a ledger document" in result.output

    def test_corrupted_store_exit_code(self, runner, mock_env):
        """Test a corrupted data file exits with the storage code."""
        with open(mock_env["FLUXLEDGER_DATA_FILE"], "w", encoding="utf-8") as f:
            f.write("{oops")
        result = runner.invoke(cli, ["list-entries"])
        assert result.exit_code == 2
        assert "Storage Error" in result.output
