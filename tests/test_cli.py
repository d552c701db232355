"""Tests for CLI commands using Click's testing utilities."""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from lifeflow import __version__
from lifeflow.cli import lifeflow as cli
from lifeflow.cli.main import load_events
from lifeflow.core.errors import InvalidInputError

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def runner() -> CliRunner:
    """Create a Click test runner."""
    return CliRunner()


@pytest.fixture
def family_file(write_events, family_events) -> Path:
    return write_events(family_events, name="family.json", wrap=True)


# =============================================================================
# Group Tests
# =============================================================================


class TestGroup:
    """Tests for the top-level command group."""

    def test_help_lists_commands(self, runner: CliRunner) -> None:
        """lifeflow --help lists every command."""
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        assert "tiers" in result.output
        assert "layout" in result.output
        assert "river" in result.output

    def test_version(self, runner: CliRunner) -> None:
        """lifeflow --version prints the package version."""
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_missing_config_file(self, runner: CliRunner, tmp_path: Path) -> None:
        """An explicit config that does not exist aborts with status 1."""
        result = runner.invoke(cli, ["--config", str(tmp_path / "nope.yaml"), "tiers"])

        assert result.exit_code == 1
        assert "not found" in result.output


# =============================================================================
# Tiers Command Tests
# =============================================================================


class TestTiersCommand:
    """Tests for the tiers command."""

    def test_lists_all_tiers(self, runner: CliRunner) -> None:
        """Every tier appears in the table."""
        result = runner.invoke(cli, ["tiers"])

        assert result.exit_code == 0
        for tier in ("year", "month", "week", "day", "focus"):
            assert tier in result.output


# =============================================================================
# Layout Command Tests
# =============================================================================


class TestLayoutCommand:
    """Tests for the layout command."""

    def test_table_output(self, runner: CliRunner, events_file: Path) -> None:
        """Default output is a rich table."""
        result = runner.invoke(cli, ["layout", str(events_file), "--zoom", "0.3"])

        assert result.exit_code == 0
        assert "Timeline Layout" in result.output
        assert "month" in result.output

    def test_json_output(self, runner: CliRunner, events_file: Path) -> None:
        """--json prints the computed nodes."""
        result = runner.invoke(cli, ["layout", str(events_file), "--zoom", "0.3", "--json"])

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["tier"] == "month"
        assert [n["node"]["kind"] for n in payload["nodes"]] == ["cluster", "event"]
        assert payload["nodes"][0]["node"]["cluster_id"] == "month_2024-01"

    def test_expand_cluster(self, runner: CliRunner, events_file: Path) -> None:
        """--expand opens a cluster."""
        result = runner.invoke(
            cli,
            ["layout", str(events_file), "--zoom", "0.3", "--expand", "month_2024-01", "--json"],
        )

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert [n["node"]["kind"] for n in payload["nodes"]] == ["event", "event", "event"]

    def test_minimal_mode(self, runner: CliRunner, events_file: Path) -> None:
        """--mode minimal produces no cards."""
        result = runner.invoke(
            cli, ["layout", str(events_file), "--mode", "minimal", "--zoom", "0.9", "--json"]
        )

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["tier"] == "focus"
        assert all(n["card_rect"] is None for n in payload["nodes"])

    def test_config_file_applies(self, runner: CliRunner, events_file: Path) -> None:
        """The view section sets the default zoom."""
        Path("lifeflow.yaml").write_text("view:\n  zoom_level: 0.1\n", encoding="utf-8")

        result = runner.invoke(cli, ["layout", str(events_file), "--json"])

        assert result.exit_code == 0
        assert json.loads(result.stdout)["tier"] == "year"

    def test_invalid_json(self, runner: CliRunner, tmp_path: Path) -> None:
        """A broken snapshot exits with status 1."""
        bad = tmp_path / "bad.json"
        bad.write_text("{not json", encoding="utf-8")

        result = runner.invoke(cli, ["layout", str(bad)])

        assert result.exit_code == 1
        assert "JSON" in result.output

    def test_missing_file(self, runner: CliRunner, tmp_path: Path) -> None:
        """Click rejects paths that do not exist."""
        result = runner.invoke(cli, ["layout", str(tmp_path / "missing.json")])

        assert result.exit_code == 2


# =============================================================================
# River Command Tests
# =============================================================================


class TestRiverCommand:
    """Tests for the river command."""

    def test_json_output(self, runner: CliRunner, family_file: Path) -> None:
        """--json prints paths and intersections."""
        result = runner.invoke(cli, ["river", str(family_file), "--json"])

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert [p["person_id"] for p in payload["paths"]] == ["P1", "P2", "P3"]
        assert len(payload["intersections"]) == 1

    def test_table_output(self, runner: CliRunner, family_file: Path) -> None:
        """Default output is a rich table."""
        result = runner.invoke(cli, ["river", str(family_file)])

        assert result.exit_code == 0
        assert "River Flow" in result.output
        assert "P3" in result.output

    def test_person_filter(self, runner: CliRunner, family_file: Path) -> None:
        """--person limits the streams."""
        result = runner.invoke(cli, ["river", str(family_file), "-p", "P2", "--json"])

        payload = json.loads(result.stdout)
        assert [p["person_id"] for p in payload["paths"]] == ["P2"]


# =============================================================================
# Event Loading Tests
# =============================================================================


class TestLoadEvents:
    """Tests for reading event snapshots."""

    def test_list_and_wrapped_forms(self, write_events, jan_jun_events) -> None:
        """Both a bare list and {"events": [...]} are accepted."""
        bare = load_events(write_events(jan_jun_events, name="bare.json"))
        wrapped = load_events(write_events(jan_jun_events, name="wrapped.json", wrap=True))

        assert [e.id for e in bare] == [e.id for e in wrapped] == ["jan-1", "jan-15", "jun-1"]

    def test_invalid_event(self, tmp_path: Path) -> None:
        """A malformed event raises InvalidInputError."""
        path = tmp_path / "events.json"
        path.write_text(json.dumps([{"id": "x"}]), encoding="utf-8")

        with pytest.raises(InvalidInputError, match="Event #0"):
            load_events(path)
