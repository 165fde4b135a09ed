"""Unit tests for the command-line interface."""

import json
from pathlib import Path

from typer.testing import CliRunner

from specguard import __version__
from specguard.cli import app


FIXTURES = Path(__file__).parent.parent / "fixtures"
SPEC = str(FIXTURES / "entities.yaml")
DRIFTED_SPEC = str(FIXTURES / "entities_drifted.yaml")

runner = CliRunner()


def _discrepancies(output: str) -> list[str]:
    # Log records may precede the JSON report
    return json.loads(output[output.index("{"):])["discrepancies"]


class TestMatchCommand:
    """Tests for `specguard match`."""

    def test_identical_specs(self):
        """Matching a spec against itself succeeds."""
        result = runner.invoke(app, ["match", SPEC, SPEC, "--json"])

        assert result.exit_code == 0
        assert _discrepancies(result.output) == []

    def test_drifted_specs(self):
        """Discrepancies are reported and the exit code is 1."""
        result = runner.invoke(app, ["match", DRIFTED_SPEC, SPEC, "--json"])

        assert result.exit_code == 1
        assert _discrepancies(result.output) == [
            "GET /api/{id} > parameter 'id' in path > schema: type mismatch - expected 'string', actual 'integer'",
            "Missing path: /api/{id}/history",
        ]

    def test_unreadable_spec(self, tmp_path):
        """Invalid documents exit with code 2."""
        broken = tmp_path / "broken.yaml"
        broken.write_text("swagger: '2.0'\npaths: {}\n")

        result = runner.invoke(app, ["match", str(broken), SPEC])

        assert result.exit_code == 2
        assert "Unsupported OpenAPI version" in result.output

    def test_malformed_spec(self, tmp_path):
        """Wrongly shaped entries exit with code 2 instead of crashing."""
        broken = tmp_path / "broken.yaml"
        broken.write_text(
            "openapi: 3.0.2\n"
            "paths:\n"
            "  /:\n"
            "    get:\n"
            "      parameters: [oops]\n"
            "      responses: {}\n"
        )

        result = runner.invoke(app, ["match", str(broken), SPEC])

        assert result.exit_code == 2
        assert "Error:" in result.output

    def test_rich_output(self):
        """Without --json a summary panel is printed."""
        result = runner.invoke(app, ["match", SPEC, SPEC])

        assert result.exit_code == 0
        assert "No discrepancies" in result.output


class TestVerifyCommand:
    """Tests for `specguard verify`."""

    def test_routes_match_spec(self):
        """Routes described by the OpenAPI document verify cleanly."""
        result = runner.invoke(
            app, ["verify", "--spec", SPEC, "--routes", "fixtures.sample_routes:routing", "--json"]
        )

        assert result.exit_code == 0, result.output
        assert _discrepancies(result.output) == []

    def test_factory_reference(self):
        """A callable returning a routing tree is accepted."""
        result = runner.invoke(
            app, ["verify", "-s", SPEC, "-r", "fixtures.sample_routes:build_routing", "--json"]
        )

        assert result.exit_code == 0, result.output

    def test_strict_reports_undocumented_paths(self):
        """Strict mode reports routes the document does not declare."""
        result = runner.invoke(
            app, ["verify", "-s", SPEC, "-r", "fixtures.sample_routes:routing", "--strict", "--json"]
        )

        assert result.exit_code == 1
        assert _discrepancies(result.output) == ["Unexpected path: /health"]

    def test_base_path_limits_analysis(self):
        """Routes outside the base paths are not analyzed."""
        result = runner.invoke(
            app,
            ["verify", "-s", SPEC, "-r", "fixtures.sample_routes:routing", "-b", "/api", "--strict", "--json"],
        )

        assert result.exit_code == 0, result.output
        assert _discrepancies(result.output) == []

    def test_invalid_routes_reference(self):
        """References that do not name a routing tree exit with code 2."""
        result = runner.invoke(app, ["verify", "-s", SPEC, "-r", "fixtures.sample_routes:not_a_routing"])

        assert result.exit_code == 2
        assert "not a routing tree" in result.output

    def test_malformed_routes_reference(self):
        """References without an attribute exit with code 2."""
        result = runner.invoke(app, ["verify", "-s", SPEC, "-r", "fixtures.sample_routes"])

        assert result.exit_code == 2


def test_version():
    """The version command prints the package version."""
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert __version__ in result.output
