"""
Test suite for the command-line interface.
"""

import pytest

from peerlib.cli import PeerLibCLI


@pytest.fixture
def cli():
    """Provide a CLI over its own in-memory library."""
    return PeerLibCLI()


@pytest.mark.unit
class TestCLI:
    """Test CLI commands against the seeded demo library."""

    def test_no_command_prints_help(self, cli, capsys):
        assert cli.run([]) == 1
        assert "usage" in capsys.readouterr().out.lower()

    def test_stats(self, cli, capsys):
        assert cli.run(["stats"]) == 0

        out = capsys.readouterr().out
        assert "Network Statistics" in out
        assert "Total Users:   3" in out
        assert "Mathematics" in out

    def test_search(self, cli, capsys):
        assert cli.run(["search", "calculus"]) == 0

        out = capsys.readouterr().out
        assert "1 result(s) for 'calculus'" in out
        assert "Calculus Complete Notes" in out

    def test_search_with_filters(self, cli, capsys):
        assert cli.run(["search", "--subject", "Physics", "--sort-by", "rating"]) == 0
        assert "Classical Mechanics" in capsys.readouterr().out

    def test_leaderboard(self, cli, capsys):
        assert cli.run(["leaderboard", "--limit", "2"]) == 0

        out = capsys.readouterr().out
        assert "alice" in out
        assert "charlie" not in out

    def test_seeds_once(self, cli, capsys):
        cli.run(["stats"])
        cli.run(["leaderboard"])

        assert cli.store.count()[0] == 3
