"""
Tests for CLI Commands
======================
Tests for the prenomkit CLI interface in prenomkit/cli.py.
"""

import json
import subprocess
import sys
from pathlib import Path

import pytest

# Ensure repo root is on path
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from prenomkit import __version__
from prenomkit.cli import build_parser, main, parse_child
from namestore import Sex


@pytest.fixture
def run(data_dir, capsys, monkeypatch):
    """Run the CLI against the test dataset, returning (code, stdout, stderr)."""
    monkeypatch.delenv("PRENOMKIT_DATA_DIR", raising=False)

    def _run(*argv):
        code = main(["--data-dir", str(data_dir), *argv])
        captured = capsys.readouterr()
        return code, captured.out, captured.err

    return _run


class TestCLIBasic:
    """Basic CLI tests."""

    def test_version_flag(self):
        """Test --version flag."""
        result = subprocess.run(
            [sys.executable, "-m", "prenomkit", "--version"],
            capture_output=True,
            text=True,
            cwd=str(ROOT),
        )
        assert result.returncode == 0
        assert __version__ in result.stdout

    def test_help_flag(self):
        """Test --help flag."""
        result = subprocess.run(
            [sys.executable, "-m", "prenomkit", "--help"],
            capture_output=True,
            text=True,
            cwd=str(ROOT),
        )
        assert result.returncode == 0
        assert "recommend" in result.stdout
        assert "search" in result.stdout

    def test_version_in_process(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["--version"])
        assert exc.value.code == 0
        assert "prenomkit" in capsys.readouterr().out

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "usage" in capsys.readouterr().out.lower()

    def test_invalid_choice(self):
        with pytest.raises(SystemExit) as exc:
            main(["search", "--sort", "length"])
        assert exc.value.code == 2


class TestCLISearch:
    """Tests for search command."""

    def test_search_json_rarity(self, run):
        code, out, _ = run("search", "--sex", "F", "--sort", "rarity", "--json")
        assert code == 0
        assert [item["name"] for item in json.loads(out)] == ["Léa", "Eloise", "Jade", "Louise", "Emma"]

    def test_search_table(self, run):
        code, out, _ = run("search", "lou")
        assert code == 0
        assert "Louise" in out

    def test_search_no_results(self, run):
        code, out, _ = run("search", "xyz")
        assert code == 0
        assert "No names found" in out

    def test_find_alias(self, run):
        code, out, _ = run("f", "--min-trend", "1.1", "--sex", "M", "--json")
        assert code == 0
        assert [item["name"] for item in json.loads(out)] == ["Milo", "Kylian"]


class TestCLIShow:
    """Tests for show and analyze commands."""

    def test_show_json(self, run):
        code, out, _ = run("show", "emma", "--json")
        assert code == 0
        assert json.loads(out)["name"] == "Emma"

    def test_show_table(self, run):
        code, out, _ = run("show", "Gabriel", "--sex", "M")
        assert code == 0
        assert "2024" in out

    def test_show_unknown(self, run):
        code, _, err = run("show", "Zéphyrine")
        assert code == 1
        assert "Error" in err
        assert "Zéphyrine" in err

    def test_analyze_json(self, run):
        code, out, _ = run("analyze", "eloïse", "--json")
        assert code == 0
        data = json.loads(out)
        assert data["found"] is True
        assert data["name"] == "Eloise"
        assert data["letters"] == 6
        assert data["popularity"] == "Uncommon"
        assert data["percentage_change"] == 50.0

    def test_analyze_unknown_name(self, run):
        code, out, _ = run("a", "Zéphyrine")
        assert code == 0
        assert "not in the dataset" in out


class TestCLIListings:
    """Tests for similar, trending, popular and stats."""

    def test_similar_json(self, run):
        code, out, _ = run("similar", "Louise", "--sex", "F", "--json")
        assert code == 0
        data = json.loads(out)
        assert len(data) == 5
        assert all(0 <= item["similarity"] <= 1 for item in data)

    def test_similar_requires_sex(self):
        with pytest.raises(SystemExit):
            main(["similar", "Louise"])

    def test_trending_json(self, run):
        code, out, _ = run("t", "--sex", "M", "--limit", "2", "--json")
        assert code == 0
        assert [item["name"] for item in json.loads(out)] == ["Kylian", "Milo"]

    def test_popular_json(self, run):
        code, out, _ = run("popular", "--year", "2023", "--sex", "F", "--json")
        assert code == 0
        assert [item["name"] for item in json.loads(out)] == ["Emma", "Louise", "Jade", "Eloise", "Léa"]

    def test_popular_empty_year(self, run):
        code, out, _ = run("top", "--year", "1800")
        assert code == 0
        assert "No births recorded for 1800" in out

    def test_stats_json(self, run):
        code, out, _ = run("stats", "--json")
        assert code == 0
        assert json.loads(out)["total_names"] == 13

    def test_stats_table(self, run):
        code, _, _ = run("stats")
        assert code == 0


class TestCLIRecommend:
    """Tests for recommend command."""

    def test_recommend_json(self, run):
        code, out, _ = run("recommend", "Martin", "--child", "Emma", "--gender", "F", "--json")
        assert code == 0
        data = json.loads(out)
        names = [item["name"] for item in data]
        assert "Emma" not in names
        assert len(names) == 4
        assert all(item["source"] == "local" for item in data)
        assert all(item["insight"] is None for item in data)

    def test_recommend_alias_table(self, run):
        code, out, _ = run("rec", "Martin", "--gender", "F")
        assert code == 0
        assert "Martin" in out

    def test_ai_without_key(self, run, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        monkeypatch.setattr("prenomkit.config.load_env", lambda env_path=None: {})
        code, _, err = run("recommend", "Martin", "--ai")
        assert code == 1
        assert "ANTHROPIC_API_KEY" in err

    def test_quiet_suppresses_text(self, run):
        code, out, _ = run("--quiet", "recommend", "Martin")
        assert code == 0
        assert out == ""


class TestParseChild:
    """Tests for --child values."""

    def test_name_only(self):
        child = parse_child("Louis")
        assert child.name == "Louis"
        assert child.sex is None

    def test_name_and_sex(self):
        assert parse_child("Jade:F").sex is Sex.FEMALE

    def test_parser_collects_children(self):
        args = build_parser().parse_args(["recommend", "Martin", "-c", "Louis:M", "-c", "Jade"])
        assert args.child == ["Louis:M", "Jade"]
