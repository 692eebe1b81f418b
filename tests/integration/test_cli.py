"""Integration tests for the command-line interface."""

import pytest
from click.testing import CliRunner

from streamsift import __version__
from streamsift.cli import cli

PROCESS_CONFIG = """
variables:
  OriginalLanguage: English
removals:
  - stream_type: audio
    rule:
      match_type: title
      pattern: commentary
sorters:
  - stream_type: subtitle
    criteria:
      - property: language
        comparison: spa
default_language:
  enabled: true
  stream_type: subtitle
"""


@pytest.fixture
def runner():
    """Create a Click test runner."""
    return CliRunner()


@pytest.fixture
def config_file(tmp_path):
    """Write a processing configuration."""
    path = tmp_path / "config.yaml"
    path.write_text(PROCESS_CONFIG)
    return path


class TestInspect:
    """Test the inspect command."""

    def test_inspect_banner(self, runner, fixture_path):
        """Should list streams and chapters."""
        result = runner.invoke(cli, ["inspect", str(fixture_path("cast_away.txt")), "--name", "cast_away.mkv"])

        assert result.exit_code == 0
        assert "cast_away.mkv (1 video, 2 audio, 2 subtitle, 0 attachment, 32 chapters)" in result.output
        assert "Audio 1: ac3 [eng] (English commentary)" in result.output
        assert "Chapter 32" in result.output

    def test_inspect_json(self, runner, fixture_path):
        """Should show container tags from JSON output."""
        result = runner.invoke(cli, ["inspect", str(fixture_path("barbie_girl.json"))])

        assert result.exit_code == 0
        assert "title: Barbie Girl" in result.output

    def test_inspect_with_issues_exits_2(self, runner, fixture_path):
        """Partially parsed output is reported with exit code 2."""
        result = runner.invoke(cli, ["inspect", str(fixture_path("show_streams.json"))])

        assert result.exit_code == 2
        assert "movie.mkv" in result.output

    def test_inspect_missing_file(self, runner, tmp_path):
        """A missing input file is a usage error."""
        result = runner.invoke(cli, ["inspect", str(tmp_path / "absent.txt")])

        assert result.exit_code != 0


class TestProcess:
    """Test the process command."""

    def test_process_with_config(self, runner, config_file, fixture_path):
        """Should apply removals, sorting and defaults."""
        result = runner.invoke(
            cli, ["--config", str(config_file), "process", str(fixture_path("cast_away.txt"))]
        )

        assert result.exit_code == 0
        assert "Audio 1: ac3 [eng] (English commentary) [DELETED]" in result.output
        assert "Subtitle 1: hdmv_pgs_subtitle [spa] (Spanish)" in result.output
        assert "Subtitle 0: hdmv_pgs_subtitle [eng] (English (SDH)) [DEFAULT]" in result.output
        assert "✓ 1 removed; reordered subtitle; 1 default flag(s) changed" in result.output

    def test_process_without_config(self, runner, fixture_path):
        """Built-in defaults change nothing."""
        result = runner.invoke(cli, ["process", str(fixture_path("episode_mp4.txt"))])

        assert result.exit_code == 0
        assert "⊘ No changes" in result.output

    def test_invalid_config(self, runner, tmp_path, fixture_path):
        """A bad configuration exits with code 1."""
        path = tmp_path / "config.yaml"
        path.write_text("logging:\n  format: xml\n")

        result = runner.invoke(cli, ["--config", str(path), "process", str(fixture_path("cast_away.txt"))])

        assert result.exit_code == 1
        assert "Error loading configuration" in result.output


class TestVersion:
    """Test the version command."""

    def test_version(self, runner):
        """Should print the package version."""
        result = runner.invoke(cli, ["version"])

        assert result.exit_code == 0
        assert f"StreamSift v{__version__}" in result.output
