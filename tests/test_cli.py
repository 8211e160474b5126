"""Tests for the command line interface."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from sitemark.cli import main, parse_defines
from sitemark.exceptions import SitemarkError


@pytest.fixture
def project(tmp_path: Path, encyclopedia_source: str) -> Path:
    content = tmp_path / "content"
    (content / "physics").mkdir(parents=True)
    (content / "index.smk").write_text(
        'title: "Home", body: p l "Gravity" /"physics/gravity" ; p l "shop" $[shop]',
        encoding="utf-8",
    )
    (content / "physics" / "gravity.smk").write_text(encyclopedia_source, encoding="utf-8")
    (content / "physics" / "orbits.smk").write_text('title: "Orbits", body:', encoding="utf-8")
    assets = tmp_path / "assets"
    assets.mkdir()
    (assets / "styles.css").write_text("main { max-width: 40em }", encoding="utf-8")
    return tmp_path


def run(project: Path, *args: str) -> int:
    return main(
        [
            args[0],
            "--source",
            str(project / "content"),
            "--assets",
            str(project / "assets"),
            *args[1:],
        ]
    )


class TestParseDefines:
    """Tests for parse_defines function."""

    def test_name_value_pairs(self) -> None:
        assert parse_defines(["a=1", " b =x=y", "c="]) == {"a": "1", "b": "x=y", "c": ""}

    @pytest.mark.parametrize("item", ["novalue", "=value"])
    def test_invalid_pairs(self, item: str) -> None:
        with pytest.raises(SitemarkError, match="expected NAME=VALUE"):
            parse_defines([item])


class TestBuild:
    """Tests for the build command."""

    def test_build_writes_pages_and_assets(self, project: Path) -> None:
        output = project / "site"
        assert run(project, "build", "--output", str(output), "-D", "shop=https://shop.example.org") == 0
        assert (output / "index").is_file()
        assert (output / "physics" / "gravity").is_file()
        assert (output / "styles.css").read_text(encoding="utf-8") == "main { max-width: 40em }"
        assert 'href="https://shop.example.org"' in (output / "index").read_text(encoding="utf-8")

    def test_build_without_defines_fails_on_slot(self, project: Path, caplog: pytest.LogCaptureFixture) -> None:
        """Unresolved slots cannot be rendered."""
        with caplog.at_level(logging.ERROR):
            assert run(project, "build", "--output", str(project / "site")) == 1
        assert "slot `shop` was not resolved" in caplog.text

    def test_no_toc(self, project: Path) -> None:
        output = project / "site"
        assert run(project, "build", "--output", str(output), "-D", "shop=#top", "--no-toc") == 0
        assert '<nav class="toc">' not in (output / "physics" / "gravity").read_text(encoding="utf-8")

    def test_check_links_blocks_build(self, project: Path) -> None:
        output = project / "site"
        assert run(project, "build", "--output", str(output), "-D", "shop=/missing", "--check-links") == 1
        assert not output.exists()

    def test_invalid_slot_path_is_reported(self, project: Path, caplog: pytest.LogCaptureFixture) -> None:
        """A bad internal path from a define fails the run cleanly."""
        with caplog.at_level(logging.ERROR):
            assert run(project, "build", "--output", str(project / "site"), "-D", "shop=/../y") == 1
        assert "invalid internal path '../y'" in caplog.text

    def test_parse_error_is_reported(self, project: Path, caplog: pytest.LogCaptureFixture) -> None:
        (project / "content" / "broken.smk").write_text('title: "T"', encoding="utf-8")
        with caplog.at_level(logging.ERROR):
            assert run(project, "build", "--output", str(project / "site")) == 1
        assert "missing body field in page in 'broken.smk'" in caplog.text


class TestCheck:
    """Tests for the check command."""

    def test_clean_site(self, project: Path) -> None:
        assert run(project, "check", "-D", "shop=https://shop.example.org") == 0

    def test_broken_link(self, project: Path, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.ERROR):
            assert run(project, "check", "-D", "shop=/physics/missing") == 1
        assert "Broken link: index: internal location 'physics/missing'" in caplog.text

    def test_stylesheet_asset_is_a_valid_target(self, project: Path) -> None:
        assert run(project, "check", "-D", "shop=/styles.css") == 0

    def test_missing_source_directory(self, tmp_path: Path) -> None:
        assert main(["check", "--source", str(tmp_path / "nope")]) == 1
