"""Tests for site generation."""

from __future__ import annotations

from pathlib import Path

import pytest

from sitemark.exceptions import GenerationError
from sitemark.generator import FileSystemSink, Generator
from sitemark.parser import parse_page
from sitemark.render import RenderOptions
from sitemark.site import InternalPath, Site


class RecordingSink:
    """Output sink keeping every operation in memory."""

    def __init__(self) -> None:
        self.operations: list[tuple[str, Path]] = []
        self.files: dict[Path, str] = {}

    def create_dir(self, path: Path) -> None:
        self.operations.append(("create-dir", path))

    def write_text(self, path: Path, content: str) -> None:
        self.operations.append(("write-file", path))
        self.files[path] = content

    def copy_file(self, source: Path, destination: Path) -> None:
        self.operations.append(("copy", destination))


def site_with(*paths: str) -> Site:
    site = Site()
    for path in paths:
        site.insert(InternalPath.parse(path), parse_page(f'{{title: "{path}", body: p "x"}}'))
    return site


class TestGeneratePages:
    """Tests for writing rendered pages."""

    def test_single_page_writes_one_file(self, tmp_path: Path) -> None:
        """A minimal page produces exactly one file holding its paragraph."""
        output = tmp_path / "site"
        site = Site()
        site.insert(InternalPath.of("index"), parse_page('{title:"T", body: p "x"}'))

        report = Generator(site=site, output_dir=output).generate()

        files = [path for path in output.rglob("*") if path.is_file()]
        assert files == [output / "index"]
        assert report.pages == files
        assert report.assets == []
        assert "<p>x</p>" in files[0].read_text(encoding="utf-8")

    def test_nested_pages_mirror_the_tree(self, tmp_path: Path) -> None:
        site = site_with("physics/gravity", "physics/orbits", "index")
        report = Generator(site=site, output_dir=tmp_path).generate()
        assert report.pages == [
            tmp_path / "index",
            tmp_path / "physics" / "gravity",
            tmp_path / "physics" / "orbits",
        ]
        assert (tmp_path / "physics" / "gravity").is_file()

    def test_pages_are_rendered_relative_to_their_path(self, tmp_path: Path) -> None:
        site = site_with("physics/gravity")
        Generator(site=site, output_dir=tmp_path).generate()
        content = (tmp_path / "physics" / "gravity").read_text(encoding="utf-8")
        assert 'href="../styles.css"' in content

    def test_render_options_are_applied(self, tmp_path: Path) -> None:
        options = RenderOptions(stylesheet=None)
        Generator(site=site_with("index"), output_dir=tmp_path, options=options).generate()
        assert "stylesheet" not in (tmp_path / "index").read_text(encoding="utf-8")

    def test_custom_sink_receives_every_write(self) -> None:
        """Directories are created before the files inside them."""
        sink = RecordingSink()
        output = Path("out")
        Generator(site=site_with("a/b", "c"), output_dir=output, sink=sink).generate()
        assert sink.operations == [
            ("create-dir", output / "a"),
            ("write-file", output / "a" / "b"),
            ("create-dir", output),
            ("write-file", output / "c"),
        ]
        assert all("<p>x</p>" in content for content in sink.files.values())

    def test_unwritable_output_raises(self, tmp_path: Path) -> None:
        """An I/O failure names the operation and the path."""
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        with pytest.raises(GenerationError, match="create-dir failed") as exc_info:
            Generator(site=site_with("a/b"), output_dir=blocker).generate()
        assert exc_info.value.operation == "create-dir"
        assert isinstance(exc_info.value.__cause__, OSError)

    def test_page_path_held_by_directory_raises(self, tmp_path: Path) -> None:
        (tmp_path / "index").mkdir()
        with pytest.raises(GenerationError) as exc_info:
            Generator(site=site_with("index"), output_dir=tmp_path).generate()
        assert exc_info.value.operation == "write-file"
        assert exc_info.value.path == tmp_path / "index"

    def test_unencodable_text_raises(self, tmp_path: Path) -> None:
        """Text the output encoding cannot represent fails like an I/O error."""
        with pytest.raises(GenerationError, match="write-file failed"):
            FileSystemSink().write_text(tmp_path / "page", "lone surrogate \ud800")


class TestCopyAssets:
    """Tests for asset copying."""

    @pytest.fixture
    def assets(self, tmp_path: Path) -> Path:
        assets = tmp_path / "assets"
        (assets / "images").mkdir(parents=True)
        (assets / "styles.css").write_text("body { margin: 0 }")
        (assets / "images" / "apple.png").write_bytes(b"\x89PNG\r\n\x1a\n")
        return assets

    def test_assets_are_copied_byte_for_byte(self, tmp_path: Path, assets: Path) -> None:
        output = tmp_path / "site"
        report = Generator(site=site_with("index"), output_dir=output, assets_dir=assets).generate()
        assert report.assets == [output / "images" / "apple.png", output / "styles.css"]
        assert (output / "images" / "apple.png").read_bytes() == b"\x89PNG\r\n\x1a\n"
        assert (output / "styles.css").read_text() == "body { margin: 0 }"
        assert (output / "index").is_file()

    def test_assets_are_copied_before_pages(self, assets: Path) -> None:
        sink = RecordingSink()
        Generator(site=site_with("index"), output_dir=Path("out"), assets_dir=assets, sink=sink).generate()
        kinds = [operation for operation, _ in sink.operations if operation != "create-dir"]
        assert kinds == ["copy", "copy", "write-file"]

    def test_assets_in_output_directory_are_not_copied(self, assets: Path) -> None:
        """Generating into the assets directory only adds pages."""
        sink = RecordingSink()
        report = Generator(site=site_with("index"), output_dir=assets, assets_dir=assets, sink=sink).generate()
        assert report.assets == []
        assert [operation for operation, _ in sink.operations if operation == "copy"] == []

    def test_output_nested_in_assets_is_skipped(self, assets: Path) -> None:
        output = assets / "site"
        (output / "old").mkdir(parents=True)
        (output / "old" / "page").write_text("stale")
        generator = Generator(site=site_with("index"), output_dir=output, assets_dir=assets)
        sources = [source for source, _ in generator.asset_pairs()]
        assert sources == [assets / "images" / "apple.png", assets / "styles.css"]

    def test_missing_assets_directory_raises(self, tmp_path: Path) -> None:
        generator = Generator(site=site_with("index"), output_dir=tmp_path / "site", assets_dir=tmp_path / "nope")
        with pytest.raises(GenerationError, match="read-dir failed"):
            generator.generate()
