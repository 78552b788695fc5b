"""Tests for the command-line interface."""

import json

from palettegen.cli import create_parser, main


class TestCLI:
    """Test cases for main."""

    def test_image_palette(self, image_file, capsys):
        """Test printing an image palette as hex lines."""
        code = main([str(image_file), "-k", "4", "--seed", "1"])
        lines = capsys.readouterr().out.strip().splitlines()

        assert code == 0
        assert len(lines) == 4
        assert all(line.startswith("#") and len(line) == 7 for line in lines)

    def test_random_palette_json(self, capsys):
        """Test printing a random palette as JSON."""
        code = main(["--random", "-k", "3", "--seed", "5", "--format", "json"])
        entries = json.loads(capsys.readouterr().out)

        assert code == 0
        assert len(entries) == 3
        for entry in entries:
            assert entry["hex"].startswith("#")
            assert len(entry["rgb"]) == 3
            assert entry["contrast"] in ("black", "white")

    def test_missing_input(self, tmp_path, capsys):
        """Test that a missing file exits with 1."""
        code = main([str(tmp_path / "nope.png")])

        assert code == 1
        assert "not found" in capsys.readouterr().err

    def test_undecodable_input(self, tmp_path, capsys):
        """Test that a broken image exits with 1."""
        path = tmp_path / "broken.jpg"
        path.write_bytes(b"garbage")

        assert main([str(path)]) == 1
        assert capsys.readouterr().err.startswith("Error:")

    def test_no_input(self, capsys):
        """Test that running without an image or --random fails."""
        assert main([]) == 1
        assert "required" in capsys.readouterr().err

    def test_invalid_color_count(self, image_file, capsys):
        """Test that -k 0 is rejected."""
        assert main([str(image_file), "-k", "0"]) == 1
        assert "n_colors" in capsys.readouterr().err

    def test_parser_defaults(self):
        """Test parser default values."""
        parsed = create_parser().parse_args(["photo.png"])

        assert parsed.colors == 5
        assert parsed.iterations == 10
        assert parsed.seed is None
        assert parsed.format == "text"
