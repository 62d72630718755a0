"""Tests for filename sanitizing."""

import pytest

from jd_organizer.utils.filenames import (
    get_base_name,
    get_extension,
    sanitize_filename,
    sanitize_text,
    split_name,
)


class TestNameParts:
    """Test base name and extension splitting."""

    @pytest.mark.parametrize("name,base,ext", [
        ("report.pdf", "report", "pdf"),
        ("archive.tar.gz", "archive.tar", "gz"),
        ("README", "README", ""),
        (".gitignore", ".gitignore", ""),
        (".env.local", ".env", "local"),
        ("trailing.", "trailing", ""),
    ])
    def test_base_and_extension(self, name, base, ext):
        assert get_base_name(name) == base
        assert get_extension(name) == ext

    def test_split_name(self):
        assert split_name("a.txt") == ("a", ".txt")
        assert split_name("Makefile") == ("Makefile", "")


class TestSanitizeFilename:
    """Test sanitize_filename."""

    @pytest.mark.parametrize("value", [None, "", "...", "   "])
    def test_empty_becomes_unnamed(self, value):
        assert sanitize_filename(value) == "unnamed"

    def test_invalid_characters_replaced(self):
        assert sanitize_filename('a<b>c:d"e|f?g*h.txt') == "a_b_c_d_e_f_g_h.txt"
        assert sanitize_filename("dir/file\\name.txt") == "dir_file_name.txt"

    def test_control_characters_replaced(self):
        assert sanitize_filename("a\x01b\x1f.txt") == "a_b_.txt"

    def test_surrounding_whitespace_and_trailing_dots_removed(self):
        assert sanitize_filename("  notes.txt  ") == "notes.txt"
        assert sanitize_filename("draft...") == "draft"

    def test_dotfile_keeps_single_leading_dot(self):
        assert sanitize_filename(".gitignore") == ".gitignore"
        assert sanitize_filename("backup_.gitignore") == "backup_.gitignore"

    def test_multiple_leading_dots_stripped(self):
        assert sanitize_filename("...hidden") == "hidden"

    @pytest.mark.parametrize("name,expected", [
        ("CON", "_CON"),
        ("con.txt", "_con.txt"),
        ("LPT1.log", "_LPT1.log"),
        ("COM9", "_COM9"),
        ("CONSOLE.txt", "CONSOLE.txt"),
    ])
    def test_reserved_names_prefixed(self, name, expected):
        assert sanitize_filename(name) == expected

    def test_long_name_keeps_extension(self):
        result = sanitize_filename("a" * 300 + ".txt")
        assert len(result) <= 250
        assert result.endswith(".txt")
        assert result == "a" * 242 + ".txt"

    def test_long_name_without_extension(self):
        assert sanitize_filename("b" * 300) == "b" * 250

    def test_safe_name_unchanged(self):
        assert sanitize_filename("2025_Invoice-01.pdf") == "2025_Invoice-01.pdf"


class TestSanitizeText:
    """Test sanitize_text for prefixes and suffixes."""

    def test_angle_brackets_removed(self):
        assert sanitize_text("<b>bold</b>") == "bbold/b"

    def test_whitespace_collapsed(self):
        assert sanitize_text("  a   b\t\tc  ") == "a b c"

    def test_control_characters_removed(self):
        assert sanitize_text("a\x00b\x07c") == "abc"

    def test_empty(self):
        assert sanitize_text(None) == ""
        assert sanitize_text("") == ""
