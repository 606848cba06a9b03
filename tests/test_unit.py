"""
Unit Tests - Test individual components in isolation.
"""

import logging

import pytest

from cpack.config import Config, load_config
from cpack.entry import InputSpec, PackedEntry
from cpack.errors import ConfigError, MalformedArgumentsError, PackError
from cpack.format import (
    DEFAULT_PREFIX,
    HEADER,
    TableRenderer,
    accessor_code,
    c_string_literal,
    directory_row,
    printable,
    render_table,
)
from cpack.reader import decode_c_string, parse_table_body
from cpack.scanner import scan_arguments


# =============================================================================
# Byte table rendering
# =============================================================================

class TestTableRenderer:

    def test_hello(self):
        assert render_table("v1", b"hello") == (
            "static const unsigned char v1[] = {\n"
            " 104, 101, 108, 108, 111, 0 // hello\n"
            "};\n"
        )

    def test_empty_table_is_just_the_terminator(self):
        assert render_table("v3", b"") == (
            "static const unsigned char v3[] = {\n"
            " 0 // \n"
            "};\n"
        )

    def test_exactly_one_full_line(self):
        text = render_table("v1", b"abcdefghijkl")
        body = text.split("\n")[1]
        assert body.endswith(" 108, 0 // abcdefghijkl")
        assert text.count("//") == 1

    def test_wraps_after_twelve_bytes(self):
        text = render_table("v1", b"abcdefghijklm")
        lines = text.split("\n")
        assert lines[1].endswith(" 108, // abcdefghijkl")
        assert lines[2] == " 109, 0 // m"
        assert lines[3] == "};"

    def test_numbers_are_right_aligned(self):
        text = render_table("v1", bytes([7, 42, 255]))
        assert "   7,  42, 255, 0 //" in text

    def test_non_printable_and_backslash_become_placeholders(self):
        text = render_table("v1", b"a\x00\\\x7f\xffz")
        assert text.split("\n")[1].endswith("// a....z")

    def test_chunked_feed_matches_single_feed(self):
        data = bytes(range(256)) * 3
        r = TableRenderer("v9")
        parts = [r.start()]
        for i in range(0, len(data), 7):
            parts.append(r.feed(data[i:i + 7]))
        parts.append(r.finish())
        assert "".join(parts) == render_table("v9", data)
        assert r.size == len(data)

    def test_feed_after_finish_raises(self):
        r = TableRenderer("v1")
        r.finish()
        with pytest.raises(RuntimeError):
            r.feed(b"x")

    def test_no_trigraphs_in_comments(self):
        # "??/" in a comment would splice the next line of values into it
        text = render_table("v1", b"abcdefghi??/XYZ")
        lines = text.split("\n")
        assert lines[1].endswith(" 63,  63,  47, // abcdefghi?./")
        assert lines[2] == "  88,  89,  90, 0 // XYZ"
        assert "??" not in text

    def test_question_mark_runs_alternate_with_placeholders(self):
        text = render_table("v1", b"????")
        assert text.split("\n")[1].endswith("// ?.?.")
        assert "??" not in text

    def test_question_marks_across_a_line_break(self):
        text = render_table("v1", b"abcdefghijk??/")
        assert "??" not in text
        assert text.split("\n")[1].endswith("// abcdefghijk?")
        assert text.split("\n")[2].endswith("// ?/")

    def test_printable(self):
        assert printable(ord(" ")) == " "
        assert printable(ord("~")) == "~"
        assert printable(0x1F) == "."
        assert printable(ord("\\")) == "."


# =============================================================================
# C string literals
# =============================================================================

class TestCStringLiteral:

    def test_plain(self):
        assert c_string_literal("/hello.txt") == '"/hello.txt"'

    def test_quote_and_backslash(self):
        assert c_string_literal('/a"b\\c') == '"/a\\"b\\\\c"'

    def test_control_bytes_are_octal(self):
        assert c_string_literal("/a\nb") == '"/a\\012b"'

    def test_utf8_bytes_are_octal(self):
        assert c_string_literal("/é") == '"/\\303\\251"'

    def test_trigraphs_are_broken_up(self):
        assert c_string_literal("/??=") == '"/?\\?="'

    def test_raw_bytes(self):
        assert c_string_literal(b"/\xff") == '"/\\377"'

    @pytest.mark.parametrize("name", [
        "/plain.txt",
        '/q"uote',
        "/back\\slash",
        "/tab\there",
        "/été",
        "/what??!",
        "/digits\x01123",
    ])
    def test_decode_inverts_encode(self, name):
        assert decode_c_string(c_string_literal(name)) == name.encode("utf-8")

    def test_decode_rejects_unquoted(self):
        with pytest.raises(ValueError):
            decode_c_string("abc")


# =============================================================================
# Directory rows and accessors
# =============================================================================

class TestDirectoryRow:

    def test_unfiltered_row(self):
        assert directory_row("/a.txt", "v1", 1700000000, False) == (
            '  {"/a.txt", v1, sizeof(v1), 1700000000, 0},\n'
        )

    def test_filtered_row(self):
        assert directory_row("/b", "v4", 0, True).endswith("sizeof(v4), 0, 1},\n")


class TestAccessorCode:

    def test_default_prefix(self):
        code = accessor_code()
        assert DEFAULT_PREFIX == "mg_"
        assert "const char *mg_unlist(size_t no) {" in code
        assert code.count(
            "const char *mg_unpack(const char *name, size_t *size, time_t *mtime)"
        ) == 2
        assert "*size = p->size - 1;" in code
        assert "return NULL;" in code

    def test_forward_declaration_precedes_definition(self):
        code = accessor_code()
        decl = code.index("time_t *mtime);")
        definition = code.index("time_t *mtime) {")
        assert decl < definition

    def test_custom_prefix(self):
        code = accessor_code("fs_")
        assert "fs_unlist" in code
        assert "fs_unpack" in code
        assert "mg_" not in code

    def test_empty_prefix(self):
        assert "const char *unpack(" in accessor_code("")

    @pytest.mark.parametrize("prefix", ["1abc", "a-b", "a b", "mg_;"])
    def test_invalid_prefix(self, prefix):
        with pytest.raises(ValueError):
            accessor_code(prefix)

    def test_header_includes(self):
        assert "#include <stddef.h>" in HEADER
        assert "#include <string.h>" in HEADER
        assert "#include <time.h>" in HEADER


class TestParseTableBody:

    def test_comments_are_ignored(self):
        assert parse_table_body(" 47, 47, 0 // //\n") == b"//\x00"

    def test_out_of_range(self):
        with pytest.raises(ValueError):
            parse_table_body(" 256, 0 // .\n")


# =============================================================================
# Entries
# =============================================================================

class TestEntries:

    def test_input_spec_defaults(self):
        spec = InputSpec(path="a.txt")
        assert spec.filter is None
        assert not spec.filtered
        assert spec.name == "/a.txt"
        assert spec.table == "v1"

    def test_packed_entry_from_spec(self):
        spec = InputSpec(path="b.bin", filter="gzip -c", position=4)
        entry = PackedEntry.from_spec(spec, size=10, mtime=123)
        assert entry == PackedEntry(name="/b.bin", table="v4", size=10, mtime=123, filtered=True)
        assert entry.physical_size == 11


# =============================================================================
# Argument scanner
# =============================================================================

class TestScanner:

    def test_empty(self):
        assert scan_arguments([]) == []

    def test_plain_files(self):
        specs = scan_arguments(["a", "b"])
        assert [(s.path, s.filter, s.position) for s in specs] == [
            ("a", None, 1),
            ("b", None, 2),
        ]

    def test_filter_applies_to_following_files_only(self):
        specs = scan_arguments(["A", "-z", "F", "B", "C"])
        assert [(s.path, s.filter) for s in specs] == [
            ("A", None),
            ("B", "F"),
            ("C", "F"),
        ]
        # Positions count the directive tokens too
        assert [s.position for s in specs] == [1, 4, 5]

    def test_filter_override(self):
        specs = scan_arguments(["-z", "gzip -c", "a", "-z", "xz -c", "b"])
        assert [(s.path, s.filter) for s in specs] == [("a", "gzip -c"), ("b", "xz -c")]

    def test_empty_command_clears_filter(self):
        specs = scan_arguments(["-z", "gzip -c", "a", "-z", "", "b"])
        assert specs[1].filter is None
        assert not specs[1].filtered

    def test_directive_without_files_produces_no_entries(self):
        assert scan_arguments(["-z", "gzip -c"]) == []

    def test_trailing_flag_is_rejected(self):
        with pytest.raises(MalformedArgumentsError) as exc:
            scan_arguments(["a", "-z"])
        assert "-z" in str(exc.value)
        assert isinstance(exc.value, ValueError)
        assert isinstance(exc.value, PackError)

    def test_flag_value_is_taken_verbatim(self):
        specs = scan_arguments(["-z", "-z", "a"])
        assert [(s.path, s.filter) for s in specs] == [("a", "-z")]

    def test_other_dash_arguments_are_paths(self):
        specs = scan_arguments(["--help", "-v"])
        assert [s.path for s in specs] == ["--help", "-v"]

    def test_duplicates_are_kept(self):
        specs = scan_arguments(["a", "a"])
        assert [s.table for s in specs] == ["v1", "v2"]


# =============================================================================
# Configuration
# =============================================================================

class TestConfig:

    def test_defaults(self):
        assert load_config({}) == Config()
        assert Config().prefix == "mg_"
        assert Config().log_level == logging.WARNING

    def test_prefix(self):
        assert load_config({"CPACK_SYMBOL_PREFIX": "fs_"}).prefix == "fs_"

    def test_invalid_prefix(self):
        with pytest.raises(ConfigError):
            load_config({"CPACK_SYMBOL_PREFIX": "9x"})

    def test_log_level_is_case_insensitive(self):
        assert load_config({"CPACK_LOG_LEVEL": "debug"}).log_level == logging.DEBUG

    def test_unknown_log_level(self):
        with pytest.raises(ConfigError):
            load_config({"CPACK_LOG_LEVEL": "chatty"})

    def test_chunk_size(self):
        assert load_config({"CPACK_CHUNK_SIZE": "16"}).chunk_size == 16

    @pytest.mark.parametrize("value", ["0", "-4", "lots"])
    def test_bad_chunk_size(self, value):
        with pytest.raises(ConfigError):
            load_config({"CPACK_CHUNK_SIZE": value})
