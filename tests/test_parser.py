# tests/test_parser.py

import pytest

from cardwatch.parser import parse_line, parse_lines


class TestParseLine:
    """Tests for the comma-delimited record parser"""

    def test_valid_line(self):
        """✅ Six fields map onto a Transaction."""
        txn = parse_line("1,A1,Amazon,retail,100.0,2024-01-01\n")

        assert txn is not None
        assert txn.transaction_id == 1
        assert txn.account_no == "A1"
        assert txn.merchant == "Amazon"
        assert txn.category == "retail"
        assert txn.amount == 100.0
        assert txn.transaction_date == "2024-01-01"
        assert txn.alert is None

    def test_crlf_is_stripped(self):
        """✅ Windows line endings don't leak into the timestamp."""
        txn = parse_line("7,A2,Shell,fuel,45.5,2024-01-02 10:00:00\r\n")
        assert txn.transaction_date == "2024-01-02 10:00:00"

    def test_extra_fields_ignored(self):
        """✅ Fields beyond the sixth are ignored."""
        txn = parse_line("3,A1,x,y,10,2024-01-01,extra,more")
        assert txn is not None
        assert txn.transaction_date == "2024-01-01"

    @pytest.mark.parametrize("line", [
        "",
        "1",
        "1,A1,x,y,100.0",
        "1,A1,x,y",
    ])
    def test_short_lines_rejected(self, line):
        """✅ Fewer than six fields yields nothing."""
        assert parse_line(line) is None

    @pytest.mark.parametrize("line", [
        "1,A1,x,y,notanumber,2024-01-01",
        "abc,A1,x,y,100.0,2024-01-01",
        "1.5,A1,x,y,100.0,2024-01-01",
        ",A1,x,y,100.0,2024-01-01",
        "1,A1,x,y,,2024-01-01",
        "1,A1,x,y,nan,2024-01-01",
        "1,A1,x,y,inf,2024-01-01",
    ])
    def test_bad_numbers_rejected(self, line):
        """✅ Non-numeric identifier or amount yields nothing."""
        assert parse_line(line) is None

    def test_descriptive_fields_are_opaque(self):
        """✅ Empty descriptive fields pass through untouched."""
        txn = parse_line("5,,,,0,")
        assert txn is not None
        assert txn.account_no == ""
        assert txn.merchant == ""
        assert txn.transaction_date == ""


class TestParseLines:

    def test_skips_rejected(self):
        """✅ Only accepted lines come out, in order."""
        lines = [
            "1,A1,x,y,100.0,2024-01-01",
            "garbage",
            "2,A1,x,y,notanumber,2024-01-01",
            "3,B2,x,y,5.0,2024-01-01",
        ]
        ids = [t.transaction_id for t in parse_lines(lines)]
        assert ids == [1, 3]
