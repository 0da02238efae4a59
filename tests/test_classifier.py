"""Tests for RowClassifier and RowReader."""

import asyncio

import pytest

from csv_tools import BytesSource, RowClassifier, RowKind, RowReader, SourceReadError


def read_all(data: bytes, read_size: int = 65536):
    reader = RowReader()
    rows = []
    for start in range(0, len(data), read_size):
        rows.extend(reader.feed(data[start:start + read_size]))
    rows.extend(reader.finish())
    return rows


class TestRowClassifier:
    """Tests for header / data / blank classification."""

    def test_first_non_blank_line_is_header(self):
        classifier = RowClassifier()
        row = classifier.classify("  name,age  ")
        assert row.kind is RowKind.HEADER
        assert row.text == "name,age"
        assert classifier.has_seen_header

    def test_leading_blank_lines_are_discarded(self):
        classifier = RowClassifier()
        assert classifier.classify("") is None
        assert classifier.classify("   \t") is None
        assert not classifier.has_seen_header

        row = classifier.classify("id")
        assert row.kind is RowKind.HEADER
        assert row.line_number == 3

    def test_data_and_blank_after_header(self):
        classifier = RowClassifier()
        classifier.classify("id")
        data = classifier.classify("1\r")
        blank = classifier.classify("  \r")

        assert data.kind is RowKind.DATA
        assert data.text == "1"
        assert blank.kind is RowKind.BLANK
        assert blank.text == ""

    def test_only_one_header(self):
        classifier = RowClassifier()
        kinds = [classifier.classify(line).kind for line in ["a", "a", "b"]]
        assert kinds == [RowKind.HEADER, RowKind.DATA, RowKind.DATA]


class TestRowReader:
    """Tests for the shared framer + classifier driver."""

    def test_rows_with_line_numbers(self):
        rows = read_all(b"\nid\n1\n\n2\n")
        assert [(r.kind, r.text, r.line_number) for r in rows] == [
            (RowKind.HEADER, "id", 2),
            (RowKind.DATA, "1", 3),
            (RowKind.BLANK, "", 4),
            (RowKind.DATA, "2", 5),
        ]

    def test_trailing_blank_lines_are_dropped(self):
        rows = read_all(b"id\n1\n\n\n   \n")
        assert [r.kind for r in rows] == [RowKind.HEADER, RowKind.DATA]

    def test_blank_lines_released_before_next_data_row(self):
        reader = RowReader()
        assert [r.text for r in reader.feed(b"id\n1\n\n\n")] == ["id", "1"]
        rows = reader.feed(b"2\n")
        assert [r.kind for r in rows] == [RowKind.BLANK, RowKind.BLANK, RowKind.DATA]
        assert [r.line_number for r in rows] == [3, 4, 5]

    def test_unterminated_last_line(self):
        rows = read_all(b"id\n1\n2", read_size=1)
        assert [r.text for r in rows] == ["id", "1", "2"]

    def test_whitespace_only_input(self):
        assert read_all(b"  \n\t\n ") == []

    def test_pull_reads_until_done(self):
        async def pull_all():
            reader = RowReader()
            source = BytesSource(b"id\n1\n2", read_size=2)
            rows = []
            while not reader.done:
                rows.extend(await reader.pull(source))
            return rows

        rows = asyncio.run(pull_all())
        assert [r.text for r in rows] == ["id", "1", "2"]

    def test_pull_wraps_source_failures(self, tracking_source):
        async def pull_once():
            source = tracking_source(BytesSource(b"id\n"), fail_on_read=1)
            await RowReader().pull(source)

        with pytest.raises(SourceReadError) as exc_info:
            asyncio.run(pull_once())
        assert isinstance(exc_info.value.__cause__, OSError)

    def test_long_blank_run_keeps_constant_state(self):
        reader = RowReader()
        reader.feed(b"h\na\n")
        for _ in range(200):
            assert reader.feed(b"\n" * 1000) == []

        assert reader.held_blank_count == 200000
        assert reader._first_held_blank_line == 3
        assert vars(reader).keys() == {
            "framer", "classifier", "held_blank_count", "_first_held_blank_line"
        }

        rows = reader.feed(b"b\n")
        assert len(rows) == 200001
        assert rows[0].line_number == 3
        assert rows[-2] == (RowKind.BLANK, "", 200002)
        assert rows[-1] == (RowKind.DATA, "b", 200003)
        assert reader.held_blank_count == 0

    def test_blank_runs_numbered_separately(self):
        rows = read_all(b"h\n\na\n\n\nb\n\n")
        assert [(r.kind, r.line_number) for r in rows] == [
            (RowKind.HEADER, 1),
            (RowKind.BLANK, 2),
            (RowKind.DATA, 3),
            (RowKind.BLANK, 4),
            (RowKind.BLANK, 5),
            (RowKind.DATA, 6),
        ]
