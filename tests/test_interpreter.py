"""Tests for the directive interpreter."""

import pytest

from dagzet.errors import (
    ConflictError,
    InvalidCommandError,
    LineError,
    ParseError,
    ReturnCode,
    StateError,
    UnresolvedReferenceError,
    UnsupportedError,
)
from dagzet.models import FileRange

from conftest import build


class TestLineShape:
    """Opcode/argument splitting and generic failures."""

    def test_empty_line_is_ok(self, dz):
        result = dz.parse_line_with_result("")
        assert result.ok
        assert result.code is ReturnCode.OKAY

    def test_short_line_is_parse_error(self, dz):
        with pytest.raises(ParseError):
            dz.parse_line("ns")

    def test_invalid_command(self, dz):
        with pytest.raises(InvalidCommandError):
            dz.parse_line("xx this isn't a real command")

    def test_invalid_command_result(self, dz):
        result = dz.parse_line_with_result("xx nope")
        assert not result.ok
        assert result.code is ReturnCode.INVALID_COMMAND
        assert "Invalid command" in result.message

    def test_reserved_opcode_unsupported(self, dz):
        for line in ("eq x^2", "pg 12", "al foo"):
            with pytest.raises(UnsupportedError):
                dz.parse_line(line)

    def test_comment_is_noop(self, dz):
        assert dz.parse_line_with_result("zz this is a comment").ok
        assert dz.store.nodes == {}

    def test_argument_starts_after_third_character(self, dz):
        dz.parse_line("ns hello world")
        assert dz.namespace == "hello world"


class TestNamespace:
    def test_set_namespace(self, dz):
        dz.parse_line("ns hello")
        assert dz.namespace == "hello"

    def test_graph_remarks_append(self, dz):
        dz.parse_line("ns hello")
        dz.parse_line("gr this is a graph remark")
        dz.parse_line("gr for the node called hello")

        assert dz.store.graph_remarks == {
            "hello": ["this is a graph remark", "for the node called hello"]
        }

    def test_graph_remark_needs_namespace(self, dz):
        with pytest.raises(StateError) as exc:
            dz.parse_line("gr orphan remark")
        assert exc.value.code is ReturnCode.NAMESPACE_NOT_SET


class TestNewNode:
    def test_needs_namespace(self, dz):
        result = dz.parse_line_with_result("nn hello")
        assert result.code is ReturnCode.NAMESPACE_NOT_SET

    def test_ids_sequential_from_one(self, dz):
        dz.parse_line("ns aaa")
        for name in ("bbb", "ccc", "ddd"):
            dz.parse_line(f"nn {name}")

        assert dz.store.nodes == {"aaa/bbb": 1, "aaa/ccc": 2, "aaa/ddd": 3}
        assert dz.store.nodelist == ["aaa/bbb", "aaa/ccc", "aaa/ddd"]
        assert dz.store.check_index_consistency() == []

    def test_selects_new_node(self, dz):
        dz.parse_line("ns aaa")
        dz.parse_line("nn bbb")
        assert dz.curnode == 1
        assert dz.current_path == "aaa/bbb"

    def test_duplicate_conflicts_without_mutation(self, dz):
        dz.parse_line("ns aaa")
        dz.parse_line("nn bbb")
        dz.parse_line("nn ccc")

        with pytest.raises(ConflictError) as exc:
            dz.parse_line("nn bbb")

        assert exc.value.code is ReturnCode.NODE_ALREADY_EXISTS
        assert len(dz.store.nodes) == 2
        assert len(dz.store.nodelist) == 2
        assert dz.current_path == "aaa/ccc"  # selection unchanged

    def test_same_name_in_other_namespace(self, dz):
        dz.parse_line("ns aaa")
        dz.parse_line("nn bbb")
        dz.parse_line("ns zzz")
        dz.parse_line("nn bbb")
        assert set(dz.store.nodes) == {"aaa/bbb", "zzz/bbb"}

    def test_names_are_case_sensitive(self, dz):
        dz.parse_line("ns aaa")
        dz.parse_line("nn Bbb")
        dz.parse_line("nn bbb")
        assert len(dz.store.nodes) == 2

    def test_records_line_number(self, dz):
        dz.parse_line("ns aaa")
        dz.parse_line("nn bbb", linum=7)
        dz.parse_line("nn ccc")
        assert dz.store.noderefs == {1: 7}


class TestSelectNode:
    def test_select(self):
        dz = build("ns top", "nn aaa", "nn bbb", "sn aaa")
        assert dz.current_path == "top/aaa"

    def test_unknown_node(self):
        dz = build("ns top", "nn aaa")
        with pytest.raises(UnresolvedReferenceError) as exc:
            dz.parse_line("sn ccc")
        assert exc.value.code is ReturnCode.UNKNOWN_NODE
        assert dz.current_path == "top/aaa"

    def test_needs_namespace(self, dz):
        assert dz.parse_line_with_result("sn aaa").code is ReturnCode.NAMESPACE_NOT_SET

    def test_needs_argument(self):
        dz = build("ns top")
        assert dz.parse_line_with_result("sn ").code is ReturnCode.NOT_ENOUGH_ARGS


class TestConnect:
    def test_connect(self):
        dz = build("ns top", "nn aaa", "nn bbb", "co bbb aaa")
        assert [c.as_pair() for c in dz.store.connections] == [("top/bbb", "top/aaa")]

    def test_not_enough_args(self):
        dz = build("ns top")
        with pytest.raises(ParseError) as exc:
            dz.parse_line("co bbb")
        assert exc.value.code is ReturnCode.NOT_ENOUGH_ARGS

    def test_needs_namespace(self, dz):
        assert dz.parse_line_with_result("co a b").code is ReturnCode.NAMESPACE_NOT_SET

    def test_forward_reference_allowed(self):
        dz = build("ns top", "co aaa bbb")
        assert len(dz.store.connections) == 1
        assert dz.store.nodes == {}

    def test_namespaces_qualify_each_connection(self):
        dz = build("ns top", "co bbb aaa", "ns pot", "co bbb aaa")
        pairs = [c.as_pair() for c in dz.store.connections]
        assert pairs == [("top/bbb", "top/aaa"), ("pot/bbb", "pot/aaa")]

    def test_duplicate_is_order_sensitive(self):
        dz = build("ns top", "co a b")

        with pytest.raises(ConflictError) as exc:
            dz.parse_line("co a b")
        assert exc.value.code is ReturnCode.ALREADY_CONNECTED

        dz.parse_line("co b a")
        assert len(dz.store.connections) == 2

    def test_shorthand_without_selection(self):
        dz = build("ns top")
        with pytest.raises(StateError) as exc:
            dz.parse_line("co $ bbb")
        assert exc.value.code is ReturnCode.NODE_NOT_SELECTED
        assert dz.store.connections == []

    def test_left_and_right_shorthand(self):
        dz = build("ns top", "nn aaa", "nn bbb", "co $ aaa", "nn ccc", "co bbb $")
        pairs = [c.as_pair() for c in dz.store.connections]
        assert pairs == [("top/bbb", "top/aaa"), ("top/bbb", "top/ccc")]

    def test_relative_path(self):
        dz = build("ns ns", "nn a/b", "co $ ../c")
        assert dz.store.connections[0].as_pair() == ("ns/a/b", "ns/a/c")

    def test_relative_path_needs_selection(self):
        dz = build("ns ns")
        assert dz.parse_line_with_result("co ../a b").code is ReturnCode.NODE_NOT_SELECTED

    def test_extra_tokens_ignored(self):
        dz = build("ns top", "co a b c")
        assert dz.store.connections[0].as_pair() == ("top/a", "top/b")


class TestConnectionRemarks:
    def test_needs_connection(self, dz):
        with pytest.raises(StateError) as exc:
            dz.parse_line("cr no connections have been made yet")
        assert exc.value.code is ReturnCode.NO_CONNECTIONS

    def test_remarks_target_last_connection(self):
        dz = build(
            "ns top",
            "co aaa bbb",
            "co bbb ccc",
            "cr this is a remark",
            "cr this is a remark on another line",
        )
        assert dz.store.connection_remarks == {
            1: ["this is a remark", "this is a remark on another line"]
        }


class TestCrossConnect:
    def test_full_paths_become_xnodes(self, dz):
        dz.parse_line("cx colors/fishes numbers/fishes")
        dz.parse_line("cr kinds of fishes in dr.seuss")

        assert dz.store.xnodes == {"colors/fishes", "numbers/fishes"}
        assert len(dz.store.connections) == 1
        assert len(dz.store.connection_remarks) == 1

    def test_not_enough_args(self, dz):
        result = dz.parse_line_with_result("cx colors/fishes")
        assert result.code is ReturnCode.NOT_ENOUGH_ARGS

    def test_duplicate(self, dz):
        dz.parse_line("cx colors/fishes numbers/fishes")
        result = dz.parse_line_with_result("cx colors/fishes numbers/fishes")
        assert result.code is ReturnCode.ALREADY_CONNECTED
        assert len(dz.store.connections) == 1

    def test_current_node_shorthand(self):
        dz = build("ns a", "nn b", "cx $ other/c")
        assert dz.store.connections[0].as_pair() == ("a/b", "other/c")

    def test_both_sides_current_node(self):
        dz = build("ns a", "nn b", "cx $ $")
        assert dz.store.connections[0].as_pair() == ("a/b", "a/b")

    def test_previous_connection_shorthand(self):
        dz = build("ns a", "co x y", "cx ^ other/z", "cx other/w ^")
        pairs = [c.as_pair() for c in dz.store.connections]
        assert pairs[1] == ("a/x", "other/z")
        assert pairs[2] == ("other/w", "other/z")

    def test_previous_connection_needs_connection(self, dz):
        result = dz.parse_line_with_result("cx ^ other/z")
        assert result.code is ReturnCode.NO_CONNECTIONS

    def test_current_node_needs_selection(self, dz):
        result = dz.parse_line_with_result("cx $ other/z")
        assert result.code is ReturnCode.NODE_NOT_SELECTED

    def test_alias_unsupported(self, dz):
        with pytest.raises(UnsupportedError):
            dz.parse_line("cx @fish other/z")
        assert dz.store.connections == []
        assert dz.store.xnodes == set()

    def test_no_namespace_needed(self, dz):
        assert dz.parse_line_with_result("cx a/b c/d").ok


class TestNodeText:
    def test_lines_need_selection(self):
        dz = build("ns aaa")
        assert dz.parse_line_with_result("ln hello line").code is ReturnCode.NODE_NOT_SELECTED

    def test_lines_append(self):
        dz = build("ns aaa", "nn bbb", "ln ccc", "ln another line")
        assert dz.store.lines == {1: ["ccc", "another line"]}

    def test_remarks_need_selection(self):
        dz = build("ns aaa")
        assert dz.parse_line_with_result("rm hello").code is ReturnCode.NODE_NOT_SELECTED

    def test_remarks_append(self):
        dz = build("ns aaa", "nn bbb", "rm ccc", "rm another line")
        assert dz.store.node_remarks == {1: ["ccc", "another line"]}


class TestFileRange:
    def test_start_and_end(self):
        dz = build("ns aaa", "nn bbb", "fr foo 1 4")
        assert dz.store.file_ranges[1] == FileRange(filename="foo", start=1, end=4)

    def test_start_only_means_to_end_of_file(self):
        dz = build("ns aaa", "nn bbb", "fr foo 4")
        fr = dz.store.file_ranges[1]
        assert fr.start == 4
        assert fr.end is None

    def test_filename_only_means_whole_file(self):
        dz = build("ns aaa", "nn bbb", "fr foo")
        assert dz.store.file_ranges[1].whole_file

    def test_start_after_end(self):
        dz = build("ns aaa", "nn bbb")
        with pytest.raises(UnresolvedReferenceError) as exc:
            dz.parse_line("fr foo 4 1")
        assert exc.value.code is ReturnCode.BAD_RANGE
        assert dz.store.file_ranges == {}

    def test_non_numeric_bound(self):
        dz = build("ns aaa", "nn bbb")
        with pytest.raises(ParseError):
            dz.parse_line("fr foo one 4")
        with pytest.raises(ParseError):
            dz.parse_line("fr foo 1 four")

    def test_negative_bound_means_absent(self):
        """fr foo 5 -1 is line 5 to the end of the file."""
        dz = build("ns aaa", "nn bbb", "fr foo 5 -1", "nn ccc", "fr foo -1 4")
        assert dz.store.file_ranges[1] == FileRange(filename="foo", start=5, end=None)
        assert dz.store.file_ranges[2] == FileRange(filename="foo", start=None, end=4)

    def test_negative_bounds_skip_order_check(self):
        dz = build("ns aaa", "nn bbb", "fr foo 9 -3")
        assert dz.store.file_ranges[1].bounds() == (9, -1)

    def test_bound_must_be_plain_integer(self):
        dz = build("ns aaa", "nn bbb")
        for token in ("1_000", "4.0", "0x10", "--1"):
            with pytest.raises(ParseError):
                dz.parse_line(f"fr foo {token}")
        assert dz.store.file_ranges == {}

    def test_signed_bound(self):
        dz = build("ns aaa", "nn bbb", "fr foo +5 10")
        assert dz.store.file_ranges[1] == FileRange(filename="foo", start=5, end=10)

    def test_reuse_last_filename(self):
        dz = build("ns aaa", "nn bbb", "fr foo 1 4", "nn ccc", "fr $ 3 5")
        assert dz.store.file_ranges[2] == FileRange(filename="foo", start=3, end=5)

    def test_reuse_without_previous_filename(self):
        dz = build("ns aaa", "nn bbb")
        with pytest.raises(StateError) as exc:
            dz.parse_line("fr $ 1 4")
        assert exc.value.code is ReturnCode.NO_FILENAME

    def test_failed_range_keeps_last_filename(self):
        dz = build("ns aaa", "nn bbb", "fr foo")
        dz.parse_line_with_result("fr bar 9 2")
        assert dz.last_filename == "foo"

    def test_needs_selection(self):
        dz = build("ns aaa")
        assert dz.parse_line_with_result("fr foo").code is ReturnCode.NODE_NOT_SELECTED


class TestSingleValuedAttributes:
    def test_hyperlink(self):
        dz = build("ns links", "nn internet_archive", "hl http://archive.org extra")
        assert dz.store.hyperlinks == {1: "http://archive.org"}

    def test_hyperlink_needs_selection(self):
        dz = build("ns links")
        result = dz.parse_line_with_result("hl http://archive.org")
        assert result.code is ReturnCode.NODE_NOT_SELECTED

    def test_hyperlink_needs_token(self):
        dz = build("ns links", "nn a")
        assert dz.parse_line_with_result("hl ").code is ReturnCode.NOT_ENOUGH_ARGS

    def test_todo(self):
        dz = build("ns top", "nn aaa", "td todo item")
        assert dz.store.todos == {1: "todo item"}

    def test_todo_needs_selection(self):
        dz = build("ns top")
        assert dz.parse_line_with_result("td todo item").code is ReturnCode.NODE_NOT_SELECTED

    def test_image_and_audio(self):
        dz = build("ns a", "nn b", "im c.jpg", "au c.mp3")
        assert dz.store.images == {1: "c.jpg"}
        assert dz.store.audio == {1: "c.mp3"}

    def test_later_value_replaces(self):
        dz = build("ns a", "nn b", "im one.jpg", "im two.jpg")
        assert dz.store.images == {1: "two.jpg"}


class TestTags:
    def test_needs_selection(self):
        dz = build("ns top")
        assert dz.parse_line_with_result("tg oops").code is ReturnCode.NODE_NOT_SELECTED

    def test_tags_accumulate(self):
        dz = build("ns seuss", "nn fishes", "tg one two red blue", "tg green")
        assert dz.store.tags[1] == {"one", "two", "red", "blue", "green"}

    def test_duplicate_against_existing(self):
        dz = build("ns seuss", "nn fishes", "tg red")
        with pytest.raises(ConflictError) as exc:
            dz.parse_line("tg blue red")
        assert exc.value.code is ReturnCode.DUPLICATE_TAG
        assert dz.store.tags[1] == {"red"}

    def test_duplicate_within_line_is_atomic(self):
        dz = build("ns seuss", "nn do_not_like")
        assert not dz.parse_line_with_result("tg green_eggs ham green_eggs").ok
        assert 1 not in dz.store.tags


class TestFlashCards:
    def test_front_and_back(self):
        dz = build("ns test", "nn a", "ff front of card", "fb back of card")
        card = dz.store.flashcards[1]
        assert card.front == ["front of card"]
        assert card.back == ["back of card"]

    def test_front_only(self):
        dz = build("ns test", "nn a", "nn b", "ff one", "ff two")
        card = dz.store.flashcards[2]
        assert card.front == ["one", "two"]
        assert card.back == []

    def test_needs_selection(self):
        dz = build("ns test")
        assert dz.parse_line_with_result("fb back").code is ReturnCode.NODE_NOT_SELECTED


class TestParseLines:
    def test_stops_at_first_failure(self, dz):
        with pytest.raises(LineError) as exc:
            dz.parse_lines(["ns a", "nn b", "nn b", "nn c"])

        err = exc.value
        assert err.linum == 3
        assert err.line == "nn b"
        assert err.code is ReturnCode.NODE_ALREADY_EXISTS
        assert isinstance(err.cause, ConflictError)
        assert "line 3" in str(err)
        assert set(dz.store.nodes) == {"a/b"}

    def test_filename_in_message(self, dz):
        with pytest.raises(LineError, match=r"notes.dz:1"):
            dz.parse_lines(["nn b"], filename="notes.dz")

    def test_start_offset(self, dz):
        dz.parse_lines(["ns a", "nn b"], start=10)
        assert dz.store.noderefs == {1: 11}

    def test_returns_count(self, dz):
        assert dz.parse_lines(["ns a", "", "nn b"]) == 3

    def test_multiple_streams_share_ids(self, dz):
        dz.parse_lines(["ns one", "nn a"])
        dz.parse_lines(["ns two", "nn a"])
        assert dz.store.nodes == {"one/a": 1, "two/a": 2}
