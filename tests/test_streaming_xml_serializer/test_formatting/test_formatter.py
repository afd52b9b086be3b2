"""Tests for the depth-first formatter and its suspension behaviour."""

import pytest

from streaming_xml_serializer.formatting import (
    DeferredElement,
    ElementState,
    Formatter,
    PendingTable,
)
from streaming_xml_serializer.shared import FormatterError, SerializationMetrics
from streaming_xml_serializer.tree import ParsedNode, resolve


class Recorder:
    """Append callback recording fragments and interrupt signals."""

    def __init__(self):
        self.parts = []
        self.interrupts = 0

    def __call__(self, text="", interrupt=False):
        self.parts.append(text)
        if interrupt:
            self.interrupts += 1

    @property
    def text(self):
        return "".join(self.parts)


@pytest.fixture
def table():
    return PendingTable()


@pytest.fixture
def formatter(table):
    return Formatter(table=table)


class TestCompleteFormatting:
    """Test formatting of fully resolved trees."""

    def test_scalar_element(self, formatter):
        recorder = Recorder()
        completed = formatter.format(recorder, resolve({"tag": "v"}))
        assert completed is True
        assert recorder.text == "<tag>v</tag>"

    def test_self_closing(self, formatter):
        recorder = Recorder()
        formatter.format(recorder, resolve({"tag": []}))
        assert recorder.text == "<tag/>"

    def test_plain_string_fast_path(self, formatter):
        recorder = Recorder()
        formatter.format(recorder, "raw")
        assert recorder.parts == ["raw"]

    def test_attributes(self, formatter):
        recorder = Recorder()
        formatter.format(recorder, resolve({"a": [{"_attr": {"x": "1", "y": "2"}}, "t"]}))
        assert recorder.text == '<a x="1" y="2">t</a>'

    def test_indented_document(self, formatter):
        """Test that multi-child elements break lines and single-child ones stay inline."""
        # Arrange
        node = resolve(
            {"root": [{"a": 1}, {"b": [{"_attr": {"x": "1"}}, "hi"]}]}, "    ", 0
        )
        recorder = Recorder()

        # Act
        formatter.format(recorder, node)

        # Assert
        assert recorder.text == (
            "<root>\n"
            "    <a>1</a>\n"
            '    <b x="1">hi</b>\n'
            "</root>\n"
        )

    def test_indented_self_closing(self, formatter):
        recorder = Recorder()
        formatter.format(recorder, resolve({"r": [{"e": None}]}, "\t", 0))
        assert recorder.text == "<r>\n\t<e/>\n</r>\n"

    def test_on_finish_called_once(self, formatter):
        calls = []
        formatter.format(Recorder(), resolve({"a": [{"b": 1}]}), on_finish=lambda: calls.append(1))
        assert calls == [1]

    def test_on_finish_for_empty_node(self, formatter):
        calls = []
        formatter.format(Recorder(), resolve({"a": None}), on_finish=lambda: calls.append(1))
        assert calls == [1]

    def test_node_is_formatted_once(self, formatter):
        """Test that a consumed node cannot be formatted again."""
        # Arrange
        node = resolve({"a": 1})
        formatter.format(Recorder(), node)

        # Act & Assert
        with pytest.raises(FormatterError, match="already been formatted"):
            formatter.format(Recorder(), node)

    def test_metrics(self, table):
        metrics = SerializationMetrics()
        Formatter(table=table, metrics=metrics).format(Recorder(), resolve({"r": [{"a": 1}, {"b": 2}]}))
        assert metrics.elements_formatted == 3
        assert metrics.suspensions == 0


class TestSuspension:
    """Test suspending at deferred elements."""

    def test_suspends_at_pending_descendant(self, table, formatter):
        """Test that siblings after a pending node wait for its close."""
        # Arrange
        handle = DeferredElement(table=table)
        node = resolve({"root": [{"a": 1}, {"rows": handle}, {"b": 2}]})
        recorder = Recorder()
        finished = []

        # Act
        completed = formatter.format(recorder, node, on_finish=lambda: finished.append(True))

        # Assert
        assert completed is False
        assert recorder.text == "<root><a>1</a><rows>"
        assert recorder.interrupts == 1
        assert "<b>" not in recorder.text
        assert finished == []
        assert table.get(handle.element_id).state is ElementState.WIRED
        assert node.remaining == (node.content[3], "")

    def test_resumes_in_document_order(self, table, formatter):
        """Test that pushes land inside the suspended element and close resumes."""
        # Arrange
        handle = DeferredElement(table=table)
        node = resolve({"root": [{"a": 1}, {"rows": handle}, {"b": 2}]})
        recorder = Recorder()
        finished = []
        formatter.format(recorder, node, on_finish=lambda: finished.append(True))

        # Act
        handle.push({"row": 1})
        handle.push({"row": 2})
        handle.close()

        # Assert
        assert recorder.text == "<root><a>1</a><rows><row>1</row><row>2</row></rows><b>2</b></root>"
        assert recorder.interrupts == 3
        assert finished == [True]

    def test_pending_root(self, table, formatter):
        handle = DeferredElement({"_attr": {"k": "v"}}, table=table)
        recorder = Recorder()
        assert formatter.format(recorder, resolve({"toys": handle})) is False
        assert recorder.text == '<toys k="v">'

    def test_unregistered_placeholder(self, formatter):
        """Test that a placeholder unknown to the table is reported."""
        node = ParsedNode(name="x", content=("", ""), pending_id="missing")
        with pytest.raises(FormatterError, match="not registered"):
            formatter.format(Recorder(), node)

    def test_suspension_is_counted(self, table):
        metrics = SerializationMetrics()
        handle = DeferredElement(table=table)
        Formatter(table=table, metrics=metrics).format(Recorder(), resolve({"a": handle}))
        assert metrics.suspensions == 1

    def test_pending_under_ready_element(self, table, formatter):
        """Test that a deferred grandchild suspends every ancestor."""
        # Arrange
        handle = DeferredElement(table=table)
        node = resolve({"doc": [{"body": [{"rows": handle}]}, {"footer": 1}]})
        recorder = Recorder()
        finished = []

        # Act
        completed = formatter.format(recorder, node, on_finish=lambda: finished.append(True))

        # Assert
        assert completed is False
        assert recorder.text == "<doc><body><rows>"
        assert finished == []

    def test_resume_under_ready_element(self, table, formatter):
        """Test that closing a deferred grandchild finishes its ancestors in order."""
        # Arrange
        handle = DeferredElement(table=table)
        node = resolve({"doc": [{"body": [{"rows": handle}, {"summary": 2}]}, {"footer": 1}]})
        recorder = Recorder()
        finished = []
        formatter.format(recorder, node, on_finish=lambda: finished.append(True))

        # Act
        handle.push({"row": 1})
        before_close = recorder.text
        handle.close()

        # Assert
        assert before_close == "<doc><body><rows><row>1</row>"
        assert recorder.text == (
            "<doc><body><rows><row>1</row></rows><summary>2</summary></body>"
            "<footer>1</footer></doc>"
        )
        assert finished == [True]

    def test_deferred_element_in_pushed_subtree(self, table, formatter):
        """Test that a pushed value holding another deferred element suspends the push."""
        # Arrange
        outer = DeferredElement(table=table)
        inner = DeferredElement(table=table)
        recorder = Recorder()
        finished = []
        formatter.format(
            recorder,
            resolve({"doc": [{"list": outer}, {"end": 1}]}),
            on_finish=lambda: finished.append(True),
        )

        # Act
        outer.push({"group": [{"items": inner}, {"total": 3}]})
        suspended_text = recorder.text
        inner.push({"item": "a"})
        inner.close()
        outer.close()

        # Assert
        assert suspended_text == "<doc><list><group><items>"
        assert recorder.text == (
            "<doc><list><group><items><item>a</item></items><total>3</total></group>"
            "</list><end>1</end></doc>"
        )
        assert finished == [True]

    def test_indented_nested_resume(self, table, formatter):
        handle = DeferredElement(table=table)
        node = resolve({"doc": [{"body": [{"rows": handle}]}, {"footer": 1}]}, "  ", 0)
        recorder = Recorder()
        formatter.format(recorder, node)

        handle.push({"row": 1})
        handle.close()

        expected = Recorder()
        Formatter(table=table).format(
            expected,
            resolve({"doc": [{"body": [{"rows": [{"row": 1}]}]}, {"footer": 1}]}, "  ", 0),
        )
        assert recorder.text == expected.text
