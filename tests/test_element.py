"""Tests for Element lifecycle bookkeeping, Group, and type dispatch."""

import pytest

from widgetdef import (
    Document,
    Element,
    Group,
    Widget,
    delete_element,
    element_ids,
    insert_element,
    point_at_element,
    redraw_element,
)


class _Probe(Element):
    """Element that records which hooks ran and its visibility at the time."""

    def __init__(self):
        super().__init__()
        self.calls = []

    def _insert(self, document, position):
        self.calls.append(("insert", self.visible))

    def _delete(self):
        self.calls.append(("delete", self.visible))

    def _redraw(self):
        self.calls.append(("redraw", self.visible))


class _Label(Widget):
    def __init__(self, text):
        super().__init__()
        self.text = text

    def render(self):
        return self.text


class TestElement:
    def test_starts_invisible(self):
        assert _Probe().visible is False

    def test_ids_are_unique(self):
        a, b = _Probe(), _Probe()
        assert a.id != b.id
        assert a.element_ids() == frozenset({a.id})

    def test_insert_marks_visible_before_hook(self):
        p = _Probe()
        p.insert(Document())
        assert p.calls == [("insert", True)]
        assert p.visible is True

    def test_delete_marks_invisible_before_hook(self):
        p = _Probe()
        p.insert(Document())
        p.delete()
        assert p.calls[-1] == ("delete", False)
        assert p.visible is False

    def test_redraw_skipped_while_invisible(self):
        p = _Probe()
        p.redraw()
        assert p.calls == []
        p.insert(Document())
        p.delete()
        p.redraw()
        assert [c[0] for c in p.calls] == ["insert", "delete"]

    def test_redraw_runs_while_visible(self):
        p = _Probe()
        p.insert(Document())
        p.redraw()
        assert p.calls[-1] == ("redraw", True)

    def test_point_at(self):
        doc = Document("..")
        label = _Label("hi")
        label.insert(doc, 1)
        assert label.point_at(doc, 1)
        assert label.point_at(doc, 2)
        assert not label.point_at(doc, 0)
        assert not label.point_at(doc, 3)
        doc.goto(1)
        assert point_at_element(label, doc)


class TestGroup:
    def test_inserts_children_in_order(self):
        doc = Document("[]")
        group = Group([_Label("ab"), _Label("cd")])
        group.insert(doc, 1)
        assert doc.text == "[abcd]"
        assert group.visible
        assert all(child.visible for child in group.children)

    def test_element_ids_aggregate_children(self):
        a, b = _Label("a"), _Label("b")
        group = Group([a, b])
        assert group.element_ids() == {a.id, b.id}
        assert element_ids(group) == {a.id, b.id}

    def test_point_at_any_child(self):
        doc = Document()
        a, b = _Label("a"), _Label("b")
        group = Group([a, b])
        group.insert(doc)
        assert group.point_at(doc, 0)
        assert group.point_at(doc, 1)
        assert not group.point_at(doc, 2)

    def test_delete_removes_all_children(self):
        doc = Document("<>")
        group = Group([_Label("ab"), _Label("cd")])
        group.insert(doc, 1)
        group.delete()
        assert doc.text == "<>"
        assert not group.visible
        assert not any(child.visible for child in group.children)

    def test_rejects_bare_text_children(self):
        with pytest.raises(TypeError, match="must be elements"):
            Group(["[", _Label("x"), "]"])

    def test_redraw_redraws_children_in_place(self):
        doc = Document("<>")
        a, b = _Label("ab"), _Label("cd")
        group = Group([a, b])
        group.insert(doc, 1)
        a.text = "A"
        b.text = "CCC"
        group.redraw()
        assert doc.text == "<ACCC>"


class TestDispatch:
    def test_str_inserts_untagged(self):
        doc = Document("ab")
        insert_element("--", doc, 1)
        assert doc.text == "a--b"
        assert doc.tag_at(1) is None
        assert element_ids("--") == frozenset()

    def test_str_inserts_at_point(self):
        doc = Document()
        insert_element("x", doc)
        insert_element("y", doc)
        assert doc.text == "xy"

    def test_element_dispatch(self):
        doc = Document()
        label = _Label("hi")
        insert_element(label, doc)
        assert doc.text == "hi"
        label.text = "yo"
        redraw_element(label)
        assert doc.text == "yo"
        delete_element(label)
        assert doc.text == ""

    def test_rejects_non_elements(self):
        with pytest.raises(TypeError):
            insert_element(42, Document())
        with pytest.raises(TypeError):
            element_ids(42)

    @pytest.mark.parametrize("value", ["x", 42])
    def test_only_elements_can_be_deleted_or_redrawn(self, value):
        with pytest.raises(TypeError, match="is not an element"):
            delete_element(value)
        with pytest.raises(TypeError, match="is not an element"):
            redraw_element(value)

    def test_point_at_dispatch(self):
        doc = Document("x")
        assert point_at_element("x", doc, 0) is False
        with pytest.raises(TypeError):
            point_at_element(42, doc)
