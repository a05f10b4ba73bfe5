import pytest

from ng_gettext_extract.catalog import (
    Catalog,
    IncompatiblePluralError,
    Reference,
    insort_unique,
    split_reference,
)


@pytest.fixture
def catalog():
    return Catalog()


def test_same_reference_is_added_once(catalog):
    catalog.add_string(Reference("a.html", 3), "Hello")
    catalog.add_string(Reference("a.html", 3), "Hello")

    assert len(catalog) == 1
    assert catalog.get("Hello").references == ["a.html:3"]


def test_references_and_comments_stay_sorted(catalog):
    catalog.add_string(Reference("b.js", 2), "Hello", comment="zeta")
    catalog.add_string(Reference("a.js", 9), "Hello", comment="alpha")
    catalog.add_string(Reference("a.js", 10), "Hello", comment="zeta")
    catalog.add_string(Reference("a.js", 9), "Hello", comment="beta")

    entry = catalog.get("Hello")
    assert entry.references == ["a.js:10", "a.js:9", "b.js:2"]
    assert entry.extracted_comments == ["alpha", "beta", "zeta"]


def test_contexts_make_distinct_entries(catalog):
    catalog.add_string("a.html", "Open", context="door")
    catalog.add_string("b.html", "Open", context="file")
    catalog.add_string("c.html", "Open", context="file")
    catalog.add_string("d.html", "Open")

    assert len(catalog) == 3
    assert catalog.get("Open", "door").references == ["a.html"]
    assert catalog.get("Open", "file").references == ["b.html", "c.html"]
    assert catalog.get("Open").msgctxt is None
    assert catalog.get("Open", "file").msgctxt == "file"


def test_empty_context_means_no_context(catalog):
    catalog.add_string("a.html", "Open", context="")
    catalog.add_string("b.html", "Open")

    assert len(catalog) == 1


def test_conflicting_plural_is_fatal(catalog):
    catalog.add_string(Reference("a.html", 1), "Bird", plural="Birds")

    with pytest.raises(IncompatiblePluralError) as excinfo:
        catalog.add_string(Reference("b.html", 4), "Bird", plural="Fowl")

    message = str(excinfo.value)
    assert "Bird" in message
    assert "Birds / Fowl" in message
    assert "a.html:1" in message and "b.html:4" in message


def test_same_plural_twice_is_accepted(catalog):
    catalog.add_string("a.html", "Bird", plural="Birds")
    catalog.add_string("b.html", "Bird", plural="Birds")
    catalog.add_string("c.html", "Bird")

    entry = catalog.get("Bird")
    assert entry.msgid_plural == "Birds"
    assert entry.msgstr == ["", ""]


def test_plural_under_other_context_does_not_conflict(catalog):
    catalog.add_string("a.html", "Bird", plural="Birds")
    catalog.add_string("a.html", "Bird", plural="Fowl", context="hunting")

    assert catalog.get("Bird", "hunting").msgid_plural == "Fowl"


@pytest.mark.parametrize("string", ["", "   ", "\n\t"])
def test_blank_strings_are_ignored(catalog, string):
    catalog.add_string("a.html", string)

    assert len(catalog) == 0


def test_strings_are_trimmed(catalog):
    catalog.add_string("a.html", "  Hello \n")

    assert catalog.get("Hello") is not None


def test_line_numbers_can_be_disabled():
    catalog = Catalog(line_numbers=False)
    catalog.add_string(Reference("a.html", 12), "Hello")

    assert catalog.get("Hello").references == ["a.html"]


def test_line_zero_is_rendered():
    assert Reference("a.html", 0).render() == "a.html:0"
    assert Reference("a.html").render() == "a.html"


def test_entries_are_ordered_by_msgid_then_context(catalog):
    catalog.add_string("x", "banana")
    catalog.add_string("x", "Apple")
    catalog.add_string("x", "cherry", context="b")
    catalog.add_string("x", "cherry")
    catalog.add_string("x", "cherry", context="a")

    ordered = [(entry.msgid, entry.msgctxt) for entry in catalog.entries()]
    assert ordered == [
        ("Apple", None),
        ("banana", None),
        ("cherry", None),
        ("cherry", "a"),
        ("cherry", "b"),
    ]


def test_to_pofile_builds_header_and_entries(catalog):
    catalog.add_string(Reference("a.js", 3), "Bird", plural="Birds", comment="Animal")
    catalog.add_string(Reference("a.html", 1), "Save", context="button")

    po = catalog.to_pofile()

    assert po.metadata["Content-Type"] == "text/plain; charset=UTF-8"
    assert po.metadata["Content-Transfer-Encoding"] == "8bit"
    assert po.metadata["Project-Id-Version"] == ""
    bird, save = list(po)
    assert bird.msgid_plural == "Birds"
    assert bird.msgstr_plural == {0: "", 1: ""}
    assert bird.occurrences == [("a.js", "3")]
    assert bird.comment == "Animal"
    assert save.msgctxt == "button"
    assert save.msgstr == ""


def test_to_pofile_runs_post_process(catalog):
    catalog.add_string("a.html", "Hello")
    seen = []

    def post_process(po):
        seen.append(len(po))
        po.metadata["Project-Id-Version"] = "demo"

    po = catalog.to_pofile(post_process)

    assert seen == [1]
    assert po.metadata["Project-Id-Version"] == "demo"


def test_insort_unique():
    items = ["a", "c"]

    assert insort_unique(items, "b") is True
    assert insort_unique(items, "b") is False
    assert items == ["a", "b", "c"]


def test_split_reference():
    assert split_reference("src/a.html:12") == ("src/a.html", "12")
    assert split_reference("src/a.html") == ("src/a.html", "")
    assert split_reference("C:/a.html") == ("C:/a.html", "")
