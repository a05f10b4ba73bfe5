import pytest

from ng_gettext_extract import Extractor, ExtractorOptions, IncompatiblePluralError


def test_dispatches_by_extension():
    extractor = Extractor()

    extractor.parse("index.html", "<p translate>From HTML</p>")
    extractor.parse("app.js", "gettext('From JS');")
    extractor.parse("notes.txt", "<p translate>Ignored</p>")
    extractor.parse("view.php", "<translate>From PHP</translate>")

    msgids = [entry.msgid for entry in extractor.catalog]
    assert msgids == ["From HTML", "From JS", "From PHP"]


def test_is_valid_strategy():
    assert Extractor.is_valid_strategy("html")
    assert Extractor.is_valid_strategy("js")
    assert not Extractor.is_valid_strategy("css")


def test_is_supported_by_strategy():
    extractor = Extractor(ExtractorOptions(extensions={"tpl": "html", "es": "js"}))

    assert extractor.is_supported_by_strategy("html", "tpl")
    assert extractor.is_supported_by_strategy("js", "es")
    assert not extractor.is_supported_by_strategy("js", "tpl")
    assert not extractor.is_supported_by_strategy("html", "html")


def test_unknown_strategy_is_rejected():
    with pytest.raises(ValueError, match="Unknown strategy"):
        Extractor(ExtractorOptions(extensions={"css": "style"}))


def test_marker_names_from_options():
    extractor = Extractor(ExtractorOptions(marker_name="_", marker_names=["tr"]))

    extractor.parse("app.js", "_('One'); tr('Two'); gettext('Three');")

    assert extractor.catalog.get("One") is not None
    assert extractor.catalog.get("Two") is not None
    assert extractor.catalog.get("Three") is None


def test_custom_delimiters_from_options():
    extractor = Extractor(ExtractorOptions(start_delim="[[", end_delim="]]"))

    extractor.parse("index.html", "<b>[[ 'Square' | translate ]]</b>")

    assert extractor.catalog.get("Square") is not None


def test_add_string_accepts_plain_file_reference():
    extractor = Extractor()

    extractor.add_string("manual.txt", "Manual")

    assert extractor.catalog.get("Manual").references == ["manual.txt"]


def test_plural_conflict_across_files():
    extractor = Extractor()
    extractor.parse("index.html", '<p translate translate-plural="Birds">Bird</p>')

    with pytest.raises(IncompatiblePluralError):
        extractor.parse("app.js", "gettextCatalog.getPlural(n, 'Bird', 'Fowl');")


def test_to_string_renders_pot():
    extractor = Extractor()
    extractor.parse(
        "app.js",
        "/// Button label\n"
        "gettext('Save', null, 'button');\n"
        "gettextCatalog.getPlural(n, 'Bird', 'Birds');\n",
    )
    extractor.parse("index.html", "<p translate>apple</p>")

    output = extractor.to_string()

    assert 'Content-Type: text/plain; charset=UTF-8' in output
    assert 'Content-Transfer-Encoding: 8bit' in output
    assert "#. Button label\n#: app.js:2\nmsgctxt \"button\"\nmsgid \"Save\"\nmsgstr \"\"" in output
    assert 'msgid "Bird"\nmsgid_plural "Birds"\nmsgstr[0] ""\nmsgstr[1] ""' in output
    assert output.index('msgid "apple"') < output.index('msgid "Bird"')
    assert output.index('msgid "Bird"') < output.index('msgid "Save"')


def test_line_numbers_disabled():
    extractor = Extractor(ExtractorOptions(line_numbers=False))
    extractor.parse("app.js", "\ngettext('Hello');")

    assert "#: app.js\n" in extractor.to_string()


def test_post_process_hook():
    def post_process(po):
        po.metadata["Project-Id-Version"] = "demo 1.0"

    extractor = Extractor(ExtractorOptions(post_process=post_process))
    extractor.parse("app.js", "gettext('Hello');")

    assert "Project-Id-Version: demo 1.0" in extractor.to_string()
