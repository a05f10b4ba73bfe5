"""Catalog merge engine.

Every candidate found by the scanners goes through ``Catalog.add_string``,
which deduplicates by (msgid, context) and keeps references and extracted
comments unique and sorted. The assembled catalog is handed to polib for
rendering.
"""

from __future__ import annotations

import bisect
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field

import polib

NO_CONTEXT = None

DEFAULT_HEADERS = {
    "Content-Type": "text/plain; charset=UTF-8",
    "Content-Transfer-Encoding": "8bit",
    "Project-Id-Version": "",
}


class IncompatiblePluralError(ValueError):
    def __init__(
        self, msgid: str, existing: str, plural: str, references: list[str]
    ) -> None:
        self.msgid = msgid
        self.existing = existing
        self.plural = plural
        self.references = list(references)
        super().__init__(
            f"Incompatible plural definitions for {msgid}: {existing} / {plural} "
            f"(in: {', '.join(references)})"
        )


@dataclass(frozen=True)
class Reference:
    file: str
    line: int | None = None

    def render(self, line_numbers: bool = True) -> str:
        if line_numbers and self.line is not None:
            return f"{self.file}:{self.line}"
        return self.file


@dataclass
class CatalogEntry:
    msgid: str
    msgctxt: str | None = None
    msgid_plural: str | None = None
    references: list[str] = field(default_factory=list)
    extracted_comments: list[str] = field(default_factory=list)
    msgstr: list[str] = field(default_factory=lambda: [""])

    def to_po_entry(self) -> polib.POEntry:
        kwargs: dict[str, object] = {
            "msgid": self.msgid,
            "occurrences": [split_reference(ref) for ref in self.references],
            "comment": "\n".join(self.extracted_comments),
        }
        if self.msgctxt is not None:
            kwargs["msgctxt"] = self.msgctxt
        if self.msgid_plural:
            kwargs["msgid_plural"] = self.msgid_plural
            kwargs["msgstr_plural"] = dict(enumerate(self.msgstr))
        else:
            kwargs["msgstr"] = self.msgstr[0]
        return polib.POEntry(**kwargs)


def insort_unique(items: list[str], value: str) -> bool:
    index = bisect.bisect_left(items, value)
    if index < len(items) and items[index] == value:
        return False
    items.insert(index, value)
    return True


def split_reference(ref: str) -> tuple[str, str]:
    path, sep, line = ref.rpartition(":")
    if sep and path and line.isdigit():
        return path, line
    return ref, ""


def collation_key(text: str) -> tuple[str, str]:
    return text.casefold(), text


def _context_key(context: str | None) -> tuple[bool, str]:
    return context is not NO_CONTEXT, context or ""


class Catalog:
    def __init__(self, line_numbers: bool = True) -> None:
        self.line_numbers = line_numbers
        self._strings: dict[str, dict[str | None, CatalogEntry]] = {}

    def add_string(
        self,
        reference: Reference | str,
        string: str,
        plural: str | None = None,
        comment: str | None = None,
        context: str | None = None,
    ) -> None:
        if isinstance(reference, str):
            reference = Reference(reference)

        string = string.strip()
        if not string:
            return

        if not context:
            context = NO_CONTEXT

        contexts = self._strings.setdefault(string, {})
        entry = contexts.get(context)
        if entry is None:
            entry = contexts[context] = CatalogEntry(msgid=string)

        insort_unique(entry.references, reference.render(self.line_numbers))

        if context is not NO_CONTEXT:
            entry.msgctxt = context

        if plural:
            if entry.msgid_plural and entry.msgid_plural != plural:
                raise IncompatiblePluralError(
                    string, entry.msgid_plural, plural, entry.references
                )
            entry.msgid_plural = plural
            entry.msgstr = ["", ""]

        if comment:
            insort_unique(entry.extracted_comments, comment)

    def get(self, msgid: str, context: str | None = None) -> CatalogEntry | None:
        return self._strings.get(msgid, {}).get(context or NO_CONTEXT)

    def entries(self) -> list[CatalogEntry]:
        """Return all entries ordered by msgid, then by context."""
        result: list[CatalogEntry] = []
        for contexts in self._strings.values():
            for context in sorted(contexts, key=_context_key):
                result.append(contexts[context])
        result.sort(key=lambda entry: collation_key(entry.msgid))
        return result

    def __iter__(self) -> Iterator[CatalogEntry]:
        return iter(self.entries())

    def __len__(self) -> int:
        return sum(len(contexts) for contexts in self._strings.values())

    def to_pofile(
        self, post_process: Callable[[polib.POFile], None] | None = None
    ) -> polib.POFile:
        po = polib.POFile()
        po.metadata = dict(DEFAULT_HEADERS)
        for entry in self.entries():
            po.append(entry.to_po_entry())
        if post_process is not None:
            post_process(po)
        return po
