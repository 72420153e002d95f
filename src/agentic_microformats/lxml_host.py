# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""lxml-backed host for the tree capability contract.

Parses server-side markup with lxml's recovering HTML parser and answers
the simple selector language by translating it to XPath with cssselect.

Two layers:
- LxmlElement: AgentElement over lxml.html.HtmlElement (+ small edit helpers)
- ObservableDocument: a parsed tree plus a MutationHub so edits can be
  observed; the hub coalesces each edit() block into one round
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager

import lxml.html
from cssselect import HTMLTranslator
from lxml import etree

from .dom import MutationSource
from .errors import DocumentLoadError

logger = logging.getLogger(__name__)

_TRANSLATOR = HTMLTranslator()


@functools.lru_cache(maxsize=256)
def _compile(selector: str, axis: str) -> etree.XPath:
    """Compile *selector* to an XPath evaluated along *axis* from a context node."""
    return etree.XPath(_TRANSLATOR.css_to_xpath(selector, prefix=f"{axis}::"))


# ---------------------------------------------------------------------------
# Element handle
# ---------------------------------------------------------------------------


class LxmlElement:
    """AgentElement implementation wrapping an lxml HtmlElement.

    Handles are cheap and created per query; equality and hashing follow
    the wrapped node.  Only the document root carries a mutation source.
    """

    __slots__ = ("_el", "mutation_source")

    def __init__(self, el: lxml.html.HtmlElement, *, mutation_source: MutationSource | None = None) -> None:
        self._el = el
        self.mutation_source = mutation_source

    @property
    def raw(self) -> lxml.html.HtmlElement:
        return self._el

    def __eq__(self, other: object) -> bool:
        return isinstance(other, LxmlElement) and other._el is self._el

    def __hash__(self) -> int:
        return hash(self._el)

    def __repr__(self) -> str:
        return f"<LxmlElement {self._el.tag} at {id(self._el):#x}>"

    # -- capability contract -------------------------------------------

    def get_attribute(self, name: str) -> str | None:
        return self._el.get(name)

    def has_attribute(self, name: str) -> bool:
        return name in self._el.attrib

    def query_selector(self, selector: str) -> LxmlElement | None:
        found = _compile(selector, "descendant")(self._el)
        return LxmlElement(found[0]) if found else None

    def query_selector_all(self, selector: str) -> list[LxmlElement]:
        return [LxmlElement(el) for el in _compile(selector, "descendant")(self._el)]

    def closest(self, selector: str) -> LxmlElement | None:
        test = _compile(selector, "self")
        node = self._el
        while node is not None:
            if test(node):
                return LxmlElement(node)
            node = node.getparent()
        return None

    @property
    def text_content(self) -> str:
        return self._el.text_content()

    @property
    def children(self) -> list[LxmlElement]:
        # Comments and processing instructions have a non-string tag
        return [LxmlElement(child) for child in self._el if isinstance(child.tag, str)]

    @property
    def tag_name(self) -> str:
        return self._el.tag.upper()

    # -- edits ----------------------------------------------------------

    def set_attribute(self, name: str, value: str) -> None:
        self._el.set(name, value)

    def remove_attribute(self, name: str) -> None:
        self._el.attrib.pop(name, None)

    def set_text(self, text: str) -> None:
        """Replace all content of this node with plain *text*."""
        for child in list(self._el):
            self._el.remove(child)
        self._el.text = text

    def remove(self) -> None:
        """Detach this node (and its subtree) from the document, keeping its tail text."""
        self._el.drop_tree()

    def append_html(self, fragment: str) -> None:
        """Parse *fragment* and append its elements as the last children."""
        for item in lxml.html.fragments_fromstring(fragment):
            if isinstance(item, str):
                continue
            self._el.append(item)


def parse_html(html: str, *, mutation_source: MutationSource | None = None) -> LxmlElement:
    """Parse *html* into a document root handle.

    Raises:
        DocumentLoadError: input is empty or lxml cannot build a tree.
    """
    if not html or not html.strip():
        raise DocumentLoadError("Empty HTML input")
    try:
        parser = lxml.html.HTMLParser(recover=True, encoding="utf-8")
        doc = lxml.html.document_fromstring(html.encode("utf-8"), parser=parser)
    except Exception as e:
        raise DocumentLoadError(f"lxml parsing failed: {e}") from e
    return LxmlElement(doc, mutation_source=mutation_source)


# ---------------------------------------------------------------------------
# Mutation delivery
# ---------------------------------------------------------------------------


class MutationHub:
    """In-process MutationSource.

    ``notify()`` delivers one round to every listener.  Inside ``batch()``
    notifications are held back and delivered once when the outermost
    batch exits.  NOT thread-safe; edits and delivery are synchronous.
    """

    def __init__(self) -> None:
        self._listeners: list[Callable[[], None]] = []
        self._depth = 0
        self._pending = False
        self.rounds_delivered = 0

    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def notify(self) -> None:
        if self._depth:
            self._pending = True
            return
        self._deliver()

    @contextmanager
    def batch(self) -> Iterator[None]:
        self._depth += 1
        try:
            yield
        finally:
            self._depth -= 1
            if self._depth == 0 and self._pending:
                self._pending = False
                self._deliver()

    def _deliver(self) -> None:
        self.rounds_delivered += 1
        logger.debug("delivering mutation round %d to %d listener(s)", self.rounds_delivered, len(self._listeners))
        for listener in list(self._listeners):
            listener()


class ObservableDocument:
    """A parsed document whose edits are reported through a MutationHub."""

    def __init__(self, html: str) -> None:
        self.mutations = MutationHub()
        self.root = parse_html(html, mutation_source=self.mutations)

    @contextmanager
    def edit(self) -> Iterator[LxmlElement]:
        """Yield the root for editing; report one round when the block exits."""
        with self.mutations.batch():
            yield self.root
            self.mutations.notify()
