"""
Ibex: an HTML-flavoured template language compiled to a tree of nodes and rendered to HTML.

    >>> import ibex
    >>> ibex.render('HEAD { title { "Hi" } } p { "Hello, " [name] }', name = "Bob")
    '<!DOCTYPE html><html><head><title>Hi</title></head><body><p>Hello, Bob</p></body></html>'
"""

from functools import lru_cache

from ibex.errors import IbexError, SyntaxErrorEx, UndefinedTagEx, TypeErrorEx, NameErrorEx, \
                        MisuseEx, VoidTagEx, HeadAppendEx, DocumentAttrsEx
from ibex.builtin_html import Tag, HTML_TAGS
from ibex.compose import Attribute, Node, Text, Element, Fragment, HeadAppend, View, Markup, to_node
from ibex.dom import Document, DomElement, DomText, convert, convert_headless
from ibex.renderer import render_document, render_nodes
from ibex.compiler import Template, DocumentTemplate


def compile(source, **config):
    """Compile Ibex `source` to a Template. See Template.config_default for `config` options."""
    return Template(source, **config)

def compile_document(source, **config):
    """Compile Ibex `source` of a complete document, with an optional [lang=...] header, to a DocumentTemplate."""
    return DocumentTemplate(source, **config)


@lru_cache(maxsize = 256)
def _cached(source):
    return Template(source)

def view(source, **variables):
    """Compile `source` with default configuration, caching the result, and evaluate it to a View."""
    return _cached(source).view(**variables)

def render(source, **variables):
    """Compile `source` with default configuration, caching the result, and render a complete HTML document."""
    return _cached(source).render(**variables)
