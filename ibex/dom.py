"""
Document Tree: the concrete, head+body shaped tree that is passed to the renderer,
and conversion of a Compose Tree (View) into it.

    Document   =  head DomElement + body DomElement (+ optional `lang` of <html>)
    DomNode    =  DomElement | DomText

Conversion is a single depth-first, left-to-right pass over the View. Fragments are spliced in place,
and the contents of HeadAppend nodes, wherever they occur, are appended to <head> in the order they are met.
"""

from ibex.errors import HeadAppendEx
from ibex.builtin_html import get_tag
from ibex.compose import Text, Element, Fragment, HeadAppend


########################################################################################################################################################
#####
#####  DOCUMENT TREE
#####

class DomNode:
    """Base class for nodes of a Document Tree."""

class DomText(DomNode):

    text = None         # markup-ready text

    def __init__(self, text):
        self.text = text

    def __eq__(self, other):
        return isinstance(other, DomText) and self.text == other.text

    __hash__ = None

    def __repr__(self):
        return f"DomText({self.text!r})"


class DomElement(DomNode):

    tag      = None     # Tag instance from ibex.builtin_html
    attrs    = None     # list of compose.Attribute
    children = None     # list of DomNode

    def __init__(self, tag, attrs = None, children = None):
        self.tag = tag
        self.attrs = list(attrs or ())
        self.children = list(children or ())

    def __eq__(self, other):
        return isinstance(other, DomElement) and \
               (self.tag.name, self.attrs, self.children) == (other.tag.name, other.attrs, other.children)

    __hash__ = None

    def __repr__(self):
        return f"DomElement({self.tag.name!r}, {self.attrs!r}, {self.children!r})"


class Document:
    """A complete HTML document: <head> and <body> elements, and an optional language of <html>."""

    head = None
    body = None
    lang = None

    def __init__(self, head = None, body = None, lang = None):
        self.head = head if head is not None else DomElement(get_tag('head'))
        self.body = body if body is not None else DomElement(get_tag('body'))
        self.lang = lang

    def render(self, mode = 'HTML'):
        from ibex.renderer import render_document
        return render_document(self, mode)

    def __repr__(self):
        return f"Document(head = {self.head!r}, body = {self.body!r}, lang = {self.lang!r})"


########################################################################################################################################################
#####
#####  CONVERSION
#####

class Converter:
    """
    One conversion of a View. Holds the list of <head> children collected so far;
    if `head` is None, the conversion is headless and any HeadAppend is an error.
    """

    head = None

    def __init__(self, head = None):
        self.head = head

    def convert(self, nodes):
        """List of DomNodes made from a sequence of compose Nodes."""
        out = []
        for node in nodes:
            self._convert(node, out)
        return out

    def _convert(self, node, out):
        if isinstance(node, Text):
            out.append(DomText(node.text))
        elif isinstance(node, Element):
            out.append(DomElement(node.tag, node.attrs, self.convert(node.children)))
        elif isinstance(node, Fragment):
            for child in node.view:
                self._convert(child, out)
        elif isinstance(node, HeadAppend):
            if self.head is None:
                raise HeadAppendEx("HEAD block found in a fragment that is rendered without a document <head>")
            self.head += self.convert(node.view)
        else:
            raise TypeError(f"unknown type of a compose node: {type(node)}")


def convert(view, lang = None):
    """Convert a View to a Document. Contents of all HeadAppend nodes go to <head>, in the order of occurrence."""
    head = []
    body = Converter(head).convert(view)
    return Document(DomElement(get_tag('head'), children = head), DomElement(get_tag('body'), children = body), lang)

def convert_headless(view):
    """Convert a View to a list of DomNodes, for rendering outside of a document. HeadAppendEx if a HeadAppend is met."""
    return Converter().convert(view)
