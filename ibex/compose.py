"""
Compose Tree: the abstract content tree built on every evaluation of a template.

    Node  =  Text | Element | Fragment | HeadAppend
    View  =  ordered sequence of Nodes

Fragment and HeadAppend have no markup of their own: Fragments are spliced into their parents
and HeadAppends are moved to <head> when a View is converted to a Document (see ibex.dom).
Text nodes and attribute values hold markup-ready strings; escaping happens when values
enter the tree through to_node() or through attributes of a template.

Any Python value can be turned into a Node with to_node(). The conversion is open:
custom types either implement __node__() or __html__(), or get registered with `to_node.register()`.
"""

from functools import singledispatch
from collections.abc import Iterable, Mapping
from html import escape as html_escape
from types import GeneratorType

from ibex.errors import TypeErrorEx
from ibex.builtin_html import Tag, get_tag


########################################################################################################################################################
#####
#####  MARKUP
#####

class Markup(str):
    """A string of trusted HTML code that is inserted into output with no escaping."""

    def __html__(self):
        return self

    def __repr__(self):
        return f"Markup({str.__repr__(self)})"


def markup(value, escape = True, quote = False):
    """
    Convert `value` to a markup-ready string: objects that implement __html__() are taken as they are,
    other values are converted with str() and HTML-escaped if `escape` is true.
    Set quote=True for values of attributes.
    """
    if hasattr(value, '__html__'):
        return str(value.__html__())
    value = str(value)
    return html_escape(value, quote = quote) if escape else value


########################################################################################################################################################
#####
#####  NODES
#####

class Attribute:
    """Attribute of an element: a name plus a value, or no value (None) for a boolean attribute like `disabled`."""

    name  = None
    value = None

    def __init__(self, name, value = None):
        self.name = name
        self.value = value

    def __eq__(self, other):
        return isinstance(other, Attribute) and (self.name, self.value) == (other.name, other.value)

    __hash__ = None

    def __repr__(self):
        if self.value is None: return f"Attribute({self.name!r})"
        return f"Attribute({self.name!r}, {self.value!r})"


class Node:
    """Base class for nodes of a Compose Tree."""

    def _key(self):
        raise NotImplementedError

    def __eq__(self, other):
        return type(self) is type(other) and self._key() == other._key()

    __hash__ = None


class Text(Node):
    """A leaf node with markup-ready text."""

    text = None

    def __init__(self, text = ''):
        self.text = text

    def _key(self):         return self.text
    def __repr__(self):     return f"Text({self.text!r})"


class Element(Node):
    """
    An HTML element: a Tag from the catalogue, a list of Attributes and a View of children.
    A tag can be passed by name, in which case it is looked up in ibex.builtin_html.HTML_TAGS.
    """

    tag      = None         # Tag instance
    attrs    = None         # list of Attribute instances, in rendering order
    children = None         # View

    def __init__(self, tag, attrs = None, children = None):
        self.tag = tag if isinstance(tag, Tag) else get_tag(tag)
        self.attrs = list(attrs or ())
        self.children = children if isinstance(children, View) else View(children)

    def _key(self):
        return self.tag.name, self.attrs, self.children

    def __repr__(self):
        return f"Element({self.tag.name!r}, {self.attrs!r}, {self.children!r})"


class Fragment(Node):
    """A grouping of nodes with no markup identity; replaced by its children during conversion to a Document."""

    view = None

    def __init__(self, view = None):
        self.view = view if isinstance(view, View) else View(view)

    def _key(self):         return self.view
    def __repr__(self):     return f"Fragment({self.view!r})"


class HeadAppend(Node):
    """Nodes that are moved to the <head> of a Document during conversion, wherever they occur in the tree."""

    view = None

    def __init__(self, view = None):
        self.view = view if isinstance(view, View) else View(view)

    def _key(self):         return self.view
    def __repr__(self):     return f"HeadAppend({self.view!r})"


########################################################################################################################################################
#####
#####  VIEW
#####

class View:
    """
    Ordered sequence of Nodes produced by a template or a part of it.
    Nested lists, tuples and Views given to the constructor are flattened and None's are dropped,
    but Fragments stay in place until conversion.
    """
    nodes = None

    def __init__(self, *nodes):
        self.nodes = self._flatten(nodes)

    def __bool__(self):             return bool(self.nodes)
    def __len__(self):              return len(self.nodes)
    def __iter__(self):             return iter(self.nodes)
    def __getitem__(self, pos):     return self.nodes[pos]

    def __eq__(self, other):
        return isinstance(other, View) and self.nodes == other.nodes

    __hash__ = None

    def __repr__(self):
        return f"View({', '.join(map(repr, self.nodes))})"

    @staticmethod
    def _flatten(nodes):
        result = []
        for n in nodes:
            if n is None: continue
            if isinstance(n, (list, tuple, View, GeneratorType)):
                result += View._flatten(n)
            elif isinstance(n, Node):
                result.append(n)
            else:
                raise TypeErrorEx(f"found {type(n)} instead of a Node as an element of a View")
        return result

    def document(self, lang = None):
        """Convert this View to a Document, with HEAD blocks moved to <head>."""
        from ibex.dom import convert
        return convert(self, lang)

    def render(self, lang = None, mode = 'HTML'):
        """Render this View as a complete HTML document."""
        from ibex.renderer import render_document
        return render_document(self.document(lang), mode)

    def render_fragment(self, mode = 'HTML'):
        """Render this View as a piece of HTML, with no <html> skeleton. HEAD blocks are not allowed."""
        from ibex.dom import convert_headless
        from ibex.renderer import render_nodes
        return render_nodes(convert_headless(self), mode)


########################################################################################################################################################
#####
#####  CONVERSION OF VALUES TO NODES
#####

@singledispatch
def to_node(value, escape = True):
    """
    Convert a Python `value` to a Node of a Compose Tree:
    - Node                              -- returned as it is
    - View                              -- Fragment
    - None                              -- empty Fragment
    - object with __node__()            -- converted result of __node__()
    - object with __html__()            -- Text with the verbatim result of __html__(), e.g., Markup
    - str                               -- Text, HTML-escaped if `escape` is true
    - int, float                        -- Text of str(value)
    - other iterable (list, generator)  -- Fragment of converted elements
    Booleans, bytes, mappings and all other values raise TypeErrorEx.
    Converters of custom types can be added with `to_node.register(Type)`; they receive `escape` as a keyword argument.
    """
    if hasattr(value, '__node__'):
        return to_node(value.__node__(), escape = escape)
    if hasattr(value, '__html__'):
        return Text(markup(value))
    if isinstance(value, Iterable) and not isinstance(value, Mapping):
        return Fragment(View([to_node(v, escape = escape) for v in value]))
    raise TypeErrorEx(f"cannot convert a value of {type(value)} to a node")

@to_node.register(Node)
def _(value, escape = True):
    return value

@to_node.register(View)
def _(value, escape = True):
    return Fragment(value)

@to_node.register(type(None))
def _(value, escape = True):
    return Fragment()

@to_node.register(str)
def _(value, escape = True):
    return Text(markup(value, escape))

@to_node.register(int)
@to_node.register(float)
def _(value, escape = True):
    return Text(str(value))

@to_node.register(bool)
@to_node.register(bytes)
@to_node.register(bytearray)
@to_node.register(Mapping)
def _(value, escape = True):
    raise TypeErrorEx(f"cannot convert a value of {type(value)} to a node")
