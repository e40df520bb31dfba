"""
Serialization of a Document Tree to an HTML string.
"""

from html import escape as html_escape

from ibex.config import DOCTYPE, MODES
from ibex.errors import VoidTagEx, DocumentAttrsEx
from ibex.dom import DomText, DomElement


def render_document(document, mode = 'HTML'):
    """
    Render a complete Document:  <!DOCTYPE html><html lang="..."><head>...</head><body>...</body></html>
    DocumentAttrsEx is raised if <head> or <body> carries attributes.
    """
    _check_mode(mode)
    head, body = document.head, document.body
    if head.attrs: raise DocumentAttrsEx(f"<head> of a document must not have attributes, found: {_names(head.attrs)}")
    if body.attrs: raise DocumentAttrsEx(f"<body> of a document must not have attributes, found: {_names(body.attrs)}")

    lang = f' lang="{html_escape(str(document.lang))}"' if document.lang is not None else ''

    return DOCTYPE + f"<html{lang}>" + \
           "<head>" + render_nodes(head.children, mode) + "</head>" + \
           "<body>" + render_nodes(body.children, mode) + "</body>" + \
           "</html>"

def render_nodes(nodes, mode = 'HTML'):
    """Concatenated markup of a list of DomNodes."""
    _check_mode(mode)
    return ''.join(render_node(node, mode) for node in nodes)

def render_node(node, mode = 'HTML'):
    if isinstance(node, DomText):
        return node.text
    if isinstance(node, DomElement):
        return render_element(node, mode)
    raise TypeError(f"unknown type of a document node: {type(node)}")

def render_element(element, mode = 'HTML'):
    """
    Void elements render as a single start tag, <br> or <br /> in XHTML mode, and VoidTagEx is raised
    if they have children. Other elements render as a start tag, children and an end tag.
    """
    name = element.tag.name
    tag = name + format_attributes(element.attrs, mode)

    if element.tag.void:
        if element.children: raise VoidTagEx(f"children are not allowed in a void element <{name}>")
        return f"<{tag} />" if mode == 'XHTML' else f"<{tag}>"

    return f"<{tag}>" + render_nodes(element.children, mode) + f"</{name}>"

def format_attributes(attrs, mode = 'HTML'):
    """
    Attributes as a string to be appended to a tag name, each one preceded by a space:
    name="value" if a value is present, or a bare name otherwise (name="name" in XHTML mode).
    Values are expected to be escaped already.
    """
    out = []
    for attr in attrs:
        if attr.value is not None:
            out.append(f' {attr.name}="{attr.value}"')
        elif mode == 'XHTML':
            out.append(f' {attr.name}="{attr.name}"')
        else:
            out.append(f' {attr.name}')
    return ''.join(out)


def _check_mode(mode):
    if mode not in MODES: raise ValueError(f"unknown rendering mode '{mode}', expected one of: {', '.join(MODES)}")

def _names(attrs):
    return ', '.join(attr.name for attr in attrs)
