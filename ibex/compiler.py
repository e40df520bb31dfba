"""
Compiled templates: the public entry point to parsing, evaluation, conversion and rendering.
"""

from ibex.parser import Parser
from ibex.structs import State
from ibex.dom import convert, convert_headless
from ibex.renderer import render_document, render_nodes


########################################################################################################################################################
#####
#####  TEMPLATE
#####

class Template:
    """
    A template compiled from Ibex source. Compilation happens once, in __init__(), and raises SyntaxErrorEx
    on any syntax error. The template can then be evaluated any number of times, with different variables,
    each evaluation producing a new View. The object is not modified by evaluation and can be shared between threads.

    >>> page = Template('p ."greeting" { "Hello, " [name] "!" }')
    >>> page.render_fragment(name = "Alice")
    '<p class="greeting">Hello, Alice!</p>'
    """

    config_default = {
        'escape':       True,           # if True, strings from [expressions] and attribute values are HTML-escaped
        'filename':     None,           # name of the template reported in error messages
        'mode':         'HTML',         # rendering mode: 'HTML' or 'XHTML'
        'verbose':      False,          # if True, the syntax tree is printed after compilation
    }
    config = None

    source = None               # source text of the template
    root   = None               # root <xtemplate> node of the syntax tree

    def __init__(self, source, **config):
        self.config = self.config_default.copy()
        self.config.update(**config)
        self.source = source
        self._parse(Parser(self.config['filename']))

        if self.config['verbose']:
            print(self.dump())

    def _parse(self, parser):
        self.root = parser.parse(self.source)

    def _state(self, context, variables):
        scope = dict(context or {})
        scope.update(variables)
        return State(scope, escape = self.config['escape'], template = self.config['filename'])

    def view(self, context = None, **variables):
        """
        Evaluate the template and return the View of its Compose Tree. Variables are taken from `context` dict
        and keyword arguments, the latter taking precedence. Names that collide with parameters of this method
        (e.g., `context`) can be passed through `context`.
        """
        return self.root.translate(self._state(context, variables))

    def document(self, context = None, lang = None, **variables):
        """Evaluate the template and convert the result to a Document, with optional `lang` of <html>."""
        return convert(self.view(context, **variables), lang)

    def render(self, context = None, lang = None, **variables):
        """Evaluate the template and render a complete HTML document."""
        return render_document(self.document(context, lang, **variables), self.config['mode'])

    def render_fragment(self, context = None, **variables):
        """Evaluate the template and render it as a piece of HTML, with no <html> skeleton. HEAD blocks are not allowed."""
        return render_nodes(convert_headless(self.view(context, **variables)), self.config['mode'])

    def dump(self):
        """Text representation of the syntax tree, for debugging."""
        return self.root.dump()


class DocumentTemplate(Template):
    """
    A template of a complete document. The source may start with a header that sets the language of <html>:

        [lang="en"]
        HEAD { title { "Home" } }
        h1 { "Welcome" }

    The value of `lang` is an expression evaluated together with the rest of the template.
    """

    lang = None                 # Expression or Static of the document's language, or None

    def _parse(self, parser):
        self.lang, self.root = parser.parse_document(self.source)

    def document(self, context = None, **variables):
        state = self._state(context, variables)
        lang = self.lang.evaluate(state) if self.lang is not None else None
        return convert(self.root.translate(state), lang)

    def render(self, context = None, **variables):
        return render_document(self.document(context, **variables), self.config['mode'])
