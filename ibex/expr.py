"""
Python code embedded in templates: expressions, conditions, loop targets, binding statements
and arguments of function calls. Each snippet is recovered verbatim from the template source,
compiled once with the built-in compile() when the template is parsed, and evaluated
with the current scope of a State as globals.
"""

import builtins
from collections.abc import Mapping

from ibex.errors import SyntaxErrorEx, NameErrorEx


_ITEM = '__ibex_item__'         # temporary variable that carries a loop item to the assignment of a loop target


########################################################################################################################################################
#####
#####  SNIPPETS
#####

class Snippet:
    """
    Base class for compiled pieces of Python code that come from a Span of template tokens.
    Python syntax errors are reported as SyntaxErrorEx pointing to the 1st token of the span.
    """
    mode       = 'eval'             # mode of compile()
    production = 'expression'       # name of the syntax element, for error messages

    span     = None                 # Span of tokens where the code comes from
    source   = None                 # Python source code that was compiled, after wrapping
    code     = None                 # code object
    template = None                 # name of the template, for error messages

    def __init__(self, span, template = None):
        self.span = span
        self.template = template
        self.source = self.wrap(span)
        self.code = self._compile(self.source)

    @property
    def text(self):
        return self.span.text

    def wrap(self, span):
        """Python source to be compiled from a given span. Parentheses allow expressions to span multiple lines."""
        return f"({span.text}\n)"

    def _compile(self, source):
        try:
            return compile(source, self.template or '<ibex>', self.mode)
        except SyntaxError as ex:
            raise SyntaxErrorEx(f"invalid Python {self.production}: {ex.msg}", self.span.first, self.production, self.template) from ex

    def __repr__(self):
        return f"{self.__class__.__name__}({self.text!r})"


class Expression(Snippet):

    def evaluate(self, state):
        return eval(self.code, state.scope)


class Static:
    """A value known at parse time, e.g., a string literal of an attribute. Exposes the same evaluate() as Expression."""

    def __init__(self, value):
        self.value = value

    @property
    def text(self):
        return repr(self.value)

    def evaluate(self, state):
        return self.value

    def __repr__(self):
        return f"Static({self.value!r})"


class Statements(Snippet):
    """Statements of a [:where ...] block, possibly spanning multiple lines, executed in a new scope."""

    mode = 'exec'
    production = 'where'

    def wrap(self, span):
        return span.block() + '\n'

    def execute(self, scope):
        exec(self.code, scope)


class Target(Snippet):
    """Target of a [:for ...] loop: a name or an unpacking pattern, like `i, (key, value)`."""

    mode = 'exec'
    production = 'for'

    def wrap(self, span):
        return f"({span.text}\n) = {_ITEM}\n"

    def assign(self, scope, value):
        scope[_ITEM] = value
        try:
            exec(self.code, scope)
        finally:
            del scope[_ITEM]


class Arguments(Snippet):
    """
    Arguments of a function call, @name[...], written with Python syntax: positional, keyword, *args and **kwargs.
    Evaluates to a pair (args, kwargs).
    """
    production = 'arguments'

    def wrap(self, span):
        return f"(lambda *args, **kwargs: (args, kwargs))({span.text}\n)"

    def evaluate(self, state):
        return eval(self.code, state.scope)


########################################################################################################################################################
#####
#####  NAMES
#####

class QualifiedName:
    """
    Name of a function in @name: a sequence of segments separated by `::` or `.`, like `ui::card` or `layout.page`.
    The 1st segment is looked up in the current scope, then in Python built-ins; a leading `::` restricts
    the lookup to top-level variables of the template. Subsequent segments are looked up as attributes,
    or as keys if the parent object is a mapping.
    """

    segments = None     # list of names
    root     = False    # True if the name starts with `::`
    token    = None     # 1st token of the name, for error messages
    text     = None     # the name as written in the template

    def __init__(self, segments, root = False, token = None, text = None):
        self.segments = segments
        self.root = root
        self.token = token
        self.text = text or ('::' if root else '') + '::'.join(segments)

    def resolve(self, state):
        first = self.segments[0]
        scope = state.root if self.root else state.scope

        if first in scope:
            obj = scope[first]
        elif not self.root and hasattr(builtins, first):
            obj = getattr(builtins, first)
        else:
            raise NameErrorEx(f"function '{self.text}' is not defined", self.token, 'call', state.template)

        for name in self.segments[1:]:
            if isinstance(obj, Mapping) and name in obj:
                obj = obj[name]
            elif hasattr(obj, name):
                obj = getattr(obj, name)
            else:
                raise NameErrorEx(f"'{name}' not found in function name '{self.text}'", self.token, 'call', state.template)
        return obj

    def __repr__(self):
        return f"QualifiedName({self.text!r})"
