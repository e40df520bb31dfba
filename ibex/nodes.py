"""
Nodes of the syntax tree of an Ibex template.

The parser (ibex.parser) builds a tree of NODES.x* objects, with all embedded Python code
already compiled (ibex.expr). Calling translate(state) on the root <xtemplate> evaluates the tree
against the variables held in a State and returns a fresh View of the Compose Tree (ibex.compose).
"""

from ibex.errors import TypeErrorEx
from ibex.expr import Static
from ibex.compose import Attribute, Text, Element, Fragment, HeadAppend, View, to_node, markup

DEBUG = False


########################################################################################################################################################
#####
#####  NODES
#####

class NODES:
    """A lexical container for definitions of all Ibex syntax tree node classes."""

    class node:
        token = None                # 1st token of this node in the source, for error messages

        def blocks(self):
            """Nested templates (child blocks) of this node, for dump()."""
            return []

        def translate(self, state):
            """Evaluate this node against `state` and return a Node of the Compose Tree."""
            raise NotImplementedError

        def convert(self, value, state):
            """Convert a value of an expression or function to a Node; TypeErrorEx points to this node."""
            try:
                return to_node(value, escape = state.escape)
            except TypeErrorEx as ex:
                if ex.token is not None: raise
                raise TypeErrorEx(str(ex), self.token, None, state.template) from ex

        def dump(self, indent = ''):
            lines = [indent + str(self)]
            lines += [block.dump(indent + '  ') for block in self.blocks()]
            return '\n'.join(filter(None, lines))

        def __str__(self): return "<%s>" % self.__class__.__name__


    ###  BLOCKS  ###

    class xtemplate(node):
        """Sequence of nodes: the whole template, or a {...} block inside it."""
        nodes = None

        def __init__(self, nodes, token = None):
            self.nodes = nodes
            self.token = token

        def translate(self, state):
            return View([n.translate(state) for n in self.nodes])

        def dump(self, indent = ''):
            return '\n'.join(n.dump(indent) for n in self.nodes)

    class xhead(node):
        """HEAD {...} block, whose contents go to <head> of the document."""
        body = None

        def __init__(self, body, token = None):
            self.body = body
            self.token = token

        def blocks(self):               return [self.body]
        def translate(self, state):     return HeadAppend(self.body.translate(state))
        def __str__(self):              return "<xhead>"

    class xelement(node):
        tag   = None            # Tag instance
        id    = None            # Static or Expression, or None
        cls   = None            # Static or Expression, or None
        attrs = None            # list of <xattr_*> nodes
        body  = None            # <xtemplate> or None for an element closed with /

        def __init__(self, tag, id, cls, attrs, body, token = None):
            self.tag = tag
            self.id = id
            self.cls = cls
            self.attrs = attrs
            self.body = body
            self.token = token

        def blocks(self):
            return [self.body] if self.body else []

        def translate(self, state):
            attrs = [
                self._shorthand('id', self.id, state),
                self._shorthand('class', self.cls, state),
            ]
            attrs += [a.translate(state) for a in self.attrs]
            attrs = [a for a in attrs if a is not None]

            children = self.body.translate(state) if self.body else View()
            return Element(self.tag, attrs, children)

        @staticmethod
        def _shorthand(name, expr, state):
            if expr is None: return None
            return NODES.attribute.make(name, expr.evaluate(state), state)

        def __str__(self):
            parts = [self.tag.name]
            if self.id is not None:  parts.append('#' + self.id.text)
            if self.cls is not None: parts.append('.' + self.cls.text)
            if self.attrs: parts.append('[%s]' % ', '.join(map(str, self.attrs)))
            if self.body is None: parts.append('/')
            return "<xelement %s>" % ' '.join(parts)

    class xliteral(node):
        """Static text inserted verbatim: a string literal, ~ or ~~, or an entity."""
        text = None

        def __init__(self, text, token = None):
            self.text = text
            self.token = token

        def translate(self, state):     return Text(self.text)
        def __str__(self):              return "<xliteral %r>" % self.text

    class xentity(xliteral):
        def __str__(self):              return "<xentity %s>" % self.text

    class xexpression(node):
        expr = None             # Expression

        def __init__(self, expr, token = None):
            self.expr = expr
            self.token = token

        def translate(self, state):
            return self.convert(self.expr.evaluate(state), state)

        def __str__(self):              return "<xexpression %s>" % self.expr.text

    class xcall(node):
        """@name[args] {body}: call of a Python function; the body is passed as the last positional argument."""
        name = None             # QualifiedName
        args = None             # Arguments, or None
        body = None             # <xtemplate>, or None

        def __init__(self, name, args, body, token = None):
            self.name = name
            self.args = args
            self.body = body
            self.token = token

        def blocks(self):
            return [self.body] if self.body else []

        def translate(self, state):
            func = self.name.resolve(state)
            if not callable(func):
                raise TypeErrorEx(f"'{self.name.text}' is not callable", self.token, 'call', state.template)

            args, kwargs = self.args.evaluate(state) if self.args else ((), {})
            if self.body is not None:
                args = args + (self.body.translate(state),)

            if DEBUG: print('call', self.name.text, args, kwargs)
            return Fragment(View(self.convert(func(*args, **kwargs), state)))

        def __str__(self):
            args = f"[{self.args.text}]" if self.args else ''
            return f"<xcall @{self.name.text}{args}>"

    class xif(node):
        test   = None           # Expression
        body   = None           # <xtemplate> of the positive branch
        orelse = None           # <xtemplate> of the negative branch, or None

        def __init__(self, test, body, orelse, token = None):
            self.test = test
            self.body = body
            self.orelse = orelse
            self.token = token

        def blocks(self):
            return [self.body] + ([self.orelse] if self.orelse else [])

        def translate(self, state):
            if self.test.evaluate(state):
                return Fragment(self.body.translate(state))
            if self.orelse is not None:
                return Fragment(self.orelse.translate(state))
            return Fragment()

        def __str__(self):              return "<xif %s>" % self.test.text

    class xfor(node):
        target = None           # Target
        source = None           # Expression that evaluates to an iterable
        body   = None           # <xtemplate>, translated once per item, each time in a new scope

        def __init__(self, target, source, body, token = None):
            self.target = target
            self.source = source
            self.body = body
            self.token = token

        def blocks(self):               return [self.body]

        def translate(self, state):
            out = []
            for item in self.source.evaluate(state):
                position = state.position()
                try:
                    self.target.assign(state.enter(), item)
                    out.append(Fragment(self.body.translate(state)))
                finally:
                    state.reset(position)
            return Fragment(View(out))

        def __str__(self):              return "<xfor %s in %s>" % (self.target.text, self.source.text)

    class xwhere(node):
        """[:where statements {body}]: variables bound by the statements are visible inside the body only."""
        statements = None       # Statements
        body       = None       # <xtemplate>

        def __init__(self, statements, body, token = None):
            self.statements = statements
            self.body = body
            self.token = token

        def blocks(self):               return [self.body]

        def translate(self, state):
            position = state.position()
            try:
                self.statements.execute(state.enter())
                return Fragment(self.body.translate(state))
            finally:
                state.reset(position)

        def __str__(self):              return "<xwhere %s>" % self.statements.text.strip()


    ###  ATTRIBUTES  ###

    class attribute(node):
        name = None

        @staticmethod
        def make(name, value, state):
            """
            Attribute from an evaluated value: True gives a boolean attribute (name only),
            False and None drop the attribute, other values are converted to strings and escaped.
            """
            if value is None or value is False: return None
            if value is True: return Attribute(name)
            return Attribute(name, markup(value, state.escape, quote = True))

    class xattr_pair(attribute):
        """name=value, or a bare `name` when value is None."""
        value = None            # Expression or Static, or None

        def __init__(self, name, value, token = None):
            self.name = name
            self.value = value
            self.token = token

        def translate(self, state):
            if self.value is None: return Attribute(self.name)
            return self.make(self.name, self.value.evaluate(state), state)

        def __str__(self):
            return self.name if self.value is None else f"{self.name}={self.value.text}"

    class xattr_cond(attribute):
        """name?=condition, or name! which stands for name?=True: a boolean attribute present if the condition holds."""
        test = None             # Expression or Static

        def __init__(self, name, test = None, token = None):
            self.name = name
            self.test = test if test is not None else Static(True)
            self.token = token

        def translate(self, state):
            return Attribute(self.name) if self.test.evaluate(state) else None

        def __str__(self):
            return f"{self.name}?={self.test.text}"
