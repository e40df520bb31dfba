"""
Data structures for evaluation of Ibex templates.
"""

########################################################################################################################################################

class State:
    """
    Run-time state of one evaluation of a template: a stack of variable scopes.
    Every scope is a dict that serves as globals for compiled Python code of the template, so that
    lambdas, comprehensions and nested functions defined in a template see all variables in scope.
    A nested scope starts as a copy of its parent; bindings made inside it are invisible outside.

    >>> state = State({'x': 1})
    >>> position = state.position()
    >>> state.enter()['x'] = 2
    >>> state.reset(position)
    >>> state.scope['x']
    1
    """

    root     = None         # top-level scope: variables passed by the caller
    scopes   = None         # stack of scopes, root first; the last one is the current scope
    escape   = True         # if True, strings from expressions and attributes are HTML-escaped
    template = None         # name of the template, for error messages

    def __init__(self, variables = None, escape = True, template = None):
        self.root = dict(variables or {})
        self.scopes = [self.root]
        self.escape = escape
        self.template = template

    @property
    def scope(self):
        return self.scopes[-1]

    def enter(self):
        """Push a new scope, a copy of the current one, and return it."""
        scope = dict(self.scope)
        self.scopes.append(scope)
        return scope

    def position(self):
        """Position in the stack of scopes that can be passed to reset()."""
        return len(self.scopes)

    def reset(self, position):
        """Drop all scopes that were entered after `position` was taken."""
        del self.scopes[position:]
