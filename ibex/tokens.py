"""
Tokens of Ibex templates and a cursor (TokenStream) for recursive-descent parsing over them.

Template source is lexed by ibex.grammar into a flat sequence of tokens, in which every region
delimited by (...), [...] or {...} is a single, opaque Group token that holds its own inner sequence.
Every token keeps its position in the source, so that Python code embedded in a template can be
recovered verbatim, and errors can point to a line and column.
"""

from ast import literal_eval
from textwrap import dedent


########################################################################################################################################################
#####
#####  TOKENS
#####

class Token:
    """Base class for all tokens."""

    source = None       # full text of the template where this token comes from
    start  = None       # position of the 1st character of the token in `source`
    end    = None       # position after the last character of the token

    def __init__(self, source, start, end):
        self.source = source
        self.start = start
        self.end = end

    @property
    def text(self):
        return self.source[self.start:self.end]

    @property
    def line(self):
        return self.source.count('\n', 0, self.start) + 1

    @property
    def column(self):
        return self.start - (self.source.rfind('\n', 0, self.start) + 1) + 1

    def is_punct(self, char = None):   return False
    def is_ident(self, name = None):   return False
    def is_group(self, delim = None):  return False

    def __repr__(self):
        return f"{self.__class__.__name__}({self.text!r})"

class Ident(Token):
    def is_ident(self, name = None):
        return name is None or self.text == name

class Punct(Token):
    def is_punct(self, char = None):
        return char is None or self.text == char

class Literal(Token):
    """A string or number literal, written with Python syntax."""

    @property
    def isstring(self):
        return not self.text[:1].isdigit()

    @property
    def value(self):
        """Python value of the literal; ValueError for literals that are not constants, like f-strings."""
        return literal_eval(self.text)

class Group(Token):
    """A delimited region of source: (...), [...] or {...} with its inner tokens."""

    OPENING = {'(': ')', '[': ']', '{': '}'}

    delim  = None           # opening delimiter character
    tokens = None           # list of inner tokens

    def __init__(self, source, start, end, tokens):
        super(Group, self).__init__(source, start, end)
        self.delim = source[start]
        self.tokens = tokens

    def is_group(self, delim = None):
        return delim is None or self.delim == delim

    def stream(self):
        return TokenStream(self.tokens, owner = self)

    def __repr__(self):
        return f"Group({self.delim}{', '.join(map(repr, self.tokens))}{self.OPENING[self.delim]})"


########################################################################################################################################################
#####
#####  SPAN
#####

class Span:
    """
    A contiguous, non-empty run of tokens from one source, e.g., an expression inside [...] or a condition
    of an `if` block. Provides the verbatim source text of the run.
    """
    def __init__(self, tokens):
        assert tokens
        self.tokens = list(tokens)

    @property
    def first(self):  return self.tokens[0]
    @property
    def last(self):   return self.tokens[-1]

    @property
    def text(self):
        """Verbatim source text from the start of the 1st token to the end of the last one."""
        return self.first.source[self.first.start : self.last.end]

    def block(self):
        """
        Source text of the span as a block of statements: the 1st line is padded to the column where it starts,
        and the common indentation of all lines is removed, so that multi-line blocks keep their relative layout.
        If the continuation lines are indented less than the 1st line, they are aligned with it instead.
        """
        source = self.first.source
        head = source[source.rfind('\n', 0, self.first.start) + 1 : self.first.start]
        pad = ''.join(c if c == '\t' else ' ' for c in head)
        first, _, rest = self.text.partition('\n')
        indents = [len(line) - len(line.lstrip()) for line in rest.splitlines() if line.strip()]
        if indents and min(indents) < len(pad):
            return first + '\n' + dedent(rest)
        return dedent(pad + self.text)

    def __len__(self):
        return len(self.tokens)

    def __repr__(self):
        return f"Span({self.text!r})"


########################################################################################################################################################
#####
#####  TOKEN STREAM
#####

class TokenStream:
    """
    Cursor over a flat list of tokens with one-token lookahead.
    Groups are not entered implicitly; call group_stream() to descend into a group.
    """

    owner = None            # Group token that encloses this stream, or None for the top-level stream
    last  = None            # most recently consumed token

    def __init__(self, tokens, owner = None):
        self.tokens = tokens
        self.owner = owner
        self.pos = 0

    def __iter__(self):
        while not self.at_end():
            yield self.next()

    def at_end(self):
        return self.pos >= len(self.tokens)

    def peek(self, offset = 0):
        """Next token (or the one `offset` positions further) without consuming it; None past the end of the stream."""
        pos = self.pos + offset
        if pos < len(self.tokens):
            return self.tokens[pos]
        return None

    def next(self):
        """Consume and return the next token, or return None at the end of the stream."""
        token = self.peek()
        if token is not None:
            self.pos += 1
            self.last = token
        return token

    def peek_punct(self, char):
        """True if the next token is a punctuation character `char`."""
        token = self.peek()
        return token is not None and token.is_punct(char)

    def peek_group(self, delim):
        token = self.peek()
        return token is not None and token.is_group(delim)

    def remaining(self):
        """Consume and return all the remaining tokens as a list."""
        rest = self.tokens[self.pos:]
        self.pos = len(self.tokens)
        if rest: self.last = rest[-1]
        return rest

    def where(self):
        """The token that best describes the current position: last consumed, or the enclosing group."""
        return self.peek() or self.last or self.owner

    @staticmethod
    def group_stream(group):
        """Inner stream of a group token."""
        return group.stream()
