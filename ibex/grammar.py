"""
Ibex template syntax: lexical grammar.

A template is a sequence of tokens, where brackets, braces and parentheses
delimit nested GROUPS that are treated as single tokens by the parser:

    HEAD { title { "Ibex" } }
    h1 #"top" ."title" [data-level="1"] { "Hello," ~ [name] &excl; }
    ul {
        [:for item in items {
            li [class=item.kind, hidden?=item.hidden] { [item.label] }
        }]
    }
    [:if user is None { a [href="/login"] { "Log in" } } else { @profile_card[user] }]
    [:where total = sum(prices); count = len(prices) {
        p { "Total: " [total] " in " [count] " items" }
    }]
    input [type="checkbox", checked!] /
    br/

Tokens:
 ident      names of tags, HEAD, keywords of control blocks, names of attributes and functions
 literal    string literal written as in Python ('...', "...", with optional r/b/u/f prefix), or a number
 punct      a single punctuation character:  # . / @ : ~ & ; , = ? ! ...
 group      (...)  [...]  {...}  with a nested sequence of tokens inside

Whitespace is insignificant between tokens. Comments /* ... */ are skipped.
Python code inside [...] (expressions, conditions, loop clauses, statements, arguments of functions)
is tokenized like the rest of the template, but recovered for compilation verbatim from the source text.
"""

from parsimonious.grammar import Grammar as Parsimonious
from parsimonious.nodes import NodeVisitor
from parsimonious.exceptions import ParseError

from ibex.errors import SyntaxErrorEx
from ibex.tokens import Token, Ident, Punct, Literal, Group


########################################################################################################################################################
#####
#####  GRAMMAR
#####

# \x22 and \x27 stand for the double and single quote characters
grammar = r"""

stream      =  skip (token skip)*

token       =  group / string / number / ident / punct

group       =  paren / bracket / brace
paren       =  '(' stream ')'
bracket     =  '[' stream ']'
brace       =  '{' stream '}'

string      =  ~r"(?:rb|br|rf|fr|[rbuf])?(?:\x22\x22\x22[\s\S]*?\x22\x22\x22|\x27\x27\x27[\s\S]*?\x27\x27\x27|\x22(?:[^\x22\\\n]|\\.)*\x22|\x27(?:[^\x27\\\n]|\\.)*\x27)"i
number      =  ~r"0[xob][0-9a-f_]+|\d[\d_]*(?:\.\d[\d_]*)?(?:e[+-]?\d+)?j?"i
ident       =  ~r"[^\W\d]\w*"
punct       =  ~r"[^\s\w()\[\]{}\x22\x27]"

skip        =  (ws / comment)*
ws          =  ~r"\s+"
comment     =  ~r"/\*[\s\S]*?\*/"

"""


########################################################################################################################################################
#####
#####  LEXER
#####

class Lexer(NodeVisitor):
    """Converts a parse tree of the `grammar` into a list of Tokens with nested Groups."""

    def __init__(self, source):
        self.source = source

    def visit_stream(self, node, children):
        _, tail = children
        if not isinstance(tail, list): return []            # empty ZeroOrMore is passed through unvisited
        return [token for token, _ in tail]

    def visit_token(self, node, children):
        return children[0]

    def visit_group(self, node, children):
        return children[0]

    def _group(self, node, children):
        _, tokens, _ = children
        return Group(self.source, node.start, node.end, tokens)

    visit_paren   = _group
    visit_bracket = _group
    visit_brace   = _group

    def visit_string(self, node, _):    return Literal(self.source, node.start, node.end)
    def visit_number(self, node, _):    return Literal(self.source, node.start, node.end)
    def visit_ident(self, node, _):     return Ident(self.source, node.start, node.end)
    def visit_punct(self, node, _):     return Punct(self.source, node.start, node.end)

    def visit_skip(self, node, _):      return None

    def generic_visit(self, node, children):
        return children or node


class Grammar(Parsimonious):

    default = None      # class-level default instance of Grammar; the grammar is stateless and can be shared

    def __init__(self):
        super(Grammar, self).__init__(grammar)

    def tokenize(self, source, template = None):
        """
        Convert `source` text of a template to a list of tokens.
        SyntaxErrorEx is raised on unbalanced delimiters, unterminated strings or stray closing brackets.
        """
        try:
            tree = self.parse(source)
        except ParseError as ex:
            pos = min(ex.pos, max(len(source) - 1, 0))
            token = Token(source, pos, pos + 1)
            raise SyntaxErrorEx("Unbalanced delimiters or malformed token", token, "template", template) from None

        return Lexer(source).visit(tree)


Grammar.default = Grammar()
