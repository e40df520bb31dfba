"""
Recursive-descent parser of Ibex templates.

Source text is split into tokens by ibex.grammar, with every (...), [...] and {...} region
as a single Group token. The parser walks the token stream and descends into groups explicitly,
building a tree of NODES (ibex.nodes). Embedded Python code is compiled on the way,
so a template that parses successfully is fully checked, apart from run-time errors.

Grammar by the leading token of a node:

    HEAD {...}                          head-append block; only as the 1st node of a block
    tag #id .class [attrs] {...}        element; id, class and attrs are optional; `/` instead of {...} closes the element
    "text"                              literal text, inserted verbatim
    [expr]                              Python expression, converted to a node at run time
    [:if cond {...} else {...}]         conditional block; else-branch optional; `else if` chains allowed
    [:for target in source {...}]       loop
    [:where statements {...}]           block with local variables
    @name[args] {...}                   call of a Python function; args or body optional, one of them required
    ~  ~~                               space, line break
    &name;  &160;  &#160;  &#x00A0;     character entity; semicolon optional

Attributes in [...]:  name,  name=value,  name?=condition,  name!
"""

import re

from ibex.config import HEAD, CONTROL, KEYWORDS, ELSE, LOOP_IN, VOID_CLOSE, SPACE, NEWLINE
from ibex.errors import SyntaxErrorEx
from ibex.grammar import Grammar
from ibex.tokens import Literal, Span, TokenStream
from ibex.builtin_html import get_tag
from ibex.expr import Expression, Static, Statements, Target, Arguments, QualifiedName
from ibex.nodes import NODES

DEBUG = False


#####################################################################################################################################################
#####
#####  UTILITIES
#####

_re_entity_name = re.compile(r'[A-Za-z][A-Za-z0-9]*')
_re_entity_dec  = re.compile(r'\d+')
_re_entity_hex  = re.compile(r'[xX][0-9a-fA-F]+')

def adjacent(a, b):
    """True if token `b` starts right where token `a` ends, with no whitespace between."""
    return a is not None and b is not None and a.end == b.start

def split(tokens, char):
    """Split a list of tokens on top-level punctuation `char`; tokens inside groups are never split."""
    parts = [[]]
    for token in tokens:
        if token.is_punct(char):
            parts.append([])
        else:
            parts[-1].append(token)
    return parts


#####################################################################################################################################################
#####
#####  PARSER
#####

class Parser:
    """
    Parser of Ibex templates. parse() returns the root <xtemplate> node, or raises SyntaxErrorEx
    pointing to the offending token and the production being parsed.
    """

    template = None         # name of the template, for error messages

    def __init__(self, template = None):
        self.template = template

    def parse(self, source):
        tokens = Grammar.default.tokenize(source, self.template)
        root = self._template(TokenStream(tokens))
        if DEBUG: print(root.dump())
        return root

    def parse_document(self, source):
        """
        Parse a document template: an optional header [lang=expr] followed by a regular template.
        Return a pair (lang, root), where `lang` is an Expression or Static, or None if no header is present.
        """
        stream = TokenStream(Grammar.default.tokenize(source, self.template))
        lang = None
        if self._is_header(stream.peek()):
            lang = self._header(stream.next())
        return lang, self._template(stream)

    def error(self, msg, token, production):
        return SyntaxErrorEx(msg, token, production, self.template)

    ###  BLOCKS  ###

    def _template(self, stream):
        nodes = []
        while not stream.at_end():
            nodes.append(self._node(stream, first = not nodes))
        return NODES.xtemplate(nodes, stream.owner)

    def _block(self, group):
        """Template made from the inside of a {...} group."""
        return self._template(TokenStream.group_stream(group))

    def _node(self, stream, first):
        token = stream.next()
        if DEBUG: print('node', token)

        if token.is_ident(HEAD):
            return self._head(token, stream, first)
        if token.is_ident():
            return self._element(token, stream)
        if token.is_group('['):
            if token.tokens and token.tokens[0].is_punct(CONTROL):
                return self._control(token)
            return self._expression(token)
        if token.is_punct('@'):
            return self._call(token, stream)
        if token.is_punct('~'):
            return self._space(token, stream)
        if token.is_punct('&'):
            return self._entity(token, stream)
        if isinstance(token, Literal):
            if not token.isstring:
                raise self.error("numbers must be written as strings or inside [...]", token, 'template')
            return NODES.xliteral(self._string(token, 'literal'), token)
        if token.is_group('{'):
            raise self.error("a {...} block must follow a tag, a function call or a control keyword", token, 'template')

        raise self.error("unexpected token", token, 'template')

    def _head(self, token, stream, first):
        if not first:
            raise self.error("HEAD block is allowed only as the first node of a block", token, 'head')
        body = stream.next()
        if body is None or not body.is_group('{'):
            raise self.error("HEAD must be followed by a {...} block, with no id, class or attributes", body or token, 'head')
        return NODES.xhead(self._block(body), token)

    ###  ELEMENTS  ###

    def _element(self, token, stream):
        tag = get_tag(token.text, token, self.template)
        id = cls = None

        if stream.peek_punct('#'):
            stream.next()
            id = self._shorthand(stream, 'id')
        if stream.peek_punct('.'):
            stream.next()
            cls = self._shorthand(stream, 'class')
        if stream.peek_punct('#'):
            raise self.error("id must precede class", stream.peek(), 'tag')
        if stream.peek_punct('.'):
            raise self.error("only one class shorthand is allowed, put all classes in one string", stream.peek(), 'tag')

        attrs = self._attributes(stream.next()) if stream.peek_group('[') else []

        end = stream.next()
        if end is not None and end.is_group('{'):
            if tag.void: raise self.error(f"void tag <{tag.name}> cannot have a body, close it with /", end, 'tag')
            body = self._block(end)
        elif end is not None and end.is_punct(VOID_CLOSE):
            body = None
        else:
            raise self.error(f"tag <{tag.name}> must be followed by a {{...}} block or /", end or token, 'tag')

        return NODES.xelement(tag, id, cls, attrs, body, token)

    def _shorthand(self, stream, production):
        """Value of #id or .class: a string literal, an expression in [...], or a bare name like `card-body`."""
        token = stream.next()
        if token is None:
            raise self.error(f"missing value of {production}", stream.where(), production)
        if isinstance(token, Literal) and token.isstring:
            return Static(self._string(token, production))
        if token.is_group('['):
            if not token.tokens: raise self.error(f"empty expression in {production}", token, production)
            return self._expr(token.tokens)
        if token.is_ident():
            return Static(self._joined(token, stream, '-'))
        raise self.error(f"invalid {production}, expected a name, a string or [...]", token, production)

    def _joined(self, first, stream, separators):
        """
        A name made of `first` identifier and adjacent parts joined with any of `separators`: aria-label, xml:lang, col-6.
        Parts are identifiers or numbers. Whitespace ends the name.
        """
        parts = [first.text]
        last = first
        while True:
            sep, part = stream.peek(), stream.peek(1)
            if not (sep is not None and sep.is_punct() and sep.text in separators and adjacent(last, sep)): break
            if not (part is not None and adjacent(sep, part)): break
            if not (part.is_ident() or (isinstance(part, Literal) and not part.isstring)): break
            stream.next()
            stream.next()
            parts += [sep.text, part.text]
            last = part
        return ''.join(parts)

    def _attributes(self, group):
        """List of <xattr_*> nodes from a [...] group. Empty [] gives no attributes; a trailing comma is allowed."""
        attrs = []
        items = split(group.tokens, ',')
        for i, item in enumerate(items):
            if not item:
                if not group.tokens or (i == len(items) - 1 and i > 0): continue
                raise self.error("empty attribute in a list of attributes", group, 'attribute')
            attrs.append(self._attribute(item))
        return attrs

    def _attribute(self, tokens):
        stream = TokenStream(tokens)
        first = stream.next()

        if isinstance(first, Literal) and first.isstring:
            name = self._string(first, 'attribute')
        elif first.is_ident():
            name = self._joined(first, stream, '-:')
        else:
            raise self.error("invalid name of an attribute", first, 'attribute')

        op = stream.next()
        if op is None:                                                  # name
            return NODES.xattr_pair(name, None, first)
        if op.is_punct('!') and stream.at_end():                        # name!
            return NODES.xattr_cond(name, None, first)
        if op.is_punct('='):                                            # name=value
            value = stream.remaining()
            if not value: raise self.error(f"missing value of attribute '{name}'", op, 'attribute')
            return NODES.xattr_pair(name, self._expr(value), first)
        if op.is_punct('?') and stream.peek_punct('=') and adjacent(op, stream.peek()):      # name?=condition
            stream.next()
            test = stream.remaining()
            if not test: raise self.error(f"missing condition of attribute '{name}'", op, 'attribute')
            return NODES.xattr_cond(name, self._expr(test), first)

        raise self.error(f"invalid attribute '{name}', expected: name, name=value, name?=condition or name!", op, 'attribute')

    ###  TEXT  ###

    def _string(self, token, production):
        try:
            value = token.value
        except (ValueError, SyntaxError):
            raise self.error("only plain string literals are allowed here, put other expressions in [...]", token, production) from None
        if not isinstance(value, str):
            raise self.error("expected a string literal", token, production)
        return value

    def _space(self, token, stream):
        nxt = stream.peek()
        if nxt is not None and nxt.is_punct('~') and adjacent(token, nxt):
            stream.next()
            return NODES.xliteral(NEWLINE, token)
        return NODES.xliteral(SPACE, token)

    def _entity(self, amp, stream):
        token = stream.next()
        if not adjacent(amp, token):
            raise self.error("expected a name or a number of an entity right after &", token or amp, 'entity')

        if token.is_ident() and _re_entity_name.fullmatch(token.text):
            text = f"&{token.text};"
        elif isinstance(token, Literal) and _re_entity_dec.fullmatch(token.text):
            text = f"&#{token.text};"
        elif token.is_punct('#'):
            code = stream.next()
            if not adjacent(token, code):
                raise self.error("expected a code of a numeric entity after &#", code or token, 'entity')
            if isinstance(code, Literal) and _re_entity_dec.fullmatch(code.text) or \
               code.is_ident() and _re_entity_hex.fullmatch(code.text):
                text = f"&#{code.text};"
            else:
                raise self.error("invalid code of a numeric entity", code, 'entity')
        else:
            raise self.error("invalid entity", token, 'entity')

        if stream.peek_punct(';') and adjacent(stream.last, stream.peek()):
            stream.next()
        return NODES.xentity(text, amp)

    ###  EXPRESSIONS & CALLS  ###

    def _expr(self, tokens):
        """Expression made of `tokens`; a single string or number literal gives a Static value."""
        if len(tokens) == 1 and isinstance(tokens[0], Literal):
            try:
                return Static(tokens[0].value)
            except (ValueError, SyntaxError):
                pass
        return Expression(Span(tokens), self.template)

    def _expression(self, group):
        if not group.tokens:
            raise self.error("empty expression", group, 'expression')
        return NODES.xexpression(self._expr(group.tokens), group)

    def _call(self, at, stream):
        name = self._name(at, stream)
        args = body = None
        has_args = stream.peek_group('[')

        if has_args:
            group = stream.next()
            if group.tokens: args = Arguments(Span(group.tokens), self.template)
        if stream.peek_group('{'):
            body = self._block(stream.next())
        if not has_args and body is None:
            raise self.error(f"call of @{name.text} requires [arguments] or a {{...}} block", stream.where() or at, 'call')

        return NODES.xcall(name, args, body, at)

    def _name(self, at, stream):
        """Qualified name of a function after @:  name, a::b, a.b, ::name"""
        root = False
        text = ''
        token = stream.next()

        if token is not None and token.is_punct(':'):
            self._second_colon(token, stream)
            root = True
            text = '::'
            token = stream.next()
        if token is None or not token.is_ident():
            raise self.error("expected a function name after @", token or at, 'call')

        segments = [token.text]
        text += token.text
        while stream.peek_punct(':') or stream.peek_punct('.'):
            sep = stream.next()
            if sep.is_punct(':'):
                self._second_colon(sep, stream)
            part = stream.next()
            if part is None or not part.is_ident():
                raise self.error(f"expected a name after '{sep.text}' in a function name", part or sep, 'call')
            segments.append(part.text)
            text += ('.' if sep.is_punct('.') else '::') + part.text

        return QualifiedName(segments, root, at, text)

    def _second_colon(self, colon, stream):
        second = stream.next()
        if second is None or not second.is_punct(':') or not adjacent(colon, second):
            raise self.error("single colon in a function name, use :: to separate names", colon, 'call')

    ###  CONTROL BLOCKS  ###

    def _control(self, group):
        tokens = group.tokens
        keyword = tokens[1] if len(tokens) > 1 else None
        if keyword is None or not keyword.is_ident() or keyword.text not in KEYWORDS:
            raise self.error(f"expected one of: {', '.join(KEYWORDS)} after '{CONTROL}'", keyword or tokens[0], 'control')

        rest = tokens[2:]
        if keyword.text == 'if':  return self._if(keyword, rest)
        if keyword.text == 'for': return self._for(keyword, rest)
        return self._where(keyword, rest)

    def _trailing_block(self, tokens, keyword, production):
        """Split `tokens` into a leading clause and the trailing {...} block, which must be present."""
        if not tokens or not tokens[-1].is_group('{'):
            raise self.error(f"[:{production} ...] must end with a {{...}} block", tokens[-1] if tokens else keyword, production)
        return tokens[:-1], tokens[-1]

    @staticmethod
    def _find_else_if(tokens):
        """Position of the last `else if` that follows a {...} block in `tokens`, or None."""
        for i in range(len(tokens) - 2, 0, -1):
            if tokens[i].is_ident(ELSE) and tokens[i+1].is_ident('if') and tokens[i-1].is_group('{'):
                return i
        return None

    def _if(self, keyword, tokens):
        """
        The trailing blocks are located by scanning backwards from the end: the optional `else {...}` first,
        then the clauses of `else if` chain, from the last one to the first; conditions are what remains in between.
        """
        orelse = None
        if len(tokens) >= 2 and tokens[-2].is_ident(ELSE):
            if not tokens[-1].is_group('{'):
                raise self.error("`else` must be followed by a {...} block", tokens[-1], 'if')
            orelse = self._block(tokens[-1])
            tokens = tokens[:-2]

        clauses = []                # (test tokens, block) pairs, from the last clause to the first
        while True:
            head, block = self._trailing_block(tokens, keyword, 'if')
            pos = self._find_else_if(head)
            test = head[pos+2:] if pos is not None else head
            if not test:
                raise self.error("missing condition", block, 'if')
            clauses.append((test, block))
            if pos is None: break
            tokens = head[:pos]

        node = None
        for test, block in clauses:
            node = NODES.xif(self._expr(test), self._block(block), orelse, test[0])
            orelse = NODES.xtemplate([node], test[0])
        node.token = keyword
        return node

    def _for(self, keyword, tokens):
        clause, block = self._trailing_block(tokens, keyword, 'for')
        pos = next((i for i, token in enumerate(clause) if token.is_ident(LOOP_IN)), None)
        if not pos or pos == len(clause) - 1:
            raise self.error("expected: [:for target in source {...}]", clause[0] if clause else keyword, 'for')

        target = Target(Span(clause[:pos]), self.template)
        source = self._expr(clause[pos+1:])
        return NODES.xfor(target, source, self._block(block), keyword)

    def _where(self, keyword, tokens):
        clause, block = self._trailing_block(tokens, keyword, 'where')
        if not clause:
            raise self.error("expected: [:where statements {...}]", block, 'where')
        return NODES.xwhere(Statements(Span(clause), self.template), self._block(block), keyword)

    ###  DOCUMENT HEADER  ###

    @staticmethod
    def _is_header(token):
        """
        True if `token` looks like a document header: [name=...], where `name` may be joined with - or :
        like in _joined(). Expressions, like [n>=1 ...] or [a == b], are not headers.
        """
        if token is None or not token.is_group('['): return False
        tokens = token.tokens
        if len(tokens) < 2 or not tokens[0].is_ident(): return False

        i = 1
        while i + 1 < len(tokens):                              # skip a joined name, like xml:lang
            sep, part = tokens[i], tokens[i+1]
            if not (sep.is_punct() and sep.text in '-:' and adjacent(tokens[i-1], sep) and adjacent(sep, part)): break
            if not (part.is_ident() or (isinstance(part, Literal) and not part.isstring)): break
            i += 2

        op = tokens[i] if i < len(tokens) else None
        if op is None or not op.is_punct('='): return False
        nxt = tokens[i+1] if i + 1 < len(tokens) else None
        return not (nxt is not None and nxt.is_punct('=') and adjacent(op, nxt))

    def _header(self, group):
        attrs = self._attributes(group)
        if len(attrs) != 1 or attrs[0].name != 'lang' or not isinstance(attrs[0], NODES.xattr_pair) or attrs[0].value is None:
            raise self.error("document header accepts only one attribute: [lang=...]", group, 'document')
        return attrs[0].value
