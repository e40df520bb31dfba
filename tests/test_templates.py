"""
Run:
$
$  pytest -q tests

"""

import re, pytest
from types import SimpleNamespace

import ibex
from ibex import Element, Attribute, Text, Fragment, View, Markup
from ibex.errors import SyntaxErrorEx, UndefinedTagEx, TypeErrorEx, NameErrorEx, HeadAppendEx

#####################################################################################################################################################
#####
#####  UTILITIES
#####

def merge_spaces(s, pat = re.compile(r'\s+')):
    """Merge multiple spaces, replace newlines and tabs with spaces, strip leading/trailing space."""
    return pat.sub(' ', s).strip()

def render(src, **variables):
    """Render `src` as an HTML fragment, without the document skeleton."""
    return ibex.compile(src).render_fragment(**variables)

#####################################################################################################################################################
#####
#####  TESTS
#####

def test_001_basic():
    assert render("") == ""
    assert render("   /* nothing here */   ") == ""
    assert render('"Hello"') == "Hello"
    assert render('p { "Ala" }') == "<p>Ala</p>"
    assert render('div { p { "a" } p { "b" } }') == "<div><p>a</p><p>b</p></div>"
    src = """
        ul {
            li { "one" }    /* first */
            li { 'two' }
        }
    """
    assert render(src) == "<ul><li>one</li><li>two</li></ul>"

def test_002_id_class():
    assert render('div #main ."box big" { }') == '<div id="main" class="box big"></div>'
    assert render('div.card-body/') == '<div class="card-body"></div>'
    assert render('div .col-6 /') == '<div class="col-6"></div>'
    assert render('p #[ident] { }', ident = "x1") == '<p id="x1"></p>'
    assert render('p .[cls] { }', cls = None) == '<p></p>'

    with pytest.raises(SyntaxErrorEx, match = 'id must precede class'):
        render('div ."a" #"b" {}')
    with pytest.raises(SyntaxErrorEx, match = 'only one class'):
        render('div .a .b {}')
    with pytest.raises(SyntaxErrorEx, match = 'missing value of id'):
        render('div #')

def test_003_attributes():
    assert render('a [href="/x", title="T"] { "go" }') == '<a href="/x" title="T">go</a>'
    assert render('input [type="checkbox", checked!] /') == '<input type="checkbox" checked>'
    assert render('input [disabled?=off] /', off = False) == '<input>'
    assert render('input [disabled?=off] /', off = True) == '<input disabled>'
    assert render('div [hidden] {}') == '<div hidden></div>'
    assert render('div [data-id=n+1, aria-label="L"] {}', n = 1) == '<div data-id="2" aria-label="L"></div>'
    assert render('div [title=""] {}') == '<div title=""></div>'
    assert render('div #"i" ."c" [x="1"] {}') == '<div id="i" class="c" x="1"></div>'
    assert render('p [] {}') == '<p></p>'
    assert render('p [a="1",] {}') == '<p a="1"></p>'
    assert render('p ["data-x"="1"] {}') == '<p data-x="1"></p>'
    assert render('p [xml:lang="en"] {}') == '<p xml:lang="en"></p>'
    assert render('p [title=max(1, 2), x=None, y=True] {}') == '<p title="2" y></p>'
    assert render('p [title=t] {}', t = 'a"b<') == '<p title="a&quot;b&lt;"></p>'

    with pytest.raises(SyntaxErrorEx, match = 'invalid attribute'):
        render('p [a b] {}')
    with pytest.raises(SyntaxErrorEx, match = 'missing value'):
        render('p [a=] {}')
    with pytest.raises(SyntaxErrorEx, match = 'empty attribute'):
        render('p [a,,b] {}')
    with pytest.raises(SyntaxErrorEx, match = r"in 'page\.ibex', line 1, column 6"):
        ibex.compile('p [a b] {}', filename = 'page.ibex')

def test_004_void_tags():
    assert render('br/') == '<br>'
    assert render('br [class="x"] /') == '<br class="x">'
    assert render('div /') == '<div></div>'
    assert ibex.compile('input [checked!] /', mode = 'XHTML').render_fragment() == '<input checked="checked" />'

    with pytest.raises(SyntaxErrorEx, match = 'void tag <br>'):
        render('br { "x" }')
    with pytest.raises(SyntaxErrorEx, match = 'must be followed by'):
        render('p')
    with pytest.raises(UndefinedTagEx, match = 'undefined tag <foo>'):
        render('foo {}')

def test_005_expressions():
    assert render('p { [x * 2] }', x = 21) == '<p>42</p>'
    assert render('[name]', name = '<b>') == '&lt;b&gt;'
    assert render('[Markup("<b>x</b>")]', Markup = Markup) == '<b>x</b>'
    assert ibex.compile('[s]', escape = False).render_fragment(s = '<i>') == '<i>'
    assert render('[x]', x = None) == ''
    assert render('[items]', items = ['a', 1, None, ['b']]) == 'a1b'
    assert render('[c.upper() for c in "abc"]') == 'ABC'
    assert render('[3.5]') == '3.5'
    src = """
        [ 1 +
          2 ]
    """
    assert render(src) == '3'

    with pytest.raises(TypeErrorEx):
        render('[flag]', flag = True)
    with pytest.raises(TypeErrorEx, match = 'line 1, column 5'):
        render('p { [d] }', d = {'a': 1})
    with pytest.raises(ZeroDivisionError):
        render('[1/0]')
    with pytest.raises(SyntaxErrorEx, match = 'invalid Python'):
        render('[1 +]')
    with pytest.raises(SyntaxErrorEx, match = 'empty expression'):
        render('[]')

def test_006_text_escapes():
    assert render('"a" ~ "b"') == 'a b'
    assert render('"a" ~~ "b"') == 'a\nb'
    assert render('"a" ~ ~ "b"') == 'a  b'
    assert render('&nbsp; &amp &160; &#160 &#x00A0;') == '&nbsp;&amp;&#160;&#160;&#x00A0;'
    assert render('"<b>" "x" "</b>"') == '<b>x</b>'                 # literals are trusted
    assert render("'''two\nlines'''") == 'two\nlines'
    assert merge_spaces(render('p { "a" ~~ "b" }')) == '<p>a b</p>'

    with pytest.raises(SyntaxErrorEx, match = 'right after &'):
        render('& nbsp')
    with pytest.raises(SyntaxErrorEx, match = 'invalid code'):
        render('&#zz')
    with pytest.raises(SyntaxErrorEx, match = 'only plain string literals'):
        render('f"{x}"')
    with pytest.raises(SyntaxErrorEx, match = 'numbers must be written'):
        render('5')

def test_007_if():
    src = '[:if x { "yes" } else { "no" }]'
    assert render(src, x = 1) == 'yes'
    assert render(src, x = 0) == 'no'
    assert render('[:if x { "yes" }]', x = 0) == ''

    src = '[:if n < 0 { "neg" } else if n == 0 { "zero" } else { "pos" }]'
    assert [render(src, n = n) for n in (-1, 0, 1)] == ['neg', 'zero', 'pos']

    src = '[:if n == 1 { "one" } else if n == 2 { "two" }]'
    assert [render(src, n = n) for n in (1, 2, 3)] == ['one', 'two', '']

    src = 'div { [:if user { p { [user] } }] }'
    assert render(src, user = "Ann") == '<div><p>Ann</p></div>'
    assert render(src, user = None) == '<div></div>'

    with pytest.raises(SyntaxErrorEx, match = 'missing condition'):
        render('[:if { "x" }]')
    with pytest.raises(SyntaxErrorEx, match = 'must end with'):
        render('[:if x "a"]')
    with pytest.raises(SyntaxErrorEx, match = 'expected one of'):
        render('[:unless x {}]')

def test_008_if_without_else():
    # a missing else-branch is the same as an empty one
    view1 = ibex.compile('[:if False { "a" }]').view()
    view2 = ibex.compile('[:if False { "a" } else {}]').view()
    assert view1 == view2 == View(Fragment())

def test_009_for():
    src = 'ul { [:for i in items { li { [i] } }] }'
    assert render(src, items = [1, 2, 3]) == '<ul><li>1</li><li>2</li><li>3</li></ul>'
    assert render(src, items = []) == '<ul></ul>'

    src = '[:for i, (k, v) in enumerate(d.items()) { [i] ":" [k] "=" [v] ~ }]'
    assert render(src, d = {'a': 1, 'b': 2}) == '0:a=1 1:b=2 '

    src = '[:for row in rows { tr { [:for cell in row { td { [cell] } }] } }]'
    assert render(src, rows = [[1, 2], [3]]) == '<tr><td>1</td><td>2</td></tr><tr><td>3</td></tr>'

    # loop variables are not visible after the loop
    assert render('[:for x in [1, 2] { [x] }] [x]', x = 9) == '129'

    with pytest.raises(SyntaxErrorEx, match = 'expected: \\[:for'):
        render('[:for x { "a" }]')
    with pytest.raises(SyntaxErrorEx, match = 'invalid Python'):
        render('[:for 1 in xs { "a" }]')

def test_010_for_nodes():
    assert ibex.compile('[:for x in [] { [x] }]').view() == View(Fragment())

    view = ibex.compile('[:for x in xs { p { [x] } }]').view(xs = ['a', 'b', 'c'])
    loop = view[0]
    assert isinstance(loop, Fragment)
    assert len(loop.view) == 3
    assert [node.view[0].children[0] for node in loop.view] == [Text('a'), Text('b'), Text('c')]

def test_011_where():
    src = '[:where total = sum(prices); n = len(prices) { p { [total] "/" [n] } }]'
    assert render(src, prices = [1, 2, 3]) == '<p>6/3</p>'

    src = """
        [:where
            a = 1
            b = a + 1
        { [b] }]
    """
    assert render(src) == '2'

    src = """
        [:where
            def double(x):
                return x * 2
        { [double(4)] }]
    """
    assert render(src) == '8'

    # statements after the 1st line may be indented less than the 1st one
    assert render('[:where a = 1\n    b = a + 1 { [b] }]') == '2'

    assert render('[:where f = lambda s: s * k { [f("ab")] }]', k = 2) == 'abab'
    assert render('[:where k = 3 { [k] }] [k]', k = 1) == '31'

    with pytest.raises(NameError):
        render('[:where y = 1 { [y] }] [y]')
    with pytest.raises(SyntaxErrorEx, match = 'invalid Python where'):
        render('[:where y = { "a" }]')

def test_012_calls():
    def card(title, body):
        return Element('div', [Attribute('class', 'card')], [Element('h2', children = [Text(title)]), Fragment(body)])
    def wrap(body):
        return ['(', body, ')']
    def greet(name, punct = '.'):
        return f"Hi {name}{punct}"

    assert render('@card["Hi"] { p { "x" } }', card = card) == '<div class="card"><h2>Hi</h2><p>x</p></div>'
    assert render('@wrap { "abc" }', wrap = wrap) == '(abc)'
    assert render('@greet["Ann", punct="!"]', greet = greet) == 'Hi Ann!'
    assert render('@greet[*names, **kw]', greet = greet, names = ["Bo"], kw = {'punct': '?'}) == 'Hi Bo?'
    assert render('@now[]', now = lambda: "t") == 't'
    assert render('@len["abc"]') == '3'

    bold = lambda body: Element('b', children = body)
    ns = SimpleNamespace(tools = SimpleNamespace(bold = bold))
    assert render('@ns::tools::bold { "x" }', ns = ns) == '<b>x</b>'
    assert render('@ns.tools.bold { "x" }', ns = ns) == '<b>x</b>'
    assert render('@ui::em["y"]', ui = {'em': lambda s: Element('em', children = [Text(s)])}) == '<em>y</em>'

    # leading :: looks up top-level variables only
    src = '[:where f = lambda: "local" { @f[] ~ @::f[] }]'
    assert render(src, f = lambda: "global") == 'local global'

def test_013_call_errors():
    with pytest.raises(NameErrorEx, match = "function 'missing' is not defined"):
        render('@missing["x"]')
    with pytest.raises(NameErrorEx, match = "'nope' not found"):
        render('@ns::nope[]', ns = SimpleNamespace())
    with pytest.raises(SyntaxErrorEx, match = 'requires'):
        render('@f')
    with pytest.raises(SyntaxErrorEx, match = 'single colon'):
        render('@a:b[]')
    with pytest.raises(SyntaxErrorEx, match = 'single colon'):
        render('@:b[]')
    with pytest.raises(TypeErrorEx, match = 'not callable'):
        render('@x[]', x = 5)

def test_014_head():
    src = 'HEAD { title { "T" } } p { "x" }'
    assert ibex.compile(src).render() == \
        '<!DOCTYPE html><html><head><title>T</title></head><body><p>x</p></body></html>'

    src = """
        HEAD { meta [charset="utf-8"] / }
        div { section { article {
            HEAD { link [rel="stylesheet", href="s.css"] / }
            p { "deep" }
        } } }
    """
    doc = ibex.compile(src).document()
    assert [child.tag.name for child in doc.head.children] == ['meta', 'link']
    assert ibex.compile(src).render() == \
        '<!DOCTYPE html><html><head><meta charset="utf-8"><link rel="stylesheet" href="s.css"></head>' \
        '<body><div><section><article><p>deep</p></article></section></div></body></html>'

    with pytest.raises(SyntaxErrorEx, match = 'first node'):
        render('p {} HEAD { "x" }')
    with pytest.raises(SyntaxErrorEx, match = 'HEAD must be followed'):
        render('HEAD [x] { "x" }')
    with pytest.raises(HeadAppendEx):
        render('HEAD { title { "T" } }')

def test_015_documents():
    assert ibex.compile('p {}').render(lang = 'en') == \
        '<!DOCTYPE html><html lang="en"><head></head><body><p></p></body></html>'

    page = ibex.compile_document('[lang=code] HEAD { title { "T" } } p { "x" }')
    assert page.render(code = 'pl') == \
        '<!DOCTYPE html><html lang="pl"><head><title>T</title></head><body><p>x</p></body></html>'
    assert page.document(code = 'de').lang == 'de'

    page = ibex.compile_document('p { [x] }')
    assert page.render(x = 1) == '<!DOCTYPE html><html><head></head><body><p>1</p></body></html>'

    with pytest.raises(SyntaxErrorEx, match = 'only one attribute'):
        ibex.compile_document('[dir="rtl"] p {}')
    with pytest.raises(SyntaxErrorEx, match = 'only one attribute'):
        ibex.compile_document('[xml:lang="en"] p {}')

    # a leading expression with comparison operators is content, not a header
    page = ibex.compile_document('[n>=1 and "big" or "small"] p {}')
    assert page.lang is None
    assert page.render(n = 2) == '<!DOCTYPE html><html><head></head><body>big<p></p></body></html>'
    assert ibex.compile_document('[a<=b and "x" or "y"] [a!=b and "z"]').render(a = 1, b = 2) == \
        '<!DOCTYPE html><html><head></head><body>xz</body></html>'

def test_016_shortcuts():
    assert ibex.view('p { [x] }', x = 1) == View(Element('p', children = [Text('1')]))
    assert ibex.render('p { [x] }', x = 2) == '<!DOCTYPE html><html><head></head><body><p>2</p></body></html>'
    assert ibex.render('p { [x] }', x = 3) == '<!DOCTYPE html><html><head></head><body><p>3</p></body></html>'

def test_017_dump(capsys):
    template = ibex.compile('p #a { "x" }')
    assert template.dump() == "<xelement p #'a'>\n  <xliteral 'x'>"

    ibex.compile('[:if x { br/ }]', verbose = True)
    out = capsys.readouterr().out
    assert '<xif x>' in out and '<xelement br />' in out

def test_018_reuse():
    # a compiled template can be evaluated many times; every evaluation builds a new tree
    template = ibex.compile('ul { [:for x in xs { li { [x] } }] }')
    assert template.render_fragment(xs = [1]) == '<ul><li>1</li></ul>'
    assert template.render_fragment(xs = [1, 2]) == '<ul><li>1</li><li>2</li></ul>'
    assert template.render_fragment({'xs': [3]}) == '<ul><li>3</li></ul>'
    assert template.view(xs = []) is not template.view(xs = [])
