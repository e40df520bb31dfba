"""
Constants of Ibex syntax and of the HTML output.
"""

DOCTYPE     = "<!DOCTYPE html>"
HEAD        = "HEAD"                        # identifier that opens a head-append block:  HEAD { ... }

CONTROL     = ':'                           # 1st character inside [...] that marks a control block:  [:if ...]
KEYWORDS    = ('if', 'for', 'where')        # keywords of control blocks
ELSE        = 'else'
LOOP_IN     = 'in'                          # separator of a loop target and a loop source in [:for ...]

VOID_CLOSE  = '/'                           # marker that closes a tag without a body:  br/
SPACE       = ' '                           # output of ~
NEWLINE     = '\n'                          # output of ~~

MODES       = ('HTML', 'XHTML')             # rendering modes of void tags and boolean attributes
