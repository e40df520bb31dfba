"""
Exceptions for Ibex.
"""

########################################################################################################################################################

class IbexError(Exception):
    """
    Base class for all Ibex exceptions. Optionally, it points to the offending `token` of a template source
    and the grammar `production` that was being parsed when the error occurred.
    """
    token      = None       # Token (see ibex.tokens) where the error was detected, or None
    production = None       # name of the grammar production being parsed, or None
    template   = None       # name of the template (e.g., its file name), for messages only

    def __init__(self, msg = None, token = None, production = None, template = None):
        self.token = token
        self.production = production
        self.template = template
        super(IbexError, self).__init__(self.make_msg(msg) if msg else msg)

    @property
    def line(self):
        return self.token.line if self.token is not None else None

    @property
    def column(self):
        return self.token.column if self.token is not None else None

    def make_msg(self, msg):
        if self.production:
            msg += f" (in {self.production})"
        if self.token is None:
            return msg

        text = self.token.text
        if len(text) > 40: text = text[:37] + '...'

        if self.template:
            return msg + " in '%s', line %s, column %s (%s)" % (self.template, self.line, self.column, text)
        else:
            return msg + " at line %s, column %s (%s)" % (self.line, self.column, text)


########################################################################################################################################################

class SyntaxErrorEx(IbexError, SyntaxError):       pass
class UndefinedTagEx(SyntaxErrorEx):                pass
class TypeErrorEx(IbexError, TypeError):           pass
class NameErrorEx(IbexError, NameError):           pass

class MisuseEx(IbexError):
    """Programmer error detected only when values are known: during evaluation, conversion or rendering."""

class VoidTagEx(MisuseEx):
    """Raised when a void element (e.g., <br>) is given children."""

class HeadAppendEx(MisuseEx):
    """Raised when a HEAD block is met during a conversion that has no <head> to receive it."""

class DocumentAttrsEx(MisuseEx):
    """Raised when <head> or <body> of a Document carries attributes."""
