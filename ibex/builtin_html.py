from ibex.errors import UndefinedTagEx


########################################################################################################################################################
#####
#####  STANDARD MARKUP TAG
#####

class Tag:
    """
    An element kind of the closed HTML catalogue. The parser resolves tag names to Tag objects from HTML_TAGS,
    and the renderer decides on void (self-closing) output by looking at the same objects.
    """

    name = None         # tag name, lowercase
    void = False        # if True, the element never has children and renders as a single start tag

    def __init__(self, name, void = False):
        self.name = name
        self.void = void

    def __repr__(self):
        return f"Tag({self.name!r})"


########################################################################################################################################################
#####
#####  BUILTIN HTML tags
#####

HTML_TAGS = {}

_HTML_TAGS_VOID    = "area base br col embed hr img input link meta param source track wbr".split()
_HTML_TAGS_NONVOID = "a abbr acronym address applet article aside audio b basefont bdi bdo big blockquote body " \
                     "button canvas caption center cite code colgroup data datalist dd del details dfn dialog dir " \
                     "div dl dt em fieldset figcaption figure font footer form frame frameset h1 h2 h3 h4 h5 h6 " \
                     "head header hgroup html i iframe ins kbd label legend li main map mark math menu meter nav " \
                     "noframes noscript object ol optgroup option output p picture pre progress q rp rt ruby s samp " \
                     "script search section select slot small span strike strong style sub summary sup svg table " \
                     "tbody td template textarea tfoot th thead time title tr tt u ul var video".split()

def _create_all_tags():
    for name in _HTML_TAGS_NONVOID:
        HTML_TAGS[name] = Tag(name, False)
    for name in _HTML_TAGS_VOID:
        HTML_TAGS[name] = Tag(name, True)

_create_all_tags()


def get_tag(name, token = None, template = None):
    """Tag object of a given `name`; UndefinedTagEx if the name is not in the catalogue."""
    tag = HTML_TAGS.get(name)
    if tag is None: raise UndefinedTagEx(f"undefined tag <{name}>", token, "tag", template)
    return tag
