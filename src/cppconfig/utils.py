import collections.abc
import shlex


def split_cmdline(cmdline):
    """Split a shell style command line into its arguments.

    Quotes are consumed and backslash escapes are honoured the way a POSIX
    shell would.  Build lines come from developers and build logs rather
    than a real shell, so malformed quoting does not raise.  An unterminated
    quote or a trailing backslash simply ends the final argument.
    """
    if not cmdline:
        return []

    lexer = shlex.shlex(cmdline, posix=True)
    lexer.whitespace_split = True
    lexer.commenters = ""

    args = []
    while True:
        try:
            token = lexer.get_token()
        except ValueError:
            # shlex keeps the partial argument it was building
            remainder = lexer.token
            if lexer.state in lexer.escape:
                remainder += lexer.state
            if remainder:
                args.append(remainder)
            break
        if token is None:
            break
        args.append(token)
    return args


def join_cmdline(args):
    """The inverse of split_cmdline. Quotes arguments where needed."""
    return " ".join(shlex.quote(arg) for arg in args)


class OrderedSet(collections.abc.MutableSet):
    """Set that remembers insertion order.

    Include paths are semantically a set but printing them in the order the
    compiler reported them keeps the output stable and readable.
    """

    def __init__(self, iterable=None):
        self._data = {}
        if iterable is not None:
            self.update(iterable)

    def __len__(self):
        return len(self._data)

    def __contains__(self, key):
        return key in self._data

    def __iter__(self):
        return iter(self._data)

    def __repr__(self):
        if not self:
            return f"{self.__class__.__name__}()"
        return f"{self.__class__.__name__}({list(self)!r})"

    def add(self, key):
        self._data[key] = None

    def discard(self, key):
        self._data.pop(key, None)

    def update(self, iterable):
        for item in iterable:
            self.add(item)

    def copy(self):
        return OrderedSet(self)
