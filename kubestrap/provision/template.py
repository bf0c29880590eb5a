"""
template.py
===========

A small composition engine for startup scripts.

Fragments are plain text with tags in double curly braces:

``{{ include NAME }}``
    replaced by the fully expanded fragment ``NAME``
``{{ PATH }}``
    replaced by the value found at the dotted ``PATH`` of the
    :class:`kubestrap.cluster.TemplateParams`, e.g. ``machine.name`` or
    ``cluster.api_endpoints.0`` (numbers index sequences)
``{{ FUNCTION PATH }}``
    replaced by the return value of a render function called with the
    value at ``PATH``
``{{ each PATH }}`` ... ``{{ end }}``
    the enclosed text is repeated for every element of the sequence at
    ``PATH``, the element itself is available as ``{{ item }}``.
    A newline directly following ``each`` or ``end`` is dropped.

Fragments are parsed once when a :class:`FragmentSet` is created. Syntax
errors, include cycles and render functions which do not have the
signature the fragments are written for are reported at that point and
should stop the program. Everything that depends on the parameters
(missing fields, includes of fragments which don't exist) raises a
:class:`TemplateError` while rendering.
"""
import inspect
import re
import typing
from collections import namedtuple
from collections.abc import Mapping

from kubestrap.cluster import Endpoint, NetworkRanges
from kubestrap.util.logger import Logger

LOGGER = Logger(__name__)

TAG = re.compile(r"\{\{\s*(.*?)\s*\}\}")

# The call signature fragments expect of every render function:
# name -> (type of the only argument, return type)
SIGNATURES = {
    "endpoint": (Endpoint, str),
    "subnet_of": (NetworkRanges, str),
}

Text = namedtuple("Text", ["text"])
Include = namedtuple("Include", ["name"])
Field = namedtuple("Field", ["path"])
Call = namedtuple("Call", ["function", "path"])
Each = namedtuple("Each", ["path", "body"])
Item = namedtuple("Item", [])


class TemplateError(Exception):
    """Base class for errors raised while rendering a fragment"""


class MissingField(TemplateError):
    """A fragment referenced a field which the parameters don't have"""

    def __init__(self, path):
        self.path = path
        super().__init__(f"missing field '{path}'")


class UndefinedFragment(TemplateError):
    """A fragment name was referenced which has no body"""

    def __init__(self, name):
        self.name = name
        super().__init__(f"fragment '{name}' is not defined")


class TemplateSyntaxError(Exception):
    """A fragment could not be parsed"""


class CyclicFragments(Exception):
    """Fragments include each other"""


class SignatureMismatch(Exception):
    """A render function does not have the signature fragments expect"""


def check_signature(name, function):
    """
    Assert ``function`` can be bound to ``name`` in the fragments.

    The function must take exactly one positional argument and both the
    argument and the return value must be annotated with the types listed
    in :data:`SIGNATURES`.

    Raises:
        SignatureMismatch
    """
    if name not in SIGNATURES:
        raise SignatureMismatch(f"no signature is declared for '{name}'")

    arg_type, return_type = SIGNATURES[name]
    params = list(inspect.signature(function).parameters.values())
    if len(params) != 1 or params[0].kind not in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD):
        raise SignatureMismatch(
            f"'{name}' must take exactly one positional argument")

    hints = typing.get_type_hints(function)
    expected = {params[0].name: arg_type, 'return': return_type}
    if hints != expected:
        raise SignatureMismatch(
            f"'{name}' has the annotations {hints}, expected {expected}")


def _split_path(path):
    return tuple(path.split("."))


def parse(text, functions):
    """
    Parse fragment ``text`` into a list of nodes.

    Args:
        text (str): the fragment body
        functions (iterable): the names of the available render functions

    Raises:
        TemplateSyntaxError
    """
    root = []
    # each entry: (list the nodes are appended to, open Each path or None)
    stack = [(root, None)]
    pos = 0

    for match in TAG.finditer(text):
        nodes = stack[-1][0]
        if match.start() > pos:
            nodes.append(Text(text[pos:match.start()]))
        pos = match.end()

        words = match.group(1).split()
        if not words:
            raise TemplateSyntaxError("empty tag")

        block = False
        if words[0] == "include" and len(words) == 2:
            nodes.append(Include(words[1]))
        elif words[0] == "each" and len(words) == 2:
            body = []
            stack.append((body, _split_path(words[1])))
            block = True
        elif words == ["end"]:
            if len(stack) == 1:
                raise TemplateSyntaxError("'end' without 'each'")
            body, path = stack.pop()
            stack[-1][0].append(Each(path, tuple(body)))
            block = True
        elif words == ["item"]:
            if len(stack) == 1:
                raise TemplateSyntaxError("'item' outside of 'each'")
            nodes.append(Item())
        elif words[0] in ("include", "each", "end", "item"):
            raise TemplateSyntaxError(
                f"can't parse tag {match.group(0)!r}")
        elif len(words) == 2:
            if words[0] not in functions:
                raise TemplateSyntaxError(
                    f"unknown function '{words[0]}'")
            nodes.append(Call(words[0], _split_path(words[1])))
        elif len(words) == 1:
            nodes.append(Field(_split_path(words[0])))
        else:
            raise TemplateSyntaxError(
                f"can't parse tag {match.group(0)!r}")

        if block and text.startswith("\n", pos):
            pos += 1

    if len(stack) != 1:
        raise TemplateSyntaxError("'each' without 'end'")

    if pos < len(text):
        root.append(Text(text[pos:]))

    return tuple(root)


def _includes(nodes):
    for node in nodes:
        if isinstance(node, Include):
            yield node.name
        elif isinstance(node, Each):
            yield from _includes(node.body)


def resolve(params, path):
    """
    Return the value at the dotted ``path`` of ``params``.

    Raises:
        MissingField if any step of the path is absent or None
    """
    value = params
    for key in path:
        if value is None:
            break
        try:
            if key.isdigit():
                value = value[int(key)]
            else:
                value = getattr(value, key)
        except (AttributeError, IndexError, KeyError, TypeError):
            raise MissingField(".".join(path)) from None

    if value is None:
        raise MissingField(".".join(path))

    return value


class FragmentSet(Mapping):
    """
    An immutable set of named fragments and the render functions they use.

    The fragments of all ``sources`` are merged, a name may only be defined
    once. Every fragment is parsed, the include graph is checked for cycles
    and each render function is checked against :data:`SIGNATURES`.

    Args:
        name (str): a name used in log messages, e.g. the node role
        sources (dict): mappings of fragment name to fragment text
        functions (dict): mapping of function name to render function

    Raises:
        TemplateSyntaxError, CyclicFragments, SignatureMismatch
    """

    def __init__(self, name, *sources, functions=None):
        self.name = name
        self._functions = dict(functions or {})
        for func_name, function in self._functions.items():
            check_signature(func_name, function)

        self._fragments = {}
        for source in sources:
            for fragment, text in source.items():
                if fragment in self._fragments:
                    raise TemplateSyntaxError(
                        f"fragment '{fragment}' is defined twice in {name}")
                self._fragments[fragment] = text

        self._parsed = {}
        for fragment, text in self._fragments.items():
            try:
                self._parsed[fragment] = parse(text, self._functions)
            except TemplateSyntaxError as err:
                raise TemplateSyntaxError(
                    f"{name}/{fragment}: {err}") from None

        self._check_cycles()
        LOGGER.debug("Loaded %d fragments for %s", len(self._fragments),
                     name)

    def _check_cycles(self):
        done = set()

        def visit(fragment, trail):
            if fragment in trail:
                cycle = " -> ".join(trail[trail.index(fragment):] +
                                    [fragment])
                raise CyclicFragments(f"{self.name}: {cycle}")
            if fragment in done or fragment not in self._parsed:
                return
            for child in _includes(self._parsed[fragment]):
                visit(child, trail + [fragment])
            done.add(fragment)

        for fragment in self._parsed:
            visit(fragment, [])

    def __getitem__(self, key):
        return self._fragments[key]

    def __iter__(self):
        return iter(self._fragments)

    def __len__(self):
        return len(self._fragments)

    def render(self, fragment, params):
        """
        Expand ``fragment`` with ``params`` and return the text.

        Raises:
            MissingField, UndefinedFragment
        """
        LOGGER.debug("Rendering %s/%s", self.name, fragment)
        out = []
        self._expand(fragment, params, out, None)
        return "".join(out)

    def _expand(self, fragment, params, out, item):
        try:
            nodes = self._parsed[fragment]
        except KeyError:
            raise UndefinedFragment(fragment) from None
        self._write(nodes, params, out, item)

    def _write(self, nodes, params, out, item):
        for node in nodes:
            if isinstance(node, Text):
                out.append(node.text)
            elif isinstance(node, Include):
                self._expand(node.name, params, out, item)
            elif isinstance(node, Field):
                out.append(str(resolve(params, node.path)))
            elif isinstance(node, Call):
                value = resolve(params, node.path)
                out.append(self._functions[node.function](value))
            elif isinstance(node, Each):
                for element in resolve(params, node.path):
                    self._write(node.body, params, out, element)
            elif isinstance(node, Item):
                out.append(str(item))
