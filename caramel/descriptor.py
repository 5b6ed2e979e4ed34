"""
Field and method descriptor parser using Lark.

Turns JVM descriptors into Java source spellings:
``[Ljava/lang/String;`` becomes ``java.lang.String[]`` and ``(IJ)V`` becomes
a MethodDescriptor with parameters ``("int", "long")`` returning ``"void"``.
"""

from dataclasses import dataclass
from pathlib import Path

from lark import Lark, Transformer
from lark.exceptions import LarkError

GRAMMAR_FILE = Path(__file__).parent / "descriptor.lark"

BASE_TYPE_NAMES = {
    "B": "byte", "C": "char", "D": "double", "F": "float",
    "I": "int", "J": "long", "S": "short", "Z": "boolean",
}


class DescriptorError(ValueError):
    """A descriptor string does not follow the descriptor grammar."""
    pass


@dataclass(frozen=True)
class MethodDescriptor:
    parameters: tuple[str, ...]
    return_type: str

    def __str__(self) -> str:
        return f"({', '.join(self.parameters)}) -> {self.return_type}"


class DescriptorTransformer(Transformer):
    """Transforms descriptor parse trees into type names."""

    def start(self, items):
        return items[0]

    def field_descriptor(self, items):
        return items[0]

    def method_descriptor(self, items):
        return MethodDescriptor(parameters=tuple(items[:-1]), return_type=items[-1])

    def base_type(self, items):
        return BASE_TYPE_NAMES[str(items[0])]

    def object_type(self, items):
        # Lpkg/Name; -> pkg.Name
        return str(items[0])[1:-1].replace("/", ".")

    def array_type(self, items):
        return f"{items[0]}[]"

    def void_type(self, items):
        return "void"


class DescriptorParser:
    """Parses field and method descriptors."""

    def __init__(self):
        with open(GRAMMAR_FILE, "r") as f:
            grammar = f.read()

        self._parser = Lark(grammar, parser="lalr")
        self._transformer = DescriptorTransformer()

    def parse(self, descriptor: str) -> str | MethodDescriptor:
        try:
            tree = self._parser.parse(descriptor)
        except LarkError as e:
            raise DescriptorError(f"Invalid descriptor {descriptor!r}: {e}") from e
        return self._transformer.transform(tree)

    def parse_field(self, descriptor: str) -> str:
        result = self.parse(descriptor)
        if isinstance(result, MethodDescriptor):
            raise DescriptorError(f"Expected a field descriptor, got {descriptor!r}")
        return result

    def parse_method(self, descriptor: str) -> MethodDescriptor:
        result = self.parse(descriptor)
        if not isinstance(result, MethodDescriptor):
            raise DescriptorError(f"Expected a method descriptor, got {descriptor!r}")
        return result
