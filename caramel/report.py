"""
Human-readable summaries of decoded class files.
"""

from typing import Optional

from .classfile import ClassUnit
from .constants import (
    ConstantPool, ConstantEntry, ConstantUtf8, ConstantInteger, ConstantFloat,
    ConstantLong, ConstantDouble, ConstantClass, ConstantString, ConstantModule,
    ConstantPackage, ConstantMethodType, ConstantNameAndType, ConstantMethodHandle,
    ConstantFieldref, ConstantMethodref, ConstantInterfaceMethodref,
    ConstantDynamic, ConstantInvokeDynamic,
)
from .descriptor import DescriptorError, DescriptorParser
from .flags import ClassAccessFlags, FieldAccessFlags, MethodAccessFlags, flag_names
from .members import MemberInfo

# Flags that have no source keyword
_HIDDEN_FIELD_FLAGS = {"synthetic", "enum"}
_HIDDEN_METHOD_FLAGS = {"synthetic", "bridge", "varargs"}


def format_header(unit: ClassUnit) -> list[str]:
    return [
        f"major = {unit.version.major} minor = {unit.version.minor}",
        f"Java SE version: {unit.version_label}",
        f"Constant pool count: {unit.constant_pool.count}",
    ]


def _class_keyword(flags: int) -> str:
    if flags & ClassAccessFlags.MODULE:
        return "module"
    if flags & ClassAccessFlags.ANNOTATION:
        return "@interface"
    if flags & ClassAccessFlags.INTERFACE:
        return "interface"
    if flags & ClassAccessFlags.ENUM:
        return "enum"
    return "class"


def format_declaration(unit: ClassUnit) -> str:
    """Java-like declaration line, e.g. ``public class a.B extends c.D``."""
    keyword = _class_keyword(unit.access_flags)
    modifiers = ["public"] if unit.access_flags & ClassAccessFlags.PUBLIC else []
    if unit.access_flags & ClassAccessFlags.FINAL:
        modifiers.append("final")
    if unit.access_flags & ClassAccessFlags.ABSTRACT and keyword == "class":
        modifiers.append("abstract")

    parts = modifiers + [keyword, _java_name(unit.name)]
    interfaces = ", ".join(_java_name(name) for name in unit.interface_names)
    if keyword in ("interface", "@interface"):
        if unit.interfaces:
            parts += ["extends", interfaces]
        return " ".join(parts)

    super_name = unit.super_name
    if super_name is not None:
        parts += ["extends", _java_name(super_name)]
    if unit.interfaces:
        parts += ["implements", interfaces]
    return " ".join(parts)


def _java_name(internal_name: Optional[str]) -> str:
    if internal_name is None:
        return "<none>"
    return internal_name.replace("/", ".")


def format_field(field: MemberInfo, pool: ConstantPool, parser: DescriptorParser) -> str:
    name = field.name(pool)
    descriptor = field.descriptor(pool)
    modifiers = [n for n in flag_names(FieldAccessFlags, field.access_flags)
                 if n not in _HIDDEN_FIELD_FLAGS]
    try:
        field_type = parser.parse_field(descriptor)
    except DescriptorError:
        return " ".join(modifiers + [f"{name} : {descriptor}"])
    return " ".join(modifiers + [field_type, name]) + ";"


def format_method(method: MemberInfo, pool: ConstantPool, parser: DescriptorParser) -> str:
    name = method.name(pool)
    descriptor = method.descriptor(pool)
    modifiers = [n for n in flag_names(MethodAccessFlags, method.access_flags)
                 if n not in _HIDDEN_METHOD_FLAGS]
    try:
        signature = parser.parse_method(descriptor)
    except DescriptorError:
        return " ".join(modifiers + [f"{name} : {descriptor}"])
    params = ", ".join(signature.parameters)
    return " ".join(modifiers + [signature.return_type, f"{name}({params});"])


def format_attributes(attributes, pool: ConstantPool, indent: str) -> list[str]:
    return [f"{indent}{attr.name(pool)} ({attr.length} bytes)" for attr in attributes]


def format_class(unit: ClassUnit, parser: Optional[DescriptorParser] = None,
                 header: bool = True) -> str:
    """Render a decoded class as a multi-line summary."""
    parser = parser or DescriptorParser()
    pool = unit.constant_pool

    lines = format_header(unit) if header else []
    lines.append(format_declaration(unit))
    lines.append(f"  flags: {unit.access_flags:#06x} "
                 f"({', '.join(flag_names(ClassAccessFlags, unit.access_flags))})")

    if unit.fields:
        lines.append("  fields:")
        for field in unit.fields:
            lines.append(f"    {format_field(field, pool, parser)}")
            lines.extend(format_attributes(field.attributes, pool, "      "))

    if unit.methods:
        lines.append("  methods:")
        for method in unit.methods:
            lines.append(f"    {format_method(method, pool, parser)}")
            lines.extend(format_attributes(method.attributes, pool, "      "))

    if unit.attributes:
        lines.append("  attributes:")
        lines.extend(format_attributes(unit.attributes, pool, "    "))

    return "\n".join(lines)


def describe_constant(entry: ConstantEntry) -> str:
    """javap-style value column for a constant pool entry."""
    if isinstance(entry, ConstantUtf8):
        return entry.text
    if isinstance(entry, (ConstantInteger, ConstantFloat, ConstantLong, ConstantDouble)):
        return repr(entry.value)
    if isinstance(entry, (ConstantClass, ConstantModule, ConstantPackage)):
        return f"#{entry.name_index}"
    if isinstance(entry, ConstantString):
        return f"#{entry.string_index}"
    if isinstance(entry, ConstantMethodType):
        return f"#{entry.descriptor_index}"
    if isinstance(entry, ConstantNameAndType):
        return f"#{entry.name_index}:#{entry.descriptor_index}"
    if isinstance(entry, (ConstantFieldref, ConstantMethodref, ConstantInterfaceMethodref)):
        return f"#{entry.class_index}.#{entry.name_and_type_index}"
    if isinstance(entry, ConstantMethodHandle):
        return f"{entry.reference_kind}:#{entry.reference_index}"
    if isinstance(entry, (ConstantDynamic, ConstantInvokeDynamic)):
        return f"#{entry.bootstrap_method_attr_index}:#{entry.name_and_type_index}"
    raise TypeError(f"Unknown constant pool entry: {entry!r}")


def format_constant_pool(pool: ConstantPool) -> str:
    width = len(str(pool.count))
    lines = []
    for index, entry in pool.items():
        label = f"#{index}".rjust(width + 1)
        lines.append(f"{label} = {entry.kind:<18} {describe_constant(entry)}".rstrip())
    return "\n".join(lines)
