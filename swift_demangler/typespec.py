"""Textual model of Swift types produced by reductions."""
import copy
from enum import Enum

TypeSpecKind = Enum('TypeSpecKind', 'NAMED TUPLE CLOSURE')


class TypeSpecAttribute():
    def __init__(self, name, parameters=None):
        self.name = name
        self.parameters = list(parameters) if parameters else []

    def __eq__(self, other):
        if not isinstance(other, TypeSpecAttribute):
            return NotImplemented
        return self.name == other.name and self.parameters == other.parameters

    def __hash__(self):
        return hash(str(self))

    def __repr__(self):
        return 'TypeSpecAttribute({!r})'.format(str(self))

    def __str__(self):
        s = '@' + self.name
        if self.parameters:
            s += '(' + ', '.join(self.parameters) + ')'
        return s


class TypeSpec():
    """Base of all type specs.

    Reductions treat specs as values: anything that changes a label,
    inout-ness or attributes works on a clone, so shared specs such as
    TupleTypeSpec.EMPTY are never modified.
    """

    def __init__(self, kind):
        self.kind = kind
        self.generic_parameters = []
        self.attributes = []
        self.is_inout = False
        self.is_variadic = False
        self.type_label = None

    @property
    def isEmptyTuple(self):
        return False

    @property
    def containsGenericParameters(self):
        return len(self.generic_parameters) != 0

    @property
    def hasAttributes(self):
        return len(self.attributes) != 0

    def clone(self):
        result = copy.copy(self)
        result.generic_parameters = list(self.generic_parameters)
        result.attributes = list(self.attributes)
        return result

    def renamedCloneOf(self, label):
        result = self.clone()
        result.type_label = label
        return result

    def bodyString(self):
        raise NotImplementedError

    def __repr__(self):
        return '{}({!r})'.format(type(self).__name__, str(self))

    def __str__(self):
        s = ''
        for attribute in self.attributes:
            s += str(attribute) + ' '
        if self.is_inout:
            s += 'inout '
        if self.type_label is not None:
            s += self.type_label + ': '
        s += self.bodyString()
        if self.containsGenericParameters:
            s += '<' + ', '.join(str(p) for p in self.generic_parameters) + '>'
        return s

    def __eq__(self, other):
        if not isinstance(other, TypeSpec):
            return NotImplemented
        return str(self) == str(other)

    def __hash__(self):
        return hash(str(self))


class NamedTypeSpec(TypeSpec):
    def __init__(self, name, *generic_parameters):
        TypeSpec.__init__(self, TypeSpecKind.NAMED)
        name = name.replace('`', '')
        # Any and AnyObject print fully qualified like every other stdlib type.
        if name == 'Any':
            name = 'Swift.Any'
        elif name == 'AnyObject':
            name = 'Swift.AnyObject'
        self.name = name
        self.generic_parameters.extend(generic_parameters)

    @property
    def module(self):
        if '.' not in self.name:
            return None
        return self.name[:self.name.index('.')]

    @property
    def nameWithoutModule(self):
        if '.' not in self.name:
            return self.name
        return self.name[self.name.index('.') + 1:]

    def bodyString(self):
        return self.name


class TupleTypeSpec(TypeSpec):
    def __init__(self, elements=None):
        TypeSpec.__init__(self, TypeSpecKind.TUPLE)
        self.elements = list(elements) if elements else []

    @property
    def isEmptyTuple(self):
        return len(self.elements) == 0

    def clone(self):
        result = TypeSpec.clone(self)
        result.elements = list(self.elements)
        return result

    def bodyString(self):
        return '(' + ', '.join(str(e) for e in self.elements) + ')'


TupleTypeSpec.EMPTY = TupleTypeSpec()


class ClosureTypeSpec(TypeSpec):
    def __init__(self, arguments, return_type, throws=False):
        TypeSpec.__init__(self, TypeSpecKind.CLOSURE)
        self.arguments = arguments
        self.return_type = return_type
        self.throws = throws

    @property
    def argumentsAsTuple(self):
        if self.arguments.kind == TypeSpecKind.TUPLE:
            return self.arguments
        return TupleTypeSpec([self.arguments])

    def argumentCount(self):
        if self.arguments.isEmptyTuple:
            return 0
        if self.arguments.kind == TypeSpecKind.TUPLE:
            return len(self.arguments.elements)
        return 1

    def hasReturn(self):
        return self.return_type is not None and not self.return_type.isEmptyTuple

    def bodyString(self):
        if self.throws:
            return '{} throws -> {}'.format(self.arguments, self.return_type)
        return '{} -> {}'.format(self.arguments, self.return_type)
