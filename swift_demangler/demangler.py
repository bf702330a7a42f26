import logging
import string
from enum import Enum

from . import punycode
from .cursor import Cursor
from .node import (Node, Kind, isContext, isDeclName, isAnyGeneric, isEntity, isRequirement,
                   isFunctionAttribute)
from .printer import archetypeName
from .reducer import Reducer
from .reduction import ReductionError

log = logging.getLogger(__name__)

MANGLING_PREFIXES = (
    '_T0',          # Swift 4
    '$S', '_$S',    # Swift 4.x
    '$s', '_$s',    # Swift 5+
)
OBJC_TYPE_NAME_PREFIX = '_Tt'

MANGLING_MODULE_OBJC = '__ObjC'
MANGLING_MODULE_C = '__C'
MANGLING_MODULE_C_SYNTHESIZED = '__C_Synthesized'
STDLIB_NAME = 'Swift'

MAX_REPEAT_COUNT = 2048
MAX_TYPE_SIZE = 4096
MAX_NUM_WORDS = 26
MAX_MANGLED_LENGTH = 65536
MAX_NODE_DEPTH = 128

Directness = Enum('Directness', 'DIRECT INDIRECT')
SymbolicReferenceKind = Enum('SymbolicReferenceKind', 'CONTEXT')


class FunctionSigSpecializationParamKind():
    CONSTANT_PROP_FUNCTION = 0
    CONSTANT_PROP_GLOBAL = 1
    CONSTANT_PROP_INTEGER = 2
    CONSTANT_PROP_FLOAT = 3
    CONSTANT_PROP_STRING = 4
    CLOSURE_PROP = 5
    BOX_TO_VALUE = 6
    BOX_TO_STACK = 7
    DEAD = 1 << 6
    OWNED_TO_GUARANTEED = 1 << 7
    SROA = 1 << 8
    GUARANTEED_TO_OWNED = 1 << 9
    EXISTENTIAL_TO_GENERIC = 1 << 10


# Position in this list is the value witness kind stored on the node.
VALUE_WITNESS_CODES = [
    'al', 'ca', 'ta', 'de', 'xx', 'XX', 'Xx', 'CP', 'Cp', 'cp', 'Tk', 'tk',
    'pr', 'TK', 'Cc', 'Tt', 'tT', 'xs', 'xg', 'ug', 'up', 'ui', 'et', 'st',
]

STANDARD_TYPES = {
    'A': (Kind.STRUCTURE, 'AutoreleasingUnsafeMutablePointer'),
    'a': (Kind.STRUCTURE, 'Array'),
    'b': (Kind.STRUCTURE, 'Bool'),
    'c': (Kind.STRUCTURE, 'UnicodeScalar'),
    'D': (Kind.STRUCTURE, 'Dictionary'),
    'd': (Kind.STRUCTURE, 'Double'),
    'f': (Kind.STRUCTURE, 'Float'),
    'h': (Kind.STRUCTURE, 'Set'),
    'I': (Kind.STRUCTURE, 'DefaultIndices'),
    'i': (Kind.STRUCTURE, 'Int'),
    'J': (Kind.STRUCTURE, 'Character'),
    'N': (Kind.STRUCTURE, 'ClosedRange'),
    'n': (Kind.STRUCTURE, 'Range'),
    'O': (Kind.STRUCTURE, 'ObjectIdentifier'),
    'P': (Kind.STRUCTURE, 'UnsafePointer'),
    'p': (Kind.STRUCTURE, 'UnsafeMutablePointer'),
    'R': (Kind.STRUCTURE, 'UnsafeBufferPointer'),
    'r': (Kind.STRUCTURE, 'UnsafeMutableBufferPointer'),
    'S': (Kind.STRUCTURE, 'String'),
    's': (Kind.STRUCTURE, 'Substring'),
    'u': (Kind.STRUCTURE, 'UInt'),
    'V': (Kind.STRUCTURE, 'UnsafeRawPointer'),
    'v': (Kind.STRUCTURE, 'UnsafeMutableRawPointer'),
    'W': (Kind.STRUCTURE, 'UnsafeRawBufferPointer'),
    'w': (Kind.STRUCTURE, 'UnsafeMutableRawBufferPointer'),

    'q': (Kind.ENUM, 'Optional'),

    'B': (Kind.PROTOCOL, 'BinaryFloatingPoint'),
    'E': (Kind.PROTOCOL, 'Encodable'),
    'e': (Kind.PROTOCOL, 'Decodable'),
    'F': (Kind.PROTOCOL, 'FloatingPoint'),
    'G': (Kind.PROTOCOL, 'RandomNumberGenerator'),
    'H': (Kind.PROTOCOL, 'Hashable'),
    'j': (Kind.PROTOCOL, 'Numeric'),
    'K': (Kind.PROTOCOL, 'BidirectionalCollection'),
    'k': (Kind.PROTOCOL, 'RandomAccessCollection'),
    'L': (Kind.PROTOCOL, 'Comparable'),
    'l': (Kind.PROTOCOL, 'Collection'),
    'M': (Kind.PROTOCOL, 'MutableCollection'),
    'm': (Kind.PROTOCOL, 'RangeReplaceableCollection'),
    'Q': (Kind.PROTOCOL, 'Equatable'),
    'T': (Kind.PROTOCOL, 'Sequence'),
    't': (Kind.PROTOCOL, 'IteratorProtocol'),
    'U': (Kind.PROTOCOL, 'UnsignedInteger'),
    'X': (Kind.PROTOCOL, 'RangeExpression'),
    'x': (Kind.PROTOCOL, 'Strideable'),
    'Y': (Kind.PROTOCOL, 'RawRepresentable'),
    'y': (Kind.PROTOCOL, 'StringProtocol'),
    'Z': (Kind.PROTOCOL, 'SignedInteger'),
    'z': (Kind.PROTOCOL, 'BinaryInteger'),
}

BUILTIN_TYPE_NAMES = {
    'b': 'Builtin.BridgeObject',
    'B': 'Builtin.UnsafeValueBuffer',
    'I': 'Builtin.IntLiteral',
    'O': 'Builtin.UnknownObject',
    'o': 'Builtin.NativeObject',
    'p': 'Builtin.RawPointer',
    't': 'Builtin.SILToken',
    'w': 'Builtin.Word',
}

OPERATOR_CHAR_TABLE = '& @/= >    <*!|+?%-~   ^ .'

OUTLINED_KINDS = {
    'y': Kind.OUTLINED_COPY,
    'e': Kind.OUTLINED_CONSUME,
    'r': Kind.OUTLINED_RETAIN,
    's': Kind.OUTLINED_RELEASE,
    'b': Kind.OUTLINED_INITIALIZE_WITH_TAKE,
    'c': Kind.OUTLINED_INITIALIZE_WITH_COPY,
    'd': Kind.OUTLINED_ASSIGN_WITH_TAKE,
    'f': Kind.OUTLINED_ASSIGN_WITH_COPY,
    'h': Kind.OUTLINED_DESTROY,
}

ACCESSOR_KINDS = {
    'm': Kind.MATERIALIZE_FOR_SET,
    's': Kind.SETTER,
    'g': Kind.GETTER,
    'G': Kind.GLOBAL_GETTER,
    'w': Kind.WILL_SET,
    'W': Kind.DID_SET,
    'r': Kind.READ_ACCESSOR,
    'M': Kind.MODIFY_ACCESSOR,
}

MUTABLE_ADDRESSOR_KINDS = {
    'O': Kind.OWNING_MUTABLE_ADDRESSOR,
    'o': Kind.NATIVE_OWNING_MUTABLE_ADDRESSOR,
    'P': Kind.NATIVE_PINNING_MUTABLE_ADDRESSOR,
    'u': Kind.UNSAFE_MUTABLE_ADDRESSOR,
}

ADDRESSOR_KINDS = {
    'O': Kind.OWNING_ADDRESSOR,
    'o': Kind.NATIVE_OWNING_ADDRESSOR,
    'p': Kind.NATIVE_PINNING_ADDRESSOR,
    'u': Kind.UNSAFE_ADDRESSOR,
}

SPECIAL_FUNCTION_TYPES = {
    'E': Kind.NO_ESCAPE_FUNCTION_TYPE,
    'A': Kind.ESCAPING_AUTO_CLOSURE_TYPE,
    'f': Kind.THIN_FUNCTION_TYPE,
    'K': Kind.AUTO_CLOSURE_TYPE,
    'U': Kind.UNCURRIED_FUNCTION_TYPE,
    'B': Kind.OBJC_BLOCK,
    'C': Kind.C_FUNCTION_POINTER,
}

SPECIAL_WRAPPED_TYPES = {
    'o': Kind.UNOWNED,
    'u': Kind.UNMANAGED,
    'w': Kind.WEAK,
    'b': Kind.SIL_BOX_TYPE,
    'D': Kind.DYNAMIC_SELF,
}

METADATA_KINDS = {
    'f': Kind.FULL_TYPE_METADATA,
    'P': Kind.GENERIC_TYPE_METADATA_PATTERN,
    'a': Kind.TYPE_METADATA_ACCESS_FUNCTION,
    'I': Kind.TYPE_METADATA_INSTANTIATION_CACHE,
    'i': Kind.TYPE_METADATA_INSTANTIATION_FUNCTION,
    'r': Kind.TYPE_METADATA_COMPLETION_FUNCTION,
    'l': Kind.TYPE_METADATA_SINGLETON_INITIALIZATION_CACHE,
    'L': Kind.TYPE_METADATA_LAZY_CACHE,
    'm': Kind.METACLASS,
    'n': Kind.NOMINAL_TYPE_DESCRIPTOR,
    'o': Kind.CLASS_METADATA_BASE_OFFSET,
    'u': Kind.METHOD_LOOKUP_FUNCTION,
    'U': Kind.OBJC_METADATA_UPDATE_FUNCTION,
    'B': Kind.REFLECTION_METADATA_BUILTIN_DESCRIPTOR,
    'F': Kind.REFLECTION_METADATA_FIELD_DESCRIPTOR,
}

CONFORMANCE_WITNESS_KINDS = {
    'P': Kind.PROTOCOL_WITNESS_TABLE,
    'p': Kind.PROTOCOL_WITNESS_TABLE_PATTERN,
    'G': Kind.GENERIC_PROTOCOL_WITNESS_TABLE,
    'I': Kind.GENERIC_PROTOCOL_WITNESS_TABLE_INSTANTIATION_FUNCTION,
    'r': Kind.RESILIENT_PROTOCOL_WITNESS_TABLE,
    'a': Kind.PROTOCOL_WITNESS_TABLE_ACCESSOR,
}

THUNK_ATTRIBUTE_KINDS = {
    'o': Kind.OBJC_ATTRIBUTE,
    'O': Kind.NON_OBJC_ATTRIBUTE,
    'D': Kind.DYNAMIC_ATTRIBUTE,
    'd': Kind.DIRECT_METHOD_REFERENCE_ATTRIBUTE,
    'a': Kind.PARTIAL_APPLY_OBJC_FORWARDER,
    'A': Kind.PARTIAL_APPLY_FORWARDER,
    'm': Kind.MERGED_FUNCTION,
    'X': Kind.DYNAMICALLY_REPLACEABLE_FUNCTION_VAR,
    'x': Kind.DYNAMICALLY_REPLACEABLE_FUNCTION_KEY,
    'I': Kind.DYNAMICALLY_REPLACEABLE_FUNCTION_IMPL,
}

IMPL_PARAM_CONVENTIONS = {
    'i': '@in',
    'c': '@in_constant',
    'l': '@inout',
    'b': '@inout_aliasable',
    'n': '@in_guaranteed',
    'x': '@owned',
    'g': '@guaranteed',
    'e': '@deallocating',
    'y': '@unowned',
}

IMPL_RESULT_CONVENTIONS = {
    'r': '@out',
    'o': '@owned',
    'd': '@unowned',
    'u': '@unowned_inner_pointer',
    'a': '@autoreleased',
}

IMPL_CALLEE_CONVENTIONS = {
    'y': '@callee_unowned',
    'g': '@callee_guaranteed',
    'x': '@callee_owned',
    't': '@convention(thin)',
}

IMPL_FUNCTION_ATTRIBUTES = {
    'B': '@convention(block)',
    'C': '@convention(c)',
    'M': '@convention(method)',
    'O': '@convention(objc_method)',
    'K': '@convention(closure)',
    'W': '@convention(witness_method)',
}

METATYPE_REPRESENTATIONS = {
    't': '@thin',
    'T': '@thick',
    'o': '@objc_metatype',
}

# requirement char -> (constraint, type kind)
GENERIC_REQUIREMENTS = {
    'c': ('base_class', 'assoc'),
    'C': ('base_class', 'compound_assoc'),
    'b': ('base_class', 'generic'),
    'B': ('base_class', 'substitution'),
    't': ('same_type', 'assoc'),
    'T': ('same_type', 'compound_assoc'),
    's': ('same_type', 'generic'),
    'S': ('same_type', 'substitution'),
    'm': ('layout', 'assoc'),
    'M': ('layout', 'compound_assoc'),
    'l': ('layout', 'generic'),
    'L': ('layout', 'substitution'),
    'p': ('protocol', 'assoc'),
    'P': ('protocol', 'compound_assoc'),
    'Q': ('protocol', 'substitution'),
}

DEPENDENT_CONFORMANCE_KINDS = (
    Kind.DEPENDENT_PROTOCOL_CONFORMANCE_ROOT,
    Kind.DEPENDENT_PROTOCOL_CONFORMANCE_INHERITED,
    Kind.DEPENDENT_PROTOCOL_CONFORMANCE_ASSOCIATED,
)

ANY_CONFORMANCE_KINDS = (Kind.CONCRETE_PROTOCOL_CONFORMANCE,) + DEPENDENT_CONFORMANCE_KINDS


def getManglingPrefixLength(mangled_name):
    if not mangled_name:
        return 0
    for prefix in MANGLING_PREFIXES:
        if mangled_name.startswith(prefix):
            return len(prefix)
    return 0

def isMangledName(mangled_name):
    return getManglingPrefixLength(mangled_name) != 0

def isOldFunctionTypeMangling(mangled_name):
    return mangled_name[:2] == '_T'

def isSwiftSymbol(mangled_name):
    if isOldFunctionTypeMangling(mangled_name):
        return True
    return getManglingPrefixLength(mangled_name) != 0

def dropSwiftManglingPrefix(mangled_name):
    return mangled_name[getManglingPrefixLength(mangled_name):]

def isObjCSymbol(mangled_name):
    name = dropSwiftManglingPrefix(mangled_name)
    return name.startswith('So') or name.startswith('Sc')


def isAliasNode(node):
    if node.kind == Kind.TYPE:
        return isAliasNode(node.getFirstChild())
    return node.kind == Kind.TYPE_ALIAS

def isClassNode(node):
    if node.kind == Kind.TYPE:
        return isClassNode(node.getFirstChild())
    return node.kind in (Kind.CLASS, Kind.BOUND_GENERIC_CLASS)

def isEnumNode(node):
    if node.kind == Kind.TYPE:
        return isEnumNode(node.getFirstChild())
    return node.kind in (Kind.ENUM, Kind.BOUND_GENERIC_ENUM)

def isProtocolNode(node):
    if node.kind == Kind.TYPE:
        return isProtocolNode(node.getFirstChild())
    return node.kind in (Kind.PROTOCOL, Kind.PROTOCOL_SYMBOLIC_REFERENCE)

def isStructNode(node):
    if node.kind == Kind.TYPE:
        return isStructNode(node.getFirstChild())
    return node.kind in (Kind.STRUCTURE, Kind.BOUND_GENERIC_STRUCTURE)

def isAlias(mangled_name):
    return isAliasNode(demangleTypeAsNode(mangled_name))

def isClass(mangled_name):
    return isClassNode(demangleTypeAsNode(mangled_name))

def isEnum(mangled_name):
    return isEnumNode(demangleTypeAsNode(mangled_name))

def isProtocol(mangled_name):
    return isProtocolNode(demangleTypeAsNode(mangled_name))

def isStruct(mangled_name):
    return isStructNode(demangleTypeAsNode(mangled_name))


def demangleSymbolAsNode(mangled_name, resolver=None):
    return Demangler(mangled_name, resolver=resolver).demangleSymbol()

def demangleTypeAsNode(mangled_name, resolver=None):
    return Demangler(mangled_name, resolver=resolver).demangleType()


def isWordStart(c):
    return c != '' and c not in string.digits and c != '_'

def isWordEnd(c, prev):
    if c == '_' or c == '':
        return True
    return not prev.isupper() and c.isupper()

def isLowerLetter(c):
    return 'a' <= c <= 'z'

def isUpperLetter(c):
    return 'A' <= c <= 'Z'


class NodeStack():
    def __init__(self):
        self.stack = []

    def __len__(self):
        return len(self.stack)

    def __iter__(self):
        # bottom to top
        return iter(self.stack)

    def pushNode(self, node):
        self.stack.append(node)

    def popNode(self, match=None):
        """Pops the top node, optionally only when it is of the given kind
        or satisfies the given predicate over kinds.

        A node nested deeper than MAX_NODE_DEPTH is never popped, so nothing
        can be built on top of it.
        """
        if len(self.stack) == 0:
            return None
        if self.stack[-1].depth > MAX_NODE_DEPTH:
            log.debug('refusing to pop %s nested %d levels deep', self.stack[-1].kind.name, self.stack[-1].depth)
            return None
        if match is not None:
            top_kind = self.stack[-1].kind
            if isinstance(match, Kind):
                if top_kind != match:
                    return None
            elif not match(top_kind):
                return None
        return self.stack.pop()


class Demangler():
    """Decodes one mangled Swift symbol into a Node tree.

    All decoding state lives on the instance, so use one instance per
    symbol. Handlers return a Node or None; None aborts the decode.

    resolver, when given, is called as
    resolver(kind, directness, value, raw_bytes) for the embedded
    symbolic references and returns a Node or None. Raw reference bytes
    are carried in the string as characters 0x00-0xff.
    """

    def __init__(self, mangled_name, resolver=None, max_length=MAX_MANGLED_LENGTH):
        self.name = mangled_name
        self.resolver = resolver
        self.max_length = max_length
        self.reset()

    def reset(self):
        self.mangled = Cursor(self.name)
        self.stack = NodeStack()
        self.substitutions = []
        self.words = []
        self.is_old_function_type_mangling = False

    def run(self):
        if not isSwiftSymbol(self.name):
            log.debug('%s is not a Swift symbol', self.name)
            return ReductionError(self.name, '{} is not a mangled Swift symbol'.format(self.name))
        top_level = self.demangleSymbol()
        if top_level is None:
            return ReductionError(self.name, 'Unable to demangle {}'.format(self.name))
        return Reducer(self.name).convert(top_level)

    def demangleSymbol(self):
        self.reset()
        if len(self.name) > self.max_length:
            log.debug('%s is longer than %d characters', self.name[:32], self.max_length)
            return None

        if self.mangled.nextIf(OBJC_TYPE_NAME_PREFIX):
            return self.demangleObjCTypeName()

        prefix_length = getManglingPrefixLength(self.name)
        if prefix_length == 0:
            log.debug('%s is not a mangled name', self.name)
            return None
        self.is_old_function_type_mangling = isOldFunctionTypeMangling(self.name)
        self.mangled.advanceOffset(prefix_length)

        if not self.parseAndPushNodes():
            log.debug('failed to demangle %s at "%s"', self.name, self.mangled)
            return None

        top_level = Node(Kind.GLOBAL)
        parent = top_level
        while True:
            func_attr = self.stack.popNode(isFunctionAttribute)
            if func_attr is None:
                break
            parent.addChild(func_attr)
            if func_attr.kind in (Kind.PARTIAL_APPLY_FORWARDER, Kind.PARTIAL_APPLY_OBJC_FORWARDER):
                parent = func_attr
        for node in self.stack:
            if node.depth > MAX_NODE_DEPTH:
                log.debug('%s nests deeper than %d levels', self.name, MAX_NODE_DEPTH)
                return None
            if node.kind == Kind.TYPE:
                parent.addChild(node.getFirstChild())
            else:
                parent.addChild(node)

        if top_level.getNumChildren() == 0:
            return None
        return top_level

    def demangleType(self):
        self.reset()
        if len(self.name) > self.max_length:
            return None
        self.mangled.advanceOffset(getManglingPrefixLength(self.name))
        self.parseAndPushNodes()
        for node in self.stack:
            if node.depth > MAX_NODE_DEPTH:
                log.debug('%s nests deeper than %d levels', self.name, MAX_NODE_DEPTH)
                return None
        result = self.stack.popNode()
        if result is not None:
            return result
        return Node(Kind.SUFFIX, text=self.name)

    def parseAndPushNodes(self):
        while not self.mangled.isAtEnd():
            node = self.demangleOperator()
            if node is None:
                return False
            self.stack.pushNode(node)
        return True

    # Input helpers. Past the end these yield '' so that every dispatch
    # falls through to its failure branch.

    def peekChar(self):
        if self.mangled.isAtEnd():
            return ''
        return self.mangled.peek()

    def nextChar(self):
        if self.mangled.isAtEnd():
            return ''
        return self.mangled.next()

    def nextIf(self, s):
        return self.mangled.nextIf(s)

    def pushBack(self):
        self.mangled.rewind()

    # Node helpers. A None argument makes the result None.

    def popNode(self, match=None):
        return self.stack.popNode(match)

    def addSubstitution(self, node):
        if node is not None:
            self.substitutions.append(node)

    def addChild(self, parent, child):
        if parent is None or child is None:
            return None
        parent.addChild(child)
        return parent

    def createWithChild(self, kind, child):
        if child is None:
            return None
        return Node(kind).addChild(child)

    def createType(self, child):
        return self.createWithChild(Kind.TYPE, child)

    def createWithChildren(self, kind, *children):
        node = Node(kind)
        for child in children:
            if child is None:
                return None
            node.addChild(child)
        return node

    def createWithPoppedType(self, kind):
        return self.createWithChild(kind, self.popNode(Kind.TYPE))

    def changeKind(self, node, kind):
        if node is None:
            return None
        if node.hasText():
            new_node = Node(kind, text=node.text)
        elif node.hasIndex():
            new_node = Node(kind, index=node.index)
        else:
            new_node = Node(kind)
        for child in node.children:
            new_node.addChild(child)
        return new_node

    def demangleOperator(self):
        c = self.nextChar()
        if c in ('\x01', '\x02', '\x03', '\x04'):
            return self.demangleSymbolicReference(ord(c))
        elif c == 'A':
            return self.demangleMultiSubstitutions()
        elif c == 'B':
            return self.demangleBuiltinType()
        elif c == 'C':
            return self.demangleAnyGenericType(Kind.CLASS)
        elif c == 'D':
            return self.demangleTypeMangling()
        elif c == 'E':
            return self.demangleExtensionContext()
        elif c == 'F':
            return self.demanglePlainFunction()
        elif c == 'G':
            return self.demangleBoundGenericType()
        elif c == 'H':
            return self.demangleConformanceOperator()
        elif c == 'I':
            return self.demangleImplFunctionType()
        elif c == 'K':
            return Node(Kind.THROWS_ANNOTATION)
        elif c == 'L':
            return self.demangleLocalIdentifier()
        elif c == 'M':
            return self.demangleMetatype()
        elif c == 'N':
            return self.createWithPoppedType(Kind.TYPE_METADATA)
        elif c == 'O':
            return self.demangleAnyGenericType(Kind.ENUM)
        elif c == 'P':
            return self.demangleAnyGenericType(Kind.PROTOCOL)
        elif c == 'Q':
            return self.demangleArchetype()
        elif c == 'R':
            return self.demangleGenericRequirement()
        elif c == 'S':
            return self.demangleStandardSubstitution()
        elif c == 'T':
            return self.demangleThunkOrSpecialization()
        elif c == 'V':
            return self.demangleAnyGenericType(Kind.STRUCTURE)
        elif c == 'W':
            return self.demangleWitness()
        elif c == 'X':
            return self.demangleSpecialType()
        elif c == 'Z':
            return self.createWithChild(Kind.STATIC, self.popNode(isEntity))
        elif c == 'a':
            return self.demangleAnyGenericType(Kind.TYPE_ALIAS)
        elif c == 'c':
            return self.popFunctionType(Kind.FUNCTION_TYPE)
        elif c == 'd':
            return Node(Kind.VARIADIC_MARKER)
        elif c == 'f':
            return self.demangleFunctionEntity()
        elif c == 'g':
            return self.demangleRetroactiveConformance()
        elif c == 'h':
            return self.createType(self.createWithChild(Kind.SHARED, self.popTypeAndGetChild()))
        elif c == 'i':
            return self.demangleSubscript()
        elif c == 'l':
            return self.demangleGenericSignature(False)
        elif c == 'm':
            return self.createType(self.createWithChild(Kind.METATYPE, self.popNode(Kind.TYPE)))
        elif c == 'n':
            return self.createType(self.createWithChild(Kind.OWNED, self.popTypeAndGetChild()))
        elif c == 'o':
            return self.demangleOperatorIdentifier()
        elif c == 'p':
            return self.createType(self.demangleProtocolList())
        elif c == 'q':
            return self.createType(self.demangleGenericParamIndex())
        elif c == 'r':
            return self.demangleGenericSignature(True)
        elif c == 's':
            return Node(Kind.MODULE, text=STDLIB_NAME)
        elif c == 't':
            return self.popTuple()
        elif c == 'u':
            return self.demangleGenericType()
        elif c == 'v':
            return self.demangleAccessor(self.demangleEntity(Kind.VARIABLE))
        elif c == 'w':
            return self.demangleValueWitness()
        elif c == 'x':
            return self.createType(self.getDependentGenericParamType(0, 0))
        elif c == 'y':
            return Node(Kind.EMPTY_LIST)
        elif c == 'z':
            return self.createType(self.createWithChild(Kind.IN_OUT, self.popTypeAndGetChild()))
        elif c == '_':
            return Node(Kind.FIRST_ELEMENT_MARKER)
        elif c == '.':
            self.pushBack()
            return Node(Kind.SUFFIX, text=self.mangled.getString())
        self.pushBack()
        return self.demangleIdentifier()

    def demangleSymbolicReference(self, raw_kind):
        if not self.mangled.hasAtLeast(4):
            return None
        raw = self.mangled.advanceOffset(4)
        if any(ord(c) > 0xff for c in raw):
            return None
        data = bytes(ord(c) for c in raw)
        value = int.from_bytes(data, 'little', signed=True)

        if raw_kind == 1:
            kind, directness = SymbolicReferenceKind.CONTEXT, Directness.DIRECT
        elif raw_kind == 2:
            kind, directness = SymbolicReferenceKind.CONTEXT, Directness.INDIRECT
        else:
            log.debug('unsupported symbolic reference kind %d in %s', raw_kind, self.name)
            return None

        if self.resolver is None:
            log.debug('no resolver for symbolic reference in %s', self.name)
            return None
        resolved = self.resolver(kind, directness, value, data)
        if resolved is None:
            return None
        if kind == SymbolicReferenceKind.CONTEXT:
            self.addSubstitution(resolved)
        return resolved

    def demangleNatural(self):
        """Returns the decimal number at the cursor, or None."""
        if self.peekChar() == '' or self.peekChar() not in string.digits:
            return None
        s = ''
        while self.peekChar() != '' and self.peekChar() in string.digits:
            s += self.nextChar()
        return int(s)

    def demangleIndex(self):
        if self.nextIf('_'):
            return 0
        num = self.demangleNatural()
        if num is not None and self.nextIf('_'):
            return num + 1
        return None

    def demangleIndexAsNode(self):
        index = self.demangleIndex()
        if index is None:
            return None
        return Node(Kind.NUMBER, index=index)

    def demangleMultiSubstitutions(self):
        repeat_count = -1
        while True:
            c = self.nextChar()
            if c == '':
                return None
            if isLowerLetter(c):
                node = self.pushMultiSubstitutions(repeat_count, ord(c) - ord('a'))
                if node is None:
                    return None
                self.stack.pushNode(node)
                repeat_count = -1
                continue
            if isUpperLetter(c):
                return self.pushMultiSubstitutions(repeat_count, ord(c) - ord('A'))
            if c == '_':
                index = repeat_count + 27
                if index >= len(self.substitutions):
                    return None
                return self.substitutions[index].copy()
            self.pushBack()
            repeat_count = self.demangleNatural()
            if repeat_count is None:
                return None

    def pushMultiSubstitutions(self, repeat_count, index):
        if index >= len(self.substitutions):
            return None
        if repeat_count > MAX_REPEAT_COUNT:
            return None
        node = self.substitutions[index]
        while repeat_count > 1:
            self.stack.pushNode(node.copy())
            repeat_count -= 1
        return node.copy()

    def createSwiftType(self, kind, name):
        return self.createType(self.createWithChildren(kind, Node(Kind.MODULE, text=STDLIB_NAME),
                                                       Node(Kind.IDENTIFIER, text=name)))

    def demangleStandardSubstitution(self):
        c = self.nextChar()
        if c == 'o':
            return Node(Kind.MODULE, text=MANGLING_MODULE_C)
        elif c == 'C':
            return Node(Kind.MODULE, text=MANGLING_MODULE_C_SYNTHESIZED)
        elif c == 'g':
            optional = self.createType(self.createWithChildren(
                Kind.BOUND_GENERIC_ENUM,
                self.createSwiftType(Kind.ENUM, 'Optional'),
                self.createWithChild(Kind.TYPE_LIST, self.popNode(Kind.TYPE))))
            self.addSubstitution(optional)
            return optional
        elif c == '':
            return None
        self.pushBack()
        repeat_count = self.demangleNatural()
        if repeat_count is None:
            repeat_count = 1
        if repeat_count > MAX_REPEAT_COUNT:
            return None
        node = self.createStandardSubstitution(self.nextChar())
        if node is None:
            return None
        while repeat_count > 1:
            self.stack.pushNode(node.copy())
            repeat_count -= 1
        return node

    def createStandardSubstitution(self, c):
        if c not in STANDARD_TYPES:
            return None
        kind, name = STANDARD_TYPES[c]
        return self.createSwiftType(kind, name)

    def demangleIdentifier(self):
        has_word_substitutions = False
        is_punycoded = False
        c = self.peekChar()
        if c == '' or c not in string.digits:
            return None
        if c == '0':
            self.nextChar()
            if self.peekChar() == '0':
                self.nextChar()
                is_punycoded = True
            else:
                has_word_substitutions = True

        identifier = ''
        while True:
            while has_word_substitutions and self.peekChar().isalpha():
                c = self.nextChar()
                if isLowerLetter(c):
                    word_index = ord(c) - ord('a')
                elif isUpperLetter(c):
                    word_index = ord(c) - ord('A')
                    has_word_substitutions = False
                else:
                    return None
                if word_index >= len(self.words):
                    return None
                identifier += self.words[word_index]
            if self.nextIf('0'):
                break
            num_chars = self.demangleNatural()
            if num_chars is None or num_chars <= 0:
                return None
            if is_punycoded:
                self.nextIf('_')
            if num_chars > len(self.mangled):
                return None
            piece = self.mangled.advanceOffset(num_chars)
            if is_punycoded:
                decoded = punycode.decode(piece)
                if decoded is None:
                    return None
                identifier += decoded
            else:
                identifier += piece
                self.collectWords(piece)
            if not has_word_substitutions:
                break

        if len(identifier) == 0:
            return None
        node = Node(Kind.IDENTIFIER, text=identifier)
        self.addSubstitution(node)
        return node

    def collectWords(self, piece):
        word_start = -1
        for i in range(len(piece) + 1):
            c = piece[i] if i < len(piece) else ''
            if word_start >= 0 and isWordEnd(c, piece[i - 1]):
                if i - word_start >= 2 and len(self.words) < MAX_NUM_WORDS:
                    self.words.append(piece[word_start:i])
                word_start = -1
            if word_start < 0 and isWordStart(c):
                word_start = i

    def demangleOperatorIdentifier(self):
        ident = self.popNode(Kind.IDENTIFIER)
        if ident is None:
            return None
        op = ''
        for c in ident.text:
            if ord(c) > 0x7f:
                op += c
                continue
            if not isLowerLetter(c):
                return None
            o = OPERATOR_CHAR_TABLE[ord(c) - ord('a')]
            if o == ' ':
                return None
            op += o
        c = self.nextChar()
        if c == 'i':
            return Node(Kind.INFIX_OPERATOR, text=op)
        elif c == 'p':
            return Node(Kind.PREFIX_OPERATOR, text=op)
        elif c == 'P':
            return Node(Kind.POSTFIX_OPERATOR, text=op)
        return None

    def demangleLocalIdentifier(self):
        if self.nextIf('L'):
            discriminator = self.popNode(Kind.IDENTIFIER)
            name = self.popNode(isDeclName)
            return self.createWithChildren(Kind.PRIVATE_DECL_NAME, discriminator, name)
        if self.nextIf('l'):
            discriminator = self.popNode(Kind.IDENTIFIER)
            return self.createWithChild(Kind.PRIVATE_DECL_NAME, discriminator)
        c = self.peekChar()
        if ('a' <= c <= 'j') or ('A' <= c <= 'J'):
            related_entity_kind = self.nextChar()
            name = self.popNode()
            return self.addChild(Node(Kind.RELATED_ENTITY_DECL_NAME, text=related_entity_kind), name)
        discriminator = self.demangleIndexAsNode()
        name = self.popNode(isDeclName)
        return self.createWithChildren(Kind.LOCAL_DECL_NAME, discriminator, name)

    def popModule(self):
        ident = self.popNode(Kind.IDENTIFIER)
        if ident is not None:
            return self.changeKind(ident, Kind.MODULE)
        return self.popNode(Kind.MODULE)

    def popContext(self):
        module = self.popModule()
        if module is not None:
            return module
        ty = self.popNode(Kind.TYPE)
        if ty is not None:
            if ty.getNumChildren() != 1:
                return None
            child = ty.getFirstChild()
            if not isContext(child.kind):
                return None
            return child
        return self.popNode(isContext)

    def popTypeAndGetChild(self):
        ty = self.popNode(Kind.TYPE)
        if ty is None or ty.getNumChildren() != 1:
            return None
        return ty.getFirstChild()

    def popTypeAndGetAnyGeneric(self):
        child = self.popTypeAndGetChild()
        if child is not None and isAnyGeneric(child.kind):
            return child
        return None

    def demangleBuiltinType(self):
        c = self.nextChar()
        if c in BUILTIN_TYPE_NAMES:
            ty = Node(Kind.BUILTIN_TYPE_NAME, text=BUILTIN_TYPE_NAMES[c])
        elif c == 'f':
            index = self.demangleIndex()
            if index is None:
                return None
            size = index - 1
            if size <= 0 or size > MAX_TYPE_SIZE:
                return None
            ty = Node(Kind.BUILTIN_TYPE_NAME, text='Builtin.FPIEEE{}'.format(size))
        elif c == 'i':
            index = self.demangleIndex()
            if index is None:
                return None
            size = index - 1
            if size < 0 or size > MAX_TYPE_SIZE:
                return None
            ty = Node(Kind.BUILTIN_TYPE_NAME, text='Builtin.Int{}'.format(size))
        elif c == 'v':
            index = self.demangleIndex()
            if index is None:
                return None
            elements = index - 1
            if elements <= 0 or elements > MAX_TYPE_SIZE:
                return None
            element_type = self.popTypeAndGetChild()
            if (element_type is None or element_type.kind != Kind.BUILTIN_TYPE_NAME
                    or not element_type.text.startswith('Builtin.')):
                return None
            name = 'Builtin.Vec{}x{}'.format(elements, element_type.text[len('Builtin.'):])
            ty = Node(Kind.BUILTIN_TYPE_NAME, text=name)
        else:
            return None
        return self.createType(ty)

    def demangleAnyGenericType(self, kind):
        name = self.popNode(isDeclName)
        context = self.popContext()
        nominal_type = self.createType(self.createWithChildren(kind, context, name))
        self.addSubstitution(nominal_type)
        return nominal_type

    def demangleExtensionContext(self):
        generic_signature = self.popNode(Kind.DEPENDENT_GENERIC_SIGNATURE)
        module = self.popModule()
        ty = self.popTypeAndGetAnyGeneric()
        extension = self.createWithChildren(Kind.EXTENSION, module, ty)
        if generic_signature is not None:
            extension = self.addChild(extension, generic_signature)
        return extension

    def demanglePlainFunction(self):
        generic_signature = self.popNode(Kind.DEPENDENT_GENERIC_SIGNATURE)
        ty = self.popFunctionType(Kind.FUNCTION_TYPE)
        label_list = self.popFunctionParamLabels(ty)

        if generic_signature is not None:
            ty = self.createType(self.createWithChildren(Kind.DEPENDENT_GENERIC_TYPE, generic_signature, ty))

        name = self.popNode(isDeclName)
        context = self.popContext()
        if label_list is not None:
            return self.createWithChildren(Kind.FUNCTION, context, name, label_list, ty)
        return self.createWithChildren(Kind.FUNCTION, context, name, ty)

    def popFunctionType(self, kind):
        function_type = Node(kind)
        self.addChild(function_type, self.popNode(Kind.THROWS_ANNOTATION))
        function_type = self.addChild(function_type, self.popFunctionParams(Kind.ARGUMENT_TUPLE))
        function_type = self.addChild(function_type, self.popFunctionParams(Kind.RETURN_TYPE))
        return self.createType(function_type)

    def popFunctionParams(self, kind):
        if self.popNode(Kind.EMPTY_LIST) is not None:
            params_type = self.createType(Node(Kind.TUPLE))
        else:
            params_type = self.popNode(Kind.TYPE)
        if params_type is None:
            return None

        if kind == Kind.ARGUMENT_TUPLE:
            params = params_type.getFirstChild()
            num_params = params.getNumChildren() if params.kind == Kind.TUPLE else 1
            node = Node(kind, index=num_params)
        else:
            node = Node(kind)
        return node.addChild(params_type)

    def popFunctionParamLabels(self, ty):
        """Recovers the argument labels of a function type.

        Current manglings push one label (or '_') per parameter ahead of
        the type, or a single empty list when no parameter is labelled.
        Legacy '_T0' manglings keep the labels as tuple element names,
        which are moved out of the parameter tuple into the label list.
        """
        if not self.is_old_function_type_mangling and self.popNode(Kind.EMPTY_LIST) is not None:
            return Node(Kind.LABEL_LIST)

        if ty is None or ty.kind != Kind.TYPE:
            return None

        function_type = ty.getFirstChild()
        if function_type.kind == Kind.DEPENDENT_GENERIC_TYPE:
            function_type = function_type.getChild(1).getFirstChild()
        if function_type.kind not in (Kind.FUNCTION_TYPE, Kind.NO_ESCAPE_FUNCTION_TYPE):
            return None

        parameter_type = function_type.getFirstChild()
        if parameter_type.kind == Kind.THROWS_ANNOTATION:
            parameter_type = function_type.getChild(1)
        if parameter_type.index == 0:
            return None

        params = parameter_type.getFirstChild().getFirstChild()
        if self.is_old_function_type_mangling and params.kind != Kind.TUPLE:
            return Node(Kind.LABEL_LIST)

        label_list = Node(Kind.LABEL_LIST)
        has_labels = False
        for i in range(parameter_type.index):
            if self.is_old_function_type_mangling:
                label = self.takeTupleElementLabel(params.getChild(i))
            else:
                label = self.popNode()
            if label is None:
                return None
            if label.kind not in (Kind.IDENTIFIER, Kind.FIRST_ELEMENT_MARKER):
                return None
            label_list.addChild(label)
            if label.kind != Kind.FIRST_ELEMENT_MARKER:
                has_labels = True

        if not has_labels:
            return Node(Kind.LABEL_LIST)
        if not self.is_old_function_type_mangling:
            label_list.reverseChildren()
        return label_list

    def takeTupleElementLabel(self, element):
        for i, child in enumerate(element.children):
            if child.kind == Kind.TUPLE_ELEMENT_NAME:
                element.removeChildAt(i)
                return Node(Kind.IDENTIFIER, text=child.text)
        return Node(Kind.FIRST_ELEMENT_MARKER)

    def popTuple(self):
        root = Node(Kind.TUPLE)
        if self.popNode(Kind.EMPTY_LIST) is None:
            first_element = False
            while not first_element:
                first_element = self.popNode(Kind.FIRST_ELEMENT_MARKER) is not None
                element = Node(Kind.TUPLE_ELEMENT)
                self.addChild(element, self.popNode(Kind.VARIADIC_MARKER))
                ident = self.popNode(Kind.IDENTIFIER)
                if ident is not None:
                    element.addChild(Node(Kind.TUPLE_ELEMENT_NAME, text=ident.text))
                ty = self.popNode(Kind.TYPE)
                if ty is None:
                    return None
                element.addChild(ty)
                root.addChild(element)
            root.reverseChildren()
        return self.createType(root)

    def popTypeList(self):
        root = Node(Kind.TYPE_LIST)
        if self.popNode(Kind.EMPTY_LIST) is None:
            first_element = False
            while not first_element:
                first_element = self.popNode(Kind.FIRST_ELEMENT_MARKER) is not None
                ty = self.popNode(Kind.TYPE)
                if ty is None:
                    return None
                root.addChild(ty)
            root.reverseChildren()
        return root

    def popProtocol(self):
        ty = self.popNode(Kind.TYPE)
        if ty is not None:
            if ty.getNumChildren() < 1 or not isProtocolNode(ty):
                return None
            return ty
        symbolic_reference = self.popNode(Kind.PROTOCOL_SYMBOLIC_REFERENCE)
        if symbolic_reference is not None:
            return symbolic_reference
        name = self.popNode(isDeclName)
        context = self.popContext()
        return self.createType(self.createWithChildren(Kind.PROTOCOL, context, name))

    def popAnyProtocolConformanceList(self):
        conformance_list = Node(Kind.ANY_PROTOCOL_CONFORMANCE_LIST)
        if self.popNode(Kind.EMPTY_LIST) is None:
            first_element = False
            while not first_element:
                first_element = self.popNode(Kind.FIRST_ELEMENT_MARKER) is not None
                conformance = self.popAnyProtocolConformance()
                if conformance is None:
                    return None
                conformance_list.addChild(conformance)
            conformance_list.reverseChildren()
        return conformance_list

    def popAnyProtocolConformance(self):
        return self.popNode(lambda kind: kind in ANY_CONFORMANCE_KINDS)

    def popDependentProtocolConformance(self):
        return self.popNode(lambda kind: kind in DEPENDENT_CONFORMANCE_KINDS)

    def demangleConformanceOperator(self):
        c = self.nextChar()
        if c == 'A':
            return self.demangleDependentProtocolConformanceAssociated()
        elif c == 'C':
            return self.demangleConcreteProtocolConformance()
        elif c == 'D':
            return self.demangleDependentProtocolConformanceRoot()
        elif c == 'I':
            return self.demangleDependentProtocolConformanceInherited()
        elif c == 'P':
            return self.createWithChild(Kind.PROTOCOL_CONFORMANCE_REF_IN_TYPE_MODULE, self.popProtocol())
        elif c == 'p':
            return self.createWithChild(Kind.PROTOCOL_CONFORMANCE_REF_IN_PROTOCOL_MODULE, self.popProtocol())
        if c != '':
            self.pushBack()
        self.pushBack()
        return self.demangleIdentifier()

    def demangleRetroactiveProtocolConformanceRef(self):
        module = self.popModule()
        protocol = self.popProtocol()
        return self.createWithChildren(Kind.PROTOCOL_CONFORMANCE_REF_IN_OTHER_MODULE, protocol, module)

    def demangleConcreteProtocolConformance(self):
        conditional_conformances = self.popAnyProtocolConformanceList()
        conformance_ref = self.popNode(Kind.PROTOCOL_CONFORMANCE_REF_IN_TYPE_MODULE)
        if conformance_ref is None:
            conformance_ref = self.popNode(Kind.PROTOCOL_CONFORMANCE_REF_IN_PROTOCOL_MODULE)
        if conformance_ref is None:
            conformance_ref = self.demangleRetroactiveProtocolConformanceRef()
        ty = self.popNode(Kind.TYPE)
        return self.createWithChildren(Kind.CONCRETE_PROTOCOL_CONFORMANCE, ty, conformance_ref,
                                       conditional_conformances)

    def dependentConformanceNode(self, kind):
        index = self.demangleIndex()
        if index is not None and index > 0:
            return Node(kind, index=index - 1)
        return Node(kind)

    def demangleDependentProtocolConformanceRoot(self):
        conformance = self.dependentConformanceNode(Kind.DEPENDENT_PROTOCOL_CONFORMANCE_ROOT)
        protocol = self.popProtocol()
        if protocol is None:
            return None
        conformance.addChild(protocol)
        dependent_type = self.popNode(Kind.TYPE)
        if dependent_type is None:
            return None
        return conformance.addChild(dependent_type)

    def demangleDependentProtocolConformanceInherited(self):
        conformance = self.dependentConformanceNode(Kind.DEPENDENT_PROTOCOL_CONFORMANCE_INHERITED)
        protocol = self.popProtocol()
        if protocol is None:
            return None
        conformance.addChild(protocol)
        nested = self.popDependentProtocolConformance()
        if nested is None:
            return None
        conformance.addChild(nested)
        conformance.reverseChildren()
        return conformance

    def popDependentAssociatedConformance(self):
        protocol = self.popProtocol()
        dependent_type = self.popNode(Kind.TYPE)
        return self.createWithChildren(Kind.DEPENDENT_ASSOCIATED_CONFORMANCE, dependent_type, protocol)

    def demangleDependentProtocolConformanceAssociated(self):
        conformance = self.dependentConformanceNode(Kind.DEPENDENT_PROTOCOL_CONFORMANCE_ASSOCIATED)
        associated_conformance = self.popDependentAssociatedConformance()
        if associated_conformance is None:
            return None
        conformance.addChild(associated_conformance)
        nested = self.popDependentProtocolConformance()
        if nested is None:
            return None
        conformance.addChild(nested)
        conformance.reverseChildren()
        return conformance

    def demangleRetroactiveConformance(self):
        index = self.demangleIndex()
        if index is None:
            return None
        conformance = self.popAnyProtocolConformance()
        if conformance is None:
            return None
        return Node(Kind.RETROACTIVE_CONFORMANCE, index=index).addChild(conformance)

    def demangleBoundGenericType(self):
        retroactive_conformances = None
        while True:
            conformance = self.popNode(Kind.RETROACTIVE_CONFORMANCE)
            if conformance is None:
                break
            if retroactive_conformances is None:
                retroactive_conformances = Node(Kind.TYPE_LIST)
            retroactive_conformances.addChild(conformance)
        if retroactive_conformances is not None:
            retroactive_conformances.reverseChildren()

        type_lists = []
        while True:
            type_list = Node(Kind.TYPE_LIST)
            type_lists.append(type_list)
            while True:
                ty = self.popNode(Kind.TYPE)
                if ty is None:
                    break
                type_list.addChild(ty)
            type_list.reverseChildren()
            if self.popNode(Kind.EMPTY_LIST) is not None:
                break
            if self.popNode(Kind.FIRST_ELEMENT_MARKER) is None:
                return None

        nominal = self.popTypeAndGetAnyGeneric()
        bound = self.demangleBoundGenericArgs(nominal, type_lists, 0)
        self.addChild(bound, retroactive_conformances)
        bound_type = self.createType(bound)
        self.addSubstitution(bound_type)
        return bound_type

    def demangleBoundGenericArgs(self, nominal, type_lists, type_list_index):
        """Attaches generic argument lists to a nominal and its parents.

        type_lists holds one list per nesting level, innermost first.
        Declarations that cannot be generic themselves (variables,
        explicit closures, subscripts) pass their list to the parent.
        """
        if nominal is None or type_list_index >= len(type_lists):
            return None

        if nominal.kind in (Kind.TYPE_SYMBOLIC_REFERENCE, Kind.PROTOCOL_SYMBOLIC_REFERENCE):
            remaining = Node(Kind.TYPE_LIST)
            for type_list in reversed(type_lists[type_list_index:]):
                for child in type_list.children:
                    remaining.addChild(child)
            return self.createWithChildren(Kind.BOUND_GENERIC_OTHER_NOMINAL_TYPE, self.createType(nominal),
                                           remaining)

        if nominal.getNumChildren() == 0:
            return None
        context = nominal.getFirstChild()

        consumes_generic_args = nominal.kind not in (Kind.VARIABLE, Kind.EXPLICIT_CLOSURE, Kind.SUBSCRIPT)

        args = type_lists[type_list_index]
        if consumes_generic_args:
            type_list_index += 1

        if type_list_index < len(type_lists):
            if context.kind == Kind.EXTENSION:
                bound_parent = self.demangleBoundGenericArgs(context.getChild(1), type_lists, type_list_index)
                bound_parent = self.createWithChildren(Kind.EXTENSION, context.getFirstChild(), bound_parent)
                if context.getNumChildren() == 3:
                    self.addChild(bound_parent, context.getChild(2))
            else:
                bound_parent = self.demangleBoundGenericArgs(context, type_lists, type_list_index)

            new_nominal = self.createWithChild(nominal.kind, bound_parent)
            if new_nominal is None:
                return None
            for child in nominal.children[1:]:
                new_nominal.addChild(child)
            nominal = new_nominal

        if not consumes_generic_args:
            return nominal
        if args.getNumChildren() == 0:
            return nominal

        if nominal.kind == Kind.CLASS:
            kind = Kind.BOUND_GENERIC_CLASS
        elif nominal.kind == Kind.STRUCTURE:
            kind = Kind.BOUND_GENERIC_STRUCTURE
        elif nominal.kind == Kind.ENUM:
            kind = Kind.BOUND_GENERIC_ENUM
        elif nominal.kind == Kind.PROTOCOL:
            kind = Kind.BOUND_GENERIC_PROTOCOL
        elif nominal.kind == Kind.OTHER_NOMINAL_TYPE:
            kind = Kind.BOUND_GENERIC_OTHER_NOMINAL_TYPE
        elif nominal.kind == Kind.TYPE_ALIAS:
            kind = Kind.BOUND_GENERIC_TYPE_ALIAS
        elif nominal.kind in (Kind.FUNCTION, Kind.CONSTRUCTOR):
            return self.createWithChildren(Kind.BOUND_GENERIC_FUNCTION, nominal, args)
        else:
            return None
        return self.createWithChildren(kind, self.createType(nominal), args)

    def demangleImplParamConvention(self):
        c = self.nextChar()
        if c not in IMPL_PARAM_CONVENTIONS:
            if c != '':
                self.pushBack()
            return None
        return self.createWithChild(Kind.IMPL_PARAMETER, Node(Kind.IMPL_CONVENTION, text=IMPL_PARAM_CONVENTIONS[c]))

    def demangleImplResultConvention(self, kind):
        c = self.nextChar()
        if c not in IMPL_RESULT_CONVENTIONS:
            if c != '':
                self.pushBack()
            return None
        return self.createWithChild(kind, Node(Kind.IMPL_CONVENTION, text=IMPL_RESULT_CONVENTIONS[c]))

    def demangleImplFunctionType(self):
        ty = Node(Kind.IMPL_FUNCTION_TYPE)

        generic_signature = self.popNode(Kind.DEPENDENT_GENERIC_SIGNATURE)
        if generic_signature is not None and self.nextIf('P'):
            generic_signature = self.changeKind(generic_signature, Kind.DEPENDENT_PSEUDOGENERIC_SIGNATURE)

        if self.nextIf('e'):
            ty.addChild(Node(Kind.IMPL_ESCAPING))

        c = self.nextChar()
        if c not in IMPL_CALLEE_CONVENTIONS:
            return None
        ty.addChild(Node(Kind.IMPL_CONVENTION, text=IMPL_CALLEE_CONVENTIONS[c]))

        c = self.nextChar()
        if c in IMPL_FUNCTION_ATTRIBUTES:
            ty.addChild(Node(Kind.IMPL_FUNCTION_ATTRIBUTE, text=IMPL_FUNCTION_ATTRIBUTES[c]))
        elif c != '':
            self.pushBack()

        self.addChild(ty, generic_signature)

        num_types_to_add = 0
        while True:
            param = self.demangleImplParamConvention()
            if param is None:
                break
            ty.addChild(param)
            num_types_to_add += 1
        while True:
            result = self.demangleImplResultConvention(Kind.IMPL_RESULT)
            if result is None:
                break
            ty.addChild(result)
            num_types_to_add += 1
        if self.nextIf('z'):
            error_result = self.demangleImplResultConvention(Kind.IMPL_ERROR_RESULT)
            if error_result is None:
                return None
            ty.addChild(error_result)
            num_types_to_add += 1
        if not self.nextIf('_'):
            return None

        for i in range(num_types_to_add):
            convention_type = self.popNode(Kind.TYPE)
            if convention_type is None:
                return None
            ty.getChild(ty.getNumChildren() - i - 1).addChild(convention_type)

        return self.createType(ty)

    def demangleMetatype(self):
        c = self.nextChar()
        if c in METADATA_KINDS:
            return self.createWithPoppedType(METADATA_KINDS[c])
        elif c == 'c':
            return self.createWithChild(Kind.PROTOCOL_CONFORMANCE_DESCRIPTOR, self.popProtocolConformance())
        elif c == 'p':
            return self.createWithChild(Kind.PROTOCOL_DESCRIPTOR, self.popProtocol())
        elif c == 'S':
            return self.createWithChild(Kind.PROTOCOL_SELF_CONFORMANCE_DESCRIPTOR, self.popProtocol())
        elif c == 'A':
            return self.createWithChild(Kind.REFLECTION_METADATA_ASSOC_TYPE_DESCRIPTOR,
                                        self.popProtocolConformance())
        elif c == 'C':
            ty = self.popNode(Kind.TYPE)
            if ty is None or not isAnyGeneric(ty.getFirstChild().kind):
                return None
            return self.createWithChild(Kind.REFLECTION_METADATA_SUPERCLASS_DESCRIPTOR, ty.getFirstChild())
        elif c == 'V':
            return self.createWithChild(Kind.PROPERTY_DESCRIPTOR, self.popNode(isEntity))
        elif c == 'X':
            return self.demanglePrivateContextDescriptor()
        return None

    def demanglePrivateContextDescriptor(self):
        c = self.nextChar()
        if c == 'E':
            return self.createWithChild(Kind.EXTENSION_DESCRIPTOR, self.popContext())
        elif c == 'M':
            return self.createWithChild(Kind.MODULE_DESCRIPTOR, self.popModule())
        elif c == 'Y':
            discriminator = self.popNode()
            if discriminator is None:
                return None
            context = self.popContext()
            return self.createWithChildren(Kind.ANONYMOUS_DESCRIPTOR, context, discriminator)
        elif c == 'X':
            return self.createWithChild(Kind.ANONYMOUS_DESCRIPTOR, self.popContext())
        elif c == 'A':
            path = self.popAssocTypePath()
            if path is None:
                return None
            base = self.popNode(Kind.TYPE)
            return self.createWithChildren(Kind.ASSOCIATED_TYPE_GENERIC_PARAM_REF, base, path)
        return None

    def demangleArchetype(self):
        c = self.nextChar()
        if c == 'a':
            ident = self.popNode(Kind.IDENTIFIER)
            archetype = self.popTypeAndGetChild()
            associated_type = self.createType(self.createWithChildren(Kind.ASSOCIATED_TYPE_REF, archetype, ident))
            self.addSubstitution(associated_type)
            return associated_type
        elif c == 'y':
            ty = self.demangleAssociatedTypeSimple(self.demangleGenericParamIndex())
        elif c == 'z':
            ty = self.demangleAssociatedTypeSimple(self.getDependentGenericParamType(0, 0))
        elif c == 'Y':
            ty = self.demangleAssociatedTypeCompound(self.demangleGenericParamIndex())
        elif c == 'Z':
            ty = self.demangleAssociatedTypeCompound(self.getDependentGenericParamType(0, 0))
        else:
            return None
        self.addSubstitution(ty)
        return ty

    def demangleAssociatedTypeSimple(self, generic_param_index):
        generic_param = self.createType(generic_param_index)
        associated_type_name = self.popAssocTypeName()
        return self.createType(self.createWithChildren(Kind.DEPENDENT_MEMBER_TYPE, generic_param,
                                                       associated_type_name))

    def demangleAssociatedTypeCompound(self, generic_param_index):
        names = []
        first_element = False
        while not first_element:
            first_element = self.popNode(Kind.FIRST_ELEMENT_MARKER) is not None
            name = self.popAssocTypeName()
            if name is None:
                return None
            names.append(name)

        base = generic_param_index
        for name in reversed(names):
            dependent_type = Node(Kind.DEPENDENT_MEMBER_TYPE)
            dependent_type = self.addChild(dependent_type, self.createType(base))
            base = self.addChild(dependent_type, name)
        return self.createType(base)

    def popAssocTypeName(self):
        protocol = self.popNode(Kind.TYPE)
        if protocol is not None and not isProtocolNode(protocol):
            return None
        if protocol is None:
            protocol = self.popNode(Kind.PROTOCOL_SYMBOLIC_REFERENCE)
        ident = self.popNode(Kind.IDENTIFIER)
        associated_type = self.changeKind(ident, Kind.DEPENDENT_ASSOCIATED_TYPE_REF)
        self.addChild(associated_type, protocol)
        return associated_type

    def popAssocTypePath(self):
        path = Node(Kind.ASSOC_TYPE_PATH)
        first_element = False
        while not first_element:
            first_element = self.popNode(Kind.FIRST_ELEMENT_MARKER) is not None
            associated_type = self.popAssocTypeName()
            if associated_type is None:
                return None
            path.addChild(associated_type)
        path.reverseChildren()
        return path

    def getDependentGenericParamType(self, depth, index):
        if depth is None or index is None or depth < 0 or index < 0:
            return None
        param_type = Node(Kind.DEPENDENT_GENERIC_PARAM_TYPE, text=archetypeName(index, depth))
        param_type.addChild(Node(Kind.INDEX, index=depth))
        param_type.addChild(Node(Kind.INDEX, index=index))
        return param_type

    def demangleGenericParamIndex(self):
        if self.nextIf('d'):
            depth = self.demangleIndex()
            index = self.demangleIndex()
            if depth is None or index is None:
                return None
            return self.getDependentGenericParamType(depth + 1, index)
        if self.nextIf('z'):
            return self.getDependentGenericParamType(0, 0)
        index = self.demangleIndex()
        if index is None:
            return None
        return self.getDependentGenericParamType(0, index + 1)

    def popProtocolConformance(self):
        generic_signature = self.popNode(Kind.DEPENDENT_GENERIC_SIGNATURE)
        module = self.popModule()
        protocol = self.popProtocol()
        ty = self.popNode(Kind.TYPE)
        ident = None
        if ty is None:
            # property behavior conformance
            ident = self.popNode(Kind.IDENTIFIER)
            ty = self.popNode(Kind.TYPE)
        if generic_signature is not None:
            ty = self.createType(self.createWithChildren(Kind.DEPENDENT_GENERIC_TYPE, generic_signature, ty))
        conformance = self.createWithChildren(Kind.PROTOCOL_CONFORMANCE, ty, protocol, module)
        self.addChild(conformance, ident)
        return conformance

    def demangleThunkOrSpecialization(self):
        c = self.nextChar()
        if c in THUNK_ATTRIBUTE_KINDS:
            return Node(THUNK_ATTRIBUTE_KINDS[c])
        elif c == 'c':
            return self.createWithChild(Kind.CURRY_THUNK, self.popNode(isEntity))
        elif c == 'j':
            return self.createWithChild(Kind.DISPATCH_THUNK, self.popNode(isEntity))
        elif c == 'q':
            return self.createWithChild(Kind.METHOD_DESCRIPTOR, self.popNode(isEntity))
        elif c == 'C':
            return self.createWithChild(Kind.COROUTINE_CONTINUATION_PROTOTYPE, self.popNode(Kind.TYPE))
        elif c == 'V':
            base = self.popNode(isEntity)
            derived = self.popNode(isEntity)
            return self.createWithChildren(Kind.VTABLE_THUNK, derived, base)
        elif c == 'W':
            entity = self.popNode(isEntity)
            conformance = self.popProtocolConformance()
            return self.createWithChildren(Kind.PROTOCOL_WITNESS, conformance, entity)
        elif c == 'S':
            return self.createWithChild(Kind.PROTOCOL_SELF_CONFORMANCE_WITNESS, self.popNode(isEntity))
        elif c in ('R', 'r'):
            thunk = Node(Kind.REABSTRACTION_THUNK_HELPER if c == 'R' else Kind.REABSTRACTION_THUNK)
            generic_signature = self.popNode(Kind.DEPENDENT_GENERIC_SIGNATURE)
            if generic_signature is not None:
                thunk.addChild(generic_signature)
            second = self.popNode(Kind.TYPE)
            thunk = self.addChild(thunk, self.popNode(Kind.TYPE))
            return self.addChild(thunk, second)
        elif c == 'g':
            return self.demangleGenericSpecialization(Kind.GENERIC_SPECIALIZATION)
        elif c == 'G':
            return self.demangleGenericSpecialization(Kind.GENERIC_SPECIALIZATION_NOT_RE_ABSTRACTED)
        elif c == 'i':
            return self.demangleGenericSpecialization(Kind.INLINED_GENERIC_FUNCTION)
        elif c in ('p', 'P'):
            kind = (Kind.GENERIC_PARTIAL_SPECIALIZATION if c == 'p'
                    else Kind.GENERIC_PARTIAL_SPECIALIZATION_NOT_RE_ABSTRACTED)
            specialization = self.demangleSpecAttributes(kind)
            param = self.createWithChild(Kind.GENERIC_SPECIALIZATION_PARAM, self.popNode(Kind.TYPE))
            return self.addChild(specialization, param)
        elif c == 'f':
            return self.demangleFunctionSpecialization()
        elif c in ('K', 'k'):
            return self.demangleKeyPathAccessorThunk(
                Kind.KEY_PATH_GETTER_THUNK_HELPER if c == 'K' else Kind.KEY_PATH_SETTER_THUNK_HELPER)
        elif c == 'l':
            return self.createWithChild(Kind.ASSOCIATED_TYPE_DESCRIPTOR, self.popAssocTypeName())
        elif c == 'L':
            return self.createWithChild(Kind.PROTOCOL_REQUIREMENTS_BASE_DESCRIPTOR, self.popProtocol())
        elif c == 'M':
            return self.createWithChild(Kind.DEFAULT_ASSOCIATED_TYPE_METADATA_ACCESSOR, self.popAssocTypeName())
        elif c in ('n', 'N'):
            requirement = self.popProtocol()
            path = self.popAssocTypePath()
            protocol = self.popNode(Kind.TYPE)
            kind = (Kind.ASSOCIATED_CONFORMANCE_DESCRIPTOR if c == 'n'
                    else Kind.DEFAULT_ASSOCIATED_CONFORMANCE_ACCESSOR)
            return self.createWithChildren(kind, protocol, path, requirement)
        elif c == 'b':
            requirement = self.popProtocol()
            protocol = self.popNode(Kind.TYPE)
            return self.createWithChildren(Kind.BASE_CONFORMANCE_DESCRIPTOR, protocol, requirement)
        elif c in ('H', 'h'):
            return self.demangleKeyPathComparisonThunk(
                Kind.KEY_PATH_EQUALS_THUNK_HELPER if c == 'H' else Kind.KEY_PATH_HASH_THUNK_HELPER)
        elif c == 'v':
            index = self.demangleIndex()
            if index is None:
                return None
            return Node(Kind.OUTLINED_VARIABLE, index=index)
        elif c == 'e':
            params = self.demangleBridgedMethodParams()
            if not params:
                return None
            return Node(Kind.OUTLINED_BRIDGED_METHOD, text=params)
        return None

    def demangleKeyPathAccessorThunk(self, kind):
        types = []
        node = self.popNode()
        if node is None or node.kind != Kind.TYPE:
            return None
        while node is not None and node.kind == Kind.TYPE:
            types.append(node)
            node = self.popNode()
        if node is None:
            return None
        if node.kind == Kind.DEPENDENT_GENERIC_SIGNATURE:
            decl = self.popNode()
            if decl is None:
                return None
            result = self.createWithChildren(kind, decl, node)
        else:
            result = self.createWithChild(kind, node)
        for ty in types:
            result.addChild(ty)
        return result

    def demangleKeyPathComparisonThunk(self, kind):
        generic_signature = None
        types = []
        node = self.popNode()
        if node is None:
            return None
        if node.kind == Kind.DEPENDENT_GENERIC_SIGNATURE:
            generic_signature = node
        elif node.kind == Kind.TYPE:
            types.append(node)
        else:
            return None
        while True:
            node = self.popNode()
            if node is None:
                break
            if node.kind != Kind.TYPE:
                return None
            types.append(node)
        result = Node(kind)
        for ty in types:
            result.addChild(ty)
        self.addChild(result, generic_signature)
        return result

    def demangleBridgedMethodParams(self):
        if self.nextIf('_'):
            return ''
        kind = self.nextChar()
        if kind not in ('p', 'a', 'm'):
            return ''
        params = kind
        while not self.nextIf('_'):
            c = self.nextChar()
            if c not in ('n', 'b'):
                return ''
            params += c
        return params

    def demangleGenericSpecialization(self, kind):
        specialization = self.demangleSpecAttributes(kind)
        if specialization is None:
            return None
        type_list = self.popTypeList()
        if type_list is None:
            return None
        for ty in type_list.children:
            specialization.addChild(self.createWithChild(Kind.GENERIC_SPECIALIZATION_PARAM, ty))
        return specialization

    def demangleFunctionSpecialization(self):
        specialization = self.demangleSpecAttributes(Kind.FUNCTION_SIGNATURE_SPECIALIZATION)
        param_index = 0
        while specialization is not None and not self.nextIf('_'):
            specialization = self.addChild(specialization, self.demangleFuncSpecParam(param_index))
            param_index += 1
        if not self.nextIf('n'):
            # return value
            specialization = self.addChild(specialization, self.demangleFuncSpecParam(-1))
        if specialization is None:
            return None

        # Payloads were pushed in parameter order, so take them back to front.
        for param in reversed(specialization.children):
            if param.kind != Kind.FUNCTION_SIGNATURE_SPECIALIZATION_PARAM or param.getNumChildren() == 0:
                continue
            param_kind = param.getFirstChild().index
            if param_kind not in (FunctionSigSpecializationParamKind.CONSTANT_PROP_FUNCTION,
                                  FunctionSigSpecializationParamKind.CONSTANT_PROP_GLOBAL,
                                  FunctionSigSpecializationParamKind.CONSTANT_PROP_STRING,
                                  FunctionSigSpecializationParamKind.CLOSURE_PROP):
                continue
            fixed_children = param.getNumChildren()
            while True:
                ty = self.popNode(Kind.TYPE)
                if ty is None:
                    break
                if param_kind != FunctionSigSpecializationParamKind.CLOSURE_PROP:
                    return None
                param.addChild(ty)
            name = self.popNode(Kind.IDENTIFIER)
            if name is None:
                return None
            text = name.text
            if param_kind == FunctionSigSpecializationParamKind.CONSTANT_PROP_STRING and text.startswith('_'):
                # '_' escapes a leading digit or '_' of a string constant
                text = text[1:]
            param.addChild(Node(Kind.FUNCTION_SIGNATURE_SPECIALIZATION_PARAM_PAYLOAD, text=text))
            param.reverseChildren(fixed_children)
        return specialization

    def funcSpecParamKind(self, param, value):
        return param.addChild(Node(Kind.FUNCTION_SIGNATURE_SPECIALIZATION_PARAM_KIND, index=value))

    def demangleFuncSpecParam(self, param_index):
        param = Node(Kind.FUNCTION_SIGNATURE_SPECIALIZATION_PARAM, index=param_index)
        kinds = FunctionSigSpecializationParamKind
        c = self.nextChar()
        if c == 'n':
            return param
        elif c == 'c':
            # the closure's identifier and types are attached later
            return self.funcSpecParamKind(param, kinds.CLOSURE_PROP)
        elif c == 'p':
            c = self.nextChar()
            if c == 'f':
                return self.funcSpecParamKind(param, kinds.CONSTANT_PROP_FUNCTION)
            elif c == 'g':
                return self.funcSpecParamKind(param, kinds.CONSTANT_PROP_GLOBAL)
            elif c == 'i':
                return self.addFuncSpecParamNumber(param, kinds.CONSTANT_PROP_INTEGER)
            elif c == 'd':
                return self.addFuncSpecParamNumber(param, kinds.CONSTANT_PROP_FLOAT)
            elif c == 's':
                encodings = {'b': 'u8', 'w': 'u16', 'c': 'objc'}
                encoding = encodings.get(self.nextChar())
                if encoding is None:
                    return None
                self.funcSpecParamKind(param, kinds.CONSTANT_PROP_STRING)
                return param.addChild(Node(Kind.FUNCTION_SIGNATURE_SPECIALIZATION_PARAM_PAYLOAD, text=encoding))
            return None
        elif c == 'e':
            value = kinds.EXISTENTIAL_TO_GENERIC
            if self.nextIf('D'):
                value |= kinds.DEAD
            if self.nextIf('G'):
                value |= kinds.OWNED_TO_GUARANTEED
            if self.nextIf('O'):
                value |= kinds.GUARANTEED_TO_OWNED
            if self.nextIf('X'):
                value |= kinds.SROA
            return self.funcSpecParamKind(param, value)
        elif c == 'd':
            value = kinds.DEAD
            if self.nextIf('G'):
                value |= kinds.OWNED_TO_GUARANTEED
            if self.nextIf('O'):
                value |= kinds.GUARANTEED_TO_OWNED
            if self.nextIf('X'):
                value |= kinds.SROA
            return self.funcSpecParamKind(param, value)
        elif c == 'g':
            value = kinds.OWNED_TO_GUARANTEED
            if self.nextIf('X'):
                value |= kinds.SROA
            return self.funcSpecParamKind(param, value)
        elif c == 'o':
            value = kinds.GUARANTEED_TO_OWNED
            if self.nextIf('X'):
                value |= kinds.SROA
            return self.funcSpecParamKind(param, value)
        elif c == 'x':
            return self.funcSpecParamKind(param, kinds.SROA)
        elif c == 'i':
            return self.funcSpecParamKind(param, kinds.BOX_TO_VALUE)
        elif c == 's':
            return self.funcSpecParamKind(param, kinds.BOX_TO_STACK)
        return None

    def addFuncSpecParamNumber(self, param, kind):
        self.funcSpecParamKind(param, kind)
        digits = ''
        while self.peekChar() != '' and self.peekChar() in string.digits:
            digits += self.nextChar()
        if not digits:
            return None
        return param.addChild(Node(Kind.FUNCTION_SIGNATURE_SPECIALIZATION_PARAM_PAYLOAD, text=digits))

    def demangleSpecAttributes(self, kind):
        is_fragile = self.nextIf('q')
        c = self.nextChar()
        if c == '' or c not in string.digits:
            return None
        specialization = Node(kind)
        if is_fragile:
            specialization.addChild(Node(Kind.SPECIALIZATION_IS_FRAGILE))
        specialization.addChild(Node(Kind.SPECIALIZATION_PASS_ID, index=int(c)))
        return specialization

    def demangleWitness(self):
        c = self.nextChar()
        if c in CONFORMANCE_WITNESS_KINDS:
            return self.createWithChild(CONFORMANCE_WITNESS_KINDS[c], self.popProtocolConformance())
        elif c == 'C':
            return self.createWithChild(Kind.ENUM_CASE, self.popNode(isEntity))
        elif c == 'V':
            return self.createWithChild(Kind.VALUE_WITNESS_TABLE, self.popNode(Kind.TYPE))
        elif c == 'v':
            c = self.nextChar()
            if c == 'd':
                directness = Directness.DIRECT
            elif c == 'i':
                directness = Directness.INDIRECT
            else:
                return None
            return self.createWithChildren(Kind.FIELD_OFFSET, Node(Kind.DIRECTNESS, index=directness.value),
                                           self.popNode(isEntity))
        elif c == 'S':
            return self.createWithChild(Kind.PROTOCOL_SELF_CONFORMANCE_WITNESS_TABLE, self.popProtocol())
        elif c in ('l', 'L'):
            conformance = self.popProtocolConformance()
            ty = self.popNode(Kind.TYPE)
            kind = (Kind.LAZY_PROTOCOL_WITNESS_TABLE_ACCESSOR if c == 'l'
                    else Kind.LAZY_PROTOCOL_WITNESS_TABLE_CACHE_VARIABLE)
            return self.createWithChildren(kind, ty, conformance)
        elif c == 't':
            name = self.popNode(isDeclName)
            conformance = self.popProtocolConformance()
            return self.createWithChildren(Kind.ASSOCIATED_TYPE_METADATA_ACCESSOR, conformance, name)
        elif c == 'T':
            protocol = self.popNode(Kind.TYPE)
            path = self.popAssocTypePath()
            conformance = self.popProtocolConformance()
            return self.createWithChildren(Kind.ASSOCIATED_TYPE_WITNESS_TABLE_ACCESSOR, conformance, path, protocol)
        elif c == 'b':
            protocol = self.popNode(Kind.TYPE)
            conformance = self.popProtocolConformance()
            return self.createWithChildren(Kind.BASE_WITNESS_TABLE_ACCESSOR, conformance, protocol)
        elif c == 'O':
            kind = OUTLINED_KINDS.get(self.nextChar())
            if kind is None:
                return None
            generic_signature = self.popNode(Kind.DEPENDENT_GENERIC_SIGNATURE)
            if generic_signature is not None:
                return self.createWithChildren(kind, self.popNode(Kind.TYPE), generic_signature)
            return self.createWithChild(kind, self.popNode(Kind.TYPE))
        return None

    def demangleSpecialType(self):
        c = self.nextChar()
        if c in SPECIAL_FUNCTION_TYPES:
            return self.popFunctionType(SPECIAL_FUNCTION_TYPES[c])
        elif c in SPECIAL_WRAPPED_TYPES:
            return self.createType(self.createWithChild(SPECIAL_WRAPPED_TYPES[c], self.popNode(Kind.TYPE)))
        elif c in ('M', 'm'):
            representation = self.demangleMetatypeRepresentation()
            ty = self.popNode(Kind.TYPE)
            kind = Kind.METATYPE if c == 'M' else Kind.EXISTENTIAL_METATYPE
            return self.createType(self.createWithChildren(kind, representation, ty))
        elif c == 'p':
            return self.createType(self.createWithChild(Kind.EXISTENTIAL_METATYPE, self.popNode(Kind.TYPE)))
        elif c == 'c':
            superclass = self.popNode(Kind.TYPE)
            protocols = self.demangleProtocolList()
            return self.createType(self.createWithChildren(Kind.PROTOCOL_LIST_WITH_CLASS, protocols, superclass))
        elif c == 'l':
            protocols = self.demangleProtocolList()
            return self.createType(self.createWithChild(Kind.PROTOCOL_LIST_WITH_ANY_OBJECT, protocols))
        elif c in ('X', 'x'):
            return self.demangleSILBoxType(c == 'X')
        elif c == 'Y':
            return self.demangleAnyGenericType(Kind.OTHER_NOMINAL_TYPE)
        elif c == 'Z':
            types = self.popTypeList()
            name = self.popNode(Kind.IDENTIFIER)
            parent = self.popContext()
            anonymous = Node(Kind.ANONYMOUS_CONTEXT)
            anonymous = self.addChild(anonymous, name)
            anonymous = self.addChild(anonymous, parent)
            return self.addChild(anonymous, types)
        elif c == 'e':
            return self.createType(Node(Kind.ERROR_TYPE))
        return None

    def demangleSILBoxType(self, has_signature):
        signature = None
        generic_args = None
        if has_signature:
            signature = self.popNode(Kind.DEPENDENT_GENERIC_SIGNATURE)
            if signature is None:
                return None
            generic_args = self.popTypeList()
            if generic_args is None:
                return None

        field_types = self.popTypeList()
        if field_types is None:
            return None
        layout = Node(Kind.SIL_BOX_LAYOUT)
        for field_type in field_types.children:
            # an inout field is a mutable one
            if field_type.getFirstChild().kind == Kind.IN_OUT:
                field = Node(Kind.SIL_BOX_MUTABLE_FIELD)
                field_type = self.createType(field_type.getFirstChild().getFirstChild())
            else:
                field = Node(Kind.SIL_BOX_IMMUTABLE_FIELD)
            layout.addChild(field.addChild(field_type))
        box = Node(Kind.SIL_BOX_TYPE_WITH_LAYOUT).addChild(layout)
        if signature is not None:
            box.addChild(signature)
            box.addChild(generic_args)
        return self.createType(box)

    def demangleMetatypeRepresentation(self):
        c = self.nextChar()
        if c not in METATYPE_REPRESENTATIONS:
            return None
        return Node(Kind.METATYPE_REPRESENTATION, text=METATYPE_REPRESENTATIONS[c])

    def demangleAccessor(self, child):
        c = self.nextChar()
        if c in ACCESSOR_KINDS:
            kind = ACCESSOR_KINDS[c]
        elif c == 'a':
            kind = MUTABLE_ADDRESSOR_KINDS.get(self.nextChar())
        elif c == 'l':
            kind = ADDRESSOR_KINDS.get(self.nextChar())
        elif c == 'p':
            # the variable or subscript itself
            return child
        else:
            return None
        if kind is None:
            return None
        return self.createWithChild(kind, child)

    def demangleFunctionEntity(self):
        c = self.nextChar()
        if c in ('D', 'd', 'E', 'e', 'i'):
            kind = {
                'D': Kind.DEALLOCATOR,
                'd': Kind.DESTRUCTOR,
                'E': Kind.IVAR_DESTROYER,
                'e': Kind.IVAR_INITIALIZER,
                'i': Kind.INITIALIZER,
            }[c]
            return self.createWithChild(kind, self.popContext())
        elif c in ('C', 'c'):
            kind = Kind.ALLOCATOR if c == 'C' else Kind.CONSTRUCTOR
            private_name = self.popNode(Kind.PRIVATE_DECL_NAME)
            param_type = self.popNode(Kind.TYPE)
            label_list = self.popFunctionParamLabels(param_type)
            entity = self.createWithChild(kind, self.popContext())
            self.addChild(entity, label_list)
            entity = self.addChild(entity, param_type)
            self.addChild(entity, private_name)
            return entity
        elif c in ('U', 'u'):
            kind = Kind.EXPLICIT_CLOSURE if c == 'U' else Kind.IMPLICIT_CLOSURE
            index = self.demangleIndexAsNode()
            param_type = self.popNode(Kind.TYPE)
            entity = self.createWithChild(kind, self.popContext())
            entity = self.addChild(entity, index)
            return self.addChild(entity, param_type)
        elif c == 'A':
            index = self.demangleIndexAsNode()
            entity = self.createWithChild(Kind.DEFAULT_ARGUMENT_INITIALIZER, self.popContext())
            return self.addChild(entity, index)
        elif c == 'p':
            return self.demangleEntity(Kind.GENERIC_TYPE_PARAM_DECL)
        return None

    def demangleEntity(self, kind):
        ty = self.popNode(Kind.TYPE)
        label_list = self.popFunctionParamLabels(ty)
        name = self.popNode(isDeclName)
        context = self.popContext()
        if label_list is not None:
            return self.createWithChildren(kind, context, name, label_list, ty)
        return self.createWithChildren(kind, context, name, ty)

    def demangleSubscript(self):
        private_name = self.popNode(Kind.PRIVATE_DECL_NAME)
        ty = self.popNode(Kind.TYPE)
        label_list = self.popFunctionParamLabels(ty)
        context = self.popContext()

        subscript = self.addChild(Node(Kind.SUBSCRIPT), context)
        self.addChild(subscript, label_list)
        subscript = self.addChild(subscript, ty)
        self.addChild(subscript, private_name)
        if subscript is None:
            return None
        return self.demangleAccessor(subscript)

    def demangleProtocolList(self):
        type_list = Node(Kind.TYPE_LIST)
        protocol_list = Node(Kind.PROTOCOL_LIST).addChild(type_list)
        if self.popNode(Kind.EMPTY_LIST) is None:
            first_element = False
            while not first_element:
                first_element = self.popNode(Kind.FIRST_ELEMENT_MARKER) is not None
                protocol = self.popProtocol()
                if protocol is None:
                    return None
                type_list.addChild(protocol)
            type_list.reverseChildren()
        return protocol_list

    def demangleGenericSignature(self, has_param_counts):
        signature = Node(Kind.DEPENDENT_GENERIC_SIGNATURE)
        if has_param_counts:
            while not self.nextIf('l'):
                if self.mangled.isAtEnd():
                    return None
                count = 0
                if not self.nextIf('z'):
                    index = self.demangleIndex()
                    if index is None:
                        return None
                    count = index + 1
                signature.addChild(Node(Kind.DEPENDENT_GENERIC_PARAM_COUNT, index=count))
        else:
            signature.addChild(Node(Kind.DEPENDENT_GENERIC_PARAM_COUNT, index=1))
        num_counts = signature.getNumChildren()
        while True:
            requirement = self.popNode(isRequirement)
            if requirement is None:
                break
            signature.addChild(requirement)
        signature.reverseChildren(num_counts)
        return signature

    def demangleGenericRequirement(self):
        c = self.nextChar()
        if c in GENERIC_REQUIREMENTS:
            constraint, type_kind = GENERIC_REQUIREMENTS[c]
        else:
            constraint, type_kind = 'protocol', 'generic'
            if c != '':
                self.pushBack()

        if type_kind == 'generic':
            constrained_type = self.createType(self.demangleGenericParamIndex())
        elif type_kind == 'assoc':
            constrained_type = self.demangleAssociatedTypeSimple(self.demangleGenericParamIndex())
            self.addSubstitution(constrained_type)
        elif type_kind == 'compound_assoc':
            constrained_type = self.demangleAssociatedTypeCompound(self.demangleGenericParamIndex())
            self.addSubstitution(constrained_type)
        else:
            constrained_type = self.popNode(Kind.TYPE)

        if constraint == 'protocol':
            return self.createWithChildren(Kind.DEPENDENT_GENERIC_CONFORMANCE_REQUIREMENT, constrained_type,
                                           self.popProtocol())
        elif constraint == 'base_class':
            return self.createWithChildren(Kind.DEPENDENT_GENERIC_CONFORMANCE_REQUIREMENT, constrained_type,
                                           self.popNode(Kind.TYPE))
        elif constraint == 'same_type':
            return self.createWithChildren(Kind.DEPENDENT_GENERIC_SAME_TYPE_REQUIREMENT, constrained_type,
                                           self.popNode(Kind.TYPE))
        return self.demangleLayoutRequirement(constrained_type)

    def demangleLayoutRequirement(self, constrained_type):
        c = self.nextChar()
        size = None
        alignment = None
        if c in ('U', 'R', 'N', 'C', 'D', 'T'):
            pass
        elif c in ('E', 'M'):
            size = self.demangleIndexAsNode()
            if size is None:
                return None
            alignment = self.demangleIndexAsNode()
        elif c in ('e', 'm'):
            size = self.demangleIndexAsNode()
            if size is None:
                return None
        else:
            return None
        requirement = self.createWithChildren(Kind.DEPENDENT_GENERIC_LAYOUT_REQUIREMENT, constrained_type,
                                              Node(Kind.IDENTIFIER, text=c))
        self.addChild(requirement, size)
        self.addChild(requirement, alignment)
        return requirement

    def demangleGenericType(self):
        generic_signature = self.popNode(Kind.DEPENDENT_GENERIC_SIGNATURE)
        ty = self.popNode(Kind.TYPE)
        return self.createType(self.createWithChildren(Kind.DEPENDENT_GENERIC_TYPE, generic_signature, ty))

    def demangleValueWitness(self):
        code = self.nextChar() + self.nextChar()
        if code not in VALUE_WITNESS_CODES:
            return None
        witness = Node(Kind.VALUE_WITNESS, index=VALUE_WITNESS_CODES.index(code))
        return self.addChild(witness, self.popNode(Kind.TYPE))

    def demangleTypeMangling(self):
        ty = self.popNode(Kind.TYPE)
        label_list = self.popFunctionParamLabels(ty)
        type_mangling = Node(Kind.TYPE_MANGLING)
        self.addChild(type_mangling, label_list)
        return self.addChild(type_mangling, ty)

    def demangleObjCTypeName(self):
        ty = Node(Kind.TYPE)
        top_level = Node(Kind.GLOBAL).addChild(Node(Kind.TYPE_MANGLING).addChild(ty))
        is_protocol = False
        if self.nextIf('C'):
            nominal = Node(Kind.CLASS)
            ty.addChild(nominal)
        elif self.nextIf('P'):
            is_protocol = True
            nominal = Node(Kind.PROTOCOL)
            ty.addChild(Node(Kind.PROTOCOL_LIST).addChild(
                Node(Kind.TYPE_LIST).addChild(Node(Kind.TYPE).addChild(nominal))))
        else:
            return None

        if self.nextIf('s'):
            nominal.addChild(Node(Kind.MODULE, text=STDLIB_NAME))
        else:
            module = self.demangleIdentifier()
            if module is None:
                return None
            nominal.addChild(self.changeKind(module, Kind.MODULE))

        identifier = self.demangleIdentifier()
        if identifier is None:
            return None
        nominal.addChild(identifier)

        if is_protocol and not self.nextIf('_'):
            return None
        if not self.mangled.isAtEnd():
            return None
        return top_level
