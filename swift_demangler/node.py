import copy
from enum import Enum

Kind = Enum('Kind', '''
    ALLOCATOR ANONYMOUS_CONTEXT ANY_PROTOCOL_CONFORMANCE_LIST ARGUMENT_TUPLE
    ASSOCIATED_TYPE ASSOCIATED_TYPE_REF ASSOCIATED_TYPE_METADATA_ACCESSOR
    DEFAULT_ASSOCIATED_TYPE_METADATA_ACCESSOR ASSOCIATED_TYPE_WITNESS_TABLE_ACCESSOR
    BASE_WITNESS_TABLE_ACCESSOR AUTO_CLOSURE_TYPE BOUND_GENERIC_CLASS BOUND_GENERIC_ENUM
    BOUND_GENERIC_STRUCTURE BOUND_GENERIC_PROTOCOL BOUND_GENERIC_OTHER_NOMINAL_TYPE
    BOUND_GENERIC_TYPE_ALIAS BOUND_GENERIC_FUNCTION BUILTIN_TYPE_NAME C_FUNCTION_POINTER
    CLASS CLASS_METADATA_BASE_OFFSET CONCRETE_PROTOCOL_CONFORMANCE CONSTRUCTOR
    COROUTINE_CONTINUATION_PROTOTYPE DEALLOCATOR DECL_CONTEXT DEFAULT_ARGUMENT_INITIALIZER
    DEPENDENT_ASSOCIATED_CONFORMANCE DEPENDENT_ASSOCIATED_TYPE_REF
    DEPENDENT_GENERIC_CONFORMANCE_REQUIREMENT DEPENDENT_GENERIC_PARAM_COUNT
    DEPENDENT_GENERIC_PARAM_TYPE DEPENDENT_GENERIC_SAME_TYPE_REQUIREMENT
    DEPENDENT_GENERIC_LAYOUT_REQUIREMENT DEPENDENT_GENERIC_SIGNATURE DEPENDENT_GENERIC_TYPE
    DEPENDENT_MEMBER_TYPE DEPENDENT_PSEUDOGENERIC_SIGNATURE DEPENDENT_PROTOCOL_CONFORMANCE_ROOT
    DEPENDENT_PROTOCOL_CONFORMANCE_INHERITED DEPENDENT_PROTOCOL_CONFORMANCE_ASSOCIATED
    DESTRUCTOR DID_SET DIRECTNESS DYNAMIC_ATTRIBUTE DIRECT_METHOD_REFERENCE_ATTRIBUTE
    DYNAMIC_SELF DYNAMICALLY_REPLACEABLE_FUNCTION_IMPL DYNAMICALLY_REPLACEABLE_FUNCTION_KEY
    DYNAMICALLY_REPLACEABLE_FUNCTION_VAR ENUM ENUM_CASE ERROR_TYPE ESCAPING_AUTO_CLOSURE_TYPE
    NO_ESCAPE_FUNCTION_TYPE EXISTENTIAL_METATYPE EXPLICIT_CLOSURE EXTENSION FIELD_OFFSET
    FULL_TYPE_METADATA FUNCTION FUNCTION_SIGNATURE_SPECIALIZATION
    FUNCTION_SIGNATURE_SPECIALIZATION_PARAM FUNCTION_SIGNATURE_SPECIALIZATION_PARAM_KIND
    FUNCTION_SIGNATURE_SPECIALIZATION_PARAM_PAYLOAD FUNCTION_TYPE GENERIC_PARTIAL_SPECIALIZATION
    GENERIC_PARTIAL_SPECIALIZATION_NOT_RE_ABSTRACTED GENERIC_PROTOCOL_WITNESS_TABLE
    GENERIC_PROTOCOL_WITNESS_TABLE_INSTANTIATION_FUNCTION RESILIENT_PROTOCOL_WITNESS_TABLE
    GENERIC_SPECIALIZATION GENERIC_SPECIALIZATION_NOT_RE_ABSTRACTED GENERIC_SPECIALIZATION_PARAM
    INLINED_GENERIC_FUNCTION GENERIC_TYPE_METADATA_PATTERN GETTER GLOBAL GLOBAL_GETTER IDENTIFIER
    INDEX IVAR_INITIALIZER IVAR_DESTROYER IMPL_ESCAPING IMPL_CONVENTION IMPL_FUNCTION_ATTRIBUTE
    IMPL_FUNCTION_TYPE IMPLICIT_CLOSURE IMPL_PARAMETER IMPL_RESULT IMPL_ERROR_RESULT IN_OUT
    INFIX_OPERATOR INITIALIZER KEY_PATH_GETTER_THUNK_HELPER KEY_PATH_SETTER_THUNK_HELPER
    KEY_PATH_EQUALS_THUNK_HELPER KEY_PATH_HASH_THUNK_HELPER LAZY_PROTOCOL_WITNESS_TABLE_ACCESSOR
    LAZY_PROTOCOL_WITNESS_TABLE_CACHE_VARIABLE LOCAL_DECL_NAME MATERIALIZE_FOR_SET MERGED_FUNCTION
    METATYPE METATYPE_REPRESENTATION METACLASS METHOD_LOOKUP_FUNCTION
    OBJC_METADATA_UPDATE_FUNCTION MODIFY_ACCESSOR MODULE NATIVE_OWNING_ADDRESSOR
    NATIVE_OWNING_MUTABLE_ADDRESSOR NATIVE_PINNING_ADDRESSOR NATIVE_PINNING_MUTABLE_ADDRESSOR
    NOMINAL_TYPE_DESCRIPTOR NON_OBJC_ATTRIBUTE NUMBER OBJC_ATTRIBUTE OBJC_BLOCK
    OTHER_NOMINAL_TYPE OWNING_ADDRESSOR OWNING_MUTABLE_ADDRESSOR PARTIAL_APPLY_FORWARDER
    PARTIAL_APPLY_OBJC_FORWARDER POSTFIX_OPERATOR PREFIX_OPERATOR PRIVATE_DECL_NAME
    PROPERTY_DESCRIPTOR PROTOCOL PROTOCOL_SYMBOLIC_REFERENCE PROTOCOL_CONFORMANCE
    PROTOCOL_CONFORMANCE_REF_IN_TYPE_MODULE PROTOCOL_CONFORMANCE_REF_IN_PROTOCOL_MODULE
    PROTOCOL_CONFORMANCE_REF_IN_OTHER_MODULE PROTOCOL_DESCRIPTOR PROTOCOL_CONFORMANCE_DESCRIPTOR
    PROTOCOL_LIST PROTOCOL_LIST_WITH_CLASS PROTOCOL_LIST_WITH_ANY_OBJECT
    PROTOCOL_SELF_CONFORMANCE_DESCRIPTOR PROTOCOL_SELF_CONFORMANCE_WITNESS
    PROTOCOL_SELF_CONFORMANCE_WITNESS_TABLE PROTOCOL_WITNESS PROTOCOL_WITNESS_TABLE
    PROTOCOL_WITNESS_TABLE_ACCESSOR PROTOCOL_WITNESS_TABLE_PATTERN REABSTRACTION_THUNK
    REABSTRACTION_THUNK_HELPER READ_ACCESSOR RELATED_ENTITY_DECL_NAME RETROACTIVE_CONFORMANCE
    RETURN_TYPE SHARED OWNED SIL_BOX_TYPE SIL_BOX_TYPE_WITH_LAYOUT SIL_BOX_LAYOUT
    SIL_BOX_MUTABLE_FIELD SIL_BOX_IMMUTABLE_FIELD SETTER SPECIALIZATION_PASS_ID
    SPECIALIZATION_IS_FRAGILE STATIC STRUCTURE SUBSCRIPT SUFFIX THIN_FUNCTION_TYPE TUPLE
    TUPLE_ELEMENT TUPLE_ELEMENT_NAME TYPE TYPE_SYMBOLIC_REFERENCE TYPE_ALIAS TYPE_LIST
    TYPE_MANGLING TYPE_METADATA TYPE_METADATA_ACCESS_FUNCTION TYPE_METADATA_COMPLETION_FUNCTION
    TYPE_METADATA_INSTANTIATION_CACHE TYPE_METADATA_INSTANTIATION_FUNCTION
    TYPE_METADATA_SINGLETON_INITIALIZATION_CACHE TYPE_METADATA_LAZY_CACHE UNOWNED
    UNCURRIED_FUNCTION_TYPE WEAK UNMANAGED UNSAFE_ADDRESSOR UNSAFE_MUTABLE_ADDRESSOR
    VALUE_WITNESS VALUE_WITNESS_TABLE VARIABLE VTABLE_THUNK VTABLE_ATTRIBUTE WILL_SET
    REFLECTION_METADATA_BUILTIN_DESCRIPTOR REFLECTION_METADATA_FIELD_DESCRIPTOR
    REFLECTION_METADATA_ASSOC_TYPE_DESCRIPTOR REFLECTION_METADATA_SUPERCLASS_DESCRIPTOR
    GENERIC_TYPE_PARAM_DECL CURRY_THUNK DISPATCH_THUNK METHOD_DESCRIPTOR
    PROTOCOL_REQUIREMENTS_BASE_DESCRIPTOR ASSOCIATED_CONFORMANCE_DESCRIPTOR
    DEFAULT_ASSOCIATED_CONFORMANCE_ACCESSOR BASE_CONFORMANCE_DESCRIPTOR
    ASSOCIATED_TYPE_DESCRIPTOR THROWS_ANNOTATION EMPTY_LIST FIRST_ELEMENT_MARKER VARIADIC_MARKER
    OUTLINED_BRIDGED_METHOD OUTLINED_COPY OUTLINED_CONSUME OUTLINED_RETAIN OUTLINED_RELEASE
    OUTLINED_INITIALIZE_WITH_TAKE OUTLINED_INITIALIZE_WITH_COPY OUTLINED_ASSIGN_WITH_TAKE
    OUTLINED_ASSIGN_WITH_COPY OUTLINED_DESTROY OUTLINED_VARIABLE ASSOC_TYPE_PATH LABEL_LIST
    MODULE_DESCRIPTOR EXTENSION_DESCRIPTOR ANONYMOUS_DESCRIPTOR ASSOCIATED_TYPE_GENERIC_PARAM_REF
''')

PayloadKind = Enum('PayloadKind', 'NONE TEXT INDEX')

# Kinds that name a declaration scope.
CONTEXT_KINDS = frozenset([
    Kind.ALLOCATOR, Kind.ANONYMOUS_CONTEXT, Kind.CLASS, Kind.CONSTRUCTOR, Kind.DEALLOCATOR,
    Kind.DEFAULT_ARGUMENT_INITIALIZER, Kind.DESTRUCTOR, Kind.DID_SET, Kind.ENUM,
    Kind.EXPLICIT_CLOSURE, Kind.EXTENSION, Kind.FUNCTION, Kind.GETTER, Kind.GLOBAL_GETTER,
    Kind.IVAR_INITIALIZER, Kind.IVAR_DESTROYER, Kind.IMPLICIT_CLOSURE, Kind.INITIALIZER,
    Kind.MATERIALIZE_FOR_SET, Kind.MODIFY_ACCESSOR, Kind.MODULE, Kind.NATIVE_OWNING_ADDRESSOR,
    Kind.NATIVE_OWNING_MUTABLE_ADDRESSOR, Kind.NATIVE_PINNING_ADDRESSOR,
    Kind.NATIVE_PINNING_MUTABLE_ADDRESSOR, Kind.OTHER_NOMINAL_TYPE, Kind.OWNING_ADDRESSOR,
    Kind.OWNING_MUTABLE_ADDRESSOR, Kind.PROTOCOL, Kind.PROTOCOL_SYMBOLIC_REFERENCE,
    Kind.READ_ACCESSOR, Kind.SETTER, Kind.STATIC, Kind.STRUCTURE, Kind.SUBSCRIPT,
    Kind.TYPE_SYMBOLIC_REFERENCE, Kind.TYPE_ALIAS, Kind.UNSAFE_ADDRESSOR,
    Kind.UNSAFE_MUTABLE_ADDRESSOR, Kind.VARIABLE, Kind.WILL_SET,
])

DECL_NAME_KINDS = frozenset([
    Kind.IDENTIFIER, Kind.LOCAL_DECL_NAME, Kind.PRIVATE_DECL_NAME, Kind.RELATED_ENTITY_DECL_NAME,
    Kind.PREFIX_OPERATOR, Kind.POSTFIX_OPERATOR, Kind.INFIX_OPERATOR,
    Kind.TYPE_SYMBOLIC_REFERENCE, Kind.PROTOCOL_SYMBOLIC_REFERENCE,
])

ANY_GENERIC_KINDS = frozenset([
    Kind.STRUCTURE, Kind.CLASS, Kind.ENUM, Kind.PROTOCOL, Kind.PROTOCOL_SYMBOLIC_REFERENCE,
    Kind.OTHER_NOMINAL_TYPE, Kind.TYPE_ALIAS, Kind.TYPE_SYMBOLIC_REFERENCE,
])

NOMINAL_KINDS = frozenset([
    Kind.STRUCTURE, Kind.CLASS, Kind.ENUM, Kind.PROTOCOL, Kind.OTHER_NOMINAL_TYPE, Kind.TYPE_ALIAS,
])

REQUIREMENT_KINDS = frozenset([
    Kind.DEPENDENT_GENERIC_SAME_TYPE_REQUIREMENT, Kind.DEPENDENT_GENERIC_LAYOUT_REQUIREMENT,
    Kind.DEPENDENT_GENERIC_CONFORMANCE_REQUIREMENT,
])

FUNCTION_ATTRIBUTE_KINDS = frozenset([
    Kind.FUNCTION_SIGNATURE_SPECIALIZATION, Kind.GENERIC_SPECIALIZATION,
    Kind.INLINED_GENERIC_FUNCTION, Kind.GENERIC_SPECIALIZATION_NOT_RE_ABSTRACTED,
    Kind.GENERIC_PARTIAL_SPECIALIZATION, Kind.GENERIC_PARTIAL_SPECIALIZATION_NOT_RE_ABSTRACTED,
    Kind.OBJC_ATTRIBUTE, Kind.NON_OBJC_ATTRIBUTE, Kind.DYNAMIC_ATTRIBUTE,
    Kind.DIRECT_METHOD_REFERENCE_ATTRIBUTE, Kind.VTABLE_ATTRIBUTE, Kind.PARTIAL_APPLY_FORWARDER,
    Kind.PARTIAL_APPLY_OBJC_FORWARDER, Kind.OUTLINED_VARIABLE, Kind.OUTLINED_BRIDGED_METHOD,
    Kind.MERGED_FUNCTION, Kind.DYNAMICALLY_REPLACEABLE_FUNCTION_IMPL,
    Kind.DYNAMICALLY_REPLACEABLE_FUNCTION_KEY, Kind.DYNAMICALLY_REPLACEABLE_FUNCTION_VAR,
])

ATTRIBUTE_KINDS = frozenset([
    Kind.OBJC_ATTRIBUTE, Kind.DYNAMIC_ATTRIBUTE, Kind.NON_OBJC_ATTRIBUTE,
    Kind.IMPL_FUNCTION_ATTRIBUTE, Kind.DIRECT_METHOD_REFERENCE_ATTRIBUTE,
])


def isContext(kind):
    return kind in CONTEXT_KINDS

def isDeclName(kind):
    return kind in DECL_NAME_KINDS

def isAnyGeneric(kind):
    return kind in ANY_GENERIC_KINDS

def isNominal(kind):
    return kind in NOMINAL_KINDS

def isEntity(kind):
    return kind == Kind.TYPE or isContext(kind)

def isRequirement(kind):
    return kind in REQUIREMENT_KINDS

def isFunctionAttribute(kind):
    return kind in FUNCTION_ATTRIBUTE_KINDS


class Node():
    """One node of a demangled tree.

    A node carries at most one payload, either text or an integer index,
    fixed when it is created. Children are owned by the node; a node is
    never shared between two parents.

    depth counts the levels below the node. It grows as children are
    added and is not lowered when a child is removed.
    """

    def __init__(self, kind, text=None, index=None):
        if text is not None and index is not None:
            raise ValueError('{} node cannot carry both text and an index'.format(kind.name))
        self.kind = kind
        self.children = []
        self.depth = 0
        if text is not None:
            self.payload_kind = PayloadKind.TEXT
        elif index is not None:
            self.payload_kind = PayloadKind.INDEX
        else:
            self.payload_kind = PayloadKind.NONE
        self._text = text
        self._index = index

    @property
    def text(self):
        if self.payload_kind != PayloadKind.TEXT:
            raise TypeError('{} node has no text payload'.format(self.kind.name))
        return self._text

    @property
    def index(self):
        if self.payload_kind != PayloadKind.INDEX:
            raise TypeError('{} node has no index payload'.format(self.kind.name))
        return self._index

    def hasText(self):
        return self.payload_kind == PayloadKind.TEXT

    def hasIndex(self):
        return self.payload_kind == PayloadKind.INDEX

    def __repr__(self):
        return self.__str__()

    def __str__(self):
        if self.hasText():
            label = '{}("{}")'.format(self.kind.name, self._text)
        elif self.hasIndex():
            label = '{}({})'.format(self.kind.name, self._index)
        else:
            label = self.kind.name
        if len(self.children) == 0:
            return '{' + label + '}'
        return '{{{} children: {}}}'.format(label, self.children)

    def __eq__(self, other):
        if not isinstance(other, Node):
            return NotImplemented
        return (self.kind == other.kind and self.payload_kind == other.payload_kind
                and self._text == other._text and self._index == other._index
                and self.children == other.children)

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    __hash__ = None

    def getNumChildren(self):
        return len(self.children)

    def getChild(self, n):
        return self.children[n]

    def getFirstChild(self):
        return self.children[0]

    def addChild(self, child):
        self.children.append(child)
        if child.depth >= self.depth:
            self.depth = child.depth + 1
        return self

    def removeChildAt(self, n):
        return self.children.pop(n)

    def reverseChildren(self, starting_at=0):
        if starting_at < 0 or starting_at > len(self.children):
            raise IndexError('cannot reverse children of {} from {}'.format(self.kind.name, starting_at))
        self.children = self.children[:starting_at] + self.children[starting_at:][::-1]

    def isAttribute(self):
        return self.kind in ATTRIBUTE_KINDS

    def copy(self):
        """Deep copy, walked with an explicit stack so deep trees copy too."""
        result = copy.copy(self)
        result.children = []
        pending = [(self, result)]
        while pending:
            original, clone = pending.pop()
            for child in original.children:
                child_clone = copy.copy(child)
                child_clone.children = []
                clone.children.append(child_clone)
                pending.append((child, child_clone))
        return result
