import logging

from .match_rule import MatchRule, MatchContent, RuleRunner
from .node import Kind, NOMINAL_KINDS
from .reduction import (ReductionKind, TypeSpecReduction, FunctionReduction, ProtocolWitnessTableReduction,
                        ProtocolConformanceDescriptorReduction, ReductionError, Provenance)
from .typespec import (TypeSpecAttribute, TypeSpecKind, NamedTypeSpec, TupleTypeSpec,
                       ClosureTypeSpec)

log = logging.getLogger(__name__)

BOUND_GENERIC_KINDS = (
    Kind.BOUND_GENERIC_CLASS, Kind.BOUND_GENERIC_STRUCTURE, Kind.BOUND_GENERIC_ENUM,
    Kind.BOUND_GENERIC_OTHER_NOMINAL_TYPE, Kind.BOUND_GENERIC_TYPE_ALIAS,
)

FUNCTION_TYPE_KINDS = (
    Kind.FUNCTION_TYPE, Kind.NO_ESCAPE_FUNCTION_TYPE, Kind.AUTO_CLOSURE_TYPE,
    Kind.ESCAPING_AUTO_CLOSURE_TYPE, Kind.THIN_FUNCTION_TYPE, Kind.C_FUNCTION_POINTER,
    Kind.OBJC_BLOCK, Kind.UNCURRIED_FUNCTION_TYPE,
)

ATTRIBUTE_NAMES = {
    Kind.OBJC_ATTRIBUTE: 'objc',
    Kind.NON_OBJC_ATTRIBUTE: 'nonobjc',
    Kind.DYNAMIC_ATTRIBUTE: 'dynamic',
    Kind.DIRECT_METHOD_REFERENCE_ATTRIBUTE: 'direct',
}

ANY_NODE = MatchRule('Any', list(Kind), content=MatchContent.ALWAYS)


def isError(value):
    return isinstance(value, ReductionError)


class Reducer():
    """Turns a demangled node tree into one reduction record.

    Rules are tried in order; the first one that matches a node decides
    how it is converted. Anything without a rule becomes a ReductionError.
    Helpers return either their result or the ReductionError to report,
    and every caller hands an error straight back up.
    """

    def __init__(self, mangled_name):
        self.mangled_name = mangled_name
        self.runner = RuleRunner(self.buildRules(), mangled_name)

    def buildRules(self):
        return [
            MatchRule('Global', [Kind.GLOBAL], self.convertGlobal),
            MatchRule('TypeMangling', [Kind.TYPE_MANGLING], self.convertTypeMangling),
            MatchRule('PassThrough', [Kind.TYPE, Kind.ARGUMENT_TUPLE, Kind.RETURN_TYPE], self.convertFirstChild,
                      content=MatchContent.ALWAYS),
            MatchRule('DependentGenericType', [Kind.DEPENDENT_GENERIC_TYPE], self.convertDependentGenericType),
            MatchRule('ProtocolWitnessTable', [Kind.PROTOCOL_WITNESS_TABLE], self.convertProtocolWitnessTable,
                      child_rules=[MatchRule('ProtocolConformance', [Kind.PROTOCOL_CONFORMANCE])]),
            MatchRule('ProtocolConformanceDescriptor', [Kind.PROTOCOL_CONFORMANCE_DESCRIPTOR],
                      self.convertProtocolConformanceDescriptor,
                      child_rules=[MatchRule('ProtocolConformance', [Kind.PROTOCOL_CONFORMANCE],
                                             child_rules=[ANY_NODE, ANY_NODE,
                                                          MatchRule('Module', [Kind.MODULE],
                                                                    content=MatchContent.TEXT)])]),
            MatchRule('Nominal', NOMINAL_KINDS, self.convertNominal, match_child_count=True,
                      child_rules=[ANY_NODE, ANY_NODE]),
            MatchRule('BoundGeneric', BOUND_GENERIC_KINDS, self.convertBoundGeneric, match_child_count=True,
                      child_rules=[MatchRule('Type', [Kind.TYPE]), MatchRule('TypeList', [Kind.TYPE_LIST])]),
            MatchRule('Tuple', [Kind.TUPLE], self.convertTuple),
            MatchRule('TupleElement', [Kind.TUPLE_ELEMENT], self.convertTupleElement),
            MatchRule('FunctionType', FUNCTION_TYPE_KINDS, self.convertFunctionType),
            MatchRule('Function', [Kind.FUNCTION], self.convertFunction),
            MatchRule('Initializer', [Kind.ALLOCATOR, Kind.CONSTRUCTOR], self.convertInitializer),
            MatchRule('Static', [Kind.STATIC], self.convertStatic),
            MatchRule('InOut', [Kind.IN_OUT], self.convertInOut),
            MatchRule('GenericParam', [Kind.DEPENDENT_GENERIC_PARAM_TYPE], self.convertNamedText,
                      content=MatchContent.TEXT),
            MatchRule('Builtin', [Kind.BUILTIN_TYPE_NAME], self.convertNamedText, content=MatchContent.TEXT),
            MatchRule('EmptyList', [Kind.EMPTY_LIST], self.convertEmptyList),
            MatchRule('ProtocolList', [Kind.PROTOCOL_LIST], self.convertProtocolList,
                      child_rules=[MatchRule('TypeList', [Kind.TYPE_LIST])]),
        ]

    def convert(self, node):
        reduction = self.runner.runRules(node)
        if reduction.isError():
            log.debug('%s', reduction.message)
        return reduction

    def error(self, message):
        return ReductionError(self.mangled_name, message)

    def errorExpected(self, expected, got):
        return self.error('Demangling {}: expected {} but got {}'.format(self.mangled_name, expected, got))

    def reduce(self, node, name=None):
        return self.runner.runRules(node, name)

    def reduceType(self, node, name=None):
        reduction = self.reduce(node, name)
        if reduction.isError():
            return reduction
        if reduction.kind != ReductionKind.TYPE_SPEC:
            return self.errorExpected('a type', reduction.kind.name)
        return reduction.type_spec

    def reduceNamedType(self, node):
        type_spec = self.reduceType(node)
        if isError(type_spec):
            return type_spec
        if type_spec.kind != TypeSpecKind.NAMED:
            return self.errorExpected('a named type', type_spec)
        return type_spec

    def reduceTypes(self, nodes):
        type_specs = []
        for node in nodes:
            type_spec = self.reduceType(node)
            if isError(type_spec):
                return type_spec
            type_specs.append(type_spec)
        return type_specs

    def typeReduction(self, type_spec):
        if isError(type_spec):
            return type_spec
        return TypeSpecReduction(self.mangled_name, type_spec)

    def convertGlobal(self, node, name):
        attributes = []
        reduction = None
        for child in node.children:
            if child.isAttribute():
                attributes.append(self.attributeOf(child))
                continue
            reduction = self.reduce(child)
            break
        if reduction is None:
            return self.errorExpected('a symbol', 'only attributes')
        if reduction.isError() or not attributes:
            return reduction

        if reduction.kind == ReductionKind.TYPE_SPEC:
            type_spec = reduction.type_spec.clone()
            type_spec.attributes.extend(attributes)
            return self.typeReduction(type_spec)
        if reduction.kind == ReductionKind.FUNCTION:
            reduction.attributes.extend(attributes)
        return reduction

    def attributeOf(self, node):
        if node.kind == Kind.IMPL_FUNCTION_ATTRIBUTE:
            # e.g. "@convention(c)"
            text = node.text.lstrip('@')
            if '(' in text:
                name, _, parameters = text.partition('(')
                return TypeSpecAttribute(name, [parameters.rstrip(')')])
            return TypeSpecAttribute(text)
        return TypeSpecAttribute(ATTRIBUTE_NAMES[node.kind])

    def convertTypeMangling(self, node, name):
        return self.reduce(node.getChild(node.getNumChildren() - 1))

    def convertFirstChild(self, node, name):
        if node.getNumChildren() == 0:
            return self.errorExpected('a child of {}'.format(node.kind.name), 'nothing')
        return self.reduce(node.getFirstChild(), name)

    def convertDependentGenericType(self, node, name):
        if node.getNumChildren() < 2:
            return self.errorExpected('a generic signature and a type', node.getNumChildren())
        return self.reduce(node.getChild(1), name)

    def conformanceTypes(self, conformance):
        """Returns (implementing type, protocol), or the error to report."""
        implementing_type = self.reduceNamedType(conformance.getFirstChild())
        if isError(implementing_type):
            return implementing_type
        protocol_type = self.reduceNamedType(conformance.getChild(1))
        if isError(protocol_type):
            return protocol_type
        return implementing_type, protocol_type

    def convertProtocolWitnessTable(self, node, name):
        types = self.conformanceTypes(node.getFirstChild())
        if isError(types):
            return types
        return ProtocolWitnessTableReduction(self.mangled_name, types[0], types[1])

    def convertProtocolConformanceDescriptor(self, node, name):
        conformance = node.getFirstChild()
        types = self.conformanceTypes(conformance)
        if isError(types):
            return types
        return ProtocolConformanceDescriptorReduction(self.mangled_name, types[0], types[1],
                                                      conformance.getChild(2).text)

    def qualifiedName(self, node):
        """Dotted name of a nominal, from its module down."""
        context = self.contextName(node.getFirstChild())
        if isError(context):
            return context
        decl_name = self.declName(node.getChild(1))
        if isError(decl_name):
            return decl_name
        return '{}.{}'.format(context, decl_name)

    def contextName(self, context):
        if context.kind == Kind.MODULE:
            return context.text
        if context.kind in NOMINAL_KINDS and context.getNumChildren() == 2:
            return self.qualifiedName(context)
        if context.kind == Kind.EXTENSION and context.getNumChildren() >= 2:
            return self.contextName(context.getChild(1))
        if context.kind in BOUND_GENERIC_KINDS:
            # Outer<Int>.Inner keeps the arguments bound on the parent
            parent = self.reduceNamedType(context)
            if isError(parent):
                return parent
            return str(parent)
        return self.errorExpected('a module or type context', context.kind.name)

    def declName(self, node):
        if node.kind in (Kind.IDENTIFIER, Kind.PREFIX_OPERATOR, Kind.INFIX_OPERATOR, Kind.POSTFIX_OPERATOR):
            return node.text
        if node.kind == Kind.PRIVATE_DECL_NAME and node.getNumChildren() > 0:
            return self.declName(node.getChild(node.getNumChildren() - 1))
        if node.kind == Kind.LOCAL_DECL_NAME and node.getNumChildren() == 2:
            return self.declName(node.getChild(1))
        if node.kind == Kind.RELATED_ENTITY_DECL_NAME and node.getNumChildren() > 0:
            return self.declName(node.getFirstChild())
        return self.errorExpected('a declaration name', node.kind.name)

    def provenanceOf(self, context):
        if context.kind == Kind.MODULE:
            return Provenance(module=context.text)
        if context.kind == Kind.EXTENSION and context.getNumChildren() >= 2:
            owner = self.contextName(context.getChild(1))
        elif context.kind in NOMINAL_KINDS or context.kind in BOUND_GENERIC_KINDS:
            owner = self.contextName(context)
        else:
            return self.errorExpected('a module or type context', context.kind.name)
        if isError(owner):
            return owner
        return Provenance(owner=NamedTypeSpec(owner))

    def convertNominal(self, node, name):
        qualified_name = self.qualifiedName(node)
        if isError(qualified_name):
            return qualified_name
        return self.typeReduction(NamedTypeSpec(qualified_name))

    def convertBoundGeneric(self, node, name):
        base = self.reduceNamedType(node.getFirstChild())
        if isError(base):
            return base
        generic_parameters = self.reduceTypes(node.getChild(1).children)
        if isError(generic_parameters):
            return generic_parameters
        return self.typeReduction(NamedTypeSpec(base.name, *generic_parameters))

    def convertTuple(self, node, name):
        if node.getNumChildren() == 0:
            return self.typeReduction(TupleTypeSpec.EMPTY)
        elements = self.reduceTypes(node.children)
        if isError(elements):
            return elements
        return self.typeReduction(TupleTypeSpec(elements))

    def convertTupleElement(self, node, name):
        if node.getNumChildren() == 0:
            return self.errorExpected('a tuple element type', 'nothing')
        is_variadic = node.getFirstChild().kind == Kind.VARIADIC_MARKER
        label = None
        for child in node.children:
            if child.kind == Kind.TUPLE_ELEMENT_NAME:
                label = child.text
        type_spec = self.reduceType(node.getChild(node.getNumChildren() - 1))
        if isError(type_spec):
            return type_spec
        if is_variadic:
            type_spec = NamedTypeSpec('Swift.Array', type_spec)
            type_spec.is_variadic = True
        if label is not None:
            type_spec = type_spec.renamedCloneOf(label)
        return self.typeReduction(type_spec)

    def convertFunctionType(self, node, name):
        throws = False
        arguments = None
        return_type = None
        for child in node.children:
            if child.kind == Kind.THROWS_ANNOTATION:
                throws = True
            elif child.kind == Kind.ARGUMENT_TUPLE:
                arguments = self.reduceType(child)
                if isError(arguments):
                    return arguments
            elif child.kind == Kind.RETURN_TYPE:
                return_type = self.reduceType(child)
                if isError(return_type):
                    return return_type
        if arguments is None or return_type is None:
            return self.errorExpected('arguments and a return type', node.kind.name)
        return self.typeReduction(ClosureTypeSpec(arguments, return_type, throws))

    def closureOf(self, type_node):
        type_spec = self.reduceType(type_node)
        if isError(type_spec):
            return type_spec
        if type_spec.kind != TypeSpecKind.CLOSURE:
            return self.errorExpected('a closure', type_spec)
        return type_spec

    def labelledParameters(self, closure, label_list):
        parameters = list(closure.argumentsAsTuple.elements)
        if label_list is not None:
            for i, label in enumerate(label_list.children):
                if i >= len(parameters):
                    break
                # '_' and the first element marker both mean no label
                if label.kind == Kind.IDENTIFIER and label.text != '_':
                    parameters[i] = parameters[i].renamedCloneOf(label.text)
        if not parameters:
            return TupleTypeSpec.EMPTY
        return TupleTypeSpec(parameters)

    def functionReduction(self, name, context, label_list, type_node):
        provenance = self.provenanceOf(context)
        if isError(provenance):
            return provenance
        closure = self.closureOf(type_node)
        if isError(closure):
            return closure
        return FunctionReduction(self.mangled_name, name, provenance, self.labelledParameters(closure, label_list),
                                 closure.return_type, closure.throws)

    def childOfKind(self, node, kind):
        for child in node.children:
            if child.kind == kind:
                return child
        return None

    def convertFunction(self, node, name):
        if node.getNumChildren() < 3:
            return self.errorExpected('a context, name and type', node.getNumChildren())
        function_name = self.declName(node.getChild(1))
        if isError(function_name):
            return function_name
        return self.functionReduction(function_name, node.getFirstChild(), self.childOfKind(node, Kind.LABEL_LIST),
                                      node.getChild(node.getNumChildren() - 1))

    def convertInitializer(self, node, name):
        type_node = self.childOfKind(node, Kind.TYPE)
        if node.getNumChildren() < 2 or type_node is None:
            return self.errorExpected('a context and type', node.getNumChildren())
        return self.functionReduction('init', node.getFirstChild(), self.childOfKind(node, Kind.LABEL_LIST),
                                      type_node)

    def convertStatic(self, node, name):
        reduction = self.reduce(node.getFirstChild())
        if reduction.isError():
            return reduction
        if reduction.kind != ReductionKind.FUNCTION:
            return self.errorExpected('a function', reduction.kind.name)
        reduction.is_static = True
        return reduction

    def convertInOut(self, node, name):
        type_spec = self.reduceType(node.getFirstChild())
        if isError(type_spec):
            return type_spec
        type_spec = type_spec.clone()
        type_spec.is_inout = True
        return self.typeReduction(type_spec)

    def convertNamedText(self, node, name):
        return self.typeReduction(NamedTypeSpec(node.text))

    def convertEmptyList(self, node, name):
        return self.typeReduction(TupleTypeSpec.EMPTY)

    def convertProtocolList(self, node, name):
        protocols = node.getFirstChild().children
        if len(protocols) == 0:
            return self.typeReduction(NamedTypeSpec('Any'))
        if len(protocols) != 1:
            return self.errorExpected('a single protocol', '{} protocols'.format(len(protocols)))
        return self.typeReduction(self.reduceNamedType(protocols[0]))
