from swift_demangler import Node, Kind, Reducer
from swift_demangler.reduction import (ReductionError, TypeSpecReduction, FunctionReduction,
                                       ProtocolWitnessTableReduction)
from swift_demangler.typespec import TupleTypeSpec

from conftest import swiftType


def identifier(text):
    return Node(Kind.IDENTIFIER, text=text)


def module(text):
    return Node(Kind.MODULE, text=text)


def functionType(arguments, return_type):
    return Node(Kind.TYPE).addChild(Node(Kind.FUNCTION_TYPE)
                                    .addChild(Node(Kind.ARGUMENT_TUPLE, index=1).addChild(arguments))
                                    .addChild(Node(Kind.RETURN_TYPE).addChild(return_type)))


def reduce(node):
    return Reducer('sym').convert(node)


class TestTypeRules:
    def test_nominal(self):
        result = reduce(swiftType('foo', 'Bar'))
        assert isinstance(result, TypeSpecReduction)
        assert str(result.type_spec) == 'foo.Bar'

    def test_nominal_in_extension(self):
        extension = Node(Kind.EXTENSION).addChild(module('other')).addChild(
            swiftType('main', 'Foo').getFirstChild())
        nested = Node(Kind.CLASS).addChild(extension).addChild(identifier('Inner'))
        assert str(reduce(nested).type_spec) == 'main.Foo.Inner'

    def test_private_decl_name(self):
        name = Node(Kind.PRIVATE_DECL_NAME).addChild(identifier('_ABC')).addChild(identifier('Hidden'))
        nominal = Node(Kind.STRUCTURE).addChild(module('main')).addChild(name)
        assert str(reduce(nominal).type_spec) == 'main.Hidden'

    def test_empty_list(self):
        assert reduce(Node(Kind.EMPTY_LIST)).type_spec is TupleTypeSpec.EMPTY

    def test_in_out(self):
        result = reduce(Node(Kind.IN_OUT).addChild(swiftType('Swift', 'Int')))
        assert str(result.type_spec) == 'inout Swift.Int'

    def test_dependent_generic_param(self):
        param = Node(Kind.DEPENDENT_GENERIC_PARAM_TYPE, text='A')
        assert str(reduce(param).type_spec) == 'A'

    def test_protocol_list(self):
        empty = Node(Kind.PROTOCOL_LIST).addChild(Node(Kind.TYPE_LIST))
        assert str(reduce(empty).type_spec) == 'Swift.Any'
        single = Node(Kind.PROTOCOL_LIST).addChild(
            Node(Kind.TYPE_LIST).addChild(swiftType('main', 'P', Kind.PROTOCOL)))
        assert str(reduce(single).type_spec) == 'main.P'

    def test_nominal_in_bound_generic_parent(self):
        parent = Node(Kind.BOUND_GENERIC_STRUCTURE).addChild(swiftType('main', 'Outer')).addChild(
            Node(Kind.TYPE_LIST).addChild(swiftType('Swift', 'Int')))
        nominal = Node(Kind.STRUCTURE).addChild(parent).addChild(identifier('Inner'))
        assert str(reduce(nominal).type_spec) == 'main.Outer<Swift.Int>.Inner'

    def test_function_type(self):
        closure = reduce(functionType(swiftType('Swift', 'Int'), swiftType('Swift', 'Bool')))
        assert str(closure.type_spec) == 'Swift.Int -> Swift.Bool'


class TestErrors:
    """Errors name the symbol and propagate from children unchanged."""

    def test_no_rule(self):
        result = reduce(Node(Kind.TYPE_METADATA_ACCESS_FUNCTION).addChild(swiftType('main', 'Foo')))
        assert isinstance(result, ReductionError)
        assert result.message == 'No rule for node TYPE_METADATA_ACCESS_FUNCTION'

    def test_child_error_propagates(self):
        bad = Node(Kind.TUPLE).addChild(Node(Kind.TUPLE_ELEMENT).addChild(
            Node(Kind.TYPE).addChild(Node(Kind.VALUE_WITNESS_TABLE))))
        assert reduce(bad).message == 'No rule for node VALUE_WITNESS_TABLE'

    def test_wrong_shape(self):
        witness_table = Node(Kind.PROTOCOL_WITNESS_TABLE).addChild(
            Node(Kind.PROTOCOL_CONFORMANCE)
            .addChild(Node(Kind.TYPE).addChild(Node(Kind.TUPLE)))
            .addChild(swiftType('main', 'P', Kind.PROTOCOL))
            .addChild(module('main')))
        result = reduce(witness_table)
        assert result.isError()
        assert result.message == 'Demangling sym: expected a named type but got ()'

    def test_witness_table_needs_conformance(self):
        result = reduce(Node(Kind.PROTOCOL_WITNESS_TABLE).addChild(module('main')))
        assert result.message == 'No rule for node PROTOCOL_WITNESS_TABLE'

    def test_deep_tree_is_an_error(self):
        tree = swiftType('Swift', 'Int')
        for _ in range(300):
            tree = Node(Kind.TYPE).addChild(tree)
        result = reduce(tree)
        assert result.isError()
        assert result.message == 'Demangling sym: tree deeper than 128 levels'

    def test_error_inside_nested_generic_parent(self):
        parent = Node(Kind.BOUND_GENERIC_STRUCTURE).addChild(swiftType('main', 'Outer')).addChild(
            Node(Kind.TYPE_LIST).addChild(Node(Kind.TYPE).addChild(Node(Kind.VALUE_WITNESS_TABLE))))
        nominal = Node(Kind.STRUCTURE).addChild(parent).addChild(identifier('Inner'))
        assert reduce(nominal).message == 'No rule for node VALUE_WITNESS_TABLE'


class TestSymbolRules:
    def test_witness_table(self):
        witness_table = Node(Kind.PROTOCOL_WITNESS_TABLE).addChild(
            Node(Kind.PROTOCOL_CONFORMANCE)
            .addChild(swiftType('main', 'Foo', Kind.CLASS))
            .addChild(swiftType('main', 'P', Kind.PROTOCOL))
            .addChild(module('main')))
        result = reduce(witness_table)
        assert isinstance(result, ProtocolWitnessTableReduction)
        assert result.implementing_type.name == 'main.Foo'
        assert result.protocol_type.name == 'main.P'

    def test_function_labels_backfilled(self):
        labels = Node(Kind.LABEL_LIST).addChild(identifier('x'))
        function = (Node(Kind.FUNCTION).addChild(module('main')).addChild(identifier('foo')).addChild(labels)
                    .addChild(functionType(swiftType('Swift', 'Int'), Node(Kind.TYPE).addChild(Node(Kind.TUPLE)))))
        result = reduce(function)
        assert isinstance(result, FunctionReduction)
        assert result.name == 'foo'
        assert str(result.provenance) == 'main'
        assert [str(p) for p in result.parameters] == ['x: Swift.Int']
        assert result.return_type.isEmptyTuple

    def test_underscore_label_means_unlabelled(self):
        labels = Node(Kind.LABEL_LIST).addChild(identifier('_'))
        function = (Node(Kind.FUNCTION).addChild(module('main')).addChild(identifier('foo')).addChild(labels)
                    .addChild(functionType(swiftType('Swift', 'Int'), Node(Kind.TYPE).addChild(Node(Kind.TUPLE)))))
        assert [str(p) for p in reduce(function).parameters] == ['Swift.Int']

    def test_global_attributes(self):
        function = (Node(Kind.FUNCTION).addChild(module('main')).addChild(identifier('foo'))
                    .addChild(functionType(swiftType('Swift', 'Int'), swiftType('Swift', 'Int'))))
        tree = Node(Kind.GLOBAL).addChild(Node(Kind.OBJC_ATTRIBUTE)).addChild(function)
        result = reduce(tree)
        assert [str(a) for a in result.attributes] == ['@objc']

    def test_global_attributes_on_type(self):
        tree = Node(Kind.GLOBAL).addChild(Node(Kind.DYNAMIC_ATTRIBUTE)).addChild(swiftType('Swift', 'Int'))
        assert str(reduce(tree).type_spec) == '@dynamic Swift.Int'

    def test_static_requires_function(self):
        result = reduce(Node(Kind.STATIC).addChild(swiftType('main', 'Foo')))
        assert result.message == 'Demangling sym: expected a function but got TYPE_SPEC'
