from swift_demangler import Node, Kind
from swift_demangler.demangler import (Demangler, Directness, SymbolicReferenceKind, demangleSymbolAsNode,
                                       demangleTypeAsNode, isSwiftSymbol, isMangledName, isObjCSymbol,
                                       isClass, isStruct, isEnum, isProtocol, isAlias,
                                       getManglingPrefixLength, VALUE_WITNESS_CODES, MAX_NODE_DEPTH)

from conftest import swiftType


def demanglerAt(text):
    """A demangler positioned at the start of text, with no prefix."""
    d = Demangler(text)
    d.reset()
    return d


class TestPrefixes:
    def test_prefix_lengths(self):
        assert getManglingPrefixLength('_T0foo') == 3
        assert getManglingPrefixLength('$sSi') == 2
        assert getManglingPrefixLength('_$sSi') == 3
        assert getManglingPrefixLength('$SSi') == 2
        assert getManglingPrefixLength('_$SSi') == 3
        assert getManglingPrefixLength('foo') == 0
        assert getManglingPrefixLength('') == 0

    def test_swift_symbols(self):
        assert isMangledName('$s3foo3BarV')
        assert isSwiftSymbol('_TtC4main3Foo')
        assert not isSwiftSymbol('_objc_msgSend')

    def test_objc_symbols(self):
        assert isObjCSymbol('$sSo8NSObjectC')
        assert not isObjCSymbol('$s3foo3BarV')


class TestPrimitives:
    """Natural numbers, indices and end-of-input handling."""

    def test_natural(self):
        d = demanglerAt('123x')
        assert d.demangleNatural() == 123
        assert d.peekChar() == 'x'

    def test_natural_requires_digit(self):
        assert demanglerAt('x').demangleNatural() is None
        assert demanglerAt('').demangleNatural() is None

    def test_index(self):
        assert demanglerAt('_').demangleIndex() == 0
        assert demanglerAt('0_').demangleIndex() == 1
        assert demanglerAt('41_').demangleIndex() == 42
        assert demanglerAt('4').demangleIndex() is None
        assert demanglerAt('x').demangleIndex() is None

    def test_end_of_input(self):
        d = demanglerAt('a')
        assert d.nextChar() == 'a'
        assert d.nextChar() == ''
        assert d.peekChar() == ''
        assert d.mangled.position == 1


class TestIdentifiers:
    def test_plain_identifier(self):
        d = demanglerAt('3foo')
        node = d.demangleIdentifier()
        assert node.kind == Kind.IDENTIFIER
        assert node.text == 'foo'
        assert d.substitutions == [node]

    def test_identifier_too_long(self):
        assert demanglerAt('9foo').demangleIdentifier() is None

    def test_word_collection(self):
        d = demanglerAt('20GenericTestFramework')
        d.demangleIdentifier()
        assert d.words == ['Generic', 'Test', 'Framework']

    def test_single_letter_words_skipped(self):
        d = demanglerAt('6aBcDef')
        d.demangleIdentifier()
        assert d.words == ['Bc', 'Def']

    def test_word_substitution(self):
        tree = demangleSymbolAsNode('$s3foo8BarThingV0cB4TestV')
        outer = tree.getFirstChild()
        assert outer.kind == Kind.STRUCTURE
        assert outer.getChild(1).text == 'ThingBarTest'
        assert outer.getFirstChild().getChild(1).text == 'BarThing'

    def test_word_index_out_of_range(self):
        assert demangleSymbolAsNode('$s3foo0z3BarV') is None

    def test_punycode_identifier(self):
        tree = demangleSymbolAsNode('$s4main007caf_dmaV')
        assert tree.getFirstChild().getChild(1).text == 'café'

    def test_operator_identifiers(self):
        assert demangleTypeAsNode('$s2ppoP') == Node(Kind.POSTFIX_OPERATOR, text='++')
        assert demangleTypeAsNode('$s2aaoi') == Node(Kind.INFIX_OPERATOR, text='&&')
        assert demangleTypeAsNode('$s2bboi').kind == Kind.SUFFIX


class TestSubstitutions:
    def test_standard_substitution(self):
        assert demangleTypeAsNode('$sSi') == swiftType('Swift', 'Int')
        assert demangleTypeAsNode('$sSq') == swiftType('Swift', 'Optional', Kind.ENUM)
        assert demangleTypeAsNode('$sSH') == swiftType('Swift', 'Hashable', Kind.PROTOCOL)

    def test_unknown_standard_substitution(self):
        assert demangleSymbolAsNode('$sS!') is None

    def test_standard_module_substitutions(self):
        assert demangleTypeAsNode('$sSo') == Node(Kind.MODULE, text='__C')
        assert demangleTypeAsNode('$sSC') == Node(Kind.MODULE, text='__C_Synthesized')

    def test_standard_repeat_count(self):
        d = Demangler('$sSi_S2itD')
        tree = d.demangleSymbol()
        tuple_node = tree.getFirstChild().getFirstChild().getFirstChild()
        assert tuple_node.kind == Kind.TUPLE
        assert tuple_node.getNumChildren() == 3

    def test_back_reference(self):
        d = Demangler('$s3foo3BarV_ACtD')
        tree = d.demangleSymbol()
        tuple_node = tree.getFirstChild().getFirstChild().getFirstChild()
        assert [e.getFirstChild() for e in tuple_node.children] == [swiftType('foo', 'Bar')] * 2
        assert len(d.substitutions) == 3

    def test_back_reference_is_a_copy(self):
        d = Demangler('$s3foo3BarV_ACtD')
        tree = d.demangleSymbol()
        tuple_node = tree.getFirstChild().getFirstChild().getFirstChild()
        first = tuple_node.getChild(0).getFirstChild()
        second = tuple_node.getChild(1).getFirstChild()
        assert first is not second
        assert second is not d.substitutions[2]

    def test_lowercase_back_references_repeat(self):
        tree = demangleSymbolAsNode('$s3foo3BarV_AcCtD')
        tuple_node = tree.getFirstChild().getFirstChild().getFirstChild()
        assert tuple_node.getNumChildren() == 3

    def test_back_reference_out_of_range(self):
        assert demangleSymbolAsNode('$s3foo3BarVAD') is None

    def test_long_back_reference_out_of_range(self):
        assert demangleSymbolAsNode('$s3foo3BarVAc_tD') is None

    def test_repeat_count_bound(self):
        assert demangleSymbolAsNode('$s3foo3BarVA2049C') is None
        assert demangleSymbolAsNode('$sS2049i') is None


class TestTuples:
    def test_empty_tuple(self):
        tree = demangleSymbolAsNode('$sytD')
        assert tree.getFirstChild().getFirstChild() == Node(Kind.TYPE).addChild(Node(Kind.TUPLE))

    def test_labelled_elements_in_order(self):
        tree = demangleSymbolAsNode('$sSi1a_Sb1btD')
        tuple_node = tree.getFirstChild().getFirstChild().getFirstChild()
        names = [e.getFirstChild().text for e in tuple_node.children]
        assert names == ['a', 'b']

    def test_variadic_element(self):
        tree = demangleSymbolAsNode('$sSid_tD')
        element = tree.getFirstChild().getFirstChild().getFirstChild().getFirstChild()
        assert element.getFirstChild().kind == Kind.VARIADIC_MARKER

    def test_tuple_consumes_exactly_its_elements(self):
        d = Demangler('$s3foo3BarVSi_SbtD')
        tree = d.demangleSymbol()
        assert [c.kind for c in tree.children] == [Kind.STRUCTURE, Kind.TYPE_MANGLING]

    def test_tuple_without_first_marker(self):
        assert demangleSymbolAsNode('$sSiSbtD') is None


class TestNominalTypes:
    def test_nested_class(self):
        tree = demangleSymbolAsNode('$s4main3FooC3BarC')
        inner = tree.getFirstChild()
        assert inner.kind == Kind.CLASS
        assert inner.getFirstChild().kind == Kind.CLASS
        assert inner.getFirstChild().getFirstChild() == Node(Kind.MODULE, text='main')

    def test_bound_generic(self):
        tree = demangleSymbolAsNode('$sSaySiGD')
        bound = tree.getFirstChild().getFirstChild().getFirstChild()
        assert bound.kind == Kind.BOUND_GENERIC_STRUCTURE
        assert bound.getFirstChild() == swiftType('Swift', 'Array')
        assert bound.getChild(1).children == [swiftType('Swift', 'Int')]

    def test_optional_shorthand(self):
        tree = demangleSymbolAsNode('$sSiSgD')
        bound = tree.getFirstChild().getFirstChild().getFirstChild()
        assert bound.kind == Kind.BOUND_GENERIC_ENUM

    def test_extension(self):
        tree = demangleSymbolAsNode('$s4main3FooV5otherE3baryyF')
        function = tree.getFirstChild()
        extension = function.getFirstChild()
        assert extension.kind == Kind.EXTENSION
        assert extension.getFirstChild() == Node(Kind.MODULE, text='other')

    def test_type_kind_helpers(self):
        assert isStruct('$sSi')
        assert isEnum('$sSq')
        assert isProtocol('$sSH')
        assert isClass('$s4main3FooC')
        assert isAlias('$s4main3Fooa')
        assert not isClass('$sSi')


class TestBuiltinsAndGenerics:
    def test_builtin_int(self):
        assert demangleTypeAsNode('$sBi64_') == Node(Kind.TYPE).addChild(
            Node(Kind.BUILTIN_TYPE_NAME, text='Builtin.Int64'))

    def test_builtin_vector(self):
        node = demangleTypeAsNode('$sBi64_Bv4_')
        assert node.getFirstChild().text == 'Builtin.Vec4xInt64'

    def test_builtin_float_size_bound(self):
        assert demangleSymbolAsNode('$sBf0_') is None

    def test_generic_param_names(self):
        assert demangleTypeAsNode('$sx').getFirstChild().text == 'A'
        assert demangleTypeAsNode('$sq_').getFirstChild().text == 'B'
        assert demangleTypeAsNode('$sqd__').getFirstChild().text == 'A1'

    def test_generic_signature(self):
        tree = demangleSymbolAsNode('$s4main3fooyyxlF')
        ty = tree.getFirstChild().getChild(3).getFirstChild()
        assert ty.kind == Kind.DEPENDENT_GENERIC_TYPE
        signature = ty.getFirstChild()
        assert signature.children == [Node(Kind.DEPENDENT_GENERIC_PARAM_COUNT, index=1)]

    def test_value_witness(self):
        tree = demangleSymbolAsNode('$sSiwxx')
        witness = tree.getFirstChild()
        assert witness.kind == Kind.VALUE_WITNESS
        assert witness.index == VALUE_WITNESS_CODES.index('xx') == 4


class TestFunctions:
    def test_labels(self):
        function = demangleSymbolAsNode('$s4main3foo1xySiF').getFirstChild()
        assert function.kind == Kind.FUNCTION
        assert function.getChild(2) == Node(Kind.LABEL_LIST).addChild(Node(Kind.IDENTIFIER, text='x'))

    def test_empty_label_list(self):
        function = demangleSymbolAsNode('$s4main3fooyySiF').getFirstChild()
        assert function.getChild(2) == Node(Kind.LABEL_LIST)

    def test_no_parameters(self):
        function = demangleSymbolAsNode('$s4main3fooyyF').getFirstChild()
        assert [c.kind for c in function.children] == [Kind.MODULE, Kind.IDENTIFIER, Kind.TYPE]

    def test_function_attributes_lead_global(self):
        tree = demangleSymbolAsNode('$s4main3FooC3baryyFTo')
        assert [c.kind for c in tree.children] == [Kind.OBJC_ATTRIBUTE, Kind.FUNCTION]

    def test_partial_apply_forwarder_becomes_parent(self):
        tree = demangleSymbolAsNode('$s4main3fooyyFTA')
        forwarder = tree.getFirstChild()
        assert tree.getNumChildren() == 1
        assert forwarder.kind == Kind.PARTIAL_APPLY_FORWARDER
        assert forwarder.getFirstChild().kind == Kind.FUNCTION

    def test_allocator(self):
        allocator = demangleSymbolAsNode('$s4main3FooC1xACSi_tcfC').getFirstChild()
        assert allocator.kind == Kind.ALLOCATOR
        assert [c.kind for c in allocator.children] == [Kind.CLASS, Kind.LABEL_LIST, Kind.TYPE]

    def test_static(self):
        static = demangleSymbolAsNode('$s4main3FooV3baryyFZ').getFirstChild()
        assert static.kind == Kind.STATIC
        assert static.getFirstChild().kind == Kind.FUNCTION

    def test_variable_getter(self):
        getter = demangleSymbolAsNode('$s4main3fooSivg').getFirstChild()
        assert getter.kind == Kind.GETTER
        assert getter.getFirstChild().kind == Kind.VARIABLE


class TestLegacyLabels:
    """Swift 4 manglings keep the labels as tuple element names."""

    def test_labels_moved_out_of_tuple(self):
        function = demangleSymbolAsNode('_T04main3fooySi1x_Si1ytF').getFirstChild()
        labels = function.getChild(2)
        assert [label.text for label in labels.children] == ['x', 'y']
        arguments = function.getChild(3).getFirstChild().getFirstChild()
        tuple_node = arguments.getFirstChild().getFirstChild()
        for element in tuple_node.children:
            assert [c.kind for c in element.children] == [Kind.TYPE]


class TestSymbolicReferences:
    def test_resolved_context(self, recording_resolver):
        d = Demangler('$s\x01\x10\x00\x00\x00D', resolver=recording_resolver)
        tree = d.demangleSymbol()
        assert recording_resolver.calls == [
            (SymbolicReferenceKind.CONTEXT, Directness.DIRECT, 16, b'\x10\x00\x00\x00')]
        assert tree.getFirstChild().getFirstChild() == swiftType('resolved', 'Target')
        assert d.substitutions == [swiftType('resolved', 'Target')]

    def test_negative_indirect_offset(self, recording_resolver):
        Demangler('$s\x02\xfc\xff\xff\xffD', resolver=recording_resolver).demangleSymbol()
        assert recording_resolver.calls[0][1:3] == (Directness.INDIRECT, -4)

    def test_no_resolver(self):
        assert demangleSymbolAsNode('$s\x01\x10\x00\x00\x00D') is None

    def test_unsupported_kind(self, recording_resolver):
        assert Demangler('$s\x03\x10\x00\x00\x00D', resolver=recording_resolver).demangleSymbol() is None
        assert recording_resolver.calls == []

    def test_truncated_reference(self, recording_resolver):
        assert Demangler('$s\x01\x10', resolver=recording_resolver).demangleSymbol() is None


class TestGuards:
    def test_max_length(self):
        assert Demangler('$s3foo3BarV', max_length=5).demangleSymbol() is None

    def test_not_mangled(self):
        assert demangleSymbolAsNode('main') is None

    def test_unparsed_type_is_suffix(self):
        assert demangleTypeAsNode('$s') == Node(Kind.SUFFIX, text='$s')

    def test_suffix(self):
        tree = demangleSymbolAsNode('$s3foo3BarV.cold')
        assert tree.children[-1] == Node(Kind.SUFFIX, text='.cold')

    def test_objc_type_name(self):
        tree = demangleSymbolAsNode('_TtC4main3Foo')
        nominal = tree.getFirstChild().getFirstChild().getFirstChild()
        assert nominal.kind == Kind.CLASS
        assert nominal.getFirstChild() == Node(Kind.MODULE, text='main')
        assert nominal.getChild(1).text == 'Foo'

    def test_deep_nesting_is_refused(self):
        assert demangleSymbolAsNode('$sSi' + '_t' * 100 + 'D') is None
        assert demangleSymbolAsNode('$sSi' + 'Sg' * 100 + 'A72_D') is None
        assert demangleTypeAsNode('$sSi' + 'Sg' * 100) is None

    def test_nesting_below_the_limit(self):
        tree = demangleSymbolAsNode('$sSi' + 'Sg' * 40 + 'D')
        assert tree is not None
        assert tree.getFirstChild().depth <= MAX_NODE_DEPTH

    def test_nested_generic_parents_are_bound(self):
        tree = demangleSymbolAsNode('$s4main5OuterV5InnerVySi_SSGD')
        inner = tree.getFirstChild().getFirstChild().getFirstChild()
        assert inner.kind == Kind.BOUND_GENERIC_STRUCTURE
        outer = inner.getFirstChild().getFirstChild().getFirstChild()
        assert outer.kind == Kind.BOUND_GENERIC_STRUCTURE
        assert outer.getChild(1).getFirstChild() == swiftType('Swift', 'Int')
