import logging

from swift_demangler import (Demangler, demangleString, demangleSymbols, ReductionKind, ReductionError,
                             FunctionReduction, ProtocolWitnessTableReduction,
                             ProtocolConformanceDescriptorReduction, TypeSpecReduction, TypeSpecKind)


class TestWitnessTablesAndDescriptors:
    """Symbols taken from a small generic test framework."""

    def test_protocol_witness_table(self):
        result = demangleString('_$s20GenericTestFramework6ThingyCAA7StanleyAAWP')
        assert isinstance(result, ProtocolWitnessTableReduction)
        assert result.implementing_type.name == 'GenericTestFramework.Thingy'
        assert result.protocol_type.name == 'GenericTestFramework.Stanley'

    def test_protocol_witness_table_other_protocol(self):
        result = demangleString('_$s20GenericTestFramework6ThingyCAA8IsItRealAAWP')
        assert result.kind == ReductionKind.PROTOCOL_WITNESS_TABLE
        assert result.implementing_type.name == 'GenericTestFramework.Thingy'
        assert result.protocol_type.name == 'GenericTestFramework.IsItReal'

    def test_protocol_witness_table_nested_type(self):
        result = demangleString('_$s20GenericTestFramework3FooC6ThingyCAA8IsItRealAAWP')
        assert result.implementing_type.name == 'GenericTestFramework.Foo.Thingy'
        assert result.protocol_type.name == 'GenericTestFramework.IsItReal'

    def test_protocol_conformance_descriptor(self):
        result = demangleString('_$s10someclient14CSAgeableProxyCAA7AgeableAAMc')
        assert isinstance(result, ProtocolConformanceDescriptorReduction)
        assert result.implementing_type.name == 'someclient.CSAgeableProxy'
        assert result.protocol_type.name == 'someclient.Ageable'
        assert result.module == 'someclient'

    def test_metadata_accessor_has_no_rule(self):
        result = demangleString('_$s20GenericTestFramework6ThingyCMa')
        assert isinstance(result, ReductionError)
        assert result.message == 'No rule for node TYPE_METADATA_ACCESS_FUNCTION'


class TestFunctions:
    def test_tuple_parameter(self):
        result = demangleString('_$s17unitHelpFrawework10ReturnsInt3arg1cS2u1a_Si1bt_SitF')
        assert isinstance(result, FunctionReduction)
        assert result.name == 'ReturnsInt'
        assert str(result.provenance) == 'unitHelpFrawework'
        assert str(result.return_type) == 'Swift.UInt'
        assert len(result.parameters) == 2
        assert str(result.parameters[0]) == 'arg: (a: Swift.UInt, b: Swift.Int)'
        assert result.parameters[1].name == 'Swift.Int'
        assert result.parameters[1].type_label == 'c'

    def test_labelled_parameter(self):
        result = demangleString('$s4main3foo1xySiF')
        assert result.name == 'foo'
        assert [str(p) for p in result.parameters] == ['x: Swift.Int']
        assert result.return_type.isEmptyTuple

    def test_unlabelled_parameter(self):
        result = demangleString('$s4main3fooyySiF')
        assert [str(p) for p in result.parameters] == ['Swift.Int']

    def test_no_parameters(self):
        result = demangleString('$s4main3fooyyF')
        assert result.parameter_list.isEmptyTuple

    def test_throws(self):
        result = demangleString('$s4main3fooyyKF')
        assert result.throws

    def test_operator(self):
        result = demangleString('$s4main2eeoiySbSi_SitF')
        assert result.name == '=='
        assert [str(p) for p in result.parameters] == ['Swift.Int', 'Swift.Int']
        assert str(result.return_type) == 'Swift.Bool'

    def test_inout_parameter(self):
        result = demangleString('$s4main3fooyySizF')
        assert [str(p) for p in result.parameters] == ['inout Swift.Int']

    def test_generic_function(self):
        result = demangleString('$s4main3fooyyxlF')
        assert [str(p) for p in result.parameters] == ['A']

    def test_static_method(self):
        result = demangleString('$s4main3FooV3baryyFZ')
        assert result.is_static
        assert not result.provenance.isTopLevel
        assert str(result.provenance.owner) == 'main.Foo'

    def test_method_in_extension(self):
        result = demangleString('$s4main3FooV5otherE3baryyF')
        assert str(result.provenance) == 'main.Foo'

    def test_objc_method(self):
        result = demangleString('$s4main3FooC3baryyFTo')
        assert [str(a) for a in result.attributes] == ['@objc']

    def test_initializer(self):
        result = demangleString('$s4main3FooC1xACSi_tcfC')
        assert result.name == 'init'
        assert str(result.provenance) == 'main.Foo'
        assert [str(p) for p in result.parameters] == ['x: Swift.Int']
        assert str(result.return_type) == 'main.Foo'

    def test_legacy_labels(self):
        result = demangleString('_T04main3fooySi1x_Si1ytF')
        assert [str(p) for p in result.parameters] == ['x: Swift.Int', 'y: Swift.Int']


class TestTypes:
    def test_nominal(self):
        result = demangleString('$s3foo3BarV')
        assert isinstance(result, TypeSpecReduction)
        assert str(result.type_spec) == 'foo.Bar'

    def test_standard_type(self):
        assert str(demangleString('$sSi').type_spec) == 'Swift.Int'

    def test_tuple(self):
        result = demangleString('$sSi_SbtD')
        assert result.type_spec.kind == TypeSpecKind.TUPLE
        assert str(result.type_spec) == '(Swift.Int, Swift.Bool)'

    def test_empty_tuple(self):
        assert demangleString('$sytD').type_spec.isEmptyTuple
        assert demangleString('$sy').type_spec.isEmptyTuple

    def test_bound_generics(self):
        assert str(demangleString('$sSaySiGD').type_spec) == 'Swift.Array<Swift.Int>'
        assert str(demangleString('$sSDySSSiGD').type_spec) == 'Swift.Dictionary<Swift.String, Swift.Int>'
        assert str(demangleString('$sSiSgD').type_spec) == 'Swift.Optional<Swift.Int>'

    def test_variadic_element(self):
        result = demangleString('$sSid_tD')
        element = result.type_spec.elements[0]
        assert element.is_variadic
        assert str(element) == 'Swift.Array<Swift.Int>'

    def test_nested_generic_types(self):
        result = demangleString('$s4main5OuterV5InnerVySi_SSGD')
        assert str(result.type_spec) == 'main.Outer<Swift.Int>.Inner<Swift.String>'
        assert result.type_spec.module == 'main'

    def test_builtin(self):
        assert str(demangleString('$sBi64_D').type_spec) == 'Builtin.Int64'

    def test_punycode_name(self):
        assert str(demangleString('$s4main007caf_dmaV').type_spec) == 'main.café'

    def test_objc_type_name(self):
        assert str(demangleString('_TtC4main3Foo').type_spec) == 'main.Foo'

    def test_mach_o_underscore(self):
        assert str(demangleString('__$s3foo3BarV').type_spec) == 'foo.Bar'

    def test_resolved_symbolic_reference(self, recording_resolver):
        result = demangleString('$s\x01\x10\x00\x00\x00D', resolver=recording_resolver)
        assert str(result.type_spec) == 'resolved.Target'


class TestFailures:
    def test_garbage(self):
        result = demangleString('_$ThisIsJustGarbage')
        assert result.isError()
        assert result.symbol == '_$ThisIsJustGarbage'
        assert '_$ThisIsJustGarbage' in result.message

    def test_undecodable(self):
        result = demangleString('$sZ')
        assert result.message == 'Unable to demangle $sZ'

    def test_deep_nesting_is_an_error(self):
        name = '$sSi' + '_t' * 100 + 'D'
        result = demangleString(name)
        assert result.isError()
        assert result.message == 'Unable to demangle {}'.format(name)
        assert demangleString('$sSi' + 'Sg' * 100 + 'A72_D').isError()

    def test_nesting_below_the_limit(self):
        result = demangleString('$sSi' + '_t' * 40 + 'D')
        assert result.kind == ReductionKind.TYPE_SPEC
        assert str(result.type_spec) == '(' * 40 + 'Swift.Int' + ')' * 40

    def test_run_on_demangler(self):
        assert Demangler('$s3foo3BarVAD').run().isError()


class TestBatch:
    def test_successful_and_skipped(self, caplog):
        names = ['$s3foo3BarV', '_$ThisIsJustGarbage', '$s4main3foo1xySiF']
        with caplog.at_level(logging.INFO, logger='swift_demangler'):
            successful, skipped = demangleSymbols(names)
        assert [name for name, _ in successful] == ['$s3foo3BarV', '$s4main3foo1xySiF']
        assert [name for name, _ in skipped] == ['_$ThisIsJustGarbage']
        assert 'Demangled 2 of 3 symbols, skipped 1' in caplog.text
