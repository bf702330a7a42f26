from enum import Enum

ReductionKind = Enum('ReductionKind', 'TYPE_SPEC FUNCTION PROTOCOL_WITNESS_TABLE PROTOCOL_CONFORMANCE_DESCRIPTOR ERROR')


class Reduction():
    kind = None

    def __init__(self, symbol):
        self.symbol = symbol

    def isError(self):
        return self.kind == ReductionKind.ERROR


class TypeSpecReduction(Reduction):
    kind = ReductionKind.TYPE_SPEC

    def __init__(self, symbol, type_spec):
        Reduction.__init__(self, symbol)
        self.type_spec = type_spec

    def __repr__(self):
        return 'TypeSpecReduction({!r}, {})'.format(self.symbol, self.type_spec)


class Provenance():
    """Where a declaration lives: a module, or inside a nominal type."""

    def __init__(self, module=None, owner=None):
        if (module is None) == (owner is None):
            raise ValueError('provenance needs exactly one of module or owner')
        self.module = module
        self.owner = owner

    @property
    def isTopLevel(self):
        return self.module is not None

    def __eq__(self, other):
        if not isinstance(other, Provenance):
            return NotImplemented
        return self.module == other.module and self.owner == other.owner

    def __hash__(self):
        return hash((self.module, str(self.owner)))

    def __str__(self):
        if self.isTopLevel:
            return self.module
        return str(self.owner)

    def __repr__(self):
        return 'Provenance({})'.format(self)


class FunctionReduction(Reduction):
    kind = ReductionKind.FUNCTION

    def __init__(self, symbol, name, provenance, parameter_list, return_type, throws=False):
        Reduction.__init__(self, symbol)
        self.name = name
        self.provenance = provenance
        self.parameter_list = parameter_list
        self.return_type = return_type
        self.throws = throws
        self.is_static = False
        self.attributes = []

    @property
    def parameters(self):
        return self.parameter_list.elements

    def __repr__(self):
        return 'FunctionReduction({!r}, {}.{}{} -> {})'.format(self.symbol, self.provenance, self.name,
                                                               self.parameter_list, self.return_type)


class ProtocolWitnessTableReduction(Reduction):
    kind = ReductionKind.PROTOCOL_WITNESS_TABLE

    def __init__(self, symbol, implementing_type, protocol_type):
        Reduction.__init__(self, symbol)
        self.implementing_type = implementing_type
        self.protocol_type = protocol_type

    def __repr__(self):
        return 'ProtocolWitnessTableReduction({!r}, {}: {})'.format(self.symbol, self.implementing_type,
                                                                   self.protocol_type)


class ProtocolConformanceDescriptorReduction(Reduction):
    kind = ReductionKind.PROTOCOL_CONFORMANCE_DESCRIPTOR

    def __init__(self, symbol, implementing_type, protocol_type, module):
        Reduction.__init__(self, symbol)
        self.implementing_type = implementing_type
        self.protocol_type = protocol_type
        self.module = module

    def __repr__(self):
        return 'ProtocolConformanceDescriptorReduction({!r}, {}: {} in {})'.format(
            self.symbol, self.implementing_type, self.protocol_type, self.module)


class ReductionError(Reduction):
    kind = ReductionKind.ERROR

    def __init__(self, symbol, message):
        Reduction.__init__(self, symbol)
        self.message = message

    def __repr__(self):
        return 'ReductionError({!r}, {!r})'.format(self.symbol, self.message)

    def __str__(self):
        return self.message
