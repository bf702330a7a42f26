import logging

from . import punycode
from .demangler import (Demangler, demangleSymbolAsNode, demangleTypeAsNode, isSwiftSymbol, isMangledName,
                        isObjCSymbol, Directness, SymbolicReferenceKind)
from .node import Node, Kind
from .printer import getNodeTreeAsString
from .reducer import Reducer
from .reduction import (ReductionKind, Reduction, TypeSpecReduction, FunctionReduction, Provenance,
                        ProtocolWitnessTableReduction, ProtocolConformanceDescriptorReduction, ReductionError)
from .typespec import TypeSpecKind, TypeSpecAttribute, TypeSpec, NamedTypeSpec, TupleTypeSpec, ClosureTypeSpec

log = logging.getLogger(__name__)


def demangleString(name, resolver=None):
    """Demangles one symbol name into a reduction.

    Mach-O symbol tables carry an extra leading underscore, so a name
    starting with '__' is accepted as well.
    """
    if name[:2] == '__':
        name = name[1:]
    return Demangler(name, resolver=resolver).run()


def demangleSymbols(names, resolver=None):
    """Demangles a batch of symbol names.

    Returns (successful, skipped), each a list of (name, reduction) pairs;
    a name is skipped when its reduction is an error.
    """
    skipped = []
    successful = []
    for name in names:
        result = demangleString(name, resolver=resolver)
        if result.isError():
            log.debug('Skipping %s: %s', name, result.message)
            skipped.append((name, result))
            continue
        successful.append((name, result))
    log.info('Demangled %d of %d symbols, skipped %d', len(successful), len(successful) + len(skipped),
             len(skipped))
    return successful, skipped
