import pytest

from swift_demangler import Node, Kind, demangleString


def swiftType(module, name, kind=Kind.STRUCTURE):
    return Node(Kind.TYPE).addChild(
        Node(kind).addChild(Node(Kind.MODULE, text=module)).addChild(Node(Kind.IDENTIFIER, text=name)))


@pytest.fixture
def demangle():
    return demangleString


@pytest.fixture
def recording_resolver():
    """Resolves every context reference to the struct `resolved.Target`
    and records the arguments it was called with."""
    calls = []

    def resolver(kind, directness, value, raw):
        calls.append((kind, directness, value, raw))
        return swiftType('resolved', 'Target')

    resolver.calls = calls
    return resolver
