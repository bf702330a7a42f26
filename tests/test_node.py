import pytest

from swift_demangler import Node, Kind
from swift_demangler import node as node_module
from swift_demangler.printer import archetypeName, getNodeTreeAsString


class TestNodePayload:
    """A node carries no payload, text, or an index, never both."""

    def test_text_payload(self):
        n = Node(Kind.IDENTIFIER, text='foo')
        assert n.hasText()
        assert not n.hasIndex()
        assert n.text == 'foo'

    def test_index_payload(self):
        n = Node(Kind.NUMBER, index=3)
        assert n.hasIndex()
        assert n.index == 3

    def test_index_zero_is_a_payload(self):
        assert Node(Kind.INDEX, index=0).hasIndex()

    def test_both_payloads_rejected(self):
        with pytest.raises(ValueError):
            Node(Kind.IDENTIFIER, text='a', index=1)

    def test_wrong_payload_access(self):
        with pytest.raises(TypeError):
            Node(Kind.IDENTIFIER, text='a').index
        with pytest.raises(TypeError):
            Node(Kind.TYPE).text


class TestNodeChildren:
    def test_add_child_chains(self):
        parent = Node(Kind.TYPE_LIST).addChild(Node(Kind.EMPTY_LIST)).addChild(Node(Kind.VARIADIC_MARKER))
        assert parent.getNumChildren() == 2
        assert parent.getFirstChild().kind == Kind.EMPTY_LIST

    def test_reverse_children_from_offset(self):
        parent = Node(Kind.DEPENDENT_GENERIC_SIGNATURE)
        for i in range(4):
            parent.addChild(Node(Kind.INDEX, index=i))
        parent.reverseChildren(1)
        assert [c.index for c in parent.children] == [0, 3, 2, 1]

    def test_reverse_children_out_of_range(self):
        with pytest.raises(IndexError):
            Node(Kind.TUPLE).reverseChildren(1)

    def test_remove_child(self):
        parent = Node(Kind.TUPLE_ELEMENT).addChild(Node(Kind.TUPLE_ELEMENT_NAME, text='x')).addChild(Node(Kind.TYPE))
        removed = parent.removeChildAt(0)
        assert removed.text == 'x'
        assert parent.getNumChildren() == 1

    def test_copy_is_deep(self):
        original = Node(Kind.TYPE).addChild(Node(Kind.IDENTIFIER, text='a'))
        duplicate = original.copy()
        assert duplicate == original
        duplicate.getFirstChild().addChild(Node(Kind.EMPTY_LIST))
        assert duplicate != original

    def test_depth_follows_children(self):
        leaf = Node(Kind.IDENTIFIER, text='a')
        assert leaf.depth == 0
        parent = Node(Kind.TYPE).addChild(Node(Kind.EMPTY_LIST)).addChild(Node(Kind.TUPLE).addChild(leaf))
        assert parent.depth == 2

    def test_copy_of_very_deep_tree(self):
        tree = Node(Kind.IDENTIFIER, text='leaf')
        for _ in range(3000):
            tree = Node(Kind.TYPE).addChild(tree)
        duplicate = tree.copy()
        assert duplicate is not tree
        assert duplicate.depth == 3000
        node = duplicate
        while node.children:
            node = node.getFirstChild()
        assert node.text == 'leaf'

    def test_str(self):
        n = Node(Kind.TYPE).addChild(Node(Kind.IDENTIFIER, text='a'))
        assert 'IDENTIFIER("a")' in str(n)


class TestClassification:
    """Predicates answer for every kind."""

    @pytest.mark.parametrize('predicate', [
        node_module.isContext, node_module.isDeclName, node_module.isAnyGeneric, node_module.isNominal,
        node_module.isEntity, node_module.isRequirement, node_module.isFunctionAttribute,
    ])
    def test_total(self, predicate):
        for kind in Kind:
            assert predicate(kind) in (True, False)

    def test_examples(self):
        assert node_module.isContext(Kind.MODULE)
        assert node_module.isEntity(Kind.TYPE)
        assert node_module.isDeclName(Kind.INFIX_OPERATOR)
        assert node_module.isNominal(Kind.TYPE_ALIAS)
        assert not node_module.isNominal(Kind.BOUND_GENERIC_CLASS)
        assert node_module.isFunctionAttribute(Kind.OBJC_ATTRIBUTE)
        assert not node_module.isContext(Kind.IDENTIFIER)

    def test_is_attribute(self):
        assert Node(Kind.OBJC_ATTRIBUTE).isAttribute()
        assert not Node(Kind.PARTIAL_APPLY_FORWARDER).isAttribute()


class TestPrinter:
    def test_archetype_names(self):
        assert archetypeName(0, 0) == 'A'
        assert archetypeName(1, 0) == 'B'
        assert archetypeName(0, 1) == 'A1'
        assert archetypeName(27, 0) == 'BB'

    def test_tree_dump(self):
        tree = Node(Kind.GLOBAL).addChild(Node(Kind.NUMBER, index=2)).addChild(Node(Kind.MODULE, text='foo'))
        assert getNodeTreeAsString(tree) == 'kind=GLOBAL\n  kind=NUMBER, index=2\n  kind=MODULE, text="foo"'
