import logging
from enum import Enum

from .reduction import ReductionError

log = logging.getLogger(__name__)

MAX_REDUCTION_DEPTH = 128

MatchContent = Enum('MatchContent', 'NONE INDEX TEXT ALWAYS')


class MatchRule():
    """A pattern over a node and its leading children, plus what to do on a match.

    kinds is the set of node kinds accepted, content says which payload the
    node must carry, child_rules are applied positionally to the first
    children. With match_child_count the node must have exactly as many
    children as there are child rules. The reducer is called as
    reducer(node, name) and returns a reduction.
    """

    def __init__(self, name, kinds, reducer=None, content=MatchContent.NONE, child_rules=(),
                 match_child_count=False):
        if not isinstance(content, MatchContent):
            raise ValueError('unknown match content {}'.format(content))
        self._name = name
        self._kinds = tuple(kinds)
        self._reducer = reducer
        self._content = content
        self._child_rules = tuple(child_rules)
        self._match_child_count = match_child_count

    name = property(lambda self: self._name)
    kinds = property(lambda self: self._kinds)
    reducer = property(lambda self: self._reducer)
    content = property(lambda self: self._content)
    child_rules = property(lambda self: self._child_rules)
    match_child_count = property(lambda self: self._match_child_count)

    def __repr__(self):
        return 'MatchRule({})'.format(self._name)

    def matches(self, node):
        return self.kindMatches(node) and self.contentMatches(node) and self.childrenMatch(node)

    def kindMatches(self, node):
        return node.kind in self._kinds

    def contentMatches(self, node):
        if self._content == MatchContent.ALWAYS:
            return True
        if self._content == MatchContent.INDEX:
            return node.hasIndex()
        if self._content == MatchContent.TEXT:
            return node.hasText()
        return not node.hasIndex() and not node.hasText()

    def childrenMatch(self, node):
        if self._match_child_count and node.getNumChildren() != len(self._child_rules):
            return False
        for child_rule, child in zip(self._child_rules, node.children):
            if not child_rule.matches(child):
                return False
        return True


class RuleRunner():
    def __init__(self, rules, mangled_name, max_depth=MAX_REDUCTION_DEPTH):
        self.rules = list(rules)
        self.mangled_name = mangled_name
        self.max_depth = max_depth
        self.depth = 0

    def findRule(self, node):
        for rule in self.rules:
            if rule.matches(node):
                return rule
        return None

    def runRules(self, node, name=None):
        rule = self.findRule(node)
        if rule is None:
            log.debug('%s: no rule for %s', self.mangled_name, node.kind.name)
            return ReductionError(self.mangled_name, 'No rule for node {}'.format(node.kind.name))
        if self.depth >= self.max_depth:
            return ReductionError(self.mangled_name,
                                  'Demangling {}: tree deeper than {} levels'.format(self.mangled_name, self.max_depth))
        self.depth += 1
        try:
            return rule.reducer(node, name)
        finally:
            self.depth -= 1
