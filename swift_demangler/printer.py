def archetypeName(index, depth):
    name = chr(ord('A') + (index % 26))
    index //= 26
    while index:
        name += chr(ord('A') + (index % 26))
        index //= 26
    if depth != 0:
        name += str(depth)
    return name


def getNodeTreeAsString(tree):
    """Indented dump of a node tree, one node per line."""
    lines = []
    printNode(tree, 0, lines)
    return '\n'.join(lines)


def printNode(node, depth, lines):
    line = '  ' * depth + 'kind=' + node.kind.name
    if node.hasText():
        line += ', text="{}"'.format(node.text)
    elif node.hasIndex():
        line += ', index={}'.format(node.index)
    lines.append(line)
    for child in node.children:
        printNode(child, depth + 1, lines)
