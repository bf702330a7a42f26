import string


class Cursor():
    """A read position over an immutable mangled name.

    Reading or advancing past the end is a caller error and raises
    IndexError; check isAtEnd() first.
    """

    def __init__(self, text):
        self.original = text
        self.position = 0

    def __len__(self):
        return len(self.original) - self.position

    def __bool__(self):
        return not self.isAtEnd()

    def __str__(self):
        return self.original[self.position:]

    @property
    def length(self):
        return len(self)

    def isAtEnd(self):
        return self.position >= len(self.original)

    def hasAtLeast(self, n):
        return n <= len(self)

    def peek(self):
        if self.isAtEnd():
            raise IndexError('peek past the end of "{}"'.format(self.original))
        return self.original[self.position]

    def peekAt(self, offset):
        i = self.position + offset
        if i < 0 or i >= len(self.original):
            raise IndexError('offset {} out of range in "{}"'.format(offset, self.original))
        return self.original[i]

    def startsWith(self, s):
        return self.original.startswith(s, self.position)

    def next(self):
        c = self.peek()
        self.position += 1
        return c

    def advanceOffset(self, n):
        if n < 0 or n > len(self):
            raise IndexError('cannot advance {} characters in "{}"'.format(n, self.original))
        result = self.original[self.position:self.position + n]
        self.position += n
        return result

    def nextIf(self, s):
        if not self.startsWith(s):
            return False
        self.position += len(s)
        return True

    def advanceIf(self, predicate):
        if self.isAtEnd() or not predicate(self.peek()):
            return False
        self.position += 1
        return True

    def rewind(self):
        if self.position == 0:
            raise IndexError('cannot rewind past the start of "{}"'.format(self.original))
        self.position -= 1

    def substring(self, position, length):
        if position < 0 or length < 0 or position + length > len(self.original):
            raise IndexError('substring({}, {}) out of range in "{}"'.format(position, length, self.original))
        return self.original[position:position + length]

    def getString(self):
        return self.advanceOffset(len(self))

    def isNameNext(self):
        """True when a length-prefixed name (digits then characters) follows."""
        if self.isAtEnd() or self.peek() not in string.digits:
            return False
        i = self.position
        while i < len(self.original) and self.original[i] in string.digits:
            i += 1
        count = int(self.original[self.position:i])
        return count > 0 and i + count <= len(self.original)
