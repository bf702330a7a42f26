"""Swift's variant of RFC 3492 punycode.

Swift uses '_' as the delimiter and the digits a-z, A-J so that encoded
identifiers stay valid symbol characters. ASCII characters that are not
legal in identifiers are tunneled through the 0xD800-0xD87F range.
"""
import logging

log = logging.getLogger(__name__)

BASE = 36
TMIN = 1
TMAX = 26
SKEW = 38
DAMP = 700
INITIAL_BIAS = 72
INITIAL_N = 128
DELIMITER = '_'


def digitIndex(c):
    if 'a' <= c <= 'z':
        return ord(c) - ord('a')
    if 'A' <= c <= 'J':
        return ord(c) - ord('A') + 26
    return -1


def adapt(delta, numpoints, firsttime):
    if firsttime:
        delta //= DAMP
    else:
        delta //= 2
    delta += delta // numpoints
    k = 0
    while delta > ((BASE - TMIN) * TMAX) // 2:
        delta //= BASE - TMIN
        k += BASE
    return k + ((BASE - TMIN + 1) * delta) // (delta + SKEW)


def decodeCodePoints(encoded):
    """Returns the list of decoded code points, or None if malformed."""
    output = []
    n = INITIAL_N
    i = 0
    bias = INITIAL_BIAS

    last_delimiter = encoded.rfind(DELIMITER)
    if last_delimiter >= 0:
        for c in encoded[:last_delimiter]:
            if ord(c) > 0x7f:
                return None
            output.append(ord(c))
        encoded = encoded[last_delimiter + 1:]

    pos = 0
    while pos < len(encoded):
        old_i = i
        w = 1
        k = BASE
        while True:
            if pos >= len(encoded):
                return None
            digit = digitIndex(encoded[pos])
            pos += 1
            if digit < 0:
                return None
            i += digit * w
            if k <= bias:
                t = TMIN
            elif k >= bias + TMAX:
                t = TMAX
            else:
                t = k - bias
            if digit < t:
                break
            w *= BASE - t
            k += BASE
        bias = adapt(i - old_i, len(output) + 1, old_i == 0)
        n += i // (len(output) + 1)
        i %= len(output) + 1
        if n < 0x80:
            return None
        output.insert(i, n)
        i += 1
    return output


def isValidUnicodeScalar(cp):
    return cp < 0xD880 or 0xE000 <= cp <= 0x10FFFF


def decode(encoded):
    code_points = decodeCodePoints(encoded)
    if code_points is None:
        log.debug('malformed punycode "%s"', encoded)
        return None
    chars = []
    for cp in code_points:
        if 0xD800 <= cp < 0xD880:
            cp -= 0xD800
        if not isValidUnicodeScalar(cp):
            log.debug('invalid scalar 0x%x in punycode "%s"', cp, encoded)
            return None
        chars.append(chr(cp))
    return ''.join(chars)
