"""
Key decoding and multi-key sequences.

Raw terminal input is turned into key names (printable characters as
themselves, plus 'tab', 'enter', 'esc', 'backspace', 'up', 'down',
'left', 'right', 'ctrl-c', 'ctrl-u'). Bound sequences such as 'g g' are
matched by ChordBuffer, which keeps at most as many keys as the longest
binding and forgets them on every tick.
"""

ESCAPE_SEQUENCES = {
    '\x1b[A': 'up',
    '\x1b[B': 'down',
    '\x1b[C': 'right',
    '\x1b[D': 'left',
    '\x1bOA': 'up',
    '\x1bOB': 'down',
    '\x1bOC': 'right',
    '\x1bOD': 'left',
}

CONTROL_KEYS = {
    '\t': 'tab',
    '\r': 'enter',
    '\n': 'enter',
    '\x7f': 'backspace',
    '\x08': 'backspace',
    '\x03': 'ctrl-c',
    '\x15': 'ctrl-u',
}

PENDING = object()


def split_keys(data: str) -> tuple[list[str], str]:
    """
    Decode as many keys as `data` holds. Returns the keys plus an incomplete
    trailing escape sequence, which the caller prepends to its next read.
    """
    keys: list[str] = []
    i = 0
    while i < len(data):
        if data[i] == '\x1b':
            if data[i + 1:i + 2] in ('[', 'O'):
                # CSI/SS3 sequence: runs up to its final byte.
                j = i + 2
                while j < len(data) and not data[j].isalpha() and data[j] != '~':
                    j += 1
                if j == len(data):
                    return keys, data[i:]
                seq = data[i:j + 1]
                if seq in ESCAPE_SEQUENCES:
                    keys.append(ESCAPE_SEQUENCES[seq])
                i = j + 1
                continue
            keys.append('esc')
            i += 1
            continue

        ch = data[i]
        if ch in CONTROL_KEYS:
            keys.append(CONTROL_KEYS[ch])
        elif ch.isprintable():
            keys.append(ch)
        i += 1
    return keys, ''


def decode_keys(data: str) -> list[str]:
    keys, _ = split_keys(data)
    return keys


def is_printable(key: str) -> bool:
    return len(key) == 1 and key.isprintable()


class ChordBuffer:
    """Pending keys matched against a trie of bound sequences."""

    def __init__(self, bindings: dict[tuple[str, ...], str]):
        self._trie: dict = {}
        for sequence, action in bindings.items():
            node = self._trie
            for key in sequence:
                node = node.setdefault(key, {})
            node[None] = action
        # Only strict prefixes stay pending, so this never exceeds the
        # longest binding.
        self.pending: list[str] = []

    def feed(self, key: str):
        """
        Returns the bound action when a sequence completes, PENDING while the
        keys so far are a prefix of some binding, None otherwise.
        """
        self.pending.append(key)
        result = self._match()
        if result is None and len(self.pending) > 1:
            # The old prefix is dead; the new key may start a fresh sequence.
            self.pending = [key]
            result = self._match()
        if result is None:
            self.pending = []
        return result

    def tick(self) -> None:
        self.pending = []

    def _match(self):
        node = self._trie
        for key in self.pending:
            node = node.get(key)
            if node is None:
                return None
        if None in node:
            self.pending = []
            return node[None]
        return PENDING
