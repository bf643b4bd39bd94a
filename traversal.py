"""
Reflected mixed-radix traversal of neighbor ranks.

For a codeword x with L = n-1 free coordinates, rank[j] selects the
rank[j]-th nearest element of x[j]. The odometer walks rank vectors so that
every step moves exactly one coordinate by one rank (Knuth, TAOCP 7.2.1.1,
Algorithm H: focus pointers plus a direction per coordinate), which lets the
caller update the running quadrance and parity in O(1). Choosing the next
coordinate is O(1) as well; only an upward step under cutoffs pays O(j) to
count the active coordinates below j when looking up its cap.

Each sweep of a coordinate is bounded by the depth-adaptive cutoff of its
element at the current weight level. The level counts the active coordinates
above j, taking into account the next move among them, so that the top
reached on an upward sweep also covers the downward sweep that follows.
"""


class NeighborOdometer:

    def __init__(self, length, max_rank):
        """
        Args:
            length (int): number of free coordinates (n - 1).
            max_rank (int): largest rank a coordinate may reach (q - 1).
        """
        self.length = length
        self.max_rank = max_rank
        self.ranks = [0] * length
        self.directions = [1] * length
        self.focus = list(range(length + 1))
        self.weight = 0
        self.caps = None

    def reset(self, caps=None):
        """
        Rewind to the all-zero rank vector.

        Args:
            caps: caps[j][w] is the first excluded rank of coordinate j when
                w coordinates are active, or None for a full traversal.
        """
        for j in range(self.length):
            self.ranks[j] = 0
            self.directions[j] = 1
            self.focus[j] = j
        self.focus[self.length] = self.length
        self.weight = 0
        self.caps = caps

    def advance(self):
        """Step one coordinate; return its index, or None when exhausted."""
        focus = self.focus
        j = focus[0]
        focus[0] = 0
        if j == self.length:
            return None

        step = self.directions[j]
        rank = self.ranks[j] + step
        self.ranks[j] = rank
        if step > 0:
            if rank == 1:
                self.weight += 1
            if rank == self.max_rank or (self.caps is not None and rank + 1 >= self._cap(j)):
                self._reverse(j)
        elif rank == 0:
            self.weight -= 1
            self._reverse(j)
        return j

    def _cap(self, j):
        ranks = self.ranks
        lower = 0
        for i in range(j):
            if ranks[i]:
                lower += 1
        above = self.weight - lower - 1

        # Next move above j happens before j sweeps back down
        k = self.focus[j + 1]
        if k < self.length and ranks[k] == 1 and self.directions[k] < 0:
            above -= 1

        level = above + 1 if above > 0 else 1
        return self.caps[j][level]

    def _reverse(self, j):
        self.directions[j] = -self.directions[j]
        self.focus[j] = self.focus[j + 1]
        self.focus[j + 1] = j + 1


def iter_rank_vectors(length, max_rank, caps=None):
    """Every rank vector visited by the odometer, starting from all zeros."""
    odometer = NeighborOdometer(length, max_rank)
    odometer.reset(caps)
    yield tuple(odometer.ranks)
    while odometer.advance() is not None:
        yield tuple(odometer.ranks)
