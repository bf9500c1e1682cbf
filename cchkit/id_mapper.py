"""Mapping between a global id range and the dense range of its selected ids."""

from itertools import accumulate


class LocalIDMapper:
    """Maps each selected global id to its rank among the selected ids."""

    def __init__(self, bits):
        self._bits = [bool(b) for b in bits]
        self._rank = list(accumulate(self._bits, initial=0))

    @property
    def global_id_count(self):
        return len(self._bits)

    @property
    def local_id_count(self):
        return self._rank[-1]

    def is_global_id_mapped(self, global_id):
        """Whether ``global_id`` is in range and selected."""
        return 0 <= global_id < len(self._bits) and self._bits[global_id]

    def to_local(self, global_id):
        """Return the local id of ``global_id``.

        Raises ``IndexError`` if it is out of range and ``KeyError`` if it is
        not selected.
        """
        if not 0 <= global_id < len(self._bits):
            raise IndexError(f"global id {global_id} is out of bounds")
        if not self._bits[global_id]:
            raise KeyError(global_id)
        return self._rank[global_id]

    def get_local(self, global_id, default=None):
        """Return the local id of ``global_id``, or ``default`` if it has none."""
        if not self.is_global_id_mapped(global_id):
            return default
        return self._rank[global_id]


class IDMapper(LocalIDMapper):
    """A :class:`LocalIDMapper` that can also map local ids back to global ids."""

    def __init__(self, bits):
        super().__init__(bits)
        self._select = [i for i, bit in enumerate(self._bits) if bit]

    def to_global(self, local_id):
        """Return the global id whose local id is ``local_id``."""
        if not 0 <= local_id < len(self._select):
            raise IndexError(f"local id {local_id} is out of bounds")
        return self._select[local_id]