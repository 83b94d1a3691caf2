"""Bit helpers, paging constants and page table entry encoding."""

from __future__ import annotations

BITS_PER_LONG = 32
BITS_PER_BYTE = 8
_WORD_MASK = (1 << BITS_PER_LONG) - 1


def _div_round_up(n: int, d: int) -> int:
    return (n + d - 1) // d


def genmask(h: int, l: int) -> int:
    """Return a 32-bit mask with bits l..h (inclusive) set."""
    low = (_WORD_MASK << l) & _WORD_MASK
    high = _WORD_MASK >> (BITS_PER_LONG - h - 1)
    return low & high


def nbits(n: int) -> int:
    """Return the index of the highest set bit of a 32-bit value, 0 for 0."""
    n &= _WORD_MASK
    return n.bit_length() - 1 if n else 0


def extract_nbits(nr: int, h: int, l: int) -> int:
    """Extract bits l..h of nr, shifted down to bit 0."""
    return (nr & genmask(h, l)) >> l


# CPU bus and page geometry
PAGING_CPU_BUS_WIDTH = 22
PAGING_PAGESZ = 256
PAGING_MEMRAMSZ = 1 << 21
PAGING_MEMSWPSZ = 1 << 29
PAGING_SWPFPN_OFFSET = 5
PAGING_MAX_PGN = _div_round_up(1 << PAGING_CPU_BUS_WIDTH, PAGING_PAGESZ)
PAGING_SBRK_INIT_SZ = PAGING_PAGESZ

# PTE flag bits
PAGING_PTE_PRESENT_MASK = 1 << 31
PAGING_PTE_SWAPPED_MASK = 1 << 30
PAGING_PTE_RESERVE_MASK = 1 << 29
PAGING_PTE_DIRTY_MASK = 1 << 28
PAGING_PTE_EMPTY01_MASK = 1 << 14
PAGING_PTE_EMPTY02_MASK = 1 << 13

# PTE fields
PAGING_PTE_USRNUM_LOBIT = 15
PAGING_PTE_USRNUM_HIBIT = 27
PAGING_PTE_FPN_LOBIT = 0
PAGING_PTE_FPN_HIBIT = 12
PAGING_PTE_SWPTYP_LOBIT = 0
PAGING_PTE_SWPTYP_HIBIT = 4
PAGING_PTE_SWPOFF_LOBIT = 5
PAGING_PTE_SWPOFF_HIBIT = 25

PAGING_PTE_USRNUM_MASK = genmask(PAGING_PTE_USRNUM_HIBIT, PAGING_PTE_USRNUM_LOBIT)
PAGING_PTE_FPN_MASK = genmask(PAGING_PTE_FPN_HIBIT, PAGING_PTE_FPN_LOBIT)
PAGING_PTE_SWPTYP_MASK = genmask(PAGING_PTE_SWPTYP_HIBIT, PAGING_PTE_SWPTYP_LOBIT)
PAGING_PTE_SWPOFF_MASK = genmask(PAGING_PTE_SWPOFF_HIBIT, PAGING_PTE_SWPOFF_LOBIT)

# Address fields
PAGING_ADDR_OFFST_LOBIT = 0
PAGING_ADDR_OFFST_HIBIT = nbits(PAGING_PAGESZ) - 1
PAGING_ADDR_PGN_LOBIT = nbits(PAGING_PAGESZ)
PAGING_ADDR_PGN_HIBIT = PAGING_CPU_BUS_WIDTH - 1
PAGING_ADDR_FPN_LOBIT = nbits(PAGING_PAGESZ)
PAGING_ADDR_FPN_HIBIT = nbits(PAGING_MEMRAMSZ) - 1
PAGING_SWP_LOBIT = nbits(PAGING_PAGESZ)
PAGING_SWP_HIBIT = nbits(PAGING_MEMSWPSZ) - 1

PAGING_OFFST_MASK = genmask(PAGING_ADDR_OFFST_HIBIT, PAGING_ADDR_OFFST_LOBIT)
PAGING_PGN_MASK = genmask(PAGING_ADDR_PGN_HIBIT, PAGING_ADDR_PGN_LOBIT)
PAGING_FPN_MASK = genmask(PAGING_ADDR_FPN_HIBIT, PAGING_ADDR_FPN_LOBIT)
PAGING_SWP_MASK = genmask(PAGING_SWP_HIBIT, PAGING_SWP_LOBIT)


def _set_val(v: int, value: int, mask: int, offset: int) -> int:
    return ((v & ~mask) | ((value << offset) & mask)) & _WORD_MASK


def page_align(size: int) -> int:
    """Round size up to a whole number of pages."""
    return _div_round_up(size, PAGING_PAGESZ) * PAGING_PAGESZ


def page_number(addr: int) -> int:
    """Return the page number of a virtual address."""
    return (addr & PAGING_PGN_MASK) >> PAGING_ADDR_PGN_LOBIT


def page_offset(addr: int) -> int:
    """Return the offset of a virtual address within its page."""
    return (addr & PAGING_OFFST_MASK) >> PAGING_ADDR_OFFST_LOBIT


def pte_present(pte: int) -> bool:
    """Return whether the present bit of a PTE is set."""
    return bool(pte & PAGING_PTE_PRESENT_MASK)


def pte_fpn(pte: int) -> int:
    """Return the frame number stored in a PTE."""
    return (pte & PAGING_PTE_FPN_MASK) >> PAGING_PTE_FPN_LOBIT


def pte_swap_offset(pte: int) -> int:
    """Return the swap offset stored in a PTE."""
    return (pte & PAGING_PTE_SWPOFF_MASK) >> PAGING_SWPFPN_OFFSET


def init_pte(pte: int, pre: int, fpn: int, drt: int, swp: int, swptyp: int, swpoff: int) -> int:
    """Return pte initialised as an online or swapped entry.

    Raises ValueError for a present, non-swapped entry with frame 0.
    """
    if not pre:
        return pte
    if not swp:
        if fpn == 0:
            raise ValueError("a present page needs a non-zero frame number")
        pte |= PAGING_PTE_PRESENT_MASK
        pte &= ~PAGING_PTE_SWAPPED_MASK
        pte &= ~PAGING_PTE_DIRTY_MASK
        return _set_val(pte, fpn, PAGING_PTE_FPN_MASK, PAGING_PTE_FPN_LOBIT)
    pte |= PAGING_PTE_PRESENT_MASK | PAGING_PTE_SWAPPED_MASK
    pte &= ~PAGING_PTE_DIRTY_MASK
    pte = _set_val(pte, swptyp, PAGING_PTE_SWPTYP_MASK, PAGING_PTE_SWPTYP_LOBIT)
    return _set_val(pte, swpoff, PAGING_PTE_SWPOFF_MASK, PAGING_PTE_SWPOFF_LOBIT)


def pte_set_swap(pte: int, swptyp: int, swpoff: int) -> int:
    """Return pte marked as swapped out to the given swap slot."""
    pte |= PAGING_PTE_PRESENT_MASK | PAGING_PTE_SWAPPED_MASK
    pte = _set_val(pte, swptyp, PAGING_PTE_SWPTYP_MASK, PAGING_PTE_SWPTYP_LOBIT)
    return _set_val(pte, swpoff, PAGING_PTE_SWPOFF_MASK, PAGING_PTE_SWPOFF_LOBIT)


def pte_set_fpn(pte: int, fpn: int) -> int:
    """Return pte marked as online in the given frame."""
    pte |= PAGING_PTE_PRESENT_MASK
    pte &= ~PAGING_PTE_SWAPPED_MASK
    return _set_val(pte, fpn, PAGING_PTE_FPN_MASK, PAGING_PTE_FPN_LOBIT)