"""Operating-system simulator: multi-level queue scheduling over simulated CPUs and paging memory with swap."""

__version__ = "0.1.0"