"""Single- and double-elimination playoff brackets that generate and update matches from results."""

__version__ = "0.1.0"