"""Prism Research Worker — dual-phase market research jobs driven over HTTP."""
