"""FluxLedger: time tracking, invoicing and regime forfettario projections."""

__version__ = "1.0.0"
