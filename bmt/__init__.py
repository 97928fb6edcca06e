"""BMT - pumping session log with label printing.

The server records pumping sessions and routes label print requests to a
TCP label printer, a local CUPS queue, a raw USB device, or a remote
print agent (see the bmtprint package).
"""

__version__ = "1.0.0"
