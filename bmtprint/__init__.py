"""BMT Print - remote print agent for TSPL label printers.

The agent runs next to a label printer (typically a Raspberry Pi with a
USB printer at /dev/usb/lp0), polls the central BMT server for queued
print jobs, writes each label straight to the device and reports the
outcome back.

Usage:
    CENTRAL_URL=http://server:5000 PRINTER_ID=pi-lab-1 bmtprint start
    bmtprint once
    bmtprint render session.json
"""

__version__ = "1.0.0"
