"""Constants for reprise.

This package contains two sets of constants:

- ``reprise.constants.ticks`` - Tick-based note lengths (240 ticks per quarter note)
- ``reprise.constants.markers`` - Marker names attached to bars, their symbols and compatibility

The tick resolution is re-exported here, so ``reprise.constants.TICK_RESOLUTION``
works without importing the submodule.
"""

# Matches reprise.constants.ticks.TICK_RESOLUTION.

TICK_RESOLUTION = 240
