"""Tick-based timing constants.

Bar lengths are measured in **240 ticks per quarter note**. These constants
represent the number of ticks for each standard note duration, and are what
bar-content collaborators report as a bar's playable length.

Multiply by a count for multi-note durations::

    import reprise.constants.ticks as ticks

    # A 3/4 bar
    length = 3 * ticks.QUARTER     # 720 ticks

    # A one-eighth pickup
    pickup = ticks.EIGHTH          # 120 ticks
"""

TICK_RESOLUTION = 240

SIXTYFOURTH = 15
THIRTYSECOND = 30
SIXTEENTH = 60
EIGHTH = 120
QUARTER = 240
DOTTED_QUARTER = 360
HALF = 480
DOTTED_HALF = 720
WHOLE = 960
