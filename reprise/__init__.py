"""
reprise - repeat structures and playing order for a MIDI sequencer.

A score is written once but played in a different order: repeats play twice,
alternate endings swap in on each pass, and Da Capo / Dal Segno send the
player back to the top or to the Segno, to stop at Fine or skip to the Coda.
reprise models that structure and resolves it into the bars actually played,
in order, so playback and rendering never have to interpret repeat marks.

What it covers:

- **Region model.** Bars are grouped into sequences, repeats, and variation
  regions (a common region followed by its alternate endings), inside a
  top-level structure that is bare, Da Capo or Dal Segno.
- **Validation.** Segno/Fine/Coda placement, variation counts, jump placement
  and auftakt arithmetic are checked before anything is resolved. Every
  violation is a structured error with a stable ``code`` and the positions of
  the offending bars, ready for an editor to highlight.
- **Resolution.** The forward pass plays repeats twice and replays the common
  region before every variation; the D.C./D.S. replay plays repeats once, only
  the last variation, stops at Fine and jumps the Coda.
- **Auftakt.** A tune starting on a pickup replays from the second bar when its
  D.C. bar is a full bar, and from the pickup when the two complete each other.
- **Bar notation.** ``"|: A [1 B :|] [2 C@fine] D@dc"`` - a one-line syntax for
  bar streams, used by score files and tests.

Minimal example:

    ```python
    import reprise

    bars = reprise.parse_bars("A B@fine C D@dc")
    order = reprise.playing_order(bars)

    order.bar_ids()   # ["A", "B", "C", "D", "A", "B"]
    ```

Command line: ``python -m reprise score.yaml`` prints the playing order of a
YAML score file (see ``reprise.score_file``).

Package-level exports: ``Bar``, ``Rhythm``, ``Structure``, ``build_structure``,
``validate``, ``resolve``, ``playing_order``, ``parse_bars``, ``PlayingOrder``,
``StructuralViolation``, ``StructuralInconsistency``.
"""

import reprise.bar
import reprise.bar_notation
import reprise.errors
import reprise.regions
import reprise.resolver
import reprise.rhythm
import reprise.validator


Bar = reprise.bar.Bar
Rhythm = reprise.rhythm.Rhythm
Structure = reprise.regions.Structure
build_structure = reprise.regions.build_structure
validate = reprise.validator.validate
resolve = reprise.resolver.resolve
playing_order = reprise.resolver.playing_order
parse_bars = reprise.bar_notation.parse
PlayingOrder = reprise.resolver.PlayingOrder
StructuralViolation = reprise.errors.StructuralViolation
StructuralInconsistency = reprise.errors.StructuralInconsistency
