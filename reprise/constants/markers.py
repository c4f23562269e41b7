"""Marker names attached to bars.

Markers are plain strings, grouped here so every module spells them the same way.

Repeat markers:
- `REPEAT_START` (``|:``) and `REPEAT_END` (``:|``) bound a repeated run of bars.

Navigation markers:
- `SEGNO` - the return point of a Dal Segno jump.
- `FINE` - where a D.C./D.S. replay ends (the Fine bar itself is played).
- `CODA_FIRST` / `CODA_SECOND` - on replay, playback jumps from the first to just after the second.
- `DA_CAPO` / `DAL_SEGNO` - the jump instruction, carried by the final bar.

`MARKER_CONFLICTS` lists the markers that cannot share a bar with each marker.
A bar carrying a variation index additionally rejects everything in `VARIATION_CONFLICTS`.
"""

import typing


REPEAT_START = "repeat_start"
REPEAT_END = "repeat_end"
SEGNO = "segno"
FINE = "fine"
CODA_FIRST = "coda_first"
CODA_SECOND = "coda_second"
DA_CAPO = "da_capo"
DAL_SEGNO = "dal_segno"

ALL_MARKERS: typing.FrozenSet[str] = frozenset({
	REPEAT_START,
	REPEAT_END,
	SEGNO,
	FINE,
	CODA_FIRST,
	CODA_SECOND,
	DA_CAPO,
	DAL_SEGNO,
})

JUMP_MARKERS: typing.FrozenSet[str] = frozenset({DA_CAPO, DAL_SEGNO})

MARKER_SYMBOLS: typing.Dict[str, str] = {
	REPEAT_START: "|:",
	REPEAT_END: ":|",
	SEGNO: "Segno",
	FINE: "Fine",
	CODA_FIRST: "Coda",
	CODA_SECOND: "Coda",
	DA_CAPO: "D.C.",
	DAL_SEGNO: "D.S.",
}

MARKER_CONFLICTS: typing.Dict[str, typing.FrozenSet[str]] = {
	REPEAT_START: frozenset({DA_CAPO, DAL_SEGNO}),
	REPEAT_END: frozenset(),
	SEGNO: frozenset({DA_CAPO}),
	FINE: frozenset(),
	CODA_FIRST: frozenset({CODA_SECOND}),
	CODA_SECOND: frozenset({CODA_FIRST}),
	DA_CAPO: frozenset({REPEAT_START, DAL_SEGNO, SEGNO}),
	DAL_SEGNO: frozenset({REPEAT_START, DA_CAPO}),
}

VARIATION_CONFLICTS: typing.FrozenSet[str] = frozenset({REPEAT_START, DA_CAPO, DAL_SEGNO})
