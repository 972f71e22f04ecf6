"""
Moderanger - a scale-degree chord sequencer driven by a tiny song notation.

A song is a list of blocks. Each block first sets up the instrument with
single-letter commands (scale, key, octave, chord width, inversion...) and then
plays a string of scale degrees. Every degree becomes a chord stacked in thirds
over the chosen scale, voiced at the instrument's octave and inversion, and
sent out as MIDI.

Two notations are understood:

- the compact form, one block per word::

      S2,K5,W3,I2:1.3=5 O4,M3:1234

- the nested form, with parts, duration groups and named attributes::

      { { {4n:( 1 2 8n:( 3 4 ) 5 ) key:3 repeat:2} } }

Main pieces:

- ``moderanger.scales`` and ``moderanger.circle`` - the music theory engine.
- ``moderanger.grammar`` and ``moderanger.song`` - text to AST to ``Song``.
- ``moderanger.instrument`` and ``moderanger.orchestra`` - performance state.
- ``moderanger.conductor`` - plays a song forever on an asyncio task.
- ``moderanger.sound`` - live MIDI ports and MIDI file recording via mido.

Minimal example:

    ```python
    import asyncio
    import moderanger

    song = moderanger.load("S0,W2:1.5.4.")
    conductor = moderanger.Conductor(output=moderanger.MidiOutput(), bpm=100)
    conductor.set_song(song)
    conductor.set_instrument(moderanger.Instrument())

    asyncio.run(conductor.play(seconds=8))
    ```

Package-level exports: ``Conductor``, ``Instrument``, ``Orchestra``, ``Scale``,
``MidiOutput``, ``MidiFileOutput``, ``parse``, ``evaluate``, ``load``,
``register_scale``.
"""

import moderanger.conductor
import moderanger.grammar
import moderanger.instrument
import moderanger.orchestra
import moderanger.scales
import moderanger.song
import moderanger.sound


Conductor = moderanger.conductor.Conductor
Instrument = moderanger.instrument.Instrument
Orchestra = moderanger.orchestra.Orchestra
Scale = moderanger.scales.Scale
MidiOutput = moderanger.sound.MidiOutput
MidiFileOutput = moderanger.sound.MidiFileOutput
parse = moderanger.grammar.parse
evaluate = moderanger.song.evaluate
load = moderanger.song.load
register_scale = moderanger.scales.register_scale
