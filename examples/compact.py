import asyncio
import logging

import moderanger

logging.basicConfig(level=logging.INFO)

# Four blocks in the compact notation. Each one sets up the instrument with
# single-letter commands, then plays scale degrees (1 = tonic, hex up to F).
#
#   S2      red scale          K5   key offset 5
#   W2/W3   triads / sevenths  I1   raise the lowest voice an octave
#   P8      eighth notes       M3   arpeggio up then down
#   .       rest               =    hold the previous chord
SONG = "S0,K0,O4,W2,P4:1.4= I1:5=6. W3,P8,M3:1357 R2,M0,W2,I0:4321"

song = moderanger.load(SONG)

if song is None:
	raise SystemExit("Song has syntax errors")

instrument = moderanger.Instrument(channel=0, velocity=90)

conductor = moderanger.Conductor(output=moderanger.MidiOutput(), bpm=96)
conductor.set_song(song)
conductor.set_instrument(instrument)

# Play until Ctrl-C.
try:
	asyncio.run(conductor.play())
except KeyboardInterrupt:
	pass
finally:
	conductor.output.close()
