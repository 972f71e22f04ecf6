import asyncio
import logging

import moderanger

logging.basicConfig(level=logging.INFO)

# The nested notation: a song holds parts, a part holds blocks. Duration tags
# apply to the notes (or parenthesised groups) that follow them, and
# name:value attributes configure the instrument for the block.
SONG = """
{
  {
    {repeat:2 4n:( 1 5 8n:( 6 5 4 3 ) 1 ) scale:white, width:2},
    {2n:( 4 s ) key:3 playmode:ascending}
  },
  {
    {8t:( 1 3 5 1 3 5 ) playmode:chord, key:0 octave:4},
    {1m:1 inversion:1}
  }
}
"""

song = moderanger.load(SONG)

if song is None:
	raise SystemExit("Song has syntax errors")

for block in song.blocks:
	logging.info(f"{','.join(str(c) for c in block.commands)}: {block.content}")

conductor = moderanger.Conductor(output=moderanger.MidiOutput(), bpm=110)
conductor.set_song(song)
conductor.set_instrument(moderanger.Instrument())

asyncio.run(conductor.play(seconds=60))
conductor.output.close()
