import asyncio
import logging

import moderanger

logging.basicConfig(level=logging.INFO)

# Two instruments share one recording: a bass line on channel 1 and chords on
# channel 0, each driven by its own conductor. The orchestra keeps them in
# order so both voices can be voiced together for display.
BASS = "C1,O2,W0,P8:11115555 O2:44443333"
CHORDS = "C0,O4,W2,I1,P2:1544 S1:1544"

orchestra = moderanger.Orchestra()
orchestra.add_instrument(moderanger.Instrument())
orchestra.add_instrument(moderanger.Instrument())

output = moderanger.MidiFileOutput("duet.mid", bpm=100)


async def main () -> None:

	conductors = []

	for text, instrument in zip([CHORDS, BASS], orchestra):

		song = moderanger.load(text)

		if song is None:
			raise SystemExit("Song has syntax errors")

		conductor = moderanger.Conductor(output=output, bpm=100)
		conductor.set_song(song)
		conductor.set_instrument(instrument)
		conductors.append(conductor)

	await asyncio.gather(*(conductor.play(seconds=20) for conductor in conductors))

	orchestra.select_notes_to_play()

	for instrument in orchestra:
		logging.info(f"Channel {instrument.channel} ended on {instrument.notes}")


asyncio.run(main())
output.close()
