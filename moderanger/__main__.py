import argparse
import asyncio
import logging
import os
import typing

import yaml

import moderanger.commands
import moderanger.conductor
import moderanger.instrument
import moderanger.song
import moderanger.sound


logger = logging.getLogger(__name__)

# Config keys under ``instrument:`` and the command each one is applied with.
INSTRUMENT_CONFIG_COMMANDS = {
	"channel": "C",
	"scale": "S",
	"key": "K",
	"octave": "O",
	"velocity": "V",
	"timbre": "T",
	"playmode": "M",
	"duration": "D",
}


def load_config (config_path: str = 'config.yaml') -> dict:

	"""
	Load configuration from a YAML file.
	"""

	if not os.path.exists(config_path):
		logger.warning(f"Config file {config_path} not found. Using defaults.")
		return {}

	with open(config_path, 'r') as f:
		return yaml.safe_load(f) or {}


def build_instrument (config: dict) -> moderanger.instrument.Instrument:

	"""
	Create the instrument, applying any ``instrument:`` settings from the config.
	"""

	instrument = moderanger.instrument.Instrument()

	for key, value in (config.get('instrument') or {}).items():

		code = INSTRUMENT_CONFIG_COMMANDS.get(key)

		if code is None:
			logger.warning(f"Ignoring unknown instrument setting '{key}'")
			continue

		try:
			moderanger.commands.apply(instrument, code, str(value))
		except ValueError as e:
			logger.warning(f"Ignoring instrument setting {key}={value}: {e}")

	return instrument


def parse_args (argv: typing.Optional[typing.List[str]] = None) -> argparse.Namespace:

	parser = argparse.ArgumentParser(prog="moderanger", description="Play a moderanger song over MIDI")
	parser.add_argument("song", help="Song file in the compact or nested notation")
	parser.add_argument("--config", default="config.yaml", help="YAML config file (default: config.yaml)")
	parser.add_argument("--bpm", type=float, default=None, help="Tempo in beats per minute (overrides config)")
	parser.add_argument("--device", default=None, help="MIDI output device name (overrides config)")
	parser.add_argument("--record", default=None, metavar="FILE.mid", help="Write the performance to a MIDI file instead of a port")
	parser.add_argument("--seconds", type=float, default=None, help="Stop after this many seconds (default: play until Ctrl-C)")

	return parser.parse_args(argv)


def main (argv: typing.Optional[typing.List[str]] = None) -> int:

	"""
	Main entry point for the moderanger command line.
	"""

	args = parse_args(argv)
	config = load_config(args.config)

	level = (config.get('logging') or {}).get('level', 'INFO')
	logging.basicConfig(level=getattr(logging, str(level).upper(), logging.INFO))

	logger.info("Moderanger starting...")

	with open(args.song, 'r') as f:
		song = moderanger.song.load(f.read())

	if song is None:
		logger.error(f"Could not load song from {args.song}")
		return 1

	logger.info(f"Loaded {args.song} ({len(song.blocks)} blocks)")

	bpm = args.bpm if args.bpm is not None else (config.get('conductor') or {}).get('bpm', 120)
	device_name = args.device if args.device is not None else (config.get('midi') or {}).get('device_name')

	output: moderanger.sound.SoundOutput

	if args.record:
		output = moderanger.sound.MidiFileOutput(args.record, bpm=bpm)
	else:
		output = moderanger.sound.MidiOutput(device_name)

	conductor = moderanger.conductor.Conductor(output=output, bpm=bpm)
	conductor.set_song(song)
	conductor.set_instrument(build_instrument(config))

	try:
		asyncio.run(conductor.play(args.seconds))
	except KeyboardInterrupt:
		logger.info("Stopping...")
	finally:
		output.close()

	return 0


if __name__ == "__main__":
	raise SystemExit(main())
