import typing

import moderanger.instrument


class Orchestra:

	"""
	An ordered ensemble of instruments.

	The perceived order lives in a separate permutation (``instrument_order``),
	so rearranging the ensemble never moves the instrument objects themselves
	and references held elsewhere (views, conductors) stay valid.
	"""

	def __init__ (self) -> None:

		self.instruments: typing.List[moderanger.instrument.Instrument] = []
		self.instrument_order: typing.List[int] = []

	def __len__ (self) -> int:
		return len(self.instruments)

	def __iter__ (self) -> typing.Iterator[moderanger.instrument.Instrument]:

		"""
		Iterate the instruments in perceived order.
		"""

		for order in range(len(self.instrument_order)):
			yield self.get_instrument(order)


	def add_instrument (self, instrument: moderanger.instrument.Instrument) -> None:

		"""
		Append an instrument; it takes the next trailing order slot.
		"""

		self.instruments.append(instrument)
		self.instrument_order.append(len(self.instrument_order))


	def move_instrument (self, from_order: int, to_order: int) -> None:

		"""
		Swap the instruments at two order slots.
		"""

		order = self.instrument_order
		order[from_order], order[to_order] = order[to_order], order[from_order]


	def get_instrument (self, order: int) -> moderanger.instrument.Instrument:
		return self.instruments[self.instrument_order[order]]


	def select_notes_to_play (self) -> None:

		"""
		Refresh every instrument's ``notes`` from its player, in ensemble order.
		"""

		for instrument in self:
			instrument.select_notes()
