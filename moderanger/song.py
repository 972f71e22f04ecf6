"""Song model and the builder that produces it from a parsed AST.

A ``Song`` is an ordered sequence of blocks. Each block carries the
commands that configure the instrument before it plays, and a content
string of note selectors. All three are immutable values: building a song
twice from the same AST gives equal songs.

The builder only restructures syntax. It does not check that command codes
are known or that values make sense; the conductor reports those problems when
the song is played.

Nested songs are flattened. Parts are concatenated, and each duration-tagged
sub-group becomes a sibling block in document order:

    {{ {4n:( 1 2 8n:( 3 4 ) 5 ) key:3} }}

builds three blocks - ``D4n,K3:"1 2"``, ``D8n:"3 4"`` and ``D4n:"5"``. Every
flattened block restates its note value with a ``D`` command so that it plays
the same wherever it lands, and ``repeat:N`` emits the block's whole flattened
sequence N times.
"""

import dataclasses
import logging
import typing

import moderanger.commands
import moderanger.durations
import moderanger.grammar


logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class Command:

	"""
	A single-letter instruction with its raw value, e.g. ``Command("O", "3")``.
	"""

	type: str
	value: str

	def __str__ (self) -> str:
		return f"{self.type}{self.value}"


@dataclasses.dataclass(frozen=True)
class Block:

	"""
	Commands to apply, then content to play.

	With no ``separator`` every character of ``content`` is one selector (the
	compact notation); otherwise the content is split on whitespace.
	"""

	commands: typing.Tuple[Command, ...]
	content: str
	separator: typing.Optional[str] = None

	def selectors (self) -> typing.List[str]:

		"""
		Return the content's note selectors in playing order.
		"""

		if self.separator is None:
			return list(self.content)

		return self.content.split()


@dataclasses.dataclass(frozen=True)
class Song:
	blocks: typing.Tuple[Block, ...]


# ---------------------------------------------------------------------------
# Compact form
# ---------------------------------------------------------------------------

def build_command (node: moderanger.grammar.CommandNode) -> Command:
	return Command(type=node.command_type, value=node.command_value)


def build_command_group (node: moderanger.grammar.CommandGroupNode) -> typing.List[Command]:

	"""
	Return the group's commands in order: head first, then the tail.
	"""

	commands = [build_command(node.head)]
	commands.extend(build_command(command) for command in node.tail)

	return commands


def build_block (node: moderanger.grammar.BlockNode) -> Block:
	return Block(commands=tuple(build_command_group(node.command_group)), content=node.block_content)


def build_song (node: moderanger.grammar.SongNode) -> Song:

	"""
	Build a song from a compact-form AST: the head block, then the tail blocks.
	"""

	blocks = [build_block(node.head)]
	blocks.extend(build_block(block) for block in node.tail)

	return Song(blocks=tuple(blocks))


# ---------------------------------------------------------------------------
# Nested form
# ---------------------------------------------------------------------------

def build_attribute (node: moderanger.grammar.AttributeNode) -> Command:

	"""
	Turn a ``name:value`` attribute into a command.

	Known names map to their command code; unknown names are kept verbatim so
	the conductor can report them.
	"""

	code = moderanger.commands.code_for_name(node.name)

	return Command(type=code if code is not None else node.name, value=node.value)


def _flatten_items (
	items: typing.Sequence[typing.Union[moderanger.grammar.NoteNode, moderanger.grammar.GroupNode]],
	duration: str,
	commands: typing.List[Command],
	blocks: typing.List[Block]
) -> None:

	"""
	Append the blocks for a run of items played at ``duration``.

	``commands`` go on the first block emitted and are consumed (cleared).
	"""

	tokens: typing.List[str] = []

	def flush () -> None:

		if not tokens:
			return

		head = [Command(type="D", value=duration)] + commands
		blocks.append(Block(commands=tuple(head), content=" ".join(tokens), separator=" "))

		commands.clear()
		tokens.clear()

	for item in items:

		if isinstance(item, moderanger.grammar.GroupNode):
			flush()
			_flatten_items(item.items, item.duration, commands, blocks)

		elif item.duration is not None and item.duration != duration:
			flush()
			blocks.append(Block(commands=tuple([Command(type="D", value=item.duration)] + commands), content=item.value, separator=" "))
			commands.clear()

		else:
			tokens.append(item.value)

	flush()


def build_nested_block (node: moderanger.grammar.NestedBlockNode) -> typing.List[Block]:

	"""
	Flatten one nested block into its sequence of sibling blocks.
	"""

	repeat = 1
	commands: typing.List[Command] = []

	for attribute in node.attributes:

		if attribute.name == "repeat":
			try:
				repeat = int(attribute.value)
			except ValueError:
				logger.warning(f"Ignoring invalid repeat count '{attribute.value}'")
			continue

		commands.append(build_attribute(attribute))

	flattened: typing.List[Block] = []
	_flatten_items(node.items, moderanger.durations.DEFAULT_NOTE_VALUE, commands, flattened)

	return flattened * max(repeat, 1)


def build_nested_song (node: moderanger.grammar.NestedSongNode) -> Song:

	"""
	Build a song from a nested-form AST: parts in order, blocks flattened.
	"""

	blocks: typing.List[Block] = []

	for part in node.parts:
		for block in part.blocks:
			blocks.extend(build_nested_block(block))

	return Song(blocks=tuple(blocks))


def build (ast: moderanger.grammar.SongAst) -> Song:

	"""
	Build a song from either AST generation.
	"""

	if isinstance(ast, moderanger.grammar.NestedSongNode):
		return build_nested_song(ast)

	return build_song(ast)


def evaluate (result: moderanger.grammar.ParseResult) -> typing.Optional[Song]:

	"""
	Build the song of a parse result, or report its syntax errors.

	Returns:
		The ``Song``, or ``None`` when the result carries errors (each one is
		logged) or no AST.
	"""

	if result.errors or result.ast is None:

		for error in result.errors:
			logger.error(f"Syntax error: {error}")

		if not result.errors:
			logger.error("Nothing to evaluate: the parse result has no song")

		return None

	return build(result.ast)


def load (text: str) -> typing.Optional[Song]:

	"""
	Parse and build song text in one step.
	"""

	return evaluate(moderanger.grammar.parse(text))
