"""Song notation parser.

Two generations of the song notation are understood. Both produce an AST that
``moderanger.song`` turns into a ``Song``.

**Compact form** - blocks separated by whitespace, each one a comma-separated
list of letter+value commands, a colon, and the block content::

    W0,I0,M0,O3,K0,P8,S2:FAB3 W2,S4:87843ABCD

**Nested form** - braces delimit the song, its parts and their blocks. A block
holds notes (integers, ``s`` or ``.`` for a rest, ``=`` to sustain),
duration-tagged groups and ``name:value`` attributes::

    {
      {
        {repeat:3 4n:( 7 4 s -4 5m:( 3 3 4 ) ) playmode:ascending, key:3},
        {5 key:3}
      }
    }

Parsing never raises for bad input: every syntax error found is collected into
``ParseResult.errors`` and the AST is only returned when there are none.
"""

import dataclasses
import re
import typing


class NotationError(Exception):

	"""
	A syntax error in song text, with its position.
	"""

	def __init__ (self, message: str, position: int = 0, text: str = "") -> None:

		self.message = message
		self.position = position
		self.line = text.count("\n", 0, position) + 1
		self.column = position - (text.rfind("\n", 0, position) + 1) + 1

		super().__init__(f"{message} (line {self.line}, column {self.column})")


# Compact form AST

@dataclasses.dataclass(frozen=True)
class CommandNode:
	command_type: str
	command_value: str


@dataclasses.dataclass(frozen=True)
class CommandGroupNode:
	head: CommandNode
	tail: typing.Tuple[CommandNode, ...] = ()


@dataclasses.dataclass(frozen=True)
class BlockNode:
	command_group: CommandGroupNode
	block_content: str


@dataclasses.dataclass(frozen=True)
class SongNode:
	head: BlockNode
	tail: typing.Tuple[BlockNode, ...] = ()


# Nested form AST

@dataclasses.dataclass(frozen=True)
class NoteNode:

	"""
	A single content token, optionally with its own note value.
	"""

	value: str
	duration: typing.Optional[str] = None


@dataclasses.dataclass(frozen=True)
class GroupNode:

	"""
	A parenthesised list of items played with the given note value.
	"""

	duration: str
	items: typing.Tuple[typing.Union[NoteNode, "GroupNode"], ...]


@dataclasses.dataclass(frozen=True)
class AttributeNode:
	name: str
	value: str


@dataclasses.dataclass(frozen=True)
class NestedBlockNode:
	items: typing.Tuple[typing.Union[NoteNode, GroupNode], ...]
	attributes: typing.Tuple[AttributeNode, ...] = ()


@dataclasses.dataclass(frozen=True)
class PartNode:
	blocks: typing.Tuple[NestedBlockNode, ...]


@dataclasses.dataclass(frozen=True)
class NestedSongNode:
	parts: typing.Tuple[PartNode, ...]


SongAst = typing.Union[SongNode, NestedSongNode]


@dataclasses.dataclass
class ParseResult:

	"""
	Outcome of parsing: an AST, or the list of syntax errors found.
	"""

	ast: typing.Optional[SongAst] = None
	errors: typing.List[NotationError] = dataclasses.field(default_factory=list)

	@property
	def ok (self) -> bool:
		return self.ast is not None and not self.errors


def parse (text: str) -> ParseResult:

	"""
	Parse song text in either notation.

	Text whose first non-blank character is ``{`` is read as the nested form,
	anything else as the compact form.

	Returns:
		A ``ParseResult`` holding either the AST or a non-empty error list.

	Example:
		```python
		result = parse("W0,O3,S2:FAB3")
		result.ast.head.block_content  # → "FAB3"

		parse("W0,O3").errors[0].message  # → "Expected ':' ..."
		```
	"""

	if not text.strip():
		return ParseResult(errors=[NotationError("Empty song", 0, text)])

	if text.lstrip().startswith("{"):
		return parse_nested(text)

	return parse_compact(text)


# ---------------------------------------------------------------------------
# Compact form
# ---------------------------------------------------------------------------

_BLOCK_TOKEN = re.compile(r"\S+")
_COMMAND = re.compile(r"^([A-Za-z])([A-Za-z0-9-]+)$")
_CONTENT_CHAR = re.compile(r"[0-9A-Za-z.=]")


def parse_compact (text: str) -> ParseResult:

	"""
	Parse the compact ``COMMANDS:CONTENT`` notation.

	Each whitespace-separated block is parsed on its own, so one malformed
	block does not hide the errors of the others.
	"""

	blocks: typing.List[BlockNode] = []
	errors: typing.List[NotationError] = []

	for match in _BLOCK_TOKEN.finditer(text):

		try:
			blocks.append(_parse_compact_block(match.group(0), match.start(), text))
		except NotationError as e:
			errors.append(e)

	if not blocks and not errors:
		errors.append(NotationError("Empty song", 0, text))

	if errors:
		return ParseResult(errors=errors)

	return ParseResult(ast=SongNode(head=blocks[0], tail=tuple(blocks[1:])))


def _parse_compact_block (chunk: str, offset: int, text: str) -> BlockNode:

	head, separator, content = chunk.partition(":")

	if not separator:
		raise NotationError(f"Expected ':' between commands and content in '{chunk}'", offset + len(chunk), text)

	if not head:
		raise NotationError("Expected at least one command before ':'", offset, text)

	content_offset = offset + len(head) + 1

	if not content:
		raise NotationError("Expected block content after ':'", content_offset, text)

	for i, char in enumerate(content):
		if not _CONTENT_CHAR.match(char):
			raise NotationError(f"Unexpected character '{char}' in block content", content_offset + i, text)

	commands: typing.List[CommandNode] = []
	command_offset = offset

	for piece in head.split(","):

		match = _COMMAND.match(piece)

		if match is None:
			if not piece:
				raise NotationError("Expected a command", command_offset, text)
			raise NotationError(f"Invalid command '{piece}' (expected a letter followed by a value)", command_offset, text)

		commands.append(CommandNode(command_type=match.group(1), command_value=match.group(2)))
		command_offset += len(piece) + 1

	group = CommandGroupNode(head=commands[0], tail=tuple(commands[1:]))

	return BlockNode(command_group=group, block_content=content)


# ---------------------------------------------------------------------------
# Nested form
# ---------------------------------------------------------------------------

_NESTED_TOKEN = re.compile(r"""
	(?P<space>\s+)
	|(?P<punct>[{}(),])
	|(?P<duration>\d+[nmt]:)
	|(?P<attribute>[A-Za-z_][A-Za-z0-9_]*:[A-Za-z0-9_#-]+)
	|(?P<note>-?\d+|[s.=])
""", re.VERBOSE)


@dataclasses.dataclass
class _Token:
	kind: str
	text: str
	position: int


def _tokenize (text: str, errors: typing.List[NotationError]) -> typing.List[_Token]:

	"""
	Split nested-form text into tokens, collecting unknown characters as errors.
	"""

	tokens: typing.List[_Token] = []
	position = 0

	while position < len(text):

		match = _NESTED_TOKEN.match(text, position)

		if match is None:
			errors.append(NotationError(f"Unexpected character '{text[position]}'", position, text))
			position += 1
			continue

		kind = typing.cast(str, match.lastgroup)

		if kind != "space":
			value = match.group(0)
			tokens.append(_Token(kind=value if kind == "punct" else kind, text=value, position=position))

		position = match.end()

	return tokens


class _NestedParser:

	"""
	Recursive-descent parser over the nested-form token list.
	"""

	def __init__ (self, text: str) -> None:

		self.text = text
		self.errors: typing.List[NotationError] = []
		self.tokens = _tokenize(text, self.errors)
		self.index = 0

	def _peek (self) -> typing.Optional[_Token]:
		return self.tokens[self.index] if self.index < len(self.tokens) else None

	def _at (self, kind: str) -> bool:

		token = self._peek()
		return token is not None and token.kind == kind

	def _error (self, message: str, token: typing.Optional[_Token] = None) -> NotationError:

		position = token.position if token is not None else len(self.text)
		return NotationError(message, position, self.text)

	def _record (self, error: NotationError) -> None:

		# A missing closing brace at the end of the text is reported once.
		if self.errors and self.errors[-1].position == error.position:
			return

		self.errors.append(error)

	def _expect (self, kind: str, context: str) -> _Token:

		token = self._peek()

		if token is None:
			raise self._error(f"Expected '{kind}' {context}, found end of text")

		if token.kind != kind:
			raise self._error(f"Expected '{kind}' {context}, found '{token.text}'", token)

		self.index += 1
		return token


	def parse_song (self) -> typing.Optional[NestedSongNode]:

		parts: typing.List[PartNode] = []

		try:
			self._expect("{", "to open the song")
			parts.append(self.parse_part())

			while self._at(","):
				self.index += 1
				parts.append(self.parse_part())

			self._expect("}", "to close the song")

			trailing = self._peek()
			if trailing is not None:
				raise self._error(f"Unexpected '{trailing.text}' after the end of the song", trailing)

		except NotationError as e:
			self._record(e)

		if self.errors:
			return None

		return NestedSongNode(parts=tuple(parts))


	def parse_part (self) -> PartNode:

		self._expect("{", "to open a part")
		blocks: typing.List[NestedBlockNode] = []

		block = self.parse_block()
		if block is not None:
			blocks.append(block)

		while self._at(","):

			self.index += 1
			block = self.parse_block()

			if block is not None:
				blocks.append(block)

		self._expect("}", "to close the part")

		return PartNode(blocks=tuple(blocks))


	def parse_block (self) -> typing.Optional[NestedBlockNode]:

		"""
		Parse one block; on a syntax error record it and skip to the block's end.
		"""

		opening = self._expect("{", "to open a block")

		try:
			return self._parse_block_body(opening)

		except NotationError as e:
			self._record(e)
			self._skip_block()
			return None


	def _parse_block_body (self, opening: _Token) -> NestedBlockNode:

		items: typing.List[typing.Union[NoteNode, GroupNode]] = []
		attributes: typing.List[AttributeNode] = []
		after_attribute = False

		while True:

			token = self._peek()

			if token is None:
				raise self._error("Unclosed block, expected '}'")

			if token.kind == "}":

				if not items:
					raise self._error("Block has no notes", opening)

				self.index += 1
				break

			if token.kind == "attribute":
				name, _, value = token.text.partition(":")
				attributes.append(AttributeNode(name=name, value=value))
				self.index += 1
				after_attribute = True
				continue

			if token.kind == "," and after_attribute:
				self.index += 1
				after_attribute = False
				continue

			if token.kind in ("note", "duration"):
				items.append(self.parse_item())
				after_attribute = False
				continue

			raise self._error(f"Unexpected '{token.text}' in block", token)

		return NestedBlockNode(items=tuple(items), attributes=tuple(attributes))


	def parse_item (self) -> typing.Union[NoteNode, GroupNode]:

		token = self._peek()

		if token is None:
			raise self._error("Expected a note, found end of text")

		if token.kind == "note":
			self.index += 1
			return NoteNode(value=token.text)

		if token.kind != "duration":
			raise self._error(f"Expected a note, found '{token.text}'", token)

		self.index += 1
		duration = token.text[:-1]
		following = self._peek()

		if following is not None and following.kind == "note":
			self.index += 1
			return NoteNode(value=following.text, duration=duration)

		self._expect("(", f"or a note after '{token.text}'")
		items: typing.List[typing.Union[NoteNode, GroupNode]] = []

		while True:

			inner = self._peek()

			if inner is not None and inner.kind == ")":
				self.index += 1
				break

			items.append(self.parse_item())

		if not items:
			raise self._error(f"Empty group after '{token.text}'", token)

		return GroupNode(duration=duration, items=tuple(items))


	def _skip_block (self) -> None:

		"""
		Advance past the closing brace of the block being parsed.
		"""

		depth = 1

		while self.index < len(self.tokens):

			kind = self.tokens[self.index].kind
			self.index += 1

			if kind == "{":
				depth += 1

			elif kind == "}":
				depth -= 1
				if depth == 0:
					return


def parse_nested (text: str) -> ParseResult:

	"""
	Parse the nested brace notation (song → parts → blocks).
	"""

	parser = _NestedParser(text)
	ast = parser.parse_song()

	if ast is None:
		return ParseResult(errors=parser.errors)

	return ParseResult(ast=ast)
