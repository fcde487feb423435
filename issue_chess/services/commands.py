"""Decode a proposal descriptor (ex. "chess|move|e2e4|12") into a Command and the GameIdentity it targets."""

from issue_chess.core.exceptions import ParseError
from issue_chess.core.models import DESCRIPTOR_SEPARATOR, Command, GameIdentity
from issue_chess.core.shared_types import CommandKind


def decode_descriptor(
    descriptor: str, fallback_sequence: str
) -> tuple[Command, GameIdentity]:
    """
    Descriptor format: namespace|command|moveNotation|sequence
    ----

    * command is "new" or "move"
    * moveNotation is required for "move", ignored for "new"
    * sequence identifies the game. When absent, `fallback_sequence` (the proposal's own id) is used.

    Raises ParseError for anything else. Pure function: same input, same output.
    """
    fields = [part.strip() for part in descriptor.split(DESCRIPTOR_SEPARATOR)]
    # pad missing trailing fields
    fields += [""] * (4 - len(fields))
    namespace, command_name, move_notation, sequence = fields[:4]

    if not namespace:
        raise ParseError(f"No game name found in {descriptor!r}.")

    if command_name not in [kind.value for kind in CommandKind]:
        raise ParseError(
            f"Unknown command {command_name!r}. Pick one from {', '.join(CommandKind)}."
        )
    kind = CommandKind(command_name)

    if kind == CommandKind.MOVE and not move_notation:
        raise ParseError(f"No move given in {descriptor!r}.")

    sequence = sequence or str(fallback_sequence)
    command = Command(
        kind=kind,
        move_notation=move_notation if kind == CommandKind.MOVE else "",
        sequence=sequence,
    )
    return command, GameIdentity(namespace=namespace, sequence=sequence)


def format_descriptor(command: Command, identity: GameIdentity) -> str:
    """Canonical descriptor for a decoded proposal: no stray whitespace, all four fields present."""
    return DESCRIPTOR_SEPARATOR.join(
        [identity.namespace, command.kind, command.move_notation, command.sequence]
    )
