"""Unit tests for issue_chess/services/commands.py"""

import pytest

from issue_chess.core.exceptions import ParseError
from issue_chess.core.models import Command, GameIdentity
from issue_chess.core.shared_types import CommandKind
from issue_chess.services.commands import decode_descriptor, format_descriptor


@pytest.mark.parametrize(
    "descriptor, expected_command, expected_identity",
    [
        (
            "game|new||1",
            Command(CommandKind.NEW, "", "1"),
            GameIdentity("game", "1"),
        ),
        (
            "chess|new",
            Command(CommandKind.NEW, "", "99"),
            GameIdentity("chess", "99"),
        ),
        (
            "chess|move|e2e4|12",
            Command(CommandKind.MOVE, "e2e4", "12"),
            GameIdentity("chess", "12"),
        ),
        (
            "chess|move|e2e4",
            Command(CommandKind.MOVE, "e2e4", "99"),
            GameIdentity("chess", "99"),
        ),
        (
            " chess | move | Nf3 | 4 ",
            Command(CommandKind.MOVE, "Nf3", "4"),
            GameIdentity("chess", "4"),
        ),
        (
            # a move given with "new" is ignored
            "chess|new|e2e4|5",
            Command(CommandKind.NEW, "", "5"),
            GameIdentity("chess", "5"),
        ),
    ],
)
def test_decode(
    descriptor: str, expected_command: Command, expected_identity: GameIdentity
) -> None:
    command, identity = decode_descriptor(descriptor, "99")
    assert command == expected_command
    assert identity == expected_identity


def test_decode_is_deterministic() -> None:
    assert decode_descriptor("chess|move|g1f3|2", "8") == decode_descriptor(
        "chess|move|g1f3|2", "8"
    )


@pytest.mark.parametrize(
    "descriptor",
    [
        "",
        "chess",
        "chess|",
        "chess|castle|e1g1|1",
        "chess|NEW",
        "chess|move",
        "chess|move||1",
        "chess|move|   |1",
        "|move|e2e4|1",
    ],
)
def test_malformed_descriptors(descriptor: str) -> None:
    with pytest.raises(ParseError):
        decode_descriptor(descriptor, "1")


@pytest.mark.parametrize(
    "descriptor, expected",
    [
        (" chess | move | d8h4 | 1 ", "chess|move|d8h4|1"),
        ("chess|move|e2e4", "chess|move|e2e4|7"),
        ("chess|new", "chess|new||7"),
        ("chess|new|e2e4|3", "chess|new||3"),
    ],
)
def test_format_canonical_descriptor(descriptor: str, expected: str) -> None:
    command, identity = decode_descriptor(descriptor, "7")
    assert format_descriptor(command, identity) == expected
