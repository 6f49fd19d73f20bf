"""
Field classification: cell tokens -> subject, teacher(s), room.

The first token is always the subject and the second the main teacher.
Whether a later token is a room or another teacher is decided by content
(looks_like_classroom), and for four-token cells by a configurable policy.
"""

import re

import structlog

from .errors import SlotParseError
from .models import FourTokenPolicy, SlotFields, TaggedToken, TokenKind

logger = structlog.get_logger()

CLASSROOM_KEYWORDS = ("LAB", "SCIENZE", "PAL", "TE", "AULA", "ROOM", "PALAESTRA")


def looks_like_classroom(text: str) -> bool:
    """
    Guess whether a token names a room rather than a teacher.

    Examples:
    - "AULA 12" -> True
    - "LAB3" -> True
    - "Mario Rossi" -> False
    """
    if not text:
        return False
    upper = text.upper()
    return any(keyword in upper for keyword in CLASSROOM_KEYWORDS) or re.search(r"\d", text, re.ASCII) is not None


def _tag_four_token_tail(
        third: str,
        fourth: str,
        policy: FourTokenPolicy
) -> list[TaggedToken]:
    """Tag the last two tokens of a four-token cell."""
    if policy is FourTokenPolicy.POSITIONAL:
        return [TaggedToken(TokenKind.TEACHER, third), TaggedToken(TokenKind.ROOM, fourth)]

    tagged = []
    room_set = False
    teacher_set = False
    for text in (third, fourth):
        # Once the second teacher is known the remaining token has to be the room
        if not room_set and (looks_like_classroom(text) or teacher_set):
            tagged.append(TaggedToken(TokenKind.ROOM, text))
            room_set = True
        else:
            tagged.append(TaggedToken(TokenKind.TEACHER, text))
            teacher_set = True
    return tagged


def tag_tokens(
        tokens: list[str],
        four_token_policy: FourTokenPolicy = FourTokenPolicy.HEURISTIC
) -> list[TaggedToken]:
    """
    Tag every token of a cell with the field it belongs to.

    Args:
        tokens: Cell tokens in document order
        four_token_policy: Rule for cells with exactly four tokens

    Returns:
        One TaggedToken per input token

    Raises:
        SlotParseError: Fewer than two tokens
    """
    if len(tokens) < 2:
        raise SlotParseError("insufficient lesson data", tokens)

    tagged = [
        TaggedToken(TokenKind.SUBJECT, tokens[0]),
        TaggedToken(TokenKind.TEACHER, tokens[1]),
    ]
    rest = tokens[2:]

    match len(tokens):
        case 2:
            pass
        case 3:
            kind = TokenKind.ROOM if looks_like_classroom(rest[0]) else TokenKind.TEACHER
            tagged.append(TaggedToken(kind, rest[0]))
        case 4:
            tagged.extend(_tag_four_token_tail(rest[0], rest[1], four_token_policy))
        case 5:
            # Room split over two fragments, e.g. "LAB" + "3"
            tagged.append(TaggedToken(TokenKind.TEACHER, rest[0]))
            tagged.append(TaggedToken(TokenKind.ROOM, rest[1]))
            tagged.append(TaggedToken(TokenKind.ROOM, rest[2]))
        case _:
            tagged.append(TaggedToken(TokenKind.TEACHER, rest[0]))
            tagged.extend(TaggedToken(TokenKind.IGNORED, text) for text in rest[1:-1])
            tagged.append(TaggedToken(TokenKind.ROOM, rest[-1]))
            logger.debug("cell_tokens_ignored", tokens=tokens, ignored=rest[1:-1])

    return tagged


def classify_tokens(
        tokens: list[str],
        four_token_policy: FourTokenPolicy = FourTokenPolicy.HEURISTIC
) -> SlotFields:
    """
    Classify cell tokens into subject, teacher and room.

    Teachers are joined with ", ", room fragments are concatenated.

    Raises:
        SlotParseError: Insufficient tokens, or no subject / main teacher
    """
    tagged = tag_tokens(tokens, four_token_policy)

    subject = tagged[0].text
    main_teacher = tagged[1].text
    if not subject:
        raise SlotParseError("missing subject", tokens)
    if not main_teacher:
        raise SlotParseError("missing teacher", tokens)

    teachers = [t.text for t in tagged if t.kind is TokenKind.TEACHER and t.text]
    room = "".join(t.text for t in tagged if t.kind is TokenKind.ROOM)

    return SlotFields(subject=subject, teacher=", ".join(teachers), room=room)
