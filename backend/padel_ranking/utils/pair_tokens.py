"""
Canonical parser for participant tokens.

A token is either a bare player id ("p7", or a uuid with hyphens), a pair
"id1::id2", or the BYE sentinel. The legacy "id1-id2" encoding is only
accepted when the caller opts in, and only when the split is unambiguous
(exactly one hyphen). Anything else is rejected instead of guessed.
"""
from typing import List, Tuple, Union

from padel_ranking.exceptions import InvalidParticipantTokenError
from padel_ranking.models.domain import BYE, MatchPair

PAIR_SEPARATOR = "::"
LEGACY_SEPARATOR = "-"


def parse_participant_token(token: str, legacy_hyphen_pairs: bool = False) -> Tuple[str, str]:
    """
    Split a token into (p1_id, p2_id). p2_id is "" for individuals and BYE.

    Raises InvalidParticipantTokenError for empty tokens, malformed "::" pairs,
    and legacy hyphen tokens whose split is ambiguous.
    """
    if token is None or not str(token).strip():
        raise InvalidParticipantTokenError("Participant token is empty")
    token = str(token).strip()

    if token == BYE:
        return BYE, ""

    if PAIR_SEPARATOR in token:
        parts = token.split(PAIR_SEPARATOR)
        if len(parts) != 2 or not parts[0] or not parts[1]:
            raise InvalidParticipantTokenError(f"Malformed pair token: '{token}'")
        return parts[0], parts[1]

    if legacy_hyphen_pairs and LEGACY_SEPARATOR in token:
        parts = token.split(LEGACY_SEPARATOR)
        if len(parts) != 2 or not parts[0] or not parts[1]:
            raise InvalidParticipantTokenError(
                f"Ambiguous legacy pair token '{token}'; re-import it as 'id1{PAIR_SEPARATOR}id2'"
            )
        return parts[0], parts[1]

    return token, ""


def pair_from_token(token: str, legacy_hyphen_pairs: bool = False) -> MatchPair:
    p1_id, p2_id = parse_participant_token(token, legacy_hyphen_pairs)
    return MatchPair(p1_id=p1_id, p2_id=p2_id)


def token_player_ids(tokens: List[str], legacy_hyphen_pairs: bool = False) -> List[str]:
    """Individual player ids contained in a token list, BYE excluded, order preserved."""
    ids: List[str] = []
    for token in tokens:
        for pid in parse_participant_token(token, legacy_hyphen_pairs):
            if pid and pid != BYE:
                ids.append(pid)
    return ids


def as_pair(value: Union[str, MatchPair], legacy_hyphen_pairs: bool = False) -> MatchPair:
    if isinstance(value, MatchPair):
        return MatchPair(p1_id=value.p1_id, p2_id=value.p2_id)
    return pair_from_token(value, legacy_hyphen_pairs)
