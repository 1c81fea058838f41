"""The three-way verdict an oracle gives for one tested item."""

from enum import Enum


class Verdict(str, Enum):
    PASS = "pass"
    FAIL = "fail"
    IGNORE = "ignore"

    @classmethod
    def parse(cls, text: str, allow_ignore: bool = True) -> "Verdict | None":
        """Parse a user answer, accepting the usual synonyms.

        Args:
            text: Raw answer, case and surrounding whitespace ignored
            allow_ignore: Reject ignore/skip answers when False

        Returns:
            The verdict, or None if ``text`` is not a recognised answer
        """
        verdict = _SYNONYMS.get(text.strip().lower())
        if verdict is Verdict.IGNORE and not allow_ignore:
            return None
        return verdict


_SYNONYMS = {
    **dict.fromkeys(("p", "pass", "good", "g", "y", "yes"), Verdict.PASS),
    **dict.fromkeys(("f", "fail", "bad", "b", "n", "no"), Verdict.FAIL),
    **dict.fromkeys(("i", "ignore", "skip", "s"), Verdict.IGNORE),
}
