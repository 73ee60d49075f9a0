"""
Lender Name Heuristic

Only used when the row carries no explicit Giver_Name. Rules are tried
in order and the first match wins:

1. notes contain " form "  ("Loan taken form Maya" - the sheet's own typo)
2. notes contain " from "
3. notes contain " of "    ("Repayment of Marwadi")
4. item is "<Name> Loan" or "<Name> Borrowing"

No match leaves the lender unresolved. That is not an error.
"""

import re
from typing import Optional


_NOTE_SEPARATORS = (" form ", " from ", " of ")
_LOAN_WORDS = frozenset({"loan", "borrowing"})


def _text_after(notes: str, separator: str) -> Optional[str]:
    tail = re.split(re.escape(separator), notes, flags=re.IGNORECASE)[-1].strip()
    return tail or None


def extract_lender(notes: str, item: str) -> Optional[str]:
    """Guess the lender from free-text notes or the item label."""
    lowered = notes.lower()
    for separator in _NOTE_SEPARATORS:
        if separator in lowered:
            return _text_after(notes, separator)

    words = item.split()
    if len(words) > 1 and words[1].lower() in _LOAN_WORDS:
        return words[0].strip()

    return None
