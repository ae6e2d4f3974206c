"""
Content comparison for articles.

Two separate comparisons with different consumers:

- ``document_changes``: whole-document, byte-length-based. Feeds change tracking;
  its output becomes ChangeRecord rows awaiting admin approval.
- ``line_changes``: line-oriented. Read-only, used by version comparison views.
"""

import logging
from dataclasses import dataclass, asdict
from typing import List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DocumentChange:
    """One whole-document delta (add / delete / modify)."""
    change_type: str
    old_text: Optional[str]
    new_text: Optional[str]
    position: int = 0


@dataclass(frozen=True)
class LineDiff:
    """One differing line between two snapshots."""
    line: int
    old: str
    new: str
    type: str = 'modified'

    def to_dict(self):
        return asdict(self)


class DiffEngine:
    """
    Compares two content snapshots.

    The document comparison is intentionally coarse: it looks only at the
    overall UTF-8 byte length of the two strings and always reports position 0.
    """

    ADD = 'add'
    DELETE = 'delete'
    MODIFY = 'modify'

    def document_changes(self, old: Optional[str], new: Optional[str]) -> List[DocumentChange]:
        old = old or ''
        new = new or ''

        if old == new:
            return []

        old_size = len(old.encode('utf-8'))
        new_size = len(new.encode('utf-8'))

        if new_size > old_size:
            change = DocumentChange(self.ADD, old_text=None, new_text=new)
        elif new_size < old_size:
            change = DocumentChange(self.DELETE, old_text=old, new_text=None)
        else:
            change = DocumentChange(self.MODIFY, old_text=old, new_text=new)

        logger.debug("Document diff: %s (%d -> %d bytes)", change.change_type, old_size, new_size)
        return [change]

    def line_changes(self, old: Optional[str], new: Optional[str]) -> List[LineDiff]:
        """
        Compare line by line; line numbers are 1-based.

        A line missing on either side compares as the empty string.
        """
        old_lines = (old or '').split('\n')
        new_lines = (new or '').split('\n')

        diffs = []
        for index in range(max(len(old_lines), len(new_lines))):
            old_line = old_lines[index] if index < len(old_lines) else ''
            new_line = new_lines[index] if index < len(new_lines) else ''
            if old_line != new_line:
                diffs.append(LineDiff(line=index + 1, old=old_line, new=new_line))
        return diffs


diff_engine = DiffEngine()
