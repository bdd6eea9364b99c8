"""
Undo/Redo History System
Bounded stacks of serialized document snapshots
"""
from typing import Any, Dict, List, Optional

DEFAULT_MAX_HISTORY = 10


class HistoryEntry:
    """Serialized snapshot of a document plus the change that replaced it"""

    def __init__(self, snapshot: str, description: str = ""):
        self.snapshot = snapshot
        self.description = description


class HistoryManager:
    """Manages the undo and redo stacks"""

    def __init__(self, max_history: int = DEFAULT_MAX_HISTORY):
        if max_history < 1:
            raise ValueError("max_history must be at least 1")
        self.max_history = max_history
        self.undo_stack: List[HistoryEntry] = []
        self.redo_stack: List[HistoryEntry] = []

    def _push(self, stack: List[HistoryEntry], entry: HistoryEntry):
        stack.append(entry)

        # Oldest entries are evicted first
        while len(stack) > self.max_history:
            stack.pop(0)

    def push_undo(self, entry: HistoryEntry):
        self._push(self.undo_stack, entry)

    def push_redo(self, entry: HistoryEntry):
        self._push(self.redo_stack, entry)

    def record(self, entry: HistoryEntry):
        """Record a new forward edit, invalidating redo history"""
        self.push_undo(entry)
        self.redo_stack.clear()

    def pop_undo(self) -> Optional[HistoryEntry]:
        if not self.can_undo():
            return None
        return self.undo_stack.pop()

    def pop_redo(self) -> Optional[HistoryEntry]:
        if not self.can_redo():
            return None
        return self.redo_stack.pop()

    def can_undo(self) -> bool:
        """Check if undo is available"""
        return len(self.undo_stack) > 0

    def can_redo(self) -> bool:
        """Check if redo is available"""
        return len(self.redo_stack) > 0

    def get_undo_description(self) -> str:
        """Get description of the change that would be undone"""
        if self.can_undo():
            return self.undo_stack[-1].description
        return ""

    def get_redo_description(self) -> str:
        """Get description of the change that would be redone"""
        if self.can_redo():
            return self.redo_stack[-1].description
        return ""

    def clear(self):
        """Clear all history"""
        self.undo_stack.clear()
        self.redo_stack.clear()

    def get_history_info(self) -> Dict[str, Any]:
        """Get information about current history state"""
        return {
            'undo_count': len(self.undo_stack),
            'redo_count': len(self.redo_stack),
            'max_history': self.max_history,
            'can_undo': self.can_undo(),
            'can_redo': self.can_redo()
        }
