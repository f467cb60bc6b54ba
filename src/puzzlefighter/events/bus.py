from blinker import Signal
from typing import Dict

class EventBus:
    """Simple event bus leveraging blinker Signal objects."""
    def __init__(self):
        self._signals: Dict[str, Signal] = {}

    def subscribe(self, name: str, fn):
        sig = self._signals.setdefault(name, Signal(name))
        # Strong references so systems that are not stored elsewhere keep receiving events.
        sig.connect(fn, weak=False)

    def emit(self, name: str, **payload):
        sig = self._signals.get(name)
        if sig:
            sig.send(self, **payload)


# ============================================================================
# SYSTEM & TIMING
# ============================================================================
EVENT_TICK = "tick"                                # payload: dt=float


# ============================================================================
# INPUT
# ============================================================================
EVENT_KEY_PRESS = "key_press"                      # payload: symbol=int, modifiers=int
EVENT_KEY_RELEASE = "key_release"                  # payload: symbol=int, modifiers=int
EVENT_BOARD_INPUT = "board_input"                  # payload: board_index=int, action=str, pressed=bool


# ============================================================================
# ROUND LIFECYCLE
# ============================================================================
EVENT_ROUND_PHASE_CHANGED = "round_phase_changed"  # payload: board=int, previous=RoundPhase, phase=RoundPhase
EVENT_CELLS_SPAWNED = "cells_spawned"              # payload: board=int, round=int, cells=list[Cell], source=str
EVENT_CELLS_FIXED = "cells_fixed"                  # payload: board=int, cells=list[Cell]
EVENT_CELLS_CLEARED = "cells_cleared"              # payload: board=int, round=int, cells=list[Cell], score=int
EVENT_GROUPS_COMBINED = "groups_combined"          # payload: board=int, groups=list[CellGroup], dropped=int
EVENT_ROUND_SCORED = "round_scored"                # payload: board=int, round=int, delta=int, score=int, all_clear=bool


# ============================================================================
# VERSUS
# ============================================================================
EVENT_ATTACK_SENT = "attack_sent"                  # payload: source=int, target=int, amount=int
EVENT_COUNTER_QUEUED = "counter_queued"            # payload: board=int, count=int
EVENT_BOARD_LOST = "board_lost"                    # payload: board=int, round=int
EVENT_BOARD_WON = "board_won"                      # payload: board=int
