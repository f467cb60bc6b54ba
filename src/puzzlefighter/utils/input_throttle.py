from __future__ import annotations

from dataclasses import dataclass, field
from time import monotonic
from typing import Callable, Dict, Hashable, Tuple

ThrottleKey = Tuple[int, Hashable]


@dataclass(slots=True)
class InputThrottle:
	"""Re-acceptance windows for board actions, keyed by (board index, action).

	Controls report how long they want to be left alone after a successful
	move (see ``RoundStateMachine.move_horizontal``); callers record that with
	``block`` and check ``allow`` before applying the next press.
	"""

	clock: Callable[[], float] | None = field(default=None, repr=False)

	_clock: Callable[[], float] = field(init=False, repr=False)
	_blocked_until: Dict[ThrottleKey, float] = field(init=False, repr=False)

	def __post_init__(self) -> None:
		self._clock = self.clock or monotonic
		self._blocked_until = {}

	def allow(self, board: int, action: Hashable) -> bool:
		until = self._blocked_until.get((board, action))
		if until is None:
			return True
		return self._clock() >= until

	def block(self, board: int, action: Hashable, duration: float) -> None:
		if duration <= 0.0:
			return
		key = (board, action)
		until = self._clock() + float(duration)
		if until > self._blocked_until.get(key, 0.0):
			self._blocked_until[key] = until

	def remaining(self, board: int, action: Hashable) -> float:
		until = self._blocked_until.get((board, action))
		if until is None:
			return 0.0
		return max(0.0, until - self._clock())

	def reset(self, board: int | None = None) -> None:
		if board is None:
			self._blocked_until.clear()
			return
		for key in [key for key in self._blocked_until if key[0] == board]:
			del self._blocked_until[key]
