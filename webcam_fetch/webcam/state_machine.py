"""Webcam cache lifecycle state machine."""

from enum import Enum, auto
from typing import ClassVar

import structlog

from webcam_fetch.errors import FetchRequiredError, WebcamFetchError
from webcam_fetch.observability.logging import get_null_logger


class WebcamState(Enum):
    """Webcam cache states.

    State transitions:
        NEED_FETCH -> NEED_SHRINK: Retrieval completed
        NEED_FETCH -> NEED_SHRINK/READY: Freshness check found the local copy current
        NEED_SHRINK -> READY: Resize completed or skipped
        NEED_SHRINK/READY -> NEED_FETCH: Freshness check found the local copy stale
    """

    NEED_FETCH = auto()
    NEED_SHRINK = auto()
    READY = auto()


class WebcamStateError(WebcamFetchError):
    """Raised when an invalid state transition is attempted."""

    def __init__(self, from_state: WebcamState, to_state: WebcamState) -> None:
        """Initialize the error.

        Args:
            from_state: The current state.
            to_state: The attempted target state.
        """
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Invalid webcam state transition: {from_state.name} -> {to_state.name}"
        )


class WebcamStateMachine:
    """State machine for the fetch/resize lifecycle of one local file.

    While in NEED_FETCH the machine also remembers whether a resize is still
    owed, so a freshness check that finds the local copy current can resume
    in the right state.
    """

    VALID_TRANSITIONS: ClassVar[dict[WebcamState, set[WebcamState]]] = {
        WebcamState.NEED_FETCH: {
            WebcamState.NEED_SHRINK,
            WebcamState.READY,
        },
        WebcamState.NEED_SHRINK: {
            WebcamState.NEED_FETCH,
            WebcamState.READY,
        },
        WebcamState.READY: {
            WebcamState.NEED_FETCH,
        },
    }

    def __init__(
        self,
        shrink_pending: bool = True,
        log: structlog.typing.FilteringBoundLogger | None = None,
    ) -> None:
        """Initialize the state machine in NEED_FETCH state.

        Args:
            shrink_pending: Whether the current local copy still needs a resize.
            log: Bound logger, defaults to a no-op logger.
        """
        self._state = WebcamState.NEED_FETCH
        self._shrink_pending = shrink_pending
        self._log = (log or get_null_logger()).bind(component="state_machine")

    @property
    def state(self) -> WebcamState:
        """Get the current state."""
        return self._state

    @property
    def need_to_fetch(self) -> bool:
        """Whether a retrieval is pending."""
        return self._state == WebcamState.NEED_FETCH

    @property
    def need_to_shrink(self) -> bool:
        """Whether a resize is pending, now or after the next retrieval."""
        if self._state == WebcamState.NEED_FETCH:
            return self._shrink_pending
        return self._state == WebcamState.NEED_SHRINK

    def can_transition(self, to_state: WebcamState) -> bool:
        """Check if a transition to the given state is valid.

        Args:
            to_state: The target state.

        Returns:
            True if the transition is valid, False otherwise.
        """
        return to_state in self.VALID_TRANSITIONS.get(self._state, set())

    def transition(self, to_state: WebcamState) -> None:
        """Transition to a new state.

        Args:
            to_state: The target state.

        Raises:
            WebcamStateError: If the transition is invalid.
        """
        if not self.can_transition(to_state):
            self._log.error(
                "invariant_violation",
                error_type="illegal_state_transition",
                from_state=self._state.name,
                to_state=to_state.name,
            )
            raise WebcamStateError(self._state, to_state)

        old_state = self._state
        self._state = to_state
        self._log.debug(
            "webcam_state_transition",
            from_state=old_state.name,
            to_state=to_state.name,
        )

    def mark_stale(self) -> None:
        """Freshness check found the local copy missing or outdated."""
        if self._state == WebcamState.NEED_FETCH:
            return
        self._shrink_pending = self._state == WebcamState.NEED_SHRINK
        self.transition(WebcamState.NEED_FETCH)

    def mark_fresh(self) -> None:
        """Freshness check found the local copy current."""
        if self._state != WebcamState.NEED_FETCH:
            return
        target = WebcamState.NEED_SHRINK if self._shrink_pending else WebcamState.READY
        self.transition(target)

    def mark_fetched(self) -> None:
        """A retrieval completed; the new copy needs a resize."""
        self.transition(WebcamState.NEED_SHRINK)

    def mark_shrunk(self) -> None:
        """The resize completed, or there was nothing to resize."""
        if self._state == WebcamState.NEED_FETCH:
            self._shrink_pending = False
            return
        self.transition(WebcamState.READY)

    def require_fetched(self) -> None:
        """Reject operations that need a completed retrieval.

        Raises:
            FetchRequiredError: If a retrieval is pending.
        """
        if self._state == WebcamState.NEED_FETCH:
            self._log.error(
                "invariant_violation",
                error_type="retrieve_required",
                state=self._state.name,
            )
            msg = "Please retrieve the remote file first!"
            raise FetchRequiredError(msg)
