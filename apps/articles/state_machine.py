"""
Article Workflow State Machine.

Single authority for the editorial status lifecycle:
- One transition table keyed by workflow action
- Status validation for every action funnels through ``ArticleStateMachine``
- On-enter hooks for side fields stamped on arrival in a state
- Persistent status history (ArticleStatusChange rows)

Primary states:
    draft → submitted → under_review → approved → published
                ↓            ↓    ↘
             rejected     rejected  revision_requested

Extended states (reachable only through the actions that produce them):
    ready_for_review     all pending tracked changes approved
    revision_pending     author asked to revise a rejected article
    revision_approved    admin approved the author's revision request
    review_rejected      accepted as a source of request_revision

Usage:
    machine = ArticleStateMachine(article)
    machine.transition(WorkflowAction.SUBMIT, actor_id=user.pk)
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Set

from django.utils import timezone

from apps.core.exceptions import InvalidStateTransition

logger = logging.getLogger(__name__)


class ArticleStatus(Enum):
    """Valid article statuses."""
    DRAFT = 'draft'
    SUBMITTED = 'submitted'
    UNDER_REVIEW = 'under_review'
    REVISION_REQUESTED = 'revision_requested'
    REJECTED = 'rejected'
    APPROVED = 'approved'
    PUBLISHED = 'published'

    # Extended statuses
    READY_FOR_REVIEW = 'ready_for_review'
    REVISION_PENDING = 'revision_pending'
    REVISION_APPROVED = 'revision_approved'
    REVIEW_REJECTED = 'review_rejected'

    @classmethod
    def from_string(cls, value: str) -> 'ArticleStatus':
        """Convert string to ArticleStatus."""
        for state in cls:
            if state.value == value:
                return state
        raise ValueError(f"Unknown status: {value}")

    @classmethod
    def choices(cls):
        return [(state.value, state.label) for state in cls]

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def is_terminal(self) -> bool:
        """Check if this is a terminal state (no further transitions)."""
        return self is ArticleStatus.PUBLISHED

    @property
    def is_extended(self) -> bool:
        return self in EXTENDED_STATES


_LABELS = {
    ArticleStatus.DRAFT: 'Draft',
    ArticleStatus.SUBMITTED: 'Submitted for Review',
    ArticleStatus.UNDER_REVIEW: 'Under Review',
    ArticleStatus.REVISION_REQUESTED: 'Revision Requested',
    ArticleStatus.REJECTED: 'Rejected',
    ArticleStatus.APPROVED: 'Approved',
    ArticleStatus.PUBLISHED: 'Published',
    ArticleStatus.READY_FOR_REVIEW: 'Ready for Review',
    ArticleStatus.REVISION_PENDING: 'Revision Pending',
    ArticleStatus.REVISION_APPROVED: 'Revision Approved',
    ArticleStatus.REVIEW_REJECTED: 'Review Rejected',
}

EXTENDED_STATES: FrozenSet[ArticleStatus] = frozenset({
    ArticleStatus.READY_FOR_REVIEW,
    ArticleStatus.REVISION_PENDING,
    ArticleStatus.REVISION_APPROVED,
    ArticleStatus.REVIEW_REJECTED,
})

NON_TERMINAL_STATES: FrozenSet[ArticleStatus] = frozenset(
    state for state in ArticleStatus if not state.is_terminal
)


class WorkflowAction(Enum):
    """Actions that move an article between statuses."""
    SUBMIT = 'submit'
    APPROVE = 'approve'
    REJECT = 'reject'
    ASSIGN_REVIEWER = 'assign_reviewer'
    REASSIGN_REVIEWER = 'reassign_reviewer'
    ACCEPT_REVIEW = 'accept_review'
    REJECT_REVIEW = 'reject_review'
    REQUEST_REVIEW_REVISION = 'request_review_revision'
    PUBLISH = 'publish'
    REQUEST_REVISION = 'request_revision'
    OPEN_REVISION_REQUEST = 'open_revision_request'
    APPROVE_REVISION = 'approve_revision'
    REJECT_REVISION = 'reject_revision'
    COMPLETE_REVISION = 'complete_revision'
    APPROVE_CHANGES = 'approve_changes'


@dataclass(frozen=True)
class Transition:
    """One row of the transition table."""
    action: WorkflowAction
    sources: FrozenSet[ArticleStatus]
    target: ArticleStatus
    description: str = ''


def _row(action, sources, target, description=''):
    return action, Transition(action, frozenset(sources), target, description)


TRANSITIONS: Dict[WorkflowAction, Transition] = dict([
    _row(WorkflowAction.SUBMIT,
         {ArticleStatus.DRAFT}, ArticleStatus.SUBMITTED,
         'Author submits a draft'),
    _row(WorkflowAction.APPROVE,
         {ArticleStatus.SUBMITTED}, ArticleStatus.APPROVED,
         'Admin approves a submitted article'),
    _row(WorkflowAction.REJECT,
         {ArticleStatus.SUBMITTED, ArticleStatus.UNDER_REVIEW}, ArticleStatus.REJECTED,
         'Admin rejects with a reason'),
    _row(WorkflowAction.ASSIGN_REVIEWER,
         {ArticleStatus.SUBMITTED, ArticleStatus.UNDER_REVIEW}, ArticleStatus.UNDER_REVIEW,
         'Admin routes the article to a reviewer'),
    _row(WorkflowAction.REASSIGN_REVIEWER,
         NON_TERMINAL_STATES, ArticleStatus.UNDER_REVIEW,
         'Admin starts another review round after a completed one'),
    _row(WorkflowAction.ACCEPT_REVIEW,
         {ArticleStatus.UNDER_REVIEW}, ArticleStatus.APPROVED,
         'Reviewer accepts'),
    _row(WorkflowAction.REJECT_REVIEW,
         {ArticleStatus.UNDER_REVIEW}, ArticleStatus.REJECTED,
         'Reviewer rejects'),
    _row(WorkflowAction.REQUEST_REVIEW_REVISION,
         {ArticleStatus.UNDER_REVIEW}, ArticleStatus.REVISION_REQUESTED,
         'Reviewer asks for a revision'),
    _row(WorkflowAction.PUBLISH,
         {ArticleStatus.APPROVED}, ArticleStatus.PUBLISHED,
         'Admin publishes an approved article'),
    _row(WorkflowAction.REQUEST_REVISION,
         {ArticleStatus.REJECTED, ArticleStatus.REVIEW_REJECTED}, ArticleStatus.REVISION_PENDING,
         'Author asks to revise a rejected article'),
    _row(WorkflowAction.OPEN_REVISION_REQUEST,
         NON_TERMINAL_STATES, ArticleStatus.REVISION_REQUESTED,
         'Admin asks the author for a revision'),
    _row(WorkflowAction.APPROVE_REVISION,
         NON_TERMINAL_STATES, ArticleStatus.REVISION_APPROVED,
         'Admin approves the pending revision request'),
    _row(WorkflowAction.REJECT_REVISION,
         NON_TERMINAL_STATES, ArticleStatus.REJECTED,
         'Admin rejects the pending revision request'),
    _row(WorkflowAction.COMPLETE_REVISION,
         NON_TERMINAL_STATES, ArticleStatus.DRAFT,
         'Author completes a revision; article returns to draft'),
    _row(WorkflowAction.APPROVE_CHANGES,
         NON_TERMINAL_STATES, ArticleStatus.READY_FOR_REVIEW,
         'Last pending tracked change approved'),
])


def _valid_transitions() -> Dict[ArticleStatus, Set[ArticleStatus]]:
    graph: Dict[ArticleStatus, Set[ArticleStatus]] = {state: set() for state in ArticleStatus}
    for transition in TRANSITIONS.values():
        for source in transition.sources:
            graph[source].add(transition.target)
    return graph


# Status graph derived from TRANSITIONS
VALID_TRANSITIONS: Dict[ArticleStatus, Set[ArticleStatus]] = _valid_transitions()


@dataclass
class StateTransition:
    """Record of an applied transition."""
    action: WorkflowAction
    from_state: ArticleStatus
    to_state: ArticleStatus
    timestamp: datetime
    actor_id: Any = None
    note: str = ''


@dataclass
class TransitionContext:
    """Context passed to on-enter hooks."""
    article: Any  # Article model instance
    action: WorkflowAction
    from_state: ArticleStatus
    to_state: ArticleStatus
    actor_id: Any = None
    metadata: Dict[str, Any] = field(default_factory=dict)


HookFunction = Callable[[TransitionContext], None]


class ArticleStateMachine:
    """
    State machine for the editorial workflow of one article.

    The caller is responsible for holding the article row lock (the workflow
    service wraps every call in ``transaction.atomic`` + ``select_for_update``).
    """

    _global_on_enter_hooks: Dict[ArticleStatus, List[HookFunction]] = {}

    def __init__(self, article):
        self.article = article
        self._history: List[StateTransition] = []

    @property
    def current_state(self) -> ArticleStatus:
        return ArticleStatus.from_string(self.article.status)

    @property
    def history(self) -> List[StateTransition]:
        """Transitions applied through this instance."""
        return self._history.copy()

    def can(self, action: WorkflowAction) -> bool:
        return self.current_state in TRANSITIONS[action].sources

    def available_actions(self) -> List[WorkflowAction]:
        current = self.current_state
        return [action for action, t in TRANSITIONS.items() if current in t.sources]

    def ensure(self, action: WorkflowAction) -> Transition:
        """Return the transition for ``action`` or raise InvalidStateTransition."""
        transition = TRANSITIONS[action]
        current = self.current_state
        if current not in transition.sources:
            logger.warning(
                "Refused %s for article %s in status %s",
                action.value, self.article.pk, current.value,
            )
            raise InvalidStateTransition(
                f"Cannot {action.value.replace('_', ' ')} an article "
                f"in status '{current.value}'",
                details={
                    'action': action.value,
                    'status': current.value,
                    'allowed_from': sorted(s.value for s in transition.sources),
                },
            )
        return transition

    def transition(
        self,
        action: WorkflowAction,
        actor_id: Any = None,
        note: str = '',
        metadata: Optional[Dict[str, Any]] = None,
    ) -> StateTransition:
        """
        Apply ``action`` to the article and persist the new status.

        Raises:
            InvalidStateTransition: the current status is not a source of the action
        """
        from .models import ArticleStatusChange

        transition = self.ensure(action)
        current = self.current_state

        context = TransitionContext(
            article=self.article,
            action=action,
            from_state=current,
            to_state=transition.target,
            actor_id=actor_id,
            metadata=metadata or {},
        )
        self._run_on_enter_hooks(transition.target, context)

        self.article.status = transition.target.value
        self.article.save()

        ArticleStatusChange.objects.create(
            article=self.article,
            from_status=current.value,
            to_status=transition.target.value,
            action=action.value,
            actor_id=actor_id,
            note=note,
        )

        record = StateTransition(
            action=action,
            from_state=current,
            to_state=transition.target,
            timestamp=timezone.now(),
            actor_id=actor_id,
            note=note,
        )
        self._history.append(record)

        logger.info(
            f"Article {self.article.pk} transitioned: "
            f"{current.value} → {transition.target.value} ({action.value})"
        )
        return record

    @classmethod
    def register_on_enter(cls, state: ArticleStatus, hook: HookFunction):
        """Register a hook to run (inside the transaction) when entering a state."""
        cls._global_on_enter_hooks.setdefault(state, []).append(hook)

    def _run_on_enter_hooks(self, state: ArticleStatus, context: TransitionContext):
        for hook in self._global_on_enter_hooks.get(state, []):
            hook(context)


def _stamp_published_at(context: TransitionContext):
    context.article.published_at = timezone.now()


ArticleStateMachine.register_on_enter(ArticleStatus.PUBLISHED, _stamp_published_at)
