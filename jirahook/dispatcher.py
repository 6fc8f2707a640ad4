import logging

from .entities import Action, DispatchAction, PullRequestState
from .jira import Formatter


__all__ = ["TransitionDispatcher", "resolve_dispatch_action"]


logger = logging.getLogger(__name__)


def _closed_action(pull_request):
    if pull_request.merged:
        return DispatchAction.MERGE
    else:
        return DispatchAction.CLOSE


def resolve_dispatch_action(event):
    """
    Map an incoming event to ``(annotate, dispatch_action)``.  An edit is
    dispatched according to the pull request's current state, since a
    closed pull request can still be edited.
    """
    if event.action in (Action.OPENED, Action.REOPENED):
        return True, DispatchAction.OPEN
    elif event.action == Action.CLOSED:
        return False, _closed_action(event.pull_request)
    elif event.action == Action.EDITED:
        if event.pull_request.state == PullRequestState.OPEN:
            return True, DispatchAction.OPEN
        else:
            return True, _closed_action(event.pull_request)
    else:
        raise ValueError(f"Unhandled action {event.action}")


class TransitionDispatcher:
    def __init__(self, config, extractor, jira_client, dry_run=False):
        self._config = config
        self._extractor = extractor
        self._jira_client = jira_client
        self._formatter = Formatter()
        self.dry_run = dry_run

    def get_issue_keys(self, event):
        if self._config.jira.require_linking_keyword:
            return self._extractor.find_linking_keys(event.pull_request.body)
        else:
            return self._extractor.find_issue_keys(event.pull_request.body)

    def dispatch(self, event, dispatch_action):
        """
        Transition every issue referenced by ``event`` and return the set of
        issue keys whose calls failed.  A failure never stops the remaining
        issues from being processed.
        """
        issue_keys = self.get_issue_keys(event)
        if not issue_keys:
            logger.info("%s references no JIRA issues", event)
            return set()

        transition = self._config.get_transition(dispatch_action)
        if transition is None:
            logger.info("No JIRA transition configured for %s, skipping %s", dispatch_action, ", ".join(issue_keys))

        create_comment = self._config.jira.create_tracking_comment and event.action in (Action.OPENED, Action.REOPENED)

        failed = set()
        for issue_key in issue_keys:
            if transition is not None and not self._transition(issue_key, transition):
                failed.add(issue_key)

            if create_comment and not self._comment(issue_key, event):
                failed.add(issue_key)

        return failed

    def _transition(self, issue_key, transition):
        logger.info("Performing %s on issue %s with fields %s", transition, issue_key, transition.fields)
        if self.dry_run:
            logger.info("Skipping issue transition due to dry run")
            return True

        result = self._jira_client.transition_issue(issue_key, transition)
        if not result:
            logger.error(
                "Failed to perform %s on issue %s with fields %s: %s",
                transition,
                issue_key,
                transition.fields,
                result.error,
            )

        return result.ok

    def _comment(self, issue_key, event):
        body = self._formatter.format_tracking_comment(event)

        logger.info("Creating comment on issue %s: %s", issue_key, body)
        if self.dry_run:
            logger.info("Skipping comment creation due to dry run")
            return True

        result = self._jira_client.add_comment(issue_key, body)
        if not result:
            logger.error("Failed to create comment on issue %s: %s", issue_key, result.error)

        return result.ok
