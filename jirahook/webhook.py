import json
import logging
import os

from .entities import Action, Outcome
from .signature import is_valid_signature
from .utils import IssueKeyExtractor
from .dispatcher import TransitionDispatcher, resolve_dispatch_action

from . import jira, github


__all__ = ["WebhookProcessor", "get_secret"]


logger = logging.getLogger(__name__)


_HANDLED_ACTIONS = {a.value for a in Action}

_SIGNATURE_HEADERS = ["x-hub-signature-256", "x-hub-signature"]


def get_secret():
    return os.environ.get("SECRET")


class WebhookProcessor:
    @classmethod
    def from_config(cls, config, dry_run=False):
        secret = get_secret()
        if not secret:
            raise RuntimeError("Missing webhook secret.  Set the SECRET environment variable.")

        jira_client = jira.Client.from_config(config)
        github_client = github.Client.from_config(config)

        return cls(config=config, secret=secret, jira_client=jira_client, github_client=github_client, dry_run=dry_run)

    def __init__(self, config, secret, jira_client, github_client, dry_run=False):
        self._config = config
        self._secret = secret

        extractor = IssueKeyExtractor.from_config(config)
        self._annotator = github.Annotator(extractor, github_client, dry_run=dry_run)
        self._dispatcher = TransitionDispatcher(config, extractor, jira_client, dry_run=dry_run)

        self.dry_run = dry_run

    def handle(self, body, headers):
        """
        Authenticate and process one webhook delivery.  Once the signature
        checks out, the result is PROCESSED or IGNORED no matter how the
        GitHub and JIRA calls went.
        """
        headers = {k.lower(): v for k, v in headers.items()}

        signature = next((headers[h] for h in _SIGNATURE_HEADERS if headers.get(h)), None)
        if not is_valid_signature(body, signature, self._secret):
            logger.warning("Rejected webhook delivery %s with invalid signature", headers.get("x-github-delivery"))
            return Outcome.REJECTED

        event_name = headers.get("x-github-event")
        if event_name and event_name != "pull_request":
            logger.info("Ignoring %s event", event_name)
            return Outcome.IGNORED

        try:
            payload = json.loads(body)
        except ValueError:
            logger.warning("Ignoring webhook delivery with malformed JSON body")
            return Outcome.IGNORED

        return self.process(payload)

    def process(self, payload):
        """
        Process a decoded payload.  The signature must already have been
        checked by the caller.
        """
        if not isinstance(payload, dict) or "pull_request" not in payload:
            logger.info("Ignoring payload with no pull_request")
            return Outcome.IGNORED

        action = payload.get("action")
        if not isinstance(action, str) or action not in _HANDLED_ACTIONS:
            logger.info("Ignoring pull request action %r", action)
            return Outcome.IGNORED

        try:
            event = github.parse_event(payload)
        except github.PayloadError as e:
            logger.warning("Ignoring malformed pull request payload: %s", e)
            return Outcome.IGNORED

        annotate, dispatch_action = resolve_dispatch_action(event)
        logger.info("Processing %s as %s", event, dispatch_action)

        if annotate and self._config.github.annotate_pull_requests:
            self._annotator.annotate(event)

        failed_issue_keys = self._dispatcher.dispatch(event, dispatch_action)
        if failed_issue_keys:
            logger.error(
                "%s issues referenced by %s failed: %s", len(failed_issue_keys), event, ", ".join(sorted(failed_issue_keys))
            )

        return Outcome.PROCESSED
