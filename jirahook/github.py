import logging
import os

from github import Auth, Github, GithubException
import requests

from .entities import Action, PullRequestState, PullRequest, Repository, WebhookEvent, Result


__all__ = ["Client", "Annotator", "PayloadError", "parse_event", "get_token"]


logger = logging.getLogger(__name__)


def get_token():
    return os.environ.get("GITHUB_API_TOKEN")


class PayloadError(ValueError):
    pass


class _EventMapper:
    """
    This class is responsible for mapping the fields of a raw pull_request
    webhook payload to our own in jirahook.entities.
    """

    def get_event(self, payload):
        if not isinstance(payload, dict):
            raise PayloadError(f"Expected a JSON object, got {type(payload).__name__}")

        action = self._get_enum(payload, "action", Action, "payload")
        pull_request = self.get_pull_request(self._get(payload, "pull_request", dict, "payload"))
        repository = self.get_repository(self._get(payload, "repository", dict, "payload"))

        return WebhookEvent(action=action, pull_request=pull_request, repository=repository)

    def get_pull_request(self, raw_pull):
        body = self._get(raw_pull, "body", str, "pull_request", optional=True)
        if body is None:
            body = ""

        merged = self._get(raw_pull, "merged", bool, "pull_request", optional=True)

        return PullRequest(
            number=self._get(raw_pull, "number", int, "pull_request"),
            title=self._get(raw_pull, "title", str, "pull_request"),
            html_url=self._get(raw_pull, "html_url", str, "pull_request"),
            state=self._get_enum(raw_pull, "state", PullRequestState, "pull_request"),
            merged=bool(merged),
            body=body,
        )

    def get_repository(self, raw_repository):
        owner = self._get(raw_repository, "owner", dict, "repository")

        return Repository(
            owner_login=self._get(owner, "login", str, "repository.owner"),
            name=self._get(raw_repository, "name", str, "repository"),
            full_name=self._get(raw_repository, "full_name", str, "repository"),
        )

    def _get(self, data, name, expected_type, context, optional=False):
        value = data.get(name)
        if value is None:
            if optional:
                return None
            raise PayloadError(f"Missing {context}.{name}")

        # bool is a subclass of int, but never a valid number:
        if not isinstance(value, expected_type) or (expected_type is int and isinstance(value, bool)):
            raise PayloadError(
                f"Expected {context}.{name} to be {expected_type.__name__}, got {type(value).__name__}"
            )

        return value

    def _get_enum(self, data, name, enum_class, context):
        value = self._get(data, name, str, context)
        try:
            return enum_class(value)
        except ValueError:
            raise PayloadError(f"Unexpected {context}.{name}: {value}")


def parse_event(payload):
    return _EventMapper().get_event(payload)


class Client:
    @classmethod
    def from_config(cls, config):
        token = get_token()
        if not token:
            raise RuntimeError("Missing GitHub access token.  Set the GITHUB_API_TOKEN environment variable.")

        github = Github(
            auth=Auth.Token(token),
            base_url=config.github.base_url,
            timeout=config.github.timeout,
            retry=config.github.max_retries,
        )

        return cls(config, github)

    def __init__(self, config, github):
        self._config = config
        self._github = github

    def update_pull_request(self, event, fields):
        try:
            repo = self._github.get_repo(event.repository.full_name, lazy=True)
            raw_pull = repo.get_pull(event.pull_request.number)
            raw_pull.edit(**fields)
        except (GithubException, requests.exceptions.RequestException) as e:
            return Result.failure(e)

        logger.info("Updated pull request %s#%s", event.repository, event.pull_request.number)

        return Result.success()


class Annotator:
    """
    Rewrites issue keys in a pull request body as links to JIRA and tags the
    title with any keys it doesn't mention yet.
    """

    def __init__(self, extractor, github_client, dry_run=False):
        self._extractor = extractor
        self._github_client = github_client
        self.dry_run = dry_run

    def make_annotation(self, pull_request):
        body = pull_request.body
        links = self._extractor.find_links(body)
        if any(not link.already_linked for link in links):
            body = self._extractor.link_issue_keys(body)

        title = pull_request.title
        title_keys = {k.casefold() for k in self._extractor.find_issue_keys(title)}
        missing_keys = [k for k in self._extractor.find_issue_keys(pull_request.body) if k.casefold() not in title_keys]
        if missing_keys:
            title = f"{title} [{'|'.join(missing_keys)}]"

        if body == pull_request.body and title == pull_request.title:
            return {}

        return {"body": body, "title": title}

    def annotate(self, event):
        fields = self.make_annotation(event.pull_request)
        if not fields:
            logger.info("%s needs no annotation", event)
            return Result.success()

        logger.info("Annotating pull request %s#%s: %s", event.repository, event.pull_request.number, fields)
        if self.dry_run:
            logger.info("Skipping pull request update due to dry run")
            return Result.success()

        result = self._github_client.update_pull_request(event, fields)
        if not result:
            logger.error(
                "Failed to update pull request %s#%s: %s", event.repository, event.pull_request.number, result.error
            )

        return result
