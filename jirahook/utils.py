import re

from .entities import JiraLink


__all__ = ["UrlHelper", "IssueKeyExtractor", "isolate_regions"]


CLOSING_KEYWORDS = ["close", "closes", "closed", "fix", "fixes", "fixed", "resolve", "resolves", "resolved"]


class UrlHelper:
    @classmethod
    def from_config(cls, config):
        return cls(jira_server=config.jira.server)

    def __init__(self, jira_server):
        self._jira_server = jira_server.rstrip("/")

    @property
    def browse_url(self):
        return f"{self._jira_server}/browse"

    def get_issue_url(self, issue_key):
        return f"{self.browse_url}/{issue_key}"


class IssueKeyExtractor:
    """
    This class is responsible for finding references to JIRA issues in
    pull request text.  The issue prefix and JIRA server URL are escaped, so
    they always match literally.
    """

    FENCE_OPEN_RE = re.compile(r"```(\w*)")
    FENCE_CLOSE_RE = re.compile(r"```")

    @classmethod
    def from_config(cls, config):
        return cls(issue_prefix=config.jira.issue_prefix, url_helper=UrlHelper.from_config(config))

    def __init__(self, issue_prefix, url_helper):
        self._url_helper = url_helper

        key_pattern = rf"(?<![\w-]){re.escape(issue_prefix)}-[0-9]+(?!\w)"
        keyword_pattern = r"\b(?:" + "|".join(CLOSING_KEYWORDS) + r")\s+"
        browse_pattern = re.escape(url_helper.browse_url)

        self._key_re = re.compile(key_pattern, re.IGNORECASE)

        # Alternatives are tried in order, so mentions inside links, URLs and
        # inline code are consumed whole before the bare key can match.
        self._mention_re = re.compile(
            rf"(?P<keyword>{keyword_pattern})?"
            rf"(?:\[(?P<linked_key>{key_pattern})\]\({browse_pattern}/(?P=linked_key)\)"
            r"|(?P<link>\[[^\]]*\]\([^)]*\))"
            r"|(?P<url><?https?://[^\s>]+>?)"
            r"|(?P<code>`[^`\n]*`)"
            rf"|(?P<key>{key_pattern}))",
            re.IGNORECASE,
        )

    def find_issue_keys(self, text):
        """
        Return the distinct issue keys in ``text`` in order of first appearance.
        Keys that differ only in case are the same key; the first spelling wins.
        """
        if not text:
            return []

        seen = set()
        keys = []
        for match in self._key_re.finditer(text):
            key = match.group(0)
            if key.casefold() not in seen:
                seen.add(key.casefold())
                keys.append(key)

        return keys

    def find_links(self, body):
        """
        Return a JiraLink for each bare or already-linked issue key in ``body``,
        skipping mentions inside code, other Markdown links and URLs.
        """
        links = []

        def _collect(match):
            if match.group("linked_key"):
                links.append(
                    JiraLink(key=match.group("linked_key"), already_linked=True, linking=bool(match.group("keyword")))
                )
            elif match.group("key"):
                links.append(JiraLink(key=match.group("key"), already_linked=False, linking=bool(match.group("keyword"))))
            return match.group(0)

        self._substitute(body, _collect)

        return links

    def find_linking_keys(self, body):
        """
        Return the distinct issue keys preceded by a closing keyword, in order
        of first appearance.
        """
        seen = set()
        keys = []
        for link in self.find_links(body):
            if link.linking and link.key.casefold() not in seen:
                seen.add(link.key.casefold())
                keys.append(link.key)

        return keys

    def link_issue_keys(self, body):
        """
        Rewrite bare issue keys in ``body`` as Markdown links to JIRA.  Keys
        that are already linked are left as they are.
        """

        def _link(match):
            key = match.group("key")
            if not key:
                return match.group(0)

            keyword = match.group("keyword") or ""
            return f"{keyword}[{key}]({self._url_helper.get_issue_url(key)})"

        return self._substitute(body, _link)

    def _substitute(self, body, replacement):
        if not body:
            return body

        regions = [(body, True)]
        regions = isolate_regions(
            regions, IssueKeyExtractor.FENCE_OPEN_RE, IssueKeyExtractor.FENCE_CLOSE_RE, self._handle_fenced_content
        )

        result = ""
        for content, formatted in regions:
            if formatted:
                content = self._mention_re.sub(replacement, content)
            result = result + content

        return result

    def _handle_fenced_content(self, content, open_match, close_match):
        if close_match:
            return (open_match.group(0) + content + close_match.group(0), False)
        else:
            return (open_match.group(0) + content, False)


def isolate_regions(regions, open_re, close_re, content_handler):
    """
    Split ``regions``, a list of (content, formatted) tuples, around spans
    delimited by ``open_re`` and ``close_re``.  Each span is passed to
    ``content_handler`` along with the open and close matches (the latter
    is None when the span runs to the end of the content), which returns
    the replacement region.
    """
    new_regions = []
    for content, formatted in regions:
        if not formatted:
            new_regions.append((content, formatted))
        else:
            current_index = 0
            while current_index < len(content):
                open_match = open_re.search(content, current_index)
                if open_match:
                    if open_match.start() > current_index:
                        new_regions.append((content[current_index : open_match.start()], True))

                    start_index = open_match.end()
                    close_match = close_re.search(content, start_index)
                    if close_match:
                        end_index = close_match.start()
                    else:
                        end_index = len(content)
                    region = content_handler(content[start_index:end_index], open_match, close_match)
                    new_regions.append(region)
                    if close_match:
                        current_index = close_match.end()
                    else:
                        current_index = len(content)
                else:
                    new_regions.append((content[current_index:], True))
                    current_index = len(content)
    return new_regions
