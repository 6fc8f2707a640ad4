# jirahook configuration file
#
# Credentials are never read from this file.  Set them in the environment:
#   SECRET            GitHub webhook secret
#   JIRA_USERNAME     JIRA username (with JIRA_PASSWORD)
#   JIRA_PASSWORD     JIRA password or API token
#   JIRA_TOKEN        JIRA personal access token (instead of username/password)
#   GITHUB_API_TOKEN  GitHub access token

# URL of JIRA deployment (required unless JIRA_URL is set)
#c.jira.server = "https://jira.example.com"

# Prefix of the JIRA issue keys to look for, e.g. "PROJ" for PROJ-123
# (required unless JIRA_ISSUE_PREFIX is set)
#c.jira.issue_prefix = "PROJ"

# Integer ID of the JIRA transition to perform when a pull request
# referencing an issue is opened, reopened or edited while open.
# (set to None to skip, or set JIRA_TRANSITION_OPENED)
#c.jira.open_transition_id = None

# Extra fields to send with the open transition
# (or set JIRA_TRANSITION_OPENED_EXTRA to a JSON object)
#c.jira.open_transition_fields = {}

# Integer ID of the JIRA transition to perform when a pull request
# is closed without being merged.
# (set to None to skip, or set JIRA_TRANSITION_CLOSED)
#c.jira.close_transition_id = None

# Extra fields to send with the close transition
# (or set JIRA_TRANSITION_CLOSED_EXTRA to a JSON object)
#c.jira.close_transition_fields = {}

# Integer ID of the JIRA transition to perform when a pull request
# is merged.
# (set to None to skip, or set JIRA_TRANSITION_MERGED)
#c.jira.merge_transition_id = None

# Extra fields to send with the merge transition, e.g.
# {"resolution": {"name": "Done"}}
# (or set JIRA_TRANSITION_MERGED_EXTRA to a JSON object)
#c.jira.merge_transition_fields = {}

# Only transition issues preceded by a closing keyword
# (close, closes, closed, fix, fixes, fixed, resolve, resolves, resolved)
#c.jira.require_linking_keyword = False

# Comment on each referenced JIRA issue with a link back to the pull
# request when it is opened or reopened.
#c.jira.create_tracking_comment = False

# Maximum number of retries on JIRA request failure
#c.jira.max_retries = 0

# Timeout in seconds for each JIRA request
#c.jira.timeout = 30

# GitHub API URL (change for GitHub Enterprise)
#c.github.base_url = "https://api.github.com"

# Rewrite issue keys in pull request bodies as links to JIRA, and
# append missing issue keys to pull request titles.
#c.github.annotate_pull_requests = True

# Maximum number of retries on GitHub request failure
#c.github.max_retries = 0

# Timeout in seconds for each GitHub request
#c.github.timeout = 30
