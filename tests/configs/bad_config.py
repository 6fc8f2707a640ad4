c.jira.server = "https://test.jira.server"
c.jira.issue_prefix = "TEST"
c.jira.frobnicate()
