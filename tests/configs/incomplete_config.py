c.jira.server = "https://test.jira.server"
