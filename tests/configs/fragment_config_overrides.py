c.jira.issue_prefix = "TEST"
c.jira.merge_transition_id = 101
c.jira.create_tracking_comment = False
