"""Personal job-application tracker: storage, analytics and data export."""
