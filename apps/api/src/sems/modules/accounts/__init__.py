"""Account directory: students, teachers and admins read by the exit-request workflow."""
